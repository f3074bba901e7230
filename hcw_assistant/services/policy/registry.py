from typing import Optional

from hcw_assistant.services.policy.schema import AssistantPolicy


class PolicyRegistry:
    """
    Lean in-memory policy registry
    - load() called once at startup
    - get() returns the loaded AssistantPolicy
    - get_or_default() for callers that may run before startup
    """

    _policy: Optional[AssistantPolicy] = None

    @classmethod
    def load(cls, policy: AssistantPolicy) -> None:
        cls._policy = policy

    @classmethod
    def get(cls) -> AssistantPolicy:
        if cls._policy is None:
            raise RuntimeError("Policy not loaded")
        return cls._policy

    @classmethod
    def get_or_default(cls) -> AssistantPolicy:
        return cls._policy or AssistantPolicy()
