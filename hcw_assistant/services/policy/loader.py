import yaml
from pathlib import Path

from hcw_assistant.core.errors import ConfigError
from hcw_assistant.services.policy.schema import AssistantPolicy


def load_policy_from_file(path: str) -> AssistantPolicy:

    p = Path(path)

    if not p.exists():
        raise ConfigError(f"Policy file not found: {path}")

    with open(p, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    if not isinstance(raw, dict):
        raise ConfigError(f"Policy file must contain a mapping: {path}")

    return AssistantPolicy(**raw)
