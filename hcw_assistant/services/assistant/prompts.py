import json
from typing import Any, Dict, Optional

from hcw_assistant.infra.llm_client import PromptParts
from hcw_assistant.services.policy.schema import PromptSpec


def build_prompt(
    spec: PromptSpec,
    *,
    query: str,
    context: str,
    previous_context: Optional[Dict[str, Any]] = None,
) -> PromptParts:
    system = "\n\n".join([
        spec.system_instructions.strip(),
        f"Current data context: {context}",
        f"Previous conversation context: {json.dumps(previous_context or {}, ensure_ascii=False, default=str)}",
        spec.closing_rules.strip(),
    ])
    user = f"User Query: {query}\n\n{spec.output_request.strip()}"
    return PromptParts(system=system, user=user)
