# hcw_assistant/services/assistant/response_contract.py
import logging
from typing import Any, Dict, Optional

from hcw_assistant.core.errors import GenerationError
from hcw_assistant.infra.llm_client import GenerativeClient
from hcw_assistant.services.assistant.envelope import (
    ResponseEnvelope,
    parse_envelope,
    parse_failure_envelope,
    unavailable_envelope,
)
from hcw_assistant.services.assistant.prompts import build_prompt
from hcw_assistant.services.policy.schema import PromptSpec

logger = logging.getLogger("hcw.contract")


class ResponseContractEnforcer:
    """
    One generative call per query, always returning a valid envelope.

    - endpoint failure   -> static capability envelope
    - unparseable output -> text envelope that keeps the raw model text
    """

    def __init__(self, llm: GenerativeClient, prompt_spec: Optional[PromptSpec] = None):
        self.llm = llm
        self.prompt_spec = prompt_spec or PromptSpec()

    async def respond(
        self,
        query: str,
        context: str,
        previous_context: Optional[Dict[str, Any]] = None,
    ) -> ResponseEnvelope:
        prompt = build_prompt(
            self.prompt_spec,
            query=query,
            context=context,
            previous_context=previous_context,
        )

        try:
            raw = await self.llm.generate(prompt)
        except GenerationError as e:
            logger.error("generation failed status=%s error=%s", e.status_code, e)
            return unavailable_envelope()
        except Exception:
            logger.exception("unexpected generative client failure")
            return unavailable_envelope()

        result = parse_envelope(raw)
        if result.ok:
            return result.envelope

        logger.warning("model output rejected by envelope contract: %s", result.error)
        return parse_failure_envelope(query, raw.strip())
