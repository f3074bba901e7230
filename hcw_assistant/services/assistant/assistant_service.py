# hcw_assistant/services/assistant/assistant_service.py
import logging
import time
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from hcw_assistant.services.assistant.conversation_store import ConversationStore
from hcw_assistant.services.assistant.envelope import ResponseEnvelope
from hcw_assistant.services.assistant.response_contract import ResponseContractEnforcer
from hcw_assistant.services.context.context_builder import ContextAssembler

logger = logging.getLogger("hcw.assistant")


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class StaffAssistantService:
    """
    One staff question, start to finish:

    1) assemble data context (store reads)
    2) ask the generative model, enforce the envelope contract
    3) append the exchange to the session log (non-fatal)
    """

    def __init__(
        self,
        *,
        assembler: ContextAssembler,
        enforcer: ResponseContractEnforcer,
        conversations: ConversationStore,
        clock: Callable[[], datetime] = _utc_now,
    ):
        self.assembler = assembler
        self.enforcer = enforcer
        self.conversations = conversations
        self.clock = clock

    async def ask(
        self,
        *,
        message: str,
        session_id: str,
        staff_user_id: str,
        previous_context: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        started = time.perf_counter()
        now = self.clock()

        logger.info("staff assistant request session_id=%s staff_user_id=%s", session_id, staff_user_id)

        bundle = await self.assembler.assemble(message, now=now)
        envelope: ResponseEnvelope = await self.enforcer.respond(
            message,
            bundle.render(),
            previous_context,
        )

        await self.conversations.append_exchange(session_id, staff_user_id, message, envelope)

        logger.info(
            "staff assistant done session_id=%s type=%s degraded=%s duration_ms=%.2f",
            session_id,
            envelope.type,
            bundle.is_degraded,
            (time.perf_counter() - started) * 1000.0,
        )

        return {
            "response": envelope.to_public(),
            "sessionId": session_id,
            "timestamp": self.clock().isoformat(),
        }

    async def session_history(self, session_id: str) -> Dict[str, Any]:
        return {
            "sessionId": session_id,
            "exchanges": await self.conversations.history(session_id),
        }
