# hcw_assistant/services/assistant/conversation_store.py
import asyncio
import logging
import weakref
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List

from pydantic import BaseModel, ConfigDict, Field

from hcw_assistant.repositories.session_repo import SessionLogStore
from hcw_assistant.services.assistant.envelope import ResponseEnvelope

logger = logging.getLogger("hcw.conversation")


class ConversationExchange(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    timestamp: str
    user_message: str = Field(..., alias="userMessage")
    assistant_response: Dict[str, Any] = Field(..., alias="assistantResponse")
    type: str = "exchange"

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ConversationStore:
    """
    Append-only per-session log on top of a read-then-upsert store.

    Appends for one session are serialized inside this process; separate
    processes still race and the last upsert wins.
    """

    def __init__(self, repo: SessionLogStore, clock: Callable[[], datetime] = _utc_now):
        self.repo = repo
        self.clock = clock
        # a lock lives only while an append holds or awaits it
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[session_id] = lock
        return lock

    async def append_exchange(
        self,
        session_id: str,
        asker_id: str,
        message: str,
        envelope: ResponseEnvelope,
    ) -> bool:
        """Returns False when the write failed; never raises."""
        exchange = ConversationExchange(
            timestamp=self.clock().isoformat(),
            user_message=message,
            assistant_response=envelope.to_public(),
        )

        try:
            async with self._lock_for(session_id):
                current = await asyncio.to_thread(self.repo.get_session_log, session_id)
                updated = list(current or []) + [exchange.to_row()]
                await asyncio.to_thread(self.repo.upsert_session_log, session_id, asker_id, updated)
        except Exception:
            logger.exception("failed to store conversation session_id=%s", session_id)
            return False

        logger.info("conversation stored session_id=%s entries=%s", session_id, len(updated))
        return True

    async def history(self, session_id: str) -> List[Dict[str, Any]]:
        rows = await asyncio.to_thread(self.repo.get_session_log, session_id)
        return [r for r in (rows or []) if isinstance(r, dict)]
