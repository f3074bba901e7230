# hcw_assistant/repositories/session_repo.py

from datetime import datetime, timezone
from typing import Any, Dict, List, Protocol

from hcw_assistant.repositories.base import BaseRepository


class SessionLogStore(Protocol):
    def get_session_log(self, session_id: str) -> List[Dict[str, Any]]: ...

    def upsert_session_log(
        self,
        session_id: str,
        staff_user_id: str,
        entries: List[Dict[str, Any]],
    ) -> None: ...


class StaffChatSessionRepository(BaseRepository):
    """
    staff_chat_sessions

    Table columns expected:
    - id (text, session id)
    - staff_user_id (uuid)
    - session_data (jsonb array of exchanges)
    - updated_at (timestamptz)
    """

    TABLE = "staff_chat_sessions"

    def __init__(self, sb):
        super().__init__(sb)

    def get_session_log(self, session_id: str) -> List[Dict[str, Any]]:
        res = (
            self.sb
            .table(self.TABLE)
            .select("session_data")
            .eq("id", session_id)
            .limit(1)
            .execute()
        )
        rows = self._rows(res)
        if not rows:
            return []
        data = rows[0].get("session_data")
        return data if isinstance(data, list) else []

    def upsert_session_log(
        self,
        session_id: str,
        staff_user_id: str,
        entries: List[Dict[str, Any]],
    ) -> None:
        payload = self._encode({
            "id": session_id,
            "staff_user_id": staff_user_id,
            "session_data": entries,
            "updated_at": datetime.now(timezone.utc),
        })
        self.sb.table(self.TABLE).upsert(payload).execute()
