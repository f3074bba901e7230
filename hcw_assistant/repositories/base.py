from abc import ABC
from datetime import datetime, date
from decimal import Decimal
from typing import Any, Dict, List
from uuid import UUID

from fastapi.encoders import jsonable_encoder


class BaseRepository(ABC):
    """Thin wrapper over a supabase Client; subclasses hold the table names."""

    def __init__(self, sb):
        self.sb = sb

    @staticmethod
    def _rows(res) -> List[Dict[str, Any]]:
        # postgrest returns data=None for empty results on some versions
        data = getattr(res, "data", None)
        return data if isinstance(data, list) else []

    def _encode(self, payload: dict) -> dict:
        # envelopes inside session_data may still be pydantic models
        return jsonable_encoder(payload, exclude_none=True)


def json_safe(v):
    """Store values -> JSON-native values for prompt text (numbers stay numbers)."""
    if isinstance(v, (datetime, date)):
        return v.isoformat()
    if isinstance(v, Decimal):
        return float(v)
    if isinstance(v, UUID):
        return str(v)
    if isinstance(v, dict):
        return {k: json_safe(x) for k, x in v.items()}
    if isinstance(v, (list, tuple)):
        return [json_safe(x) for x in v]
    return v
