"""
In-memory stand-ins for Supabase and the generative endpoint.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from hcw_assistant.core.errors import GenerationError
from hcw_assistant.infra.llm_client import PromptParts

# Friday
NOW = datetime(2024, 3, 15, 10, 0, 0, tzinfo=timezone.utc)


class FakeBusinessStore:
    def __init__(
        self,
        orders: Optional[List[Dict[str, Any]]] = None,
        products: Optional[List[Dict[str, Any]]] = None,
        profiles: Optional[List[Dict[str, Any]]] = None,
        customer_stats: Any = None,
        top_categories: Optional[List[Dict[str, Any]]] = None,
        top_brands: Optional[List[Dict[str, Any]]] = None,
        fail: Optional[set] = None,
    ):
        self.orders = orders or []
        self.products = products or []
        self.profiles = profiles or []
        self.customer_stats = customer_stats
        self.top_categories = top_categories or []
        self.top_brands = top_brands or []
        self.fail = fail or set()
        self.calls: List[str] = []

    def _hit(self, name: str) -> None:
        self.calls.append(name)
        if name in self.fail or "*" in self.fail:
            raise ConnectionError(f"{name} unavailable")

    def get_confirmed_orders(self, limit: int) -> List[Dict[str, Any]]:
        self._hit("orders")
        rows = [o for o in self.orders if o.get("status") == "confirmed"]
        rows.sort(key=lambda o: o.get("created_at") or "", reverse=True)
        return rows[:limit]

    def get_active_products(self, limit: int) -> List[Dict[str, Any]]:
        self._hit("products")
        return [p for p in self.products if p.get("is_active", True)][:limit]

    def get_customer_stats(self) -> Any:
        self._hit("customer_stats")
        return self.customer_stats

    def get_recent_profiles(self, limit: int) -> List[Dict[str, Any]]:
        self._hit("profiles")
        return self.profiles[:limit]

    def get_top_categories(self, limit: int) -> List[Dict[str, Any]]:
        self._hit("top_categories")
        return self.top_categories[:limit]

    def get_top_brands(self, limit: int) -> List[Dict[str, Any]]:
        self._hit("top_brands")
        return self.top_brands[:limit]

    def get_low_stock_products(self, threshold: int) -> List[Dict[str, Any]]:
        self._hit("low_stock")
        rows = [p for p in self.products if p.get("is_active", True) and (p.get("stock") or 0) <= threshold]
        return sorted(rows, key=lambda p: p.get("stock") or 0)


class FakeSessionStore:
    def __init__(self, fail_writes: bool = False):
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.fail_writes = fail_writes

    def get_session_log(self, session_id: str) -> List[Dict[str, Any]]:
        row = self.rows.get(session_id)
        return list(row["session_data"]) if row else []

    def upsert_session_log(self, session_id: str, staff_user_id: str, entries: List[Dict[str, Any]]) -> None:
        if self.fail_writes:
            raise ConnectionError("staff_chat_sessions unavailable")
        self.rows[session_id] = {
            "id": session_id,
            "staff_user_id": staff_user_id,
            "session_data": list(entries),
        }


class FakeLLM:
    """Returns canned replies in order; an Exception instance in the list is raised."""

    def __init__(self, *replies: Any):
        self.replies = list(replies)
        self.prompts: List[PromptParts] = []

    async def generate(self, prompt: PromptParts) -> str:
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if self.replies else GenerationError("no reply queued")
        if isinstance(reply, Exception):
            raise reply
        return reply


def order(order_id: str, amount: Optional[float], created_at: str, status: str = "confirmed", **extra: Any) -> Dict[str, Any]:
    row = {
        "id": order_id,
        "total_amount": amount,
        "shipping_amount": 0,
        "status": status,
        "payment_status": "paid",
        "created_at": created_at,
        "order_items": [
            {
                "quantity": 1,
                "unit_price": amount,
                "total_price": amount,
                "products": {"name": f"Product {order_id}", "category": "Wellness", "brand": "HCW", "price": amount, "stock": 25},
            }
        ],
    }
    row.update(extra)
    return row


class _Result:
    def __init__(self, data: Any):
        self.data = data


class RecordingQuery:
    """Chainable stand-in for a postgrest query; records every call."""

    def __init__(self, log: List[tuple], data: Any):
        self._log = log
        self._data = data

    def __getattr__(self, name: str):
        def _call(*args: Any, **kwargs: Any) -> "RecordingQuery":
            self._log.append((name, args, kwargs))
            return self
        return _call

    def execute(self) -> _Result:
        self._log.append(("execute", (), {}))
        return _Result(self._data)


class RecordingSupabase:
    def __init__(self, data: Any = None):
        self.data = data
        self.log: List[tuple] = []

    def table(self, name: str) -> RecordingQuery:
        self.log.append(("table", (name,), {}))
        return RecordingQuery(self.log, self.data)

    def rpc(self, fn: str, params: Optional[Dict[str, Any]] = None) -> RecordingQuery:
        self.log.append(("rpc", (fn, params), {}))
        return RecordingQuery(self.log, self.data)
