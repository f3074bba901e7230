# hcw_assistant/repositories/business_repo.py

from typing import Any, Dict, List, Protocol

from hcw_assistant.repositories.base import BaseRepository


class BusinessStore(Protocol):
    """
    Read-only capability set the context assembler needs.
    Every method returns plain rows (dicts) as the store hands them back.
    """

    def get_confirmed_orders(self, limit: int) -> List[Dict[str, Any]]: ...

    def get_active_products(self, limit: int) -> List[Dict[str, Any]]: ...

    def get_customer_stats(self) -> Any: ...

    def get_recent_profiles(self, limit: int) -> List[Dict[str, Any]]: ...

    def get_top_categories(self, limit: int) -> List[Dict[str, Any]]: ...

    def get_top_brands(self, limit: int) -> List[Dict[str, Any]]: ...

    def get_low_stock_products(self, threshold: int) -> List[Dict[str, Any]]: ...


class SupabaseBusinessRepository(BaseRepository):
    ORDERS = "orders"
    PRODUCTS = "products"
    PROFILES = "profiles"

    ORDER_COLUMNS = (
        "id, total_amount, shipping_amount, status, payment_status, created_at, "
        "order_items ( quantity, unit_price, total_price, "
        "products ( name, category, brand, price, stock ) )"
    )
    PRODUCT_COLUMNS = (
        "id, name, category, brand, price, mrp, stock, is_active, created_at, "
        "product_reviews ( rating, comment, created_at )"
    )

    def __init__(self, sb):
        super().__init__(sb)

    # =====================================================
    # Orders
    # =====================================================
    def get_confirmed_orders(self, limit: int) -> List[Dict[str, Any]]:
        res = (
            self.sb
            .table(self.ORDERS)
            .select(self.ORDER_COLUMNS)
            .eq("status", "confirmed")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return self._rows(res)

    # =====================================================
    # Products
    # =====================================================
    def get_active_products(self, limit: int) -> List[Dict[str, Any]]:
        res = (
            self.sb
            .table(self.PRODUCTS)
            .select(self.PRODUCT_COLUMNS)
            .eq("is_active", True)
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return self._rows(res)

    def get_low_stock_products(self, threshold: int) -> List[Dict[str, Any]]:
        res = (
            self.sb
            .table(self.PRODUCTS)
            .select("id, name, category, stock, price")
            .lte("stock", threshold)
            .eq("is_active", True)
            .order("stock")
            .execute()
        )
        return self._rows(res)

    # =====================================================
    # Customers
    # =====================================================
    def get_customer_stats(self) -> Any:
        res = self.sb.rpc("get_customer_stats").execute()
        return res.data

    def get_recent_profiles(self, limit: int) -> List[Dict[str, Any]]:
        res = (
            self.sb
            .table(self.PROFILES)
            .select("id, full_name, email, created_at")
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return self._rows(res)

    # =====================================================
    # Aggregate rollups (RPC)
    # =====================================================
    def get_top_categories(self, limit: int) -> List[Dict[str, Any]]:
        res = self.sb.rpc("get_top_categories", {"limit_count": limit}).execute()
        return self._rows(res)

    def get_top_brands(self, limit: int) -> List[Dict[str, Any]]:
        res = self.sb.rpc("get_top_brands", {"limit_count": limit}).execute()
        return self._rows(res)
