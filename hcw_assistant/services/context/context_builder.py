# hcw_assistant/services/context/context_builder.py
from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import ValidationError

from hcw_assistant.core.errors import ContextFetchError
from hcw_assistant.repositories.base import json_safe
from hcw_assistant.repositories.business_repo import BusinessStore
from hcw_assistant.services.context.aggregation import (
    OrderMetrics,
    compare_periods,
    metrics_for,
    orders_in_window,
)
from hcw_assistant.services.context.intent import QueryIntent, Topic, classify_query
from hcw_assistant.services.context.records import OrderRecord
from hcw_assistant.services.context.time_windows import localize, resolve_window
from hcw_assistant.services.policy.schema import AssistantPolicy

logger = logging.getLogger("hcw.context")

CONTEXT_UNAVAILABLE = "Unable to fetch complete data context."


@dataclass(frozen=True)
class ContextBlock:
    title: str
    lines: List[str]

    def render(self) -> str:
        return f"{self.title}:\n" + "\n".join(self.lines)


@dataclass
class ContextBundle:
    intent: QueryIntent
    blocks: List[ContextBlock] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)

    @property
    def is_degraded(self) -> bool:
        return bool(self.failures)

    def render(self) -> str:
        if not self.blocks:
            return CONTEXT_UNAVAILABLE
        return "\n\n".join(b.render() for b in self.blocks)


class ContextAssembler:
    """
    Free-text query -> bounded textual context for the generative model.

    - orders are always fetched (confirmed, newest first, capped)
    - other slices are fetched only when the query touches their topic
    - fetches run concurrently; a failed slice is logged and its block omitted
    - every block states its own date range or snapshot date
    """

    def __init__(self, store: BusinessStore, policy: Optional[AssistantPolicy] = None, tz_name: str = "UTC"):
        self.store = store
        self.policy = policy or AssistantPolicy()
        self.tz_name = tz_name

    # -------------------------
    # Formatting helpers
    # -------------------------
    def _money(self, v: float) -> str:
        return f"{self.policy.meta.currency_symbol}{v:.2f}"

    def _json(self, v: Any) -> str:
        return json.dumps(json_safe(v), ensure_ascii=False, default=str)

    def _metric_lines(self, m: OrderMetrics) -> List[str]:
        return [
            f"- Total Revenue: {self._money(m.revenue)}",
            f"- Total Orders: {m.order_count}",
            f"- Average Order Value: {self._money(m.average_order_value)}",
        ]

    # -------------------------
    # Fetching
    # -------------------------
    async def _fetch(self, name: str, fn: Callable[..., Any], *args: Any) -> Any:
        try:
            return await asyncio.to_thread(fn, *args)
        except Exception as e:
            logger.warning("context fetch failed slice=%s error=%s", name, e)
            raise ContextFetchError(name, e) from e

    async def _fetch_all(self, intent: QueryIntent) -> Dict[str, Any]:
        limits = self.policy.limits
        calls: Dict[str, Awaitable[Any]] = {
            "orders": self._fetch("orders", self.store.get_confirmed_orders, limits.orders),
        }
        if intent.wants(Topic.PRODUCTS):
            calls["products"] = self._fetch("products", self.store.get_active_products, limits.products)
        if intent.wants(Topic.CUSTOMERS):
            calls["customer_stats"] = self._fetch("customer_stats", self.store.get_customer_stats)
            calls["profiles"] = self._fetch("profiles", self.store.get_recent_profiles, limits.profiles)
        if intent.wants(Topic.CATEGORIES):
            calls["top_categories"] = self._fetch("top_categories", self.store.get_top_categories, limits.rollups)
            calls["top_brands"] = self._fetch("top_brands", self.store.get_top_brands, limits.rollups)
        if intent.wants(Topic.LOW_STOCK):
            calls["low_stock"] = self._fetch("low_stock", self.store.get_low_stock_products, self.policy.stock.low)

        results = await asyncio.gather(*calls.values(), return_exceptions=True)
        return dict(zip(calls.keys(), results))

    def _parse_orders(self, rows: List[Dict[str, Any]]) -> List[OrderRecord]:
        orders: List[OrderRecord] = []
        skipped = 0
        for row in rows or []:
            try:
                order = OrderRecord.model_validate(row)
            except ValidationError:
                skipped += 1
                continue
            if order.is_confirmed:
                orders.append(order)
        if skipped:
            logger.warning("skipped %s malformed order rows", skipped)
        return orders

    # -------------------------
    # Blocks
    # -------------------------
    def _dataset_block(self, orders: List[OrderRecord], local_now: datetime) -> ContextBlock:
        lines: List[str]
        if not orders:
            lines = ["- No confirmed orders found"]
        else:
            lines = self._metric_lines(metrics_for(orders))
            stamps = [localize(o.created_at, self.tz_name) for o in orders if o.created_at is not None]
            if stamps:
                lines.append(f"- Data Range: {min(stamps).date().isoformat()} to {max(stamps).date().isoformat()}")
            if len(orders) >= self.policy.limits.orders:
                lines.append(f"- Note: limited to the {self.policy.limits.orders} most recent confirmed orders")
        lines.append(f"- Current Date: {local_now.date().isoformat()}")
        return ContextBlock("Sales Summary (All Time Dataset)", lines)

    def _window_block(self, orders: List[OrderRecord], intent: QueryIntent, now: datetime) -> Optional[ContextBlock]:
        window = resolve_window(intent.window, now, self.tz_name)
        if not window.is_bounded:
            return None
        in_window = orders_in_window(orders, window)
        lines = self._metric_lines(metrics_for(in_window))
        sample = [o.slim() for o in in_window[: self.policy.limits.window_order_sample]]
        lines.append(f"- Sample Orders: {self._json(sample)}")
        return ContextBlock(f"Sales Summary - {window.label()}", lines)

    def _comparison_block(self, orders: List[OrderRecord], intent: QueryIntent, now: datetime) -> Optional[ContextBlock]:
        if intent.comparison is None:
            return None
        current_kind, previous_kind = intent.comparison
        cmp = compare_periods(
            orders,
            resolve_window(current_kind, now, self.tz_name),
            resolve_window(previous_kind, now, self.tz_name),
        )
        n = self.policy.limits.comparison_order_sample
        cur, prev = cmp.current_window, cmp.previous_window

        def _row(label: str, m: OrderMetrics) -> str:
            return (
                f"- {label}: {m.order_count} orders, {self._money(m.revenue)} revenue, "
                f"{self._money(m.average_order_value)} average order value"
            )

        lines = [
            _row(cur.label(), cmp.current),
            _row(prev.label(), cmp.previous),
            f"- Growth Rate: {cmp.growth_rate:.1f}%",
            f"- {cur.title} Orders: {self._json([o.slim() for o in cmp.current_orders[:n]])}",
            f"- {prev.title} Orders: {self._json([o.slim() for o in cmp.previous_orders[:n]])}",
        ]
        return ContextBlock(f"Period Comparison ({cur.title} vs {prev.title})", lines)

    def _stock_status(self, stock: Any) -> str:
        try:
            s = float(stock)
        except (TypeError, ValueError):
            return "UNKNOWN"
        if s <= self.policy.stock.low:
            return "LOW"
        if s <= self.policy.stock.medium:
            return "MEDIUM"
        return "HIGH"

    def _product_block(self, products: List[Dict[str, Any]], as_of: str) -> ContextBlock:
        out: List[Dict[str, Any]] = []
        for p in (products or [])[: self.policy.limits.product_sample]:
            if not isinstance(p, dict):
                continue
            reviews = [r for r in (p.get("product_reviews") or []) if isinstance(r, dict)]
            ratings = [float(r["rating"]) for r in reviews if isinstance(r.get("rating"), (int, float))]
            avg = sum(ratings) / len(ratings) if ratings else 0.0
            slim = {k: v for k, v in p.items() if k != "product_reviews"}
            slim["avg_rating"] = round(avg, 1)
            slim["review_count"] = len(reviews)
            slim["stock_status"] = self._stock_status(p.get("stock"))
            out.append(slim)
        return ContextBlock(
            f"Product Performance Data (active catalogue snapshot as of {as_of})",
            [f"- Products: {self._json(out)}"],
        )

    def _customer_block(self, stats: Any, profiles: Any, as_of: str) -> ContextBlock:
        lines = []
        if stats is not None:
            lines.append(f"- Stats: {self._json(stats)}")
        if profiles is not None:
            lines.append(f"- Recent Customers: {self._json(list(profiles)[: self.policy.limits.profile_sample])}")
        return ContextBlock(f"Customer Analytics (snapshot as of {as_of})", lines)

    def _rollup_block(self, categories: Any, brands: Any, as_of: str) -> ContextBlock:
        lines = []
        if categories is not None:
            lines.append(f"- Top Categories: {self._json(categories)}")
        if brands is not None:
            lines.append(f"- Top Brands: {self._json(brands)}")
        return ContextBlock(f"Category and Brand Performance (all-time rollups as of {as_of})", lines)

    def _low_stock_block(self, products: List[Dict[str, Any]], as_of: str) -> ContextBlock:
        rows = list(products or [])[: self.policy.limits.low_stock_sample]
        return ContextBlock(
            f"Low Stock Alerts (stock <= {self.policy.stock.low}, snapshot as of {as_of})",
            [f"- Products: {self._json(rows)}" if rows else "- No active products at or below the threshold"],
        )

    # -------------------------
    # Public
    # -------------------------
    async def assemble(self, query: str, now: Optional[datetime] = None) -> ContextBundle:
        now = now or datetime.now(timezone.utc)
        local_now = localize(now, self.tz_name)
        as_of = local_now.date().isoformat()

        intent = classify_query(query, self.policy.keywords)
        bundle = ContextBundle(intent=intent)

        fetched = await self._fetch_all(intent)

        def ok(name: str) -> bool:
            return name in fetched and not isinstance(fetched[name], BaseException)

        bundle.failures = [name for name, res in fetched.items() if isinstance(res, BaseException)]

        if ok("orders"):
            orders = self._parse_orders(fetched["orders"])
            bundle.blocks.append(self._dataset_block(orders, local_now))
            for block in (
                self._window_block(orders, intent, now),
                self._comparison_block(orders, intent, now),
            ):
                if block is not None:
                    bundle.blocks.append(block)

        if ok("products"):
            bundle.blocks.append(self._product_block(fetched["products"], as_of))

        if ok("customer_stats") or ok("profiles"):
            bundle.blocks.append(
                self._customer_block(
                    fetched["customer_stats"] if ok("customer_stats") else None,
                    fetched["profiles"] if ok("profiles") else None,
                    as_of,
                )
            )

        if ok("top_categories") or ok("top_brands"):
            bundle.blocks.append(
                self._rollup_block(
                    fetched["top_categories"] if ok("top_categories") else None,
                    fetched["top_brands"] if ok("top_brands") else None,
                    as_of,
                )
            )

        if ok("low_stock"):
            bundle.blocks.append(self._low_stock_block(fetched["low_stock"], as_of))

        logger.info(
            "context assembled intent=%s window=%s topics=%s blocks=%s failures=%s",
            intent.kind.value,
            intent.window.value,
            sorted(t.value for t in intent.topics),
            len(bundle.blocks),
            bundle.failures,
        )
        return bundle
