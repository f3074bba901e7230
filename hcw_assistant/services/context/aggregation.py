# hcw_assistant/services/context/aggregation.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

from hcw_assistant.services.context.records import OrderRecord
from hcw_assistant.services.context.time_windows import ResolvedWindow


@dataclass(frozen=True)
class OrderMetrics:
    order_count: int
    revenue: float
    average_order_value: float


@dataclass(frozen=True)
class PeriodComparison:
    current_window: ResolvedWindow
    previous_window: ResolvedWindow
    current: OrderMetrics
    previous: OrderMetrics
    current_orders: List[OrderRecord]
    previous_orders: List[OrderRecord]

    @property
    def growth_rate(self) -> float:
        return growth_rate(self.current.revenue, self.previous.revenue)


def orders_in_window(orders: Iterable[OrderRecord], window: Optional[ResolvedWindow]) -> List[OrderRecord]:
    """Confirmed orders inside the window; an unbounded window keeps all of them."""
    out: List[OrderRecord] = []
    for o in orders:
        if not o.is_confirmed:
            continue
        if window is None or not window.is_bounded:
            out.append(o)
            continue
        if o.created_at is not None and window.contains(o.created_at):
            out.append(o)
    return out


def metrics_for(orders: Iterable[OrderRecord]) -> OrderMetrics:
    orders = list(orders)
    revenue = sum(o.amount for o in orders)
    count = len(orders)
    aov = revenue / count if count > 0 else 0.0
    return OrderMetrics(order_count=count, revenue=revenue, average_order_value=aov)


def summarize_orders(orders: Iterable[OrderRecord], window: Optional[ResolvedWindow] = None) -> OrderMetrics:
    return metrics_for(orders_in_window(orders, window))


def growth_rate(current: float, previous: float) -> float:
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def compare_periods(
    orders: Iterable[OrderRecord],
    current_window: ResolvedWindow,
    previous_window: ResolvedWindow,
) -> PeriodComparison:
    orders = list(orders)
    current_orders = orders_in_window(orders, current_window)
    previous_orders = orders_in_window(orders, previous_window)
    return PeriodComparison(
        current_window=current_window,
        previous_window=previous_window,
        current=metrics_for(current_orders),
        previous=metrics_for(previous_orders),
        current_orders=current_orders,
        previous_orders=previous_orders,
    )
