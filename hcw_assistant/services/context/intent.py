# hcw_assistant/services/context/intent.py
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Tuple

from hcw_assistant.services.context.time_windows import (
    COMPARISON_PAIRS,
    WindowKind,
    detect_window,
    granularity_of,
)
from hcw_assistant.services.policy.schema import TopicKeywords


class IntentKind(str, Enum):
    SALES = "sales"
    PRODUCT = "product"
    CUSTOMER = "customer"
    COMPARISON = "comparison"
    GENERIC = "generic"


class Topic(str, Enum):
    """Optional data slices; orders are always fetched."""

    PRODUCTS = "products"
    CUSTOMERS = "customers"
    CATEGORIES = "categories"
    LOW_STOCK = "low_stock"


@dataclass(frozen=True)
class QueryIntent:
    kind: IntentKind
    window: WindowKind
    topics: FrozenSet[Topic]
    comparison: Optional[Tuple[WindowKind, WindowKind]] = None

    def wants(self, topic: Topic) -> bool:
        return topic in self.topics


def _norm_text(s: str) -> str:
    s = (s or "").replace("\u00a0", " ")  # NBSP -> space
    return " ".join(s.strip().lower().split())


def _contains_any(text: str, keywords: Iterable[str]) -> bool:
    return any(kw in text for kw in keywords)


def _contains_keyword(text: str, keywords: Iterable[str]) -> bool:
    # short tokens like "vs" need word boundaries ("cvs" is not a comparison);
    # longer ones match inflections too ("compared", "comparing")
    for kw in keywords:
        if len(kw) <= 3:
            if re.search(rf"\b{re.escape(kw)}\b", text):
                return True
        elif kw in text:
            return True
    return False


def classify_query(query: str, keywords: Optional[TopicKeywords] = None) -> QueryIntent:
    kw = keywords or TopicKeywords()
    text = _norm_text(query)
    window = detect_window(text)

    topics = set()
    if _contains_any(text, kw.products):
        topics.add(Topic.PRODUCTS)
    if _contains_any(text, kw.customers):
        topics.add(Topic.CUSTOMERS)
    if _contains_any(text, kw.categories):
        topics.add(Topic.CATEGORIES)
    if _contains_any(text, kw.low_stock):
        topics.add(Topic.LOW_STOCK)

    comparison = None
    if _contains_keyword(text, kw.comparison):
        granularity = granularity_of(window)
        if granularity is None:
            if "month" in text:
                granularity = "month"
            elif "day" in text:
                granularity = "day"
            else:
                granularity = "week"
        comparison = COMPARISON_PAIRS[granularity]

    if comparison is not None:
        kind = IntentKind.COMPARISON
    elif topics & {Topic.PRODUCTS, Topic.LOW_STOCK, Topic.CATEGORIES}:
        kind = IntentKind.PRODUCT
    elif Topic.CUSTOMERS in topics:
        kind = IntentKind.CUSTOMER
    elif window is not WindowKind.ALL_TIME or _contains_any(text, kw.sales):
        kind = IntentKind.SALES
    else:
        kind = IntentKind.GENERIC

    return QueryIntent(kind=kind, window=window, topics=frozenset(topics), comparison=comparison)
