from typing import List, Optional
from pydantic import BaseModel, Field


# =========================================================
# META
# =========================================================

class PolicyMeta(BaseModel):
    policy_id: str = "hcw_staff_assistant"
    version: str = "v1"
    description: Optional[str] = None
    brand: str = "HealthCareWorld"
    currency_symbol: str = "₹"


# =========================================================
# FETCH LIMITS
# =========================================================

class FetchLimits(BaseModel):
    orders: int = 2000
    products: int = 100
    product_sample: int = 20
    profiles: int = 50
    profile_sample: int = 10
    rollups: int = 20
    low_stock_sample: int = 50
    window_order_sample: int = 3
    comparison_order_sample: int = 5


class StockThresholds(BaseModel):
    low: int = 10
    medium: int = 50


# =========================================================
# KEYWORDS
# =========================================================

class TopicKeywords(BaseModel):
    products: List[str] = Field(default_factory=lambda: ["product", "inventory", "stock", "top", "best"])
    customers: List[str] = Field(default_factory=lambda: ["customer", "user", "profile"])
    categories: List[str] = Field(default_factory=lambda: ["category", "brand", "performance"])
    low_stock: List[str] = Field(default_factory=lambda: ["low", "stock", "alert", "inventory"])
    comparison: List[str] = Field(default_factory=lambda: ["compar", "vs", "versus"])
    sales: List[str] = Field(default_factory=lambda: ["sales", "revenue", "order", "aov", "sold"])


# =========================================================
# PROMPT
# =========================================================

class PromptSpec(BaseModel):
    system_instructions: str = (
        "You are HealthCareWorld's Master Interactive Data Analyst. "
        "Always return valid JSON with the fields type, content, chartSpec, actions and insights."
    )
    closing_rules: str = "Respond only with valid JSON in the exact format specified."
    output_request: str = (
        "Provide a comprehensive analysis with narrative, data, and actionable insights in JSON format. "
        "Include chartSpec for visualizations when appropriate."
    )


# =========================================================
# ROOT
# =========================================================

class AssistantPolicy(BaseModel):
    meta: PolicyMeta = Field(default_factory=PolicyMeta)
    limits: FetchLimits = Field(default_factory=FetchLimits)
    stock: StockThresholds = Field(default_factory=StockThresholds)
    keywords: TopicKeywords = Field(default_factory=TopicKeywords)
    prompt: PromptSpec = Field(default_factory=PromptSpec)
