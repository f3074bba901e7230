from typing import Any, Dict, List, Optional
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ProductRef(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[str] = None
    category: Optional[str] = None
    brand: Optional[str] = None
    price: Optional[float] = None
    stock: Optional[float] = None


class OrderLineItem(BaseModel):
    """1 row of order_items with its embedded product."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    quantity: Optional[float] = None
    unit_price: Optional[float] = None
    total_price: Optional[float] = None
    product: Optional[ProductRef] = Field(default=None, alias="products")

    @field_validator("product", mode="before")
    @classmethod
    def _single_product(cls, v: Any) -> Any:
        # to-one embeds come back as an object, misconfigured ones as a list
        if isinstance(v, list):
            v = v[0] if v else None
        return v if isinstance(v, (dict, ProductRef)) else None


class OrderRecord(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    total_amount: Optional[float] = None
    shipping_amount: Optional[float] = None
    status: Optional[str] = None
    payment_status: Optional[str] = None
    created_at: Optional[datetime] = None
    items: List[OrderLineItem] = Field(default_factory=list, alias="order_items")

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> str:
        return str(v)

    @field_validator("items", mode="before")
    @classmethod
    def _items_list(cls, v: Any) -> Any:
        return v if isinstance(v, list) else []

    @field_validator("created_at")
    @classmethod
    def _aware(cls, v: Optional[datetime]) -> Optional[datetime]:
        # timestamps without offset are stored as UTC
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v

    @property
    def amount(self) -> float:
        return float(self.total_amount or 0)

    @property
    def is_confirmed(self) -> bool:
        return (self.status or "").lower() == "confirmed"

    def slim(self) -> Dict[str, Any]:
        """Compact form embedded as order samples in the prompt context."""
        return {
            "id": self.id,
            "total_amount": self.amount,
            "shipping_amount": self.shipping_amount,
            "payment_status": self.payment_status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "items": [
                {
                    "product": it.product.name if it.product else None,
                    "quantity": it.quantity,
                    "total_price": it.total_price,
                }
                for it in self.items
            ],
        }
