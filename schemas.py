"""
Storefront Schemas

Each record model mirrors a collection in the hosted backend:
- Product     -> "products"
- Order       -> "orders"
- CustomOrder -> "custom_orders"

The *In models are the exact rows the storefront inserts. The read models add
the backend-assigned id and creation timestamp and accept whatever the backend
holds: any status string, and nulls in the free-text fields.

Emails are validated on the request payloads but kept exactly as typed, since
order lookup matches the stored address verbatim.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.networks import validate_email


class OrderStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["OrderStatus"]:
        """Closed view of an open status string; None when unrecognised."""
        try:
            return cls(value)
        except ValueError:
            return None


# Collection: products
class Product(BaseModel):
    id: str
    name: str = Field(..., description="Product name")
    description: Optional[str] = Field(None, description="Product description")
    price: float = Field(..., ge=0, description="Unit price in dollars")
    image_url: Optional[str] = Field(None, description="Image URL")
    stock: int = Field(0, ge=0, description="Units available")
    created_at: Optional[datetime] = None


# Collection: orders
class OrderIn(BaseModel):
    customer_name: str = Field(..., min_length=1)
    customer_email: str
    product_id: str
    product_name: str
    product_price: float = Field(..., ge=0, description="Unit price at order time")
    quantity: int = Field(..., ge=1)
    total_amount: float = Field(..., ge=0)
    notes: str = ""
    status: str = OrderStatus.PENDING.value

class Order(OrderIn):
    id: str
    customer_name: Optional[str] = None
    product_name: Optional[str] = None
    notes: Optional[str] = None
    stripe_payment_intent_id: Optional[str] = None
    created_at: Optional[datetime] = None


# Collection: custom_orders
class CustomOrderIn(BaseModel):
    customer_name: str = Field(..., min_length=1)
    customer_email: str
    description: str = Field(..., min_length=1)
    status: str = OrderStatus.PENDING.value

class CustomOrder(CustomOrderIn):
    id: str
    customer_name: Optional[str] = None
    description: Optional[str] = None
    estimated_price: Optional[float] = None
    created_at: Optional[datetime] = None


# ---------- Request payloads ----------

class CheckoutRequest(BaseModel):
    product_id: str
    name: str = Field(..., min_length=1)
    email: str
    quantity: int = Field(1, ge=1)
    notes: str = ""

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        validate_email(value)
        return value

class CustomOrderRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: str
    description: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        validate_email(value)
        return value

class OrderHistory(BaseModel):
    email: str
    orders: List[Order] = Field(default_factory=list)
    custom_orders: List[CustomOrder] = Field(default_factory=list)
