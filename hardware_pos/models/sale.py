from beanie import Document, Indexed
from pydantic import BaseModel, Field
from typing import Annotated, List, Optional
from uuid import UUID, uuid4
from datetime import datetime
from enum import Enum


class PaymentMethod(str, Enum):
    CASH = "cash"
    CARD = "card"
    CREDIT = "credit"
    MIXED = "mixed"


class DiscountType(str, Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class SaleStatus(str, Enum):
    COMPLETED = "completed"
    REFUNDED = "refunded"


class StockStatus(str, Enum):
    PENDING = "pending"      # Sale stored, stock not yet (fully) moved
    APPLIED = "applied"      # Every line decremented
    FAILED = "failed"        # Needs reconciliation
    REVERSED = "reversed"    # Refunded and every applied line restored


class Customer(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class SaleItem(BaseModel):
    """Individual item in a sale - embedded in Sale document"""
    product_id: UUID
    product_name: str       # Snapshot at time of sale
    quantity: int = Field(..., ge=1)
    unit_price: float       # Price at time of sale (snapshot)
    discount_type: DiscountType = DiscountType.PERCENTAGE
    discount: float = 0.0
    discount_amount: float = 0.0
    item_total: float       # quantity × unit_price
    total: float            # item_total - discount_amount
    stock_applied: bool = False


class Sale(Document):
    """
    Posted sales transaction.
    Immutable after posting apart from the refund and stock bookkeeping fields.
    """
    id: UUID = Field(default_factory=uuid4)

    invoice_number: Annotated[str, Indexed(unique=True)]  # INV-YYYYMMDD-NNNN

    items: List[SaleItem]

    # Financial Details
    subtotal: float
    item_discount_total: float = 0.0
    order_discount: float = 0.0
    order_discount_type: DiscountType = DiscountType.PERCENTAGE
    order_discount_amount: float = 0.0
    total_discount: float = 0.0
    grand_total: float

    # Payment
    payment_method: PaymentMethod = PaymentMethod.CASH
    amount_paid: float
    change: float = 0.0

    customer: Optional[Customer] = None
    sold_by: UUID

    sale_date: datetime = Field(default_factory=datetime.utcnow)

    # Status & Tracking
    status: SaleStatus = SaleStatus.COMPLETED
    stock_status: StockStatus = StockStatus.PENDING
    stock_error: Optional[str] = None
    stock_updated_at: Optional[datetime] = None

    refunded_at: Optional[datetime] = None
    refunded_by: Optional[UUID] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "sales"
        indexes = [
            "sold_by",
            "sale_date",
            "status",
            "stock_status",
        ]
