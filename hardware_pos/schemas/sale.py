from pydantic import BaseModel, Field, model_validator
from typing import List, Optional
from uuid import UUID
from datetime import datetime
from hardware_pos.models.sale import (
    Customer,
    DiscountType,
    PaymentMethod,
    SaleStatus,
    StockStatus,
)


# ==========================================
# REQUEST SCHEMAS (What users send)
# ==========================================

class SaleItemCreate(BaseModel):
    """One basket line - sent by cashier"""
    product_id: UUID
    quantity: int = Field(..., gt=0, description="Must be greater than 0")
    unit_price: Optional[float] = Field(default=None, ge=0, description="Defaults to the product's sale price")
    discount: Optional[float] = Field(default=None, ge=0, description="Defaults to the product's standing discount (%)")
    discount_type: DiscountType = DiscountType.PERCENTAGE

    @model_validator(mode="after")
    def check_percentage(self):
        if self.discount_type == DiscountType.PERCENTAGE and self.discount is not None and self.discount > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return self


class SaleCreate(BaseModel):
    """Post a new sale transaction"""
    items: List[SaleItemCreate] = Field(..., min_length=1, description="Must have at least 1 item")
    order_discount: float = Field(default=0.0, ge=0, description="Order-level discount value")
    order_discount_type: DiscountType = DiscountType.PERCENTAGE
    payment_method: PaymentMethod = PaymentMethod.CASH
    amount_paid: float = Field(..., ge=0, description="Amount customer paid")
    customer: Optional[Customer] = None

    @model_validator(mode="after")
    def check_order_percentage(self):
        if self.order_discount_type == DiscountType.PERCENTAGE and self.order_discount > 100:
            raise ValueError("Percentage discount cannot exceed 100")
        return self


# ==========================================
# RESPONSE SCHEMAS (What API returns)
# ==========================================

class SaleItemResponse(BaseModel):
    product_id: UUID
    product_name: str
    quantity: int
    unit_price: float
    discount_type: DiscountType
    discount: float
    discount_amount: float
    item_total: float
    total: float
    stock_applied: bool


class SaleResponse(BaseModel):
    """Complete sale details"""
    id: UUID
    invoice_number: str
    items: List[SaleItemResponse]
    subtotal: float
    item_discount_total: float
    order_discount: float
    order_discount_type: DiscountType
    order_discount_amount: float
    total_discount: float
    grand_total: float
    payment_method: PaymentMethod
    amount_paid: float
    change: float
    customer: Optional[Customer] = None
    sold_by: UUID
    sale_date: datetime
    status: SaleStatus
    stock_status: StockStatus
    stock_error: Optional[str] = None
    refunded_at: Optional[datetime] = None
    refunded_by: Optional[UUID] = None

    model_config = {"from_attributes": True}
