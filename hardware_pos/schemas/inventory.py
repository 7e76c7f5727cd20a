from pydantic import BaseModel, Field
from typing import Literal
from uuid import UUID
from hardware_pos.models.product import ProductCategory, Unit


# Used by: PATCH /inventory/{product_id}/stock
class StockAdjustmentSchema(BaseModel):
    quantity: int = Field(..., gt=0, description="Amount to add or remove. Must be positive.")
    operation: Literal["add", "subtract"]


class AvailabilityResponse(BaseModel):
    product_id: UUID
    name: str
    requested: int
    current_quantity: int
    available: bool


class StockLevelResponse(BaseModel):
    id: UUID
    name: str
    size_package: str | None = None
    unit: Unit
    category: ProductCategory
    barcode: str | None = None
    sale_price: float
    quantity: int
    min_stock_level: int

    model_config = {"from_attributes": True}
