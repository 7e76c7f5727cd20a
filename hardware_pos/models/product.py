from beanie import Document
from pydantic import Field
from typing import Optional
from uuid import UUID, uuid4
from datetime import datetime
from enum import Enum


class Unit(str, Enum):
    # Count
    PIECE = "piece"
    PAIR = "pair"
    SET = "set"
    PACK = "pack"
    BOX = "box"
    BUNDLE = "bundle"
    CARTON = "carton"
    # Weight
    GRAM = "gram"
    KG = "kg"
    TON = "ton"
    # Length
    INCH = "inch"
    FEET = "feet"
    METER = "meter"
    ROLL = "roll"
    COIL = "coil"
    # Volume
    ML = "ml"
    LITER = "liter"
    GALLON = "gallon"
    DRUM = "drum"
    # Area
    SQFT = "sqft"
    SQM = "sqm"
    # Electrical
    AMPERE = "ampere"
    WATT = "watt"


class ProductCategory(str, Enum):
    HARDWARE = "hardware"
    ELECTRICAL = "electrical"
    PLUMBING = "plumbing"
    TOOLS = "tools"
    PAINT = "paint"
    OTHER = "other"


class Product(Document):
    """
    Catalog entry with its on-hand quantity.
    Catalog fields are maintained elsewhere; `quantity` is only written
    through the inventory ledger.
    """
    id: UUID = Field(default_factory=uuid4)

    # --- Identification ---
    name: str
    size_package: Optional[str] = None     # e.g. "1/2 inch", "5L tin"
    unit: Unit = Unit.PIECE
    category: ProductCategory = ProductCategory.OTHER
    barcode: Optional[str] = None
    supplier: Optional[str] = None

    # --- Financials ---
    purchase_price: float = Field(default=0.0, ge=0)
    sale_price: float = Field(..., ge=0)
    discount: float = Field(default=0.0, ge=0, le=100)  # Standing discount (%)

    # --- Stock ---
    quantity: int = Field(default=0, ge=0)
    min_stock_level: int = Field(default=10, ge=0)      # Reorder threshold

    is_active: bool = True

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "products"
        indexes = ["barcode", "is_active"]
