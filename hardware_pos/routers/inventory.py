from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List
from uuid import UUID

from hardware_pos.core.exceptions import SaleError
from hardware_pos.dependencies.auth import get_current_active_user, get_manager_user
from hardware_pos.models.user import User
from hardware_pos.schemas.inventory import AvailabilityResponse, StockAdjustmentSchema, StockLevelResponse
from hardware_pos.services import inventory_ledger

router = APIRouter()


@router.get("/low-stock", response_model=List[StockLevelResponse])
async def get_low_stock(current_user: User = Depends(get_current_active_user)):
    """Active products at or below their minimum stock level."""
    return await inventory_ledger.low_stock()


@router.get("/{product_id}/availability", response_model=AvailabilityResponse)
async def check_availability(
    product_id: UUID,
    quantity: int = Query(1, gt=0),
    current_user: User = Depends(get_current_active_user)
):
    try:
        availability = await inventory_ledger.check_availability(product_id, quantity)
    except SaleError as exc:
        raise HTTPException(status_code=exc.status_code, detail={"message": exc.message, **exc.details})

    return {
        "product_id": availability.product.id,
        "name": availability.product.name,
        "requested": quantity,
        "current_quantity": availability.current_qty,
        "available": availability.available,
    }


@router.patch("/{product_id}/stock", response_model=StockLevelResponse)
async def adjust_stock(
    product_id: UUID,
    data: StockAdjustmentSchema,
    manager: User = Depends(get_manager_user)
):
    """
    Receive goods (`add`) or write stock off (`subtract`).
    Subtracting never takes the quantity below zero.
    """
    try:
        return await inventory_ledger.adjust_stock(product_id, data.quantity, data.operation)
    except SaleError as exc:
        raise HTTPException(status_code=exc.status_code, detail={"message": exc.message, **exc.details})
