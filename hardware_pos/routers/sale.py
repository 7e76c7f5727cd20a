from fastapi import APIRouter, Depends, HTTPException, Query, status
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from hardware_pos.core.exceptions import SaleError
from hardware_pos.models.sale import PaymentMethod, SaleStatus
from hardware_pos.models.user import User
from hardware_pos.schemas.sale import SaleCreate, SaleResponse
from hardware_pos.dependencies.auth import get_current_active_user, get_manager_user
from hardware_pos.services import sale_poster

router = APIRouter()


def _http_error(exc: SaleError) -> HTTPException:
    return HTTPException(
        status_code=exc.status_code,
        detail={"message": exc.message, **exc.details},
    )


# ==========================================
# 1. POST SALE (CRITICAL ENDPOINT)
# ==========================================

@router.post("/", response_model=SaleResponse, status_code=status.HTTP_201_CREATED)
async def create_sale(
    sale_data: SaleCreate,
    current_user: User = Depends(get_current_active_user)
):
    """
    Post a sale transaction and deduct its stock.

    Check `stock_status` in the response: `failed` means the sale was saved
    but stock could not be fully applied and is listed for reconciliation.

    Access: any active staff member
    """
    try:
        return await sale_poster.post_sale(sale_data, current_user.user_id)
    except SaleError as exc:
        raise _http_error(exc)


# ==========================================
# 2. LIST SALES
# ==========================================

@router.get("/", response_model=List[SaleResponse])
async def list_sales(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    payment_method: Optional[PaymentMethod] = None,
    search: Optional[str] = None,
    sale_status: SaleStatus = Query(SaleStatus.COMPLETED, alias="status"),
    current_user: User = Depends(get_current_active_user)
):
    """
    List sales, newest first.

    Refunded sales are left out unless `status=refunded` is requested.
    `search` matches invoice number and customer name, phone or address.
    """
    return await sale_poster.list_sales(
        page=page,
        limit=limit,
        start_date=start_date,
        end_date=end_date,
        payment_method=payment_method,
        search=search,
        status=sale_status,
    )


# ==========================================
# 3. RECONCILIATION QUEUE (Manager Only)
# ==========================================

@router.get("/reconciliation", response_model=List[SaleResponse])
async def list_reconciliation(manager: User = Depends(get_manager_user)):
    """Sales whose stock effects are not confirmed applied (or reversed)."""
    return await sale_poster.list_reconciliation()


# ==========================================
# 4. GET SALE DETAILS
# ==========================================

@router.get("/invoice/{invoice_number}", response_model=SaleResponse)
async def get_sale_by_invoice(
    invoice_number: str,
    current_user: User = Depends(get_current_active_user)
):
    try:
        return await sale_poster.get_sale_by_invoice(invoice_number)
    except SaleError as exc:
        raise _http_error(exc)


@router.get("/{sale_id}", response_model=SaleResponse)
async def get_sale(
    sale_id: UUID,
    current_user: User = Depends(get_current_active_user)
):
    try:
        return await sale_poster.get_sale(sale_id)
    except SaleError as exc:
        raise _http_error(exc)


# ==========================================
# 5. REFUND SALE (Manager Only)
# ==========================================

@router.post("/{sale_id}/refund", response_model=SaleResponse)
async def refund_sale(
    sale_id: UUID,
    manager: User = Depends(get_manager_user)
):
    """Void a sale and return its items to stock"""
    try:
        return await sale_poster.refund_sale(sale_id, manager.user_id)
    except SaleError as exc:
        raise _http_error(exc)


@router.post("/{sale_id}/reconcile", response_model=SaleResponse)
async def reconcile_sale(
    sale_id: UUID,
    manager: User = Depends(get_manager_user)
):
    """Retry the stock side of a sale flagged for reconciliation"""
    try:
        return await sale_poster.reconcile_sale(sale_id)
    except SaleError as exc:
        raise _http_error(exc)
