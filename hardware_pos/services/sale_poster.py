"""
Sale posting: basket -> durable sale record -> stock decrement, exactly once.

Outcome is two-phase. The sale document is committed first with
`stock_status=pending`; each line's decrement is then applied through the
inventory ledger and recorded on the line (`stock_applied`). A store failure
between the two phases leaves the sale in `failed` for reconciliation instead
of losing track of it.
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from beanie import UpdateResponse
from beanie.operators import And, Or, Set
from pymongo.errors import DuplicateKeyError, PyMongoError

from hardware_pos.core.config import settings
from hardware_pos.core.exceptions import (
    DuplicateInvoiceNumber,
    InsufficientStock,
    PersistenceFailure,
    ProductNotFound,
    SaleAlreadyRefunded,
    SaleBusy,
    SaleNotFound,
    SaleNotReconcilable,
)
from hardware_pos.models.product import Product
from hardware_pos.models.sale import (
    PaymentMethod,
    Sale,
    SaleItem,
    SaleStatus,
    StockStatus,
)
from hardware_pos.schemas.sale import SaleCreate
from hardware_pos.services import inventory_ledger, invoice, pricing

logger = logging.getLogger(__name__)


# ==========================================
# HELPER FUNCTIONS
# ==========================================

async def _availability_pass(basket: SaleCreate) -> Dict[UUID, Product]:
    """
    Check every line before anything is written.
    Lines repeating a product are checked against stock as one total.
    """
    requested: Dict[UUID, int] = {}
    first_line: Dict[UUID, int] = {}
    for index, line in enumerate(basket.items):
        requested[line.product_id] = requested.get(line.product_id, 0) + line.quantity
        first_line.setdefault(line.product_id, index)

    products = {}
    for product_id, qty in requested.items():
        try:
            availability = await inventory_ledger.check_availability(product_id, qty)
        except ProductNotFound:
            raise ProductNotFound(product_id, line=first_line[product_id]) from None

        if not availability.available:
            raise InsufficientStock(product_id, availability.product.name, availability.current_qty, qty)
        products[product_id] = availability.product

    return products


def _price_basket(basket: SaleCreate, products: Dict[UUID, Product]) -> Tuple[List[SaleItem], pricing.SaleTotals]:
    lines = []
    for line in basket.items:
        product = products[line.product_id]
        unit_price = line.unit_price if line.unit_price is not None else product.sale_price
        discount = line.discount if line.discount is not None else 0.0
        lines.append(pricing.compute_line(line.quantity, unit_price, discount, line.discount_type))

    totals = pricing.compute_totals(
        lines,
        amount_paid=basket.amount_paid,
        order_discount=basket.order_discount,
        order_discount_type=basket.order_discount_type,
    )

    items = [
        SaleItem(
            product_id=line.product_id,
            product_name=products[line.product_id].name,
            quantity=computed.quantity,
            unit_price=computed.unit_price,
            discount_type=computed.discount_type,
            discount=computed.discount,
            discount_amount=computed.discount_amount,
            item_total=computed.item_total,
            total=computed.total,
        )
        for line, computed in zip(basket.items, totals.lines)
    ]
    return items, totals


async def _commit(fields: dict) -> Sale:
    """
    Insert the sale under a freshly allocated invoice number.
    Collisions on the number are retried; anything else is a persistence failure.
    """
    attempts = max(1, settings.INVOICE_RETRY_ATTEMPTS)
    invoice_number: Optional[str] = None

    for attempt in range(1, attempts + 1):
        try:
            invoice_number = await invoice.allocate_invoice_number(fields["sale_date"])
            sale = Sale(invoice_number=invoice_number, **fields)
            await sale.insert()
            return sale
        except DuplicateKeyError:
            logger.warning(
                "Invoice number %s collided (attempt %d/%d), re-allocating",
                invoice_number, attempt, attempts,
            )
        except PyMongoError as exc:
            logger.exception("Failed to save sale")
            raise PersistenceFailure("Could not save sale", {"error": str(exc)}) from exc

    raise DuplicateInvoiceNumber(invoice_number or "", attempts)


async def _record_line(sale: Sale, index: int, applied: bool) -> None:
    sale.items[index].stock_applied = applied
    await Sale.find_one(Sale.id == sale.id).update(
        Set({f"items.{index}.stock_applied": applied})
    )


async def _mark_stock(sale: Sale, status: StockStatus, error: Optional[str] = None) -> Sale:
    now = datetime.utcnow()
    sale.stock_status = status
    sale.stock_error = error
    sale.stock_updated_at = now
    sale.updated_at = now
    await Sale.find_one(Sale.id == sale.id).update(
        Set({
            Sale.stock_status: status,
            Sale.stock_error: error,
            Sale.stock_updated_at: now,
            Sale.updated_at: now,
        })
    )
    return sale


async def _flag_for_reconciliation(sale: Sale, exc: Exception) -> Sale:
    logger.error(
        "RECONCILIATION NEEDED: sale %s (%s) stock_status=%s, applied lines=%s: %s",
        sale.invoice_number,
        sale.id,
        sale.stock_status.value,
        [i for i, item in enumerate(sale.items) if item.stock_applied],
        exc,
        exc_info=exc,
    )
    try:
        await _mark_stock(sale, StockStatus.FAILED, str(exc))
    except PyMongoError:
        # Record stays pending; it becomes reconcilable once stale
        logger.exception("Could not flag sale %s as failed", sale.invoice_number)
        sale.stock_status = StockStatus.FAILED
        sale.stock_error = str(exc)
    return sale


async def _unwind(sale: Sale) -> None:
    """Undo a sale that lost a stock race: put back what it took, drop the record."""
    try:
        for index, item in enumerate(sale.items):
            if item.stock_applied:
                await inventory_ledger.restore(item.product_id, item.quantity)
                await _record_line(sale, index, False)
        await sale.delete()
    except PyMongoError as exc:
        await _flag_for_reconciliation(sale, exc)
        raise PersistenceFailure(
            f"Sale {sale.invoice_number} could not be rolled back",
            {"invoice_number": sale.invoice_number, "error": str(exc)},
        ) from exc
    logger.info("Sale %s rolled back after a concurrent stock change", sale.invoice_number)


async def _apply_stock(sale: Sale, unwind_on_shortage: bool = True) -> Sale:
    """Decrement every line not yet applied. Each line is decremented at most once."""
    try:
        for index, item in enumerate(sale.items):
            if item.stock_applied:
                continue
            await inventory_ledger.decrement(item.product_id, item.quantity)
            await _record_line(sale, index, True)
    except (InsufficientStock, ProductNotFound) as exc:
        if unwind_on_shortage:
            await _unwind(sale)
        else:
            await _mark_stock(sale, StockStatus.FAILED, exc.message)
        raise
    except PyMongoError as exc:
        return await _flag_for_reconciliation(sale, exc)

    return await _mark_stock(sale, StockStatus.APPLIED)


async def _reverse_stock(sale: Sale) -> Sale:
    """Restore every line that was applied. Restoring is always allowed."""
    try:
        for index, item in enumerate(sale.items):
            if not item.stock_applied:
                continue
            await inventory_ledger.restore(item.product_id, item.quantity)
            await _record_line(sale, index, False)
    except PyMongoError as exc:
        return await _flag_for_reconciliation(sale, exc)

    return await _mark_stock(sale, StockStatus.REVERSED)


def _stale_pending_cutoff() -> datetime:
    return datetime.utcnow() - timedelta(seconds=settings.RECONCILE_PENDING_AFTER_SECONDS)


def _needs_reconciliation(cutoff: datetime):
    return Or(
        Sale.stock_status == StockStatus.FAILED,
        And(Sale.stock_status == StockStatus.PENDING, Sale.stock_updated_at < cutoff),
    )


# ==========================================
# OPERATIONS
# ==========================================

async def post_sale(basket: SaleCreate, staff_id: UUID) -> Sale:
    """
    Validate, price, number, commit and apply stock for one basket.

    Raises ProductNotFound, InsufficientStock, InsufficientPayment,
    DuplicateInvoiceNumber or PersistenceFailure; none of these leave a
    sale behind or move stock. A store failure while applying stock returns
    the sale with `stock_status=failed`.
    """
    products = await _availability_pass(basket)
    items, totals = _price_basket(basket, products)

    now = datetime.utcnow()
    sale = await _commit({
        "items": items,
        "subtotal": totals.subtotal,
        "item_discount_total": totals.item_discount_total,
        "order_discount": totals.order_discount,
        "order_discount_type": totals.order_discount_type,
        "order_discount_amount": totals.order_discount_amount,
        "total_discount": totals.total_discount,
        "grand_total": totals.grand_total,
        "payment_method": basket.payment_method,
        "amount_paid": totals.amount_paid,
        "change": totals.change,
        "customer": basket.customer,
        "sold_by": staff_id,
        "sale_date": now,
        "stock_status": StockStatus.PENDING,
        "stock_updated_at": now,
    })

    sale = await _apply_stock(sale)

    logger.info(
        "Sale %s posted by %s: %d lines, total %.2f, stock %s",
        sale.invoice_number, staff_id, len(sale.items), sale.grand_total, sale.stock_status.value,
    )
    return sale


async def refund_sale(sale_id: UUID, staff_id: UUID) -> Sale:
    """
    Void a completed sale and put its stock back.
    The status flip is the claim: a second refund finds nothing to flip.
    """
    now = datetime.utcnow()
    sale = await Sale.find_one(
        Sale.id == sale_id,
        Sale.status == SaleStatus.COMPLETED,
        Sale.stock_status != StockStatus.PENDING,
    ).update(
        Set({
            Sale.status: SaleStatus.REFUNDED,
            Sale.refunded_at: now,
            Sale.refunded_by: staff_id,
            Sale.stock_status: StockStatus.PENDING,
            Sale.stock_updated_at: now,
            Sale.updated_at: now,
        }),
        response_type=UpdateResponse.NEW_DOCUMENT,
    )

    if sale is None:
        existing = await Sale.get(sale_id)
        if existing is None:
            raise SaleNotFound(sale_id)
        if existing.status == SaleStatus.REFUNDED:
            raise SaleAlreadyRefunded(existing.invoice_number)
        raise SaleBusy(existing.invoice_number)

    sale = await _reverse_stock(sale)
    logger.info("Sale %s refunded by %s, stock %s", sale.invoice_number, staff_id, sale.stock_status.value)
    return sale


async def reconcile_sale(sale_id: UUID) -> Sale:
    """
    Finish the stock side of a sale left in a reconciliation condition:
    completed sales get their remaining lines decremented, refunded sales
    get their remaining lines restored.
    """
    now = datetime.utcnow()
    sale = await Sale.find_one(
        Sale.id == sale_id,
        _needs_reconciliation(_stale_pending_cutoff()),
    ).update(
        Set({Sale.stock_status: StockStatus.PENDING, Sale.stock_updated_at: now}),
        response_type=UpdateResponse.NEW_DOCUMENT,
    )

    if sale is None:
        existing = await Sale.get(sale_id)
        if existing is None:
            raise SaleNotFound(sale_id)
        raise SaleNotReconcilable(existing.invoice_number, existing.stock_status.value)

    if sale.status == SaleStatus.REFUNDED:
        sale = await _reverse_stock(sale)
    else:
        sale = await _apply_stock(sale, unwind_on_shortage=False)

    logger.info("Sale %s reconciled, stock %s", sale.invoice_number, sale.stock_status.value)
    return sale


async def list_reconciliation() -> List[Sale]:
    return await Sale.find(
        _needs_reconciliation(_stale_pending_cutoff())
    ).sort(+Sale.sale_date).to_list()


async def get_sale(sale_id: UUID) -> Sale:
    sale = await Sale.get(sale_id)
    if not sale:
        raise SaleNotFound(sale_id)
    return sale


async def get_sale_by_invoice(invoice_number: str) -> Sale:
    sale = await Sale.find_one(Sale.invoice_number == invoice_number)
    if not sale:
        raise SaleNotFound(invoice_number)
    return sale


async def list_sales(
    page: int = 1,
    limit: int = 20,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    payment_method: Optional[PaymentMethod] = None,
    search: Optional[str] = None,
    status: Optional[SaleStatus] = SaleStatus.COMPLETED,
) -> List[Sale]:
    """
    Newest first. Only completed sales unless another status is asked for;
    `status=None` lists everything. `search` matches the invoice number or
    the customer's name, phone or address.
    """
    query: dict = {}

    if status is not None:
        query["status"] = status.value
    if payment_method is not None:
        query["payment_method"] = payment_method.value
    if start_date:
        query["sale_date"] = {"$gte": start_date}
    if end_date:
        query.setdefault("sale_date", {})["$lte"] = end_date
    if search:
        pattern = {"$regex": re.escape(search), "$options": "i"}
        query["$or"] = [
            {"invoice_number": pattern},
            {"customer.name": pattern},
            {"customer.phone": pattern},
            {"customer.address": pattern},
        ]

    return await Sale.find(query).sort(-Sale.sale_date).skip((page - 1) * limit).limit(limit).to_list()
