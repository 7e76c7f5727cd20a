from typing import Any, Dict, Optional
from uuid import UUID


class SaleError(Exception):
    """Base class for sale posting and inventory ledger failures."""

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ProductNotFound(SaleError):
    status_code = 404

    def __init__(self, product_id: UUID, line: Optional[int] = None):
        message = f"Product {product_id} not found"
        if line is not None:
            message = f"Line {line + 1}: {message}"
        super().__init__(message, {"product_id": str(product_id), "line": line})
        self.product_id = product_id
        self.line = line


class InsufficientStock(SaleError):
    def __init__(self, product_id: UUID, product_name: str, available: int, requested: int):
        super().__init__(
            f"Insufficient stock for '{product_name}'. Available: {available}, Requested: {requested}",
            {
                "product_id": str(product_id),
                "product_name": product_name,
                "available": available,
                "requested": requested,
            },
        )
        self.product_id = product_id
        self.available = available
        self.requested = requested


class InsufficientPayment(SaleError):
    def __init__(self, grand_total: float, amount_paid: float):
        super().__init__(
            f"Insufficient payment. Total: {grand_total:.2f}, Paid: {amount_paid:.2f}",
            {"grand_total": grand_total, "amount_paid": amount_paid},
        )
        self.grand_total = grand_total
        self.amount_paid = amount_paid


class DuplicateInvoiceNumber(SaleError):
    status_code = 409

    def __init__(self, invoice_number: str, attempts: int):
        super().__init__(
            f"Could not allocate a unique invoice number after {attempts} attempts",
            {"invoice_number": invoice_number, "attempts": attempts},
        )


class PersistenceFailure(SaleError):
    status_code = 500


class SaleNotFound(SaleError):
    status_code = 404

    def __init__(self, reference: Any):
        super().__init__(f"Sale {reference} not found", {"sale": str(reference)})


class SaleAlreadyRefunded(SaleError):
    status_code = 409

    def __init__(self, invoice_number: str):
        super().__init__(
            f"Sale {invoice_number} has already been refunded",
            {"invoice_number": invoice_number},
        )


class SaleNotReconcilable(SaleError):
    status_code = 409

    def __init__(self, invoice_number: str, stock_status: str):
        super().__init__(
            f"Sale {invoice_number} does not need reconciliation (stock status '{stock_status}')",
            {"invoice_number": invoice_number, "stock_status": stock_status},
        )


class SaleBusy(SaleError):
    status_code = 409

    def __init__(self, invoice_number: str):
        super().__init__(
            f"Stock for sale {invoice_number} is still being applied, try again shortly",
            {"invoice_number": invoice_number},
        )
