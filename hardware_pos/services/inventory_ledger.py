"""
Inventory ledger: the only code allowed to change a product's on-hand quantity.

Every write is a single conditional update issued to MongoDB, so concurrent
sales of the same product serialize inside the store instead of racing through
a read-then-write in the application.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from beanie import UpdateResponse
from beanie.operators import Inc, Set

from hardware_pos.core.exceptions import InsufficientStock, ProductNotFound
from hardware_pos.models.product import Product

logger = logging.getLogger(__name__)


@dataclass
class Availability:
    product: Product
    requested: int

    @property
    def current_qty(self) -> int:
        return self.product.quantity

    @property
    def available(self) -> bool:
        return self.product.quantity >= self.requested


def _check_quantity(qty: int) -> None:
    if qty <= 0:
        raise ValueError(f"Quantity must be positive, got {qty}")


async def get_active_product(product_id: UUID) -> Product:
    product = await Product.get(product_id)
    if not product or not product.is_active:
        raise ProductNotFound(product_id)
    return product


async def check_availability(product_id: UUID, requested_qty: int) -> Availability:
    """Advisory read. The decrement itself is the actual guarantee."""
    _check_quantity(requested_qty)
    product = await get_active_product(product_id)
    return Availability(product=product, requested=requested_qty)


async def decrement(product_id: UUID, qty: int) -> Product:
    """
    Take `qty` units off the shelf, only if at least `qty` are on hand.
    Raises InsufficientStock / ProductNotFound when the condition does not hold.
    """
    _check_quantity(qty)

    updated = await Product.find_one(
        Product.id == product_id,
        Product.is_active == True,  # noqa: E712
        Product.quantity >= qty,
    ).update(
        Inc({Product.quantity: -qty}),
        Set({Product.updated_at: datetime.utcnow()}),
        response_type=UpdateResponse.NEW_DOCUMENT,
    )

    if updated is None:
        product = await get_active_product(product_id)
        raise InsufficientStock(product.id, product.name, product.quantity, qty)

    logger.debug("Decremented %s by %d, now %d", updated.name, qty, updated.quantity)
    return updated


async def restore(product_id: UUID, qty: int) -> Optional[Product]:
    """
    Put `qty` units back. Unconditional: works on deactivated products too.
    """
    _check_quantity(qty)

    updated = await Product.find_one(Product.id == product_id).update(
        Inc({Product.quantity: qty}),
        Set({Product.updated_at: datetime.utcnow()}),
        response_type=UpdateResponse.NEW_DOCUMENT,
    )

    if updated is None:
        logger.warning("Restore of %d units skipped: product %s no longer exists", qty, product_id)
        return None

    logger.debug("Restored %d to %s, now %d", qty, updated.name, updated.quantity)
    return updated


async def adjust_stock(product_id: UUID, qty: int, operation: str) -> Product:
    """Manual stock correction (receiving goods, write-offs)."""
    if operation == "add":
        # Receiving goods requires a known product, unlike a refund restore
        await get_active_product(product_id)
        product = await restore(product_id, qty)
        if product is None:
            raise ProductNotFound(product_id)
    elif operation == "subtract":
        product = await decrement(product_id, qty)
    else:
        raise ValueError(f"Unknown stock operation '{operation}'")

    logger.info("Stock %s %d for '%s', new quantity %d", operation, qty, product.name, product.quantity)
    return product


async def low_stock() -> List[Product]:
    """Active products at or below their reorder threshold."""
    return await Product.find(
        {"$expr": {"$lte": ["$quantity", "$min_stock_level"]}},
        Product.is_active == True,  # noqa: E712
    ).sort(+Product.quantity).to_list()
