import asyncio
import uuid

import pytest

from hardware_pos.core.exceptions import InsufficientStock, ProductNotFound
from hardware_pos.models.product import Product
from hardware_pos.services import inventory_ledger


async def test_check_availability(make_product):
    product = await make_product(quantity=5)

    ok = await inventory_ledger.check_availability(product.id, 5)
    assert ok.available is True
    assert ok.current_qty == 5

    short = await inventory_ledger.check_availability(product.id, 6)
    assert short.available is False


async def test_check_availability_unknown_or_inactive(make_product):
    with pytest.raises(ProductNotFound):
        await inventory_ledger.check_availability(uuid.uuid4(), 1)

    retired = await make_product(is_active=False)
    with pytest.raises(ProductNotFound):
        await inventory_ledger.check_availability(retired.id, 1)


async def test_decrement(make_product):
    product = await make_product(quantity=10)

    updated = await inventory_ledger.decrement(product.id, 4)

    assert updated.quantity == 6
    assert (await Product.get(product.id)).quantity == 6


async def test_decrement_refuses_to_go_negative(make_product):
    product = await make_product(name="Copper Wire", quantity=3)

    with pytest.raises(InsufficientStock) as excinfo:
        await inventory_ledger.decrement(product.id, 4)

    assert excinfo.value.available == 3
    assert excinfo.value.details["product_name"] == "Copper Wire"
    assert (await Product.get(product.id)).quantity == 3


async def test_decrement_rejects_non_positive(make_product):
    product = await make_product()
    with pytest.raises(ValueError):
        await inventory_ledger.decrement(product.id, 0)


async def test_concurrent_decrements_never_oversell(make_product):
    product = await make_product(quantity=5)

    results = await asyncio.gather(
        *[inventory_ledger.decrement(product.id, 1) for _ in range(8)],
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, InsufficientStock)]
    assert len(failures) == 3
    assert (await Product.get(product.id)).quantity == 0


async def test_restore_has_no_upper_bound_and_ignores_active_flag(make_product):
    product = await make_product(quantity=2, is_active=False)

    updated = await inventory_ledger.restore(product.id, 50)

    assert updated.quantity == 52


async def test_restore_missing_product_is_logged(db, caplog):
    assert await inventory_ledger.restore(uuid.uuid4(), 1) is None
    assert "no longer exists" in caplog.text


async def test_adjust_stock(make_product):
    product = await make_product(quantity=10)

    added = await inventory_ledger.adjust_stock(product.id, 5, "add")
    assert added.quantity == 15

    removed = await inventory_ledger.adjust_stock(product.id, 15, "subtract")
    assert removed.quantity == 0

    with pytest.raises(InsufficientStock):
        await inventory_ledger.adjust_stock(product.id, 1, "subtract")


async def test_adjust_stock_add_requires_known_product(db):
    with pytest.raises(ProductNotFound):
        await inventory_ledger.adjust_stock(uuid.uuid4(), 1, "add")


async def test_low_stock(make_product):
    await make_product(name="LED Bulb", quantity=2, min_stock_level=5)
    await make_product(name="PVC Pipe", quantity=300, min_stock_level=20)
    await make_product(name="Emulsion Paint", quantity=5, min_stock_level=5)
    await make_product(name="Wood Screws", quantity=15, min_stock_level=10)
    await make_product(name="Old Stock", quantity=0, is_active=False)

    names = [p.name for p in await inventory_ledger.low_stock()]

    assert names == ["LED Bulb", "Emulsion Paint"]
