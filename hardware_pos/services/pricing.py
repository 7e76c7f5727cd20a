"""Sale arithmetic. Pure functions, no database access."""

from dataclasses import dataclass
from typing import Iterable, List

from hardware_pos.core.exceptions import InsufficientPayment
from hardware_pos.models.sale import DiscountType


def _money(value: float) -> float:
    return round(value, 2)


@dataclass(frozen=True)
class LineTotals:
    quantity: int
    unit_price: float
    discount_type: DiscountType
    discount: float
    item_total: float
    discount_amount: float
    total: float


@dataclass(frozen=True)
class SaleTotals:
    lines: List[LineTotals]
    subtotal: float
    item_discount_total: float
    order_discount: float
    order_discount_type: DiscountType
    order_discount_amount: float
    total_discount: float
    grand_total: float
    amount_paid: float
    change: float


def discount_amount(base: float, value: float, discount_type: DiscountType) -> float:
    """
    Percentage: value% of base. Fixed: value, capped at base.
    Never negative and never more than base.
    """
    if base <= 0 or value <= 0:
        return 0.0
    if discount_type == DiscountType.PERCENTAGE:
        return min(value / 100 * base, base)
    return min(value, base)


def compute_line(quantity: int, unit_price: float, discount: float = 0.0,
                 discount_type: DiscountType = DiscountType.PERCENTAGE) -> LineTotals:
    item_total = _money(quantity * unit_price)
    amount = _money(discount_amount(item_total, discount, discount_type))
    return LineTotals(
        quantity=quantity,
        unit_price=unit_price,
        discount_type=discount_type,
        discount=discount,
        item_total=item_total,
        discount_amount=amount,
        total=_money(item_total - amount),
    )


def compute_totals(lines: Iterable[LineTotals], amount_paid: float,
                   order_discount: float = 0.0,
                   order_discount_type: DiscountType = DiscountType.PERCENTAGE) -> SaleTotals:
    """
    Roll line totals up into order totals and check the payment covers them.
    The order discount applies to what is left after item discounts.
    """
    lines = list(lines)
    subtotal = _money(sum(line.item_total for line in lines))
    item_discount_total = _money(sum(line.discount_amount for line in lines))

    base = max(0.0, subtotal - item_discount_total)
    order_discount_amount = _money(discount_amount(base, order_discount, order_discount_type))

    total_discount = _money(item_discount_total + order_discount_amount)
    grand_total = _money(max(0.0, subtotal - total_discount))

    if amount_paid < grand_total:
        raise InsufficientPayment(grand_total, amount_paid)
    change = _money(amount_paid - grand_total)

    return SaleTotals(
        lines=lines,
        subtotal=subtotal,
        item_discount_total=item_discount_total,
        order_discount=order_discount,
        order_discount_type=order_discount_type,
        order_discount_amount=order_discount_amount,
        total_discount=total_discount,
        grand_total=grand_total,
        amount_paid=amount_paid,
        change=change,
    )
