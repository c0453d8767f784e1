"""
Money helpers shared by order intake and the payment routes.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Union

Number = Union[Decimal, float, int, str]

CENT = Decimal("0.01")


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 9.99 from turning into 9.9900000000000002131...
    return Decimal(str(value))


def quantize(value: Number) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def calculate_order_amount(items: Iterable) -> Decimal:
    """Sum of price * quantity over lines (dicts or objects)."""
    total = Decimal("0")
    for item in items:
        price = item["price"] if isinstance(item, dict) else item.price
        quantity = item["quantity"] if isinstance(item, dict) else item.quantity
        total += to_decimal(price) * int(quantity)
    return quantize(total)


def format_stripe_amount(amount: Number) -> int:
    """Stripe expects amounts in minor units (cents)."""
    return int((to_decimal(amount) * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def validate_payment_amount(payment_amount: Number, order_amount: Number) -> bool:
    # Compare in cents
    return format_stripe_amount(payment_amount) == format_stripe_amount(order_amount)


def calculate_tax_and_total(subtotal: Number, tax_rate: Number = Decimal("0.08")) -> dict:
    """
    Tax breakdown for display. Not applied to order totals, which only
    carry the flat delivery fee.
    """
    subtotal = to_decimal(subtotal)
    tax_rate = to_decimal(tax_rate)
    tax = quantize(subtotal * tax_rate)
    return {
        "subtotal": quantize(subtotal),
        "tax": tax,
        "total": quantize(subtotal + tax),
        "tax_rate": tax_rate,
    }


def validate_refund_amount(refund_amount: Number, original_amount: Number) -> bool:
    refund_amount = to_decimal(refund_amount)
    if refund_amount <= 0:
        raise ValueError("Refund amount must be greater than 0")
    if refund_amount > to_decimal(original_amount):
        raise ValueError("Refund amount cannot exceed original payment amount")
    return True


def generate_payment_description(order) -> str:
    order_type = getattr(order.order_type, "value", order.order_type)
    return f"Order #{order.id} - {len(order.items)} items - {order_type}"
