from decimal import Decimal
from types import SimpleNamespace

import pytest

from cozy_corner.models.order import Order, OrderStatus, PaymentMethod, PaymentStatus
from cozy_corner.utils.exceptions import InvalidStatusTransition
from cozy_corner.utils.order_state import (apply_payment_failed, apply_payment_succeeded,
                                           is_terminal, validate_admin_transition)
from cozy_corner.utils.payment import (calculate_order_amount, calculate_tax_and_total,
                                       format_stripe_amount, generate_payment_description,
                                       validate_payment_amount, validate_refund_amount)


@pytest.mark.parametrize("amount,cents", [
    ("30.00", 3000),
    ("19.99", 1999),
    (0.1 + 0.2, 30),
    ("10.005", 1001),
    (Decimal("4.35") * 3, 1305),
])
def test_format_stripe_amount(amount, cents):
    assert format_stripe_amount(amount) == cents


def test_calculate_order_amount_accepts_dicts_and_objects():
    lines = [
        {"price": "10.00", "quantity": 2},
        SimpleNamespace(price=Decimal("5.00"), quantity=1),
    ]
    assert calculate_order_amount(lines) == Decimal("25.00")


def test_validate_payment_amount_compares_cents():
    assert validate_payment_amount(30, "30.00")
    assert not validate_payment_amount("30.01", "30.00")


def test_tax_is_a_separate_breakdown():
    assert calculate_tax_and_total("25.00") == {
        "subtotal": Decimal("25.00"),
        "tax": Decimal("2.00"),
        "total": Decimal("27.00"),
        "tax_rate": Decimal("0.08"),
    }


def test_validate_refund_amount():
    assert validate_refund_amount("10.00", "30.00")
    assert validate_refund_amount("30.00", "30.00")
    with pytest.raises(ValueError):
        validate_refund_amount(0, "30.00")
    with pytest.raises(ValueError):
        validate_refund_amount("30.01", "30.00")


def test_payment_description():
    order = SimpleNamespace(id=7, items=[1, 2, 3], order_type=SimpleNamespace(value="delivery"))
    assert generate_payment_description(order) == "Order #7 - 3 items - delivery"


def test_terminal_states():
    assert is_terminal(OrderStatus.delivered)
    assert is_terminal(OrderStatus.cancelled)
    assert not is_terminal(OrderStatus.ready)


def test_pending_orders_only_move_by_payment():
    with pytest.raises(InvalidStatusTransition):
        validate_admin_transition(OrderStatus.pending, OrderStatus.cancelled)


def test_admin_settles_pending_cash_orders():
    validate_admin_transition(OrderStatus.pending, OrderStatus.confirmed, PaymentMethod.cash)
    validate_admin_transition(OrderStatus.pending, OrderStatus.cancelled, PaymentMethod.cash)
    with pytest.raises(InvalidStatusTransition):
        validate_admin_transition(OrderStatus.pending, OrderStatus.preparing, PaymentMethod.cash)


def test_nothing_leaves_a_terminal_state():
    for target in OrderStatus:
        with pytest.raises(InvalidStatusTransition):
            validate_admin_transition(OrderStatus.delivered, target)


def order_with(status, payment_status):
    return Order(id=1, payment_id="pi_1", status=status, payment_status=payment_status)


def test_payment_succeeded_confirms_pending():
    order = order_with(OrderStatus.pending, PaymentStatus.processing)
    assert apply_payment_succeeded(order) is True
    assert (order.status, order.payment_status) == (OrderStatus.confirmed, PaymentStatus.completed)
    assert apply_payment_succeeded(order) is False


def test_payment_succeeded_does_not_rewind_progress():
    order = order_with(OrderStatus.preparing, PaymentStatus.completed)
    assert apply_payment_succeeded(order) is False
    assert order.status == OrderStatus.preparing


def test_payment_failed_cancels_pending():
    order = order_with(OrderStatus.pending, PaymentStatus.processing)
    assert apply_payment_failed(order) is True
    assert (order.status, order.payment_status) == (OrderStatus.cancelled, PaymentStatus.failed)


def test_payment_failed_never_downgrades_refund():
    order = order_with(OrderStatus.confirmed, PaymentStatus.refunded)
    assert apply_payment_failed(order) is False
    assert order.payment_status == PaymentStatus.refunded


def test_payment_succeeded_never_overwrites_refund():
    order = order_with(OrderStatus.confirmed, PaymentStatus.refunded)
    assert apply_payment_succeeded(order) is False
    assert order.payment_status == PaymentStatus.refunded
