"""
Order status state machine.

    pending -> confirmed -> preparing -> ready -> delivered
    any non-terminal state -> cancelled

pending -> confirmed and pending -> cancelled are driven by payment events,
except for cash orders which an admin settles by hand. Admins drive the
rest. Nothing leaves delivered or cancelled; payment reconciliation fields
may still be written on terminal orders.
"""
import logging
from typing import Dict, FrozenSet

from ..models.order import Order, OrderStatus, PaymentMethod, PaymentStatus
from .exceptions import InvalidStatusTransition

logger = logging.getLogger(__name__)

TERMINAL_STATUSES: FrozenSet[OrderStatus] = frozenset({
    OrderStatus.delivered,
    OrderStatus.cancelled,
})

ADMIN_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.pending: frozenset(),
    OrderStatus.confirmed: frozenset({OrderStatus.preparing, OrderStatus.cancelled}),
    OrderStatus.preparing: frozenset({OrderStatus.ready, OrderStatus.cancelled}),
    OrderStatus.ready: frozenset({OrderStatus.delivered, OrderStatus.cancelled}),
    OrderStatus.delivered: frozenset(),
    OrderStatus.cancelled: frozenset(),
}

CASH_PENDING_TRANSITIONS: FrozenSet[OrderStatus] = frozenset({
    OrderStatus.confirmed,
    OrderStatus.cancelled,
})


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES


def validate_admin_transition(
    current: OrderStatus, target: OrderStatus, payment_method: PaymentMethod = PaymentMethod.card
) -> None:
    """
    Raise InvalidStatusTransition unless an admin may move current -> target.
    Cash orders never see a payment event, so staff confirm or cancel them.
    """
    if is_terminal(current):
        raise InvalidStatusTransition(
            current, target, f"Order is already {current.value} and can no longer change")
    if current == OrderStatus.pending:
        if payment_method == PaymentMethod.cash and target in CASH_PENDING_TRANSITIONS:
            return
        raise InvalidStatusTransition(
            current, target,
            "Pending orders are confirmed or cancelled by the payment provider")
    if target not in ADMIN_TRANSITIONS[current]:
        raise InvalidStatusTransition(current, target)


def apply_payment_succeeded(order: Order) -> bool:
    """
    Apply a payment_intent.succeeded event. Set-based, so redelivery is a
    no-op. Returns True when the order status changed.
    """
    if order.payment_status == PaymentStatus.refunded:
        logger.warning(
            "Ignoring success for payment %s on order %s, already refunded",
            order.payment_id, order.id)
        return False

    order.payment_status = PaymentStatus.completed

    if order.status == OrderStatus.pending:
        order.status = OrderStatus.confirmed
        return True

    if order.status == OrderStatus.cancelled:
        logger.warning(
            "Payment %s succeeded for cancelled order %s, refund required",
            order.payment_id, order.id)
    return False


def apply_payment_failed(order: Order) -> bool:
    """
    Apply a payment_intent.payment_failed event. A failure arriving after a
    success never downgrades the payment. Returns True when the order
    status changed.
    """
    if order.payment_status in (PaymentStatus.completed, PaymentStatus.refunded):
        logger.warning(
            "Ignoring out-of-order failure for payment %s on order %s (already %s)",
            order.payment_id, order.id, order.payment_status.value)
        return False

    order.payment_status = PaymentStatus.failed

    if order.status == OrderStatus.pending:
        order.status = OrderStatus.cancelled
        return True
    return False
