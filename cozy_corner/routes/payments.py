"""
Payment routes: Stripe payment intents, webhook reconciliation, refunds.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..auth_utils import admin_required, get_current_user
from ..db import get_db
from ..models.order import Order, OrderStatus, PaymentMethod, PaymentStatus
from ..models.user import User
from ..schemas.payment import (PaymentIntentCreate, PaymentIntentOut, PaymentVerifyOut,
                               RefundOut, RefundRequest)
from ..utils.exceptions import DuplicatePaymentIntent
from ..utils.notification_service import NotificationService
from ..utils.order_state import apply_payment_failed, apply_payment_succeeded
from ..utils.payment import (format_stripe_amount, generate_payment_description,
                             to_decimal, validate_refund_amount)
from ..utils.stripe_service import StripeService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/payments",
    tags=["payments"]
)

PAYMENT_EVENT_HANDLERS = {
    "payment_intent.succeeded": apply_payment_succeeded,
    "payment_intent.payment_failed": apply_payment_failed,
}


def _order_visible_to(order: Order, user: User) -> bool:
    return user.is_admin() or order.user_id == user.id


@router.post("/create-payment-intent", response_model=PaymentIntentOut)
def create_payment_intent(
    payload: PaymentIntentCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    order = db.query(Order).filter(Order.id == payload.order_id).first()
    if not order or not _order_visible_to(order, current_user):
        raise HTTPException(status_code=404, detail="Order not found")

    if order.payment_method == PaymentMethod.cash:
        raise HTTPException(status_code=400, detail="Order is set to be paid in cash")
    if order.status != OrderStatus.pending or order.payment_status in (
            PaymentStatus.completed, PaymentStatus.refunded):
        raise HTTPException(status_code=400, detail="Order is not awaiting payment")

    amount = format_stripe_amount(order.total_amount)

    # Re-entering checkout reuses the intent already opened for this order
    if order.payment_id and order.payment_status == PaymentStatus.processing:
        intent = StripeService.retrieve_payment_intent(order.payment_id)
        if intent.status not in ("succeeded", "canceled"):
            return {
                "client_secret": intent.client_secret,
                "payment_intent_id": intent.id,
                "amount": amount,
            }

    intent = StripeService.create_payment_intent(
        amount,
        metadata={"order_id": str(order.id), "user_id": str(order.user_id)},
        description=generate_payment_description(order),
    )

    order.payment_id = intent.id
    order.payment_status = PaymentStatus.processing
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.exception(f"Payment intent {intent.id} is already attached to another order")
        raise DuplicatePaymentIntent()

    logger.info(f"Payment intent {intent.id} opened for order {order.id} ({amount} cents)")
    return {
        "client_secret": intent.client_secret,
        "payment_intent_id": intent.id,
        "amount": amount,
    }


def reconcile_payment_event(db: Session, payload: bytes, signature: Optional[str]) -> dict:
    # Raises InvalidSignature before anything is read from the database
    event = StripeService.construct_event(payload, signature)

    event_type = event.type
    handler = PAYMENT_EVENT_HANDLERS.get(event_type)
    if handler is None:
        logger.debug(f"Ignoring webhook event {event_type}")
        return {"received": True}

    payment_intent_id = event.data.object.id
    order = db.query(Order).filter(Order.payment_id == payment_intent_id).first()
    if not order:
        logger.warning(f"Webhook {event_type} for unknown payment intent {payment_intent_id}")
        return {"received": True}

    previous_payment_status = order.payment_status
    status_changed = handler(order)
    db.commit()
    db.refresh(order)
    logger.info(f"Webhook {event_type} applied to order {order.id}: "
                f"status={order.status.value}, payment_status={order.payment_status.value}")

    if status_changed or order.payment_status != previous_payment_status:
        NotificationService.payment_update(db, order)
    return {"received": True}


@router.post("/webhook")
async def stripe_webhook(request: Request, db: Session = Depends(get_db)):
    payload = await request.body()
    signature = request.headers.get("stripe-signature")
    # Database writes and mail/SMS delivery block, keep them off the event loop
    return await run_in_threadpool(reconcile_payment_event, db, payload, signature)


@router.get("/verify/{payment_intent_id}", response_model=PaymentVerifyOut)
def verify_payment(
    payment_intent_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    order = db.query(Order).filter(Order.payment_id == payment_intent_id).first()
    if not order or not _order_visible_to(order, current_user):
        raise HTTPException(status_code=404, detail="Payment not found")

    intent = StripeService.retrieve_payment_intent(payment_intent_id)
    return {"status": intent.status}


@router.post("/refund/{order_id}", response_model=RefundOut)
def refund_order(
    order_id: int,
    refund_in: RefundRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required)
):
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    if order.payment_status != PaymentStatus.completed or not order.payment_id:
        raise HTTPException(status_code=400, detail="Only completed payments can be refunded")

    amount = to_decimal(refund_in.amount) if refund_in.amount is not None else to_decimal(order.total_amount)
    try:
        validate_refund_amount(amount, order.total_amount)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    refund = StripeService.create_refund(order.payment_id, format_stripe_amount(amount))

    order.refund_id = refund.id
    order.refunded_amount = amount
    order.payment_status = PaymentStatus.refunded
    db.commit()
    db.refresh(order)
    logger.info(f"Admin {current_user.id} refunded {amount} on order {order.id} ({refund.id})")

    NotificationService.payment_update(db, order)
    return {
        "message": "Refund issued successfully",
        "order_id": order.id,
        "refund_id": refund.id,
        "amount": float(amount),
    }
