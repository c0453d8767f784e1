# cozy_corner/routes/orders.py
"""
Order routes: customer checkout and history, admin status management.
"""
import logging
from datetime import datetime, time
from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..auth_utils import admin_required, get_current_user
from ..config import settings
from ..db import get_db
from ..models.menu_item import MenuItem
from ..models.order import Order, OrderItem, OrderStatus, OrderType, PaymentStatus
from ..models.user import User
from ..schemas.order import OrderCreate, OrderOut, OrderStatsSummary, OrderStatusUpdate
from ..utils.exceptions import ItemUnavailable
from ..utils.notification_service import NotificationService
from ..utils.order_state import validate_admin_transition
from ..utils.payment import quantize, to_decimal

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/orders",
    tags=["orders"]
)

# Customers may withdraw an order only before money is in flight
CUSTOMER_CANCELLABLE_PAYMENTS = (PaymentStatus.pending, PaymentStatus.failed)


def build_order(db: Session, user: User, order_in: OrderCreate) -> Order:
    """
    Validate every line against the catalog and build an unsaved pending
    Order. Raises ItemUnavailable before anything is added to the session.
    """
    total = Decimal("0")
    lines = []

    for line in order_in.items:
        menu_item = db.query(MenuItem).filter(MenuItem.id == line.menu_item_id).first()
        if not menu_item or not menu_item.available:
            raise ItemUnavailable(line.menu_item_id)

        price = to_decimal(menu_item.price)
        total += price * line.quantity
        lines.append(OrderItem(
            menu_item_id=menu_item.id,
            name=menu_item.name,
            quantity=line.quantity,
            price=price,
            special_instructions=line.special_instructions,
        ))

    if order_in.order_type == OrderType.delivery:
        total += to_decimal(settings.DELIVERY_FEE)

    address = order_in.delivery_address
    return Order(
        user_id=user.id,
        items=lines,
        total_amount=quantize(total),
        status=OrderStatus.pending,
        payment_status=PaymentStatus.pending,
        order_type=order_in.order_type,
        payment_method=order_in.payment_method,
        special_instructions=order_in.special_instructions,
        street=address.street if address else None,
        city=address.city if address else None,
        state=address.state if address else None,
        zip_code=address.zip_code if address else None,
    )


def get_own_order_or_404(db: Session, order_id: int, user: User) -> Order:
    order = db.query(Order).filter(
        Order.id == order_id,
        Order.user_id == user.id
    ).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.get("/my-orders", response_model=List[OrderOut])
def get_my_orders(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return db.query(Order).filter(
        Order.user_id == current_user.id
    ).order_by(Order.created_at.desc(), Order.id.desc()).all()


@router.get("/stats/summary", response_model=OrderStatsSummary)
def get_order_stats(
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required)
):
    today = datetime.combine(datetime.utcnow().date(), time.min)

    daily_count, daily_revenue = db.query(
        func.count(Order.id),
        func.coalesce(func.sum(Order.total_amount), 0)
    ).filter(Order.created_at >= today).one()

    by_status = db.query(Order.status, func.count(Order.id)).group_by(Order.status).all()
    by_type = db.query(Order.order_type, func.count(Order.id)).group_by(Order.order_type).all()

    return {
        "daily": {"count": daily_count, "revenue": float(daily_revenue or 0)},
        "status": {s.value: count for s, count in by_status},
        "order_types": {t.value: count for t, count in by_type},
    }


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return get_own_order_or_404(db, order_id, current_user)


@router.post("", response_model=OrderOut, status_code=status.HTTP_201_CREATED)
def create_order(
    order_in: OrderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    order = build_order(db, current_user, order_in)
    db.add(order)
    db.commit()
    db.refresh(order)
    logger.info(f"Order {order.id} created by user {current_user.id}, total {order.total_amount}")

    NotificationService.order_confirmation(db, order)
    return order


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_order_status(
    order_id: int,
    status_in: OrderStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required)
):
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    validate_admin_transition(order.status, status_in.status, order.payment_method)

    previous = order.status
    order.status = status_in.status
    db.commit()
    db.refresh(order)
    logger.info(f"Admin {current_user.id} moved order {order.id} "
                f"from {previous.value} to {order.status.value}")

    NotificationService.order_status_update(db, order)
    return order


@router.delete("/{order_id}")
def cancel_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    order = db.query(Order).filter(
        Order.id == order_id,
        Order.user_id == current_user.id,
        Order.status == OrderStatus.pending,
        Order.payment_status.in_(CUSTOMER_CANCELLABLE_PAYMENTS),
    ).first()

    if not order:
        raise HTTPException(
            status_code=404,
            detail="Order not found or cannot be cancelled"
        )

    order.status = OrderStatus.cancelled
    db.commit()
    db.refresh(order)
    logger.info(f"Order {order.id} cancelled by customer {current_user.id}")

    NotificationService.order_status_update(db, order)
    return {"message": "Order cancelled successfully"}
