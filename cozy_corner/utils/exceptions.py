"""
Domain errors raised by the order, payment, reservation and review flows.
Each one is an HTTPException so FastAPI renders it as {"detail": ...}.
"""
from typing import Optional

from fastapi import HTTPException, status


class CafeError(HTTPException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Request could not be processed"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(status_code=self.status_code,
                         detail=detail or self.default_detail)


class ItemUnavailable(CafeError):
    default_detail = "Menu item is not available"

    def __init__(self, menu_item_id=None, detail: Optional[str] = None):
        self.menu_item_id = menu_item_id
        if detail is None and menu_item_id is not None:
            detail = f"Menu item {menu_item_id} is not available"
        super().__init__(detail)


class SlotFull(CafeError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Selected time slot is fully booked"


class DuplicatePaymentIntent(CafeError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Error creating payment intent"


class InvalidSignature(CafeError):
    default_detail = "Webhook signature verification failed"


class OrderNotEligible(CafeError):
    default_detail = "Order not found or not eligible for review"


class DuplicateReview(CafeError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "You have already reviewed this order"


class InvalidStatusTransition(CafeError):
    def __init__(self, current, target, detail: Optional[str] = None):
        self.current = current
        self.target = target
        super().__init__(
            detail or f"Cannot change order status from {_value(current)} to {_value(target)}")


class PaymentProviderError(CafeError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = "Payment provider error"


def _value(status_enum) -> str:
    return getattr(status_enum, "value", str(status_enum))
