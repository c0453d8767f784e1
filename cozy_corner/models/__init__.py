# Import models in dependency order to avoid relationship resolution issues

# Base models first (no foreign key dependencies)
from .user import User, UserRole, UserStatus
from .menu_item import MenuItem, MenuCategory

# Models that depend on User / MenuItem
from .order import Order, OrderItem, OrderStatus, OrderType, PaymentMethod, PaymentStatus
from .reservation import Reservation, ReservationStatus

# Models with complex dependencies
from .review import Review, ReviewStatus
from .notification import Notification, NotificationType

# Export all models
__all__ = [
    "User",
    "UserRole",
    "UserStatus",
    "MenuItem",
    "MenuCategory",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderType",
    "PaymentMethod",
    "PaymentStatus",
    "Reservation",
    "ReservationStatus",
    "Review",
    "ReviewStatus",
    "Notification",
    "NotificationType",
]
