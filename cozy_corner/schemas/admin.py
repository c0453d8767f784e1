"""
Admin dashboard schemas.
"""
from typing import List

from pydantic import BaseModel

from .order import OrderAdminOut
from .reservation import ReservationAdminOut


class DailyRevenue(BaseModel):
    date: str
    amount: float


class DashboardOut(BaseModel):
    total_orders: int
    total_reservations: int
    active_menu_items: int
    total_users: int
    recent_orders: List[OrderAdminOut]
    recent_reservations: List[ReservationAdminOut]
    daily_revenue: List[DailyRevenue]
