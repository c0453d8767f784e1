"""
Menu item model: one entry of the cafe catalog.
"""
from sqlalchemy import Boolean, CheckConstraint, Column, Enum, Integer, Numeric, String, Text
import enum

from ..db import Base


class MenuCategory(str, enum.Enum):
    Breakfast = "Breakfast"
    Lunch = "Lunch"
    Dinner = "Dinner"
    Dessert = "Dessert"
    Beverages = "Beverages"


class MenuItem(Base):
    __tablename__ = "menu_items"
    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_menu_items_price_non_negative"),
        CheckConstraint("spicy_level >= 0 AND spicy_level <= 3",
                        name="ck_menu_items_spicy_level"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(120), nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    category = Column(Enum(MenuCategory), nullable=False, index=True)
    image = Column(String, nullable=True)

    # Dietary flags
    vegetarian = Column(Boolean, default=False, nullable=False)
    vegan = Column(Boolean, default=False, nullable=False)
    gluten_free = Column(Boolean, default=False, nullable=False)

    spicy_level = Column(Integer, default=0, nullable=False)
    available = Column(Boolean, default=True, nullable=False)
    popular = Column(Boolean, default=False, nullable=False)

    @property
    def dietary(self) -> dict:
        return {
            "vegetarian": self.vegetarian,
            "vegan": self.vegan,
            "gluten_free": self.gluten_free,
        }
