"""
Menu item schemas
Path: cozy_corner/schemas/menu.py
"""
from typing import Optional

from pydantic import BaseModel, Field

from cozy_corner.models.menu_item import MenuCategory


class DietaryFlags(BaseModel):
    vegetarian: bool = False
    vegan: bool = False
    gluten_free: bool = False


class MenuItemBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    description: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    category: MenuCategory
    image: Optional[str] = None
    vegetarian: bool = False
    vegan: bool = False
    gluten_free: bool = False
    spicy_level: int = Field(0, ge=0, le=3)
    available: bool = True
    popular: bool = False


class MenuItemCreate(MenuItemBase):
    pass


class MenuItemUpdate(MenuItemBase):
    pass


class MenuItemOut(BaseModel):
    id: int
    name: str
    description: str
    price: float
    category: MenuCategory
    image: Optional[str] = None
    dietary: DietaryFlags
    spicy_level: int
    available: bool
    popular: bool

    class Config:
        from_attributes = True
