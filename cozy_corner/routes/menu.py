"""
Menu catalog routes: public reads, admin writes.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from ..auth_utils import admin_required
from ..db import get_db
from ..models.menu_item import MenuCategory, MenuItem
from ..models.order import OrderItem
from ..models.user import User
from ..schemas.menu import MenuItemCreate, MenuItemOut, MenuItemUpdate

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/menu",
    tags=["menu"]
)

DIETARY_COLUMNS = {
    "vegetarian": MenuItem.vegetarian,
    "vegan": MenuItem.vegan,
    "gluten_free": MenuItem.gluten_free,
    "glutenFree": MenuItem.gluten_free,
}


def get_menu_item_or_404(db: Session, item_id: int) -> MenuItem:
    menu_item = db.query(MenuItem).filter(MenuItem.id == item_id).first()
    if not menu_item:
        raise HTTPException(status_code=404, detail="Menu item not found")
    return menu_item


@router.get("", response_model=List[MenuItemOut])
def list_menu_items(
    category: Optional[MenuCategory] = None,
    available: Optional[bool] = None,
    dietary: Optional[str] = Query(
        None, description="Comma separated: vegetarian,vegan,gluten_free"),
    db: Session = Depends(get_db)
):
    query = db.query(MenuItem)

    if category is not None:
        query = query.filter(MenuItem.category == category)
    if available:
        query = query.filter(MenuItem.available == True)  # noqa: E712
    if dietary:
        for flag in (d.strip() for d in dietary.split(",") if d.strip()):
            column = DIETARY_COLUMNS.get(flag)
            if column is None:
                raise HTTPException(status_code=400, detail=f"Unknown dietary filter: {flag}")
            query = query.filter(column == True)  # noqa: E712

    return query.order_by(MenuItem.category, MenuItem.name).all()


@router.get("/featured/items", response_model=List[MenuItemOut])
def get_featured_items(db: Session = Depends(get_db)):
    return db.query(MenuItem).filter(
        MenuItem.available == True,  # noqa: E712
        MenuItem.popular == True,  # noqa: E712
    ).order_by(MenuItem.name).limit(6).all()


@router.get("/category/{category}", response_model=List[MenuItemOut])
def get_items_by_category(category: MenuCategory, db: Session = Depends(get_db)):
    return db.query(MenuItem).filter(
        MenuItem.category == category,
        MenuItem.available == True,  # noqa: E712
    ).order_by(MenuItem.name).all()


@router.get("/search/{query}", response_model=List[MenuItemOut])
def search_menu_items(query: str, db: Session = Depends(get_db)):
    pattern = f"%{query.strip()}%"
    # Enum column: match against the category names in Python
    matching_categories = [c for c in MenuCategory if query.strip().lower() in c.value.lower()]

    conditions = [MenuItem.name.ilike(pattern), MenuItem.description.ilike(pattern)]
    if matching_categories:
        conditions.append(MenuItem.category.in_(matching_categories))

    return db.query(MenuItem).filter(
        or_(*conditions),
        MenuItem.available == True,  # noqa: E712
    ).order_by(MenuItem.category, MenuItem.name).all()


@router.get("/{item_id}", response_model=MenuItemOut)
def get_menu_item(item_id: int, db: Session = Depends(get_db)):
    return get_menu_item_or_404(db, item_id)


@router.post("", response_model=MenuItemOut, status_code=status.HTTP_201_CREATED)
def create_menu_item(
    item_in: MenuItemCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required)
):
    menu_item = MenuItem(**item_in.model_dump())
    db.add(menu_item)
    db.commit()
    db.refresh(menu_item)
    logger.info(f"Admin {current_user.id} created menu item {menu_item.id}")
    return menu_item


@router.put("/{item_id}", response_model=MenuItemOut)
def update_menu_item(
    item_id: int,
    item_in: MenuItemUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required)
):
    menu_item = get_menu_item_or_404(db, item_id)
    for field, value in item_in.model_dump().items():
        setattr(menu_item, field, value)
    db.commit()
    db.refresh(menu_item)
    logger.info(f"Admin {current_user.id} updated menu item {item_id}")
    return menu_item


@router.delete("/{item_id}")
def delete_menu_item(
    item_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(admin_required)
):
    menu_item = get_menu_item_or_404(db, item_id)

    # Past order lines keep their copied name and price
    db.query(OrderItem).filter(OrderItem.menu_item_id == item_id).update(
        {OrderItem.menu_item_id: None}, synchronize_session=False)
    db.delete(menu_item)
    db.commit()
    logger.info(f"Admin {current_user.id} deleted menu item {item_id}")
    return {"message": "Menu item deleted successfully"}
