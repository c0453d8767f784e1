"""
Populate an empty catalog with the cafe's starter menu.

Run once against a fresh database:
    python -m cozy_corner.scripts.seed_menu
"""
import logging
from decimal import Decimal

from sqlalchemy.orm import Session

from cozy_corner.db import SessionLocal
from cozy_corner.models.menu_item import MenuCategory, MenuItem

logger = logging.getLogger(__name__)


SAMPLE_MENU = [
    {
        "name": "Buttermilk Pancakes",
        "description": "Three fluffy pancakes with maple syrup and whipped butter",
        "price": Decimal("9.50"),
        "category": MenuCategory.Breakfast,
        "vegetarian": True,
        "popular": True,
    },
    {
        "name": "Avocado Toast",
        "description": "Sourdough, smashed avocado, chili flakes and lime",
        "price": Decimal("8.75"),
        "category": MenuCategory.Breakfast,
        "vegetarian": True,
        "vegan": True,
        "spicy_level": 1,
    },
    {
        "name": "Grilled Chicken Sandwich",
        "description": "Marinated chicken breast, lettuce, tomato and garlic aioli",
        "price": Decimal("12.00"),
        "category": MenuCategory.Lunch,
        "popular": True,
    },
    {
        "name": "Quinoa Garden Bowl",
        "description": "Quinoa, roasted vegetables, chickpeas and tahini dressing",
        "price": Decimal("11.25"),
        "category": MenuCategory.Lunch,
        "vegetarian": True,
        "vegan": True,
        "gluten_free": True,
    },
    {
        "name": "Spicy Beef Tacos",
        "description": "Three corn tortillas with chipotle beef, salsa and cotija",
        "price": Decimal("14.50"),
        "category": MenuCategory.Dinner,
        "gluten_free": True,
        "spicy_level": 2,
    },
    {
        "name": "Mushroom Risotto",
        "description": "Arborio rice with wild mushrooms and parmesan",
        "price": Decimal("16.00"),
        "category": MenuCategory.Dinner,
        "vegetarian": True,
        "gluten_free": True,
        "popular": True,
    },
    {
        "name": "Chocolate Lava Cake",
        "description": "Warm chocolate cake with a molten center and vanilla ice cream",
        "price": Decimal("7.50"),
        "category": MenuCategory.Dessert,
        "vegetarian": True,
        "popular": True,
    },
    {
        "name": "Cappuccino",
        "description": "Double espresso with steamed and foamed milk",
        "price": Decimal("4.25"),
        "category": MenuCategory.Beverages,
        "vegetarian": True,
        "gluten_free": True,
    },
    {
        "name": "Fresh Lemonade",
        "description": "Squeezed lemons, cane sugar and mint",
        "price": Decimal("3.75"),
        "category": MenuCategory.Beverages,
        "vegetarian": True,
        "vegan": True,
        "gluten_free": True,
    },
]


def seed_menu(db: Session) -> int:
    """Insert the sample menu if the catalog is empty. Returns the number of items added."""
    if db.query(MenuItem).count() > 0:
        logger.info("Menu already has items, skipping seed")
        return 0

    for data in SAMPLE_MENU:
        db.add(MenuItem(**data))
    db.commit()
    logger.info(f"Seeded {len(SAMPLE_MENU)} menu items")
    return len(SAMPLE_MENU)


def main():
    logging.basicConfig(level=logging.INFO)
    db = SessionLocal()
    try:
        seed_menu(db)
    finally:
        db.close()


if __name__ == "__main__":
    main()
