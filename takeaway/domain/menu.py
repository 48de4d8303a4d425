"""
Menu reference data.

The catalog is loaded once at start-up from data/menu.json and never mutated.
"""
import json
import logging
from decimal import Decimal
from typing import Dict, List, Literal, get_args

from pydantic import BaseModel, ConfigDict, Field

logger = logging.getLogger(__name__)

MenuCategory = Literal[
    "Plats de Poulet",
    "Plats de Crevettes",
    "Plats de Légumes",
    "Menus",
    "Entrées",
    "Naans",
    "Riz & Accompagnements",
    "Desserts",
    "Boissons Maison",
    "Boissons Fraîches",
    "Lassi",
    "Rice Box",
]

CATEGORIES: tuple = get_args(MenuCategory)


class MenuItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable menu identifier")
    name: str = Field(..., description="Dish name")
    description: str = Field("", description="Short description")
    price: Decimal = Field(..., ge=0, decimal_places=2, description="Unit price in euros")
    category: MenuCategory


class MenuCatalog:
    def __init__(self, items: List[MenuItem]):
        self._items: Dict[str, MenuItem] = {}
        for item in items:
            if item.id in self._items:
                raise ValueError(f"Duplicate menu id: {item.id}")
            self._items[item.id] = item

    def get(self, item_id: str) -> MenuItem | None:
        return self._items.get(item_id)

    def __iter__(self):
        return iter(self._items.values())

    def __len__(self) -> int:
        return len(self._items)

    def by_category(self) -> Dict[str, List[MenuItem]]:
        """Items grouped in menu order; empty categories are left out."""
        grouped = {}
        for category in CATEGORIES:
            items = [i for i in self._items.values() if i.category == category]
            if items:
                grouped[category] = items
        return grouped


def load_menu(path: str) -> MenuCatalog:
    with open(path, encoding="utf-8") as fh:
        raw = json.load(fh)
    catalog = MenuCatalog([MenuItem(**entry) for entry in raw])
    logger.info(f"✅ Menu loaded: {len(catalog)} items from {path}")
    return catalog
