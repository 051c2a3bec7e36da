"""
Menu catalog with lookup, search and owner-side menu management.

Backed by an in-memory item list, optionally loaded from a JSON menu file
shaped as ``{"restaurant_name": ..., "date": ..., "menu": [...]}``.
Lookups used by the intent resolver only ever return available items and
preserve catalog order, so the first search hit is authoritative.
"""

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Optional, TypedDict, Union

from pydantic import ValidationError

from whatsorder.errors import CatalogUnavailableError
from whatsorder.schemas.menu_schema import MenuDocument, MenuItem
from whatsorder.utils import parse_count

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Main Course"

# (keyword, emoji) pairs checked in order against the item name, then the category.
_NAME_EMOJIS: list[tuple[tuple[str, ...], str]] = [
    (("biryani", "rice"), "🍛"),
    (("tikka",), "🍗"),
    (("chicken",), "🐔"),
    (("mutton", "lamb"), "🍖"),
    (("fish",), "🐟"),
    (("curry",), "🍛"),
    (("naan", "bread"), "🫓"),
    (("lassi", "drink"), "🥤"),
    (("tea", "chai"), "🍵"),
    (("coffee",), "☕"),
    (("dessert", "sweet", "jamun"), "🍮"),
    (("ice cream",), "🍦"),
    (("pizza",), "🍕"),
    (("burger",), "🍔"),
    (("sandwich",), "🥪"),
    (("salad",), "🥗"),
    (("soup",), "🍲"),
]

_CATEGORY_EMOJIS: list[tuple[tuple[str, ...], str]] = [
    (("appetizer", "starter"), "🍽️"),
    (("main", "course"), "🍛"),
    (("dessert", "sweet"), "🍮"),
    (("drink", "beverage"), "🥤"),
    (("bread", "roti"), "🫓"),
]

DEFAULT_EMOJI = "🍽️"


class MenuChangeResult(TypedDict, total=False):
    """Result from add_item, edit_item, delete_item or toggle_item."""

    success: bool
    message: str
    item: MenuItem
    previous: MenuItem


def emoji_for_item(name: str, category: str = DEFAULT_CATEGORY) -> str:
    """Pick a display emoji from the item name, falling back to its category."""
    name_lower = name.lower()
    for keywords, emoji in _NAME_EMOJIS:
        if any(k in name_lower for k in keywords):
            return emoji
    category_lower = category.lower()
    for keywords, emoji in _CATEGORY_EMOJIS:
        if any(k in category_lower for k in keywords):
            return emoji
    return DEFAULT_EMOJI


class MenuCatalog:
    """Ordered, in-memory menu."""

    def __init__(
        self,
        items: Optional[list[MenuItem]] = None,
        restaurant_name: str = "Our Restaurant",
        menu_date: Optional[str] = None,
    ) -> None:
        self._items: list[MenuItem] = list(items or [])
        self.restaurant_name = restaurant_name
        self.menu_date = menu_date or date.today().isoformat()

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #

    def find_by_id(self, item_id: int) -> Optional[MenuItem]:
        """Return the available item with this id, or None."""
        for item in self._items:
            if item.id == item_id and item.available:
                return item
        return None

    def search_by_name(self, term: str) -> list[MenuItem]:
        """Case-insensitive substring search over available items, catalog order."""
        needle = term.lower().strip()
        if not needle:
            return []
        return [i for i in self._items if i.available and needle in i.name.lower()]

    def list_available(self) -> list[MenuItem]:
        return [i for i in self._items if i.available]

    def list_all(self) -> list[MenuItem]:
        return list(self._items)

    def grouped_by_category(self) -> dict[str, list[MenuItem]]:
        """All items grouped by category, in first-seen category order."""
        groups: dict[str, list[MenuItem]] = {}
        for item in self._items:
            groups.setdefault(item.category, []).append(item)
        return groups

    # ------------------------------------------------------------------ #
    # Owner menu management
    # ------------------------------------------------------------------ #

    def _find_index(self, identifier: Union[int, str]) -> int:
        """Resolve a numeric id or a case-insensitive exact name to a list index."""
        ident = str(identifier).strip()
        if ident.isdecimal():
            item_id = parse_count(ident)
            for idx, item in enumerate(self._items):
                if item.id == item_id:
                    return idx
            return -1
        lowered = ident.lower()
        for idx, item in enumerate(self._items):
            if item.name.lower() == lowered:
                return idx
        return -1

    def _touch(self) -> None:
        self.menu_date = date.today().isoformat()

    def add_item(
        self,
        name: str,
        price: float,
        description: str = "",
        category: str = DEFAULT_CATEGORY,
    ) -> MenuChangeResult:
        """Append a new available item. Names must be unique (case-insensitive)."""
        name = name.strip()
        if not name or price <= 0:
            return {"success": False, "message": "An item needs a name and a price above zero."}

        for item in self._items:
            if item.name.lower() == name.lower():
                return {
                    "success": False,
                    "message": f'Item "{name}" already exists in the menu',
                    "item": item,
                }

        new_id = max((i.id for i in self._items), default=0) + 1
        category = category.strip() or DEFAULT_CATEGORY
        item = MenuItem(
            id=new_id,
            name=name,
            price=float(price),
            description=description.strip() or f"Delicious {name}",
            category=category,
            emoji=emoji_for_item(name, category),
            available=True,
        )
        self._items.append(item)
        self._touch()
        logger.info("Menu item added: %s (id=%d, price=%.2f)", name, new_id, item.price)
        return {"success": True, "message": f'"{name}" added to menu', "item": item}

    def edit_item(self, identifier: Union[int, str], **updates: Any) -> MenuChangeResult:
        """Apply name/price/description/category/available updates to one item."""
        idx = self._find_index(identifier)
        if idx == -1:
            return {"success": False, "message": f'Item "{identifier}" not found in menu'}

        previous = self._items[idx]
        changes: dict[str, Any] = {}

        new_name = updates.get("name")
        if new_name:
            new_name = str(new_name).strip()
            for pos, item in enumerate(self._items):
                if pos != idx and item.name.lower() == new_name.lower():
                    return {
                        "success": False,
                        "message": f'Name "{new_name}" already exists in menu',
                    }
            changes["name"] = new_name

        if updates.get("price") is not None:
            price = float(updates["price"])
            if price <= 0:
                return {"success": False, "message": "Price must be above zero."}
            changes["price"] = price

        if updates.get("description"):
            changes["description"] = str(updates["description"]).strip()
        if updates.get("category"):
            changes["category"] = str(updates["category"]).strip()
        if updates.get("available") is not None:
            changes["available"] = bool(updates["available"])

        if "name" in changes or "category" in changes:
            changes["emoji"] = emoji_for_item(
                changes.get("name", previous.name),
                changes.get("category", previous.category),
            )

        updated = previous.model_copy(update=changes)
        self._items[idx] = updated
        self._touch()
        logger.info("Menu item %d updated: %s", updated.id, sorted(changes))
        return {
            "success": True,
            "message": f'"{previous.name}" updated',
            "item": updated,
            "previous": previous,
        }

    def delete_item(self, identifier: Union[int, str]) -> MenuChangeResult:
        idx = self._find_index(identifier)
        if idx == -1:
            return {"success": False, "message": f'Item "{identifier}" not found in menu'}
        removed = self._items.pop(idx)
        self._touch()
        logger.info("Menu item deleted: %s (id=%d)", removed.name, removed.id)
        return {"success": True, "message": f'"{removed.name}" deleted from menu', "item": removed}

    def toggle_item(self, identifier: Union[int, str]) -> MenuChangeResult:
        """Flip availability of one item."""
        idx = self._find_index(identifier)
        if idx == -1:
            return {"success": False, "message": f'Item "{identifier}" not found in menu'}
        current = self._items[idx]
        updated = current.model_copy(update={"available": not current.available})
        self._items[idx] = updated
        self._touch()
        status = "available" if updated.available else "unavailable"
        logger.info("Menu item %d marked %s", updated.id, status)
        return {"success": True, "message": f'"{updated.name}" marked as {status}', "item": updated}

    # ------------------------------------------------------------------ #
    # Persistence
    # ------------------------------------------------------------------ #

    def to_document(self) -> MenuDocument:
        return MenuDocument(
            restaurant_name=self.restaurant_name,
            date=self.menu_date,
            menu=self.list_all(),
        )

    def save(self, path: Union[str, Path]) -> None:
        """Write the catalog back to a JSON menu file."""
        try:
            Path(path).write_text(
                self.to_document().model_dump_json(indent=2), encoding="utf-8"
            )
        except OSError as exc:
            raise CatalogUnavailableError(f"Cannot write menu file {path}: {exc}") from exc


def load_menu_file(path: Union[str, Path]) -> MenuCatalog:
    """Load a MenuCatalog from a JSON menu file.

    Raises:
        CatalogUnavailableError: If the file is missing or not a valid menu.
    """
    menu_path = Path(path)
    try:
        raw = json.loads(menu_path.read_text(encoding="utf-8"))
        document = MenuDocument.model_validate(raw)
    except (OSError, json.JSONDecodeError, ValidationError) as exc:
        raise CatalogUnavailableError(f"Failed to load menu from {menu_path}: {exc}") from exc

    items = [
        item if item.emoji else item.model_copy(update={"emoji": emoji_for_item(item.name, item.category)})
        for item in document.menu
    ]
    logger.info("Menu loaded from %s: %d items", menu_path, len(items))
    return MenuCatalog(items, restaurant_name=document.restaurant_name, menu_date=document.date)
