from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List

from takeaway.domain.menu import MenuItem


@dataclass
class CartLine:
    item: MenuItem
    quantity: int

    @property
    def line_total(self) -> Decimal:
        return self.item.price * self.quantity


class Cart:
    """
    In-memory set of selected menu items keyed by menu id.
    Lines keep the item as it was when first added (price included).
    """

    def __init__(self, lines: List[CartLine] | None = None):
        self._lines: Dict[str, CartLine] = {}
        for line in lines or []:
            if line.quantity > 0:
                self._lines[line.item.id] = line

    def add(self, item: MenuItem) -> None:
        line = self._lines.get(item.id)
        if line:
            line.quantity += 1
        else:
            self._lines[item.id] = CartLine(item=item, quantity=1)

    def set_quantity(self, item_id: str, quantity: int) -> None:
        # Negative quantities are clamped to zero, which removes the line.
        if quantity <= 0:
            self.remove(item_id)
            return
        line = self._lines.get(item_id)
        if line:
            line.quantity = quantity

    def remove(self, item_id: str) -> None:
        self._lines.pop(item_id, None)

    def clear(self) -> None:
        self._lines.clear()

    def total(self) -> Decimal:
        return sum((line.line_total for line in self._lines.values()), Decimal("0"))

    def count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    def is_empty(self) -> bool:
        return not self._lines

    def snapshot(self) -> "Cart":
        """Independent copy, used to freeze the cart at checkout."""
        return Cart([CartLine(item=l.item, quantity=l.quantity) for l in self._lines.values()])

    # --- Serialization for the cart store ---

    def to_dict(self) -> dict:
        return {
            "items": [
                {"item": line.item.model_dump(mode="json"), "quantity": line.quantity}
                for line in self._lines.values()
            ]
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Cart":
        return cls([
            CartLine(item=MenuItem(**entry["item"]), quantity=int(entry["quantity"]))
            for entry in data.get("items", [])
        ])
