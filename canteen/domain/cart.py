# canteen/domain/cart.py
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from canteen.domain.errors import ValidationError
from canteen.domain.schemas import MenuItem, OrderItemIn


@dataclass
class CartLineItem:
    menu_item_id: str
    name: str
    unit_price: Decimal
    quantity: int
    category: str = ""
    allergens: Tuple[str, ...] = ()

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity


@dataclass
class Cart:
    """
    Shopping cart of a single patient session.

    Lives only in memory and is owned by whoever created it; nothing here
    talks to the network. Lines keep insertion order.
    """

    _lines: Dict[str, CartLineItem] = field(default_factory=dict, init=False)

    @property
    def lines(self) -> Tuple[CartLineItem, ...]:
        return tuple(self._lines.values())

    def get_line(self, menu_item_id: str) -> Optional[CartLineItem]:
        return self._lines.get(menu_item_id)

    def is_empty(self) -> bool:
        return not self._lines

    def add_item(self, item: MenuItem, quantity: int = 1) -> None:
        existing = self._lines.get(item.id)

        if quantity > 0 and not item.available:
            raise ValidationError(f"{item.name} is currently unavailable")

        if existing:
            existing.quantity += quantity
            if existing.quantity <= 0:
                del self._lines[item.id]
            return

        if quantity <= 0:
            return

        # price and display fields are copied, later menu changes do not reach the cart
        self._lines[item.id] = CartLineItem(
            menu_item_id=item.id,
            name=item.name,
            unit_price=Decimal(str(item.price)),
            quantity=quantity,
            category=item.category,
            allergens=tuple(item.allergens),
        )

    def update_quantity(self, menu_item_id: str, new_quantity: int) -> None:
        # use remove_item to delete a line
        if new_quantity < 1:
            return
        line = self._lines.get(menu_item_id)
        if line:
            line.quantity = new_quantity

    def remove_item(self, menu_item_id: str) -> None:
        self._lines.pop(menu_item_id, None)

    def clear(self) -> None:
        self._lines.clear()

    def subtotal(self) -> Decimal:
        return sum((line.line_total for line in self._lines.values()), Decimal("0.00"))

    def item_count(self) -> int:
        return sum(line.quantity for line in self._lines.values())

    def snapshot(self) -> List[OrderItemIn]:
        """Detached copies of the lines, safe to hand over to an order."""
        return [
            OrderItemIn(
                menu_item_id=line.menu_item_id,
                name=line.name,
                unit_price=line.unit_price,
                quantity=line.quantity,
                category=line.category,
                allergens=list(line.allergens),
            )
            for line in self._lines.values()
        ]
