# canteen/services/cart_service.py
from decimal import Decimal

from canteen.domain.cart import Cart
from canteen.domain.pricing import PricingTotals, compute_totals
from canteen.services.menu_client import MenuClient
from canteen.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Session-side use cases for the cart.
    commands (add, remove, change quantity, clear) mutate the session's cart,
    queries (summary) only read it.
    """

    def __init__(self, cart: Cart, menu_client: MenuClient):
        self.cart = cart
        self.menu_client = menu_client

    #commands
    def add_menu_item(self, menu_item_id: str, quantity: int = 1) -> Cart:
        logger.info(f"Fetching menu item {menu_item_id} from menu-service")
        item = self.menu_client.fetch_menu_item(menu_item_id)

        self.cart.add_item(item, quantity)
        logger.info(f"Added {quantity} x {item.name} to cart, {self.cart.item_count()} items in cart")
        return self.cart

    def change_quantity(self, menu_item_id: str, new_quantity: int) -> Cart:
        self.cart.update_quantity(menu_item_id, new_quantity)
        return self.cart

    def remove_menu_item(self, menu_item_id: str) -> Cart:
        self.cart.remove_item(menu_item_id)
        return self.cart

    def clear(self) -> Cart:
        self.cart.clear()
        return self.cart

    #query
    def summary(self, tax_rate: Decimal | None = None, delivery_fee: Decimal | None = None) -> PricingTotals:
        return compute_totals(self.cart.subtotal(), tax_rate=tax_rate, delivery_fee=delivery_fee)
