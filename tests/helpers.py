from datetime import datetime, timezone
from decimal import Decimal

from canteen.domain.pricing import compute_totals
from canteen.domain.schemas import (
    DeliveryDetailsIn,
    MenuItem,
    OrderCreate,
    OrderItemIn,
    PatientIdentity,
)

DELIVERY_TIME = datetime(2026, 10, 20, 12, 30, tzinfo=timezone.utc)

SOUP = MenuItem(id="1", name="Tomato Soup", price=Decimal("5.99"), category="Soups", allergens=["celery"])
CHICKEN = MenuItem(id="2", name="Grilled Chicken Plate", price=Decimal("8.99"), category="Mains")
FISH_PIE = MenuItem(id="4", name="Fish Pie", price=Decimal("9.49"), category="Mains", available=False)

PATIENT = PatientIdentity(user_id=7, full_name="Anna Nowak", ward_number="4B", bed_number="12")

CASH = {"method": "cash"}
HOSPITAL_ACCOUNT = {"method": "hospital-account", "hospital_account_id": "HA-100234"}
CARD = {
    "method": "card",
    "card_number": "4111 1111 1111 1111",
    "expiry_month": 12,
    "expiry_year": 2030,
    "cvv": "123",
    "cardholder_name": "Anna Nowak",
}


def soup_line(quantity=1):
    return OrderItemIn(
        menu_item_id="1",
        name="Tomato Soup",
        unit_price=Decimal("5.99"),
        quantity=quantity,
        category="Soups",
        allergens=["celery"],
    )


def order_payload(items=None, user_id=7, payment=None, **overrides) -> OrderCreate:
    items = items or [soup_line()]
    subtotal = sum((i.unit_price * i.quantity for i in items), Decimal("0.00"))
    totals = compute_totals(subtotal)

    data = dict(
        user_id=user_id,
        items=items,
        subtotal=totals.subtotal,
        delivery_fee=totals.delivery_fee,
        tax=totals.tax,
        total_amount=totals.total,
        delivery_details=DeliveryDetailsIn(ward_number="4B", bed_number="12", delivery_time=DELIVERY_TIME),
        payment=payment or CASH,
    )
    data.update(overrides)
    return OrderCreate(**data)


class RecordingNotifications:
    def __init__(self):
        self.events = []

    def send_order_placed(self, user_id, order_number):
        self.events.append((user_id, order_number, "pending"))

    def send_status_changed(self, user_id, order_number, status):
        self.events.append((user_id, order_number, status))
