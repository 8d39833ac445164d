from datetime import datetime, timezone
from decimal import Decimal

import pytest

from canteen.domain.cart import Cart
from canteen.domain.errors import EmptyCartError, InvalidTransition, ValidationError
from canteen.domain.order_status import ActorRole, OrderStatus
from canteen.domain.schemas import CashPaymentIn, MenuItem
from canteen.services.checkout_service import CheckoutService
from tests.helpers import CARD, CASH, CHICKEN, DELIVERY_TIME, HOSPITAL_ACCOUNT, PATIENT, SOUP


class FakeGateway:
    def __init__(self, fail=False):
        self.payloads = []
        self.fail = fail

    def create(self, payload):
        self.payloads.append(payload)
        if self.fail:
            raise ConnectionError("order service down")
        return type("Placed", (), {"order_number": "ORD-000001-001"})()


@pytest.fixture
def cart():
    c = Cart()
    c.add_item(SOUP, 2)
    c.add_item(CHICKEN, 1)
    return c


def test_empty_cart_is_rejected_before_any_call():
    gateway = FakeGateway()

    with pytest.raises(EmptyCartError):
        CheckoutService(gateway).checkout(Cart(), PATIENT, DELIVERY_TIME, CASH)

    assert gateway.payloads == []


def test_missing_delivery_time_is_rejected(cart):
    gateway = FakeGateway()

    with pytest.raises(ValidationError, match="delivery time"):
        CheckoutService(gateway).checkout(cart, PATIENT, None, CASH)

    assert gateway.payloads == []
    assert not cart.is_empty()


def test_incomplete_card_is_rejected(cart):
    gateway = FakeGateway()
    payment = {k: v for k, v in CARD.items() if k != "cvv"}

    with pytest.raises(ValidationError, match="cvv"):
        CheckoutService(gateway).checkout(cart, PATIENT, DELIVERY_TIME, payment)

    assert gateway.payloads == []


def test_invalid_card_number_is_rejected(cart):
    payment = {**CARD, "card_number": "4111 1111 1111 1112"}

    with pytest.raises(ValidationError, match="Invalid card number"):
        CheckoutService(FakeGateway()).checkout(cart, PATIENT, DELIVERY_TIME, payment)


def test_short_hospital_account_is_rejected(cart):
    payment = {"method": "hospital-account", "hospital_account_id": "123"}

    with pytest.raises(ValidationError):
        CheckoutService(FakeGateway()).checkout(cart, PATIENT, DELIVERY_TIME, payment)


def test_unknown_payment_method_is_rejected(cart):
    with pytest.raises(ValidationError):
        CheckoutService(FakeGateway()).checkout(cart, PATIENT, DELIVERY_TIME, {"method": "bitcoin"})


def test_payload_carries_snapshot_and_totals(cart):
    gateway = FakeGateway()

    CheckoutService(gateway).checkout(
        cart, PATIENT, DELIVERY_TIME, HOSPITAL_ACCOUNT, special_instructions="No salt"
    )

    payload = gateway.payloads[0]
    assert payload.user_id == PATIENT.user_id
    assert [(i.menu_item_id, i.quantity) for i in payload.items] == [("1", 2), ("2", 1)]
    assert payload.subtotal == Decimal("20.97")
    assert payload.tax == Decimal("1.05")
    assert payload.delivery_fee == Decimal("0.00")
    assert payload.total_amount == Decimal("22.02")
    assert payload.delivery_details.special_instructions == "No salt"
    assert payload.payment.method == "hospital-account"


def test_delivery_location_defaults_to_patient_bed(cart):
    gateway = FakeGateway()

    CheckoutService(gateway).checkout(cart, PATIENT, DELIVERY_TIME, CASH)

    delivery = gateway.payloads[0].delivery_details
    assert (delivery.ward_number, delivery.bed_number) == ("4B", "12")


def test_delivery_location_can_be_overridden(cart):
    gateway = FakeGateway()

    CheckoutService(gateway).checkout(cart, PATIENT, DELIVERY_TIME, CASH, ward_number="ICU", bed_number="3")

    delivery = gateway.payloads[0].delivery_details
    assert (delivery.ward_number, delivery.bed_number) == ("ICU", "3")


def test_payment_model_is_accepted(cart):
    gateway = FakeGateway()

    CheckoutService(gateway).checkout(cart, PATIENT, DELIVERY_TIME, CashPaymentIn(method="cash"))

    assert gateway.payloads[0].payment.method == "cash"


def test_cart_is_cleared_after_successful_checkout(cart):
    CheckoutService(FakeGateway()).checkout(cart, PATIENT, DELIVERY_TIME, CASH)
    assert cart.is_empty()


def test_cart_survives_failed_submission(cart):
    with pytest.raises(ConnectionError):
        CheckoutService(FakeGateway(fail=True)).checkout(cart, PATIENT, DELIVERY_TIME, CASH)

    assert cart.item_count() == 3


def test_order_is_frozen_after_checkout(order_service):
    cart = Cart()
    cart.add_item(SOUP, 2)
    order = CheckoutService(order_service).checkout(cart, PATIENT, DELIVERY_TIME, CARD)

    # the patient keeps shopping and the menu price goes up
    cart.add_item(MenuItem(id="1", name="Tomato Soup", price=Decimal("9.99"), category="Soups"), 3)
    cart.add_item(CHICKEN)

    stored = order_service.get(order.id)
    assert [(i.menu_item_id, i.quantity, i.unit_price) for i in stored.items] == [("1", 2, Decimal("5.99"))]
    assert stored.total_amount == order.total_amount == Decimal("12.58")


def test_soup_order_end_to_end(order_service):
    cart = Cart()
    cart.add_item(SOUP)
    checkout = CheckoutService(order_service)

    order = checkout.checkout(cart, PATIENT, datetime(2026, 10, 20, 8, 0, tzinfo=timezone.utc), CASH)

    assert order.status == OrderStatus.PENDING
    assert order.total_amount == Decimal("6.29")
    assert cart.is_empty()

    accepted = order_service.update_status(order.id, "accepted", ActorRole.STAFF)
    assert accepted.status == OrderStatus.ACCEPTED

    with pytest.raises(InvalidTransition):
        order_service.update_status(order.id, "cancelled", ActorRole.PATIENT, user_id=PATIENT.user_id)

    assert order_service.get(order.id).status == OrderStatus.ACCEPTED
