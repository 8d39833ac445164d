# canteen/services/checkout_service.py
from datetime import datetime
from decimal import Decimal
from typing import Optional, Protocol

from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from canteen.domain.cart import Cart
from canteen.domain.errors import EmptyCartError, ValidationError
from canteen.domain.pricing import compute_totals
from canteen.domain.schemas import (
    DeliveryDetailsIn,
    OrderCreate,
    OrderOut,
    PatientIdentity,
    payment_adapter,
)
from canteen.utils.logging import get_logger

logger = get_logger(__name__)


class OrderGateway(Protocol):
    def create(self, payload: OrderCreate) -> OrderOut: ...


def describe_errors(exc: SchemaValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"])
        parts.append(f"{loc}: {err['msg']}" if loc else err["msg"])
    return "; ".join(parts)


class CheckoutService:
    """
    Turns the session cart into an order.

    Everything that can be checked locally (empty cart, delivery and payment
    fields) is checked before the gateway is called. The cart is only cleared
    once the order has been stored.
    """

    def __init__(self, orders: OrderGateway, tax_rate: Decimal | None = None, delivery_fee: Decimal | None = None):
        self.orders = orders
        self.tax_rate = tax_rate
        self.delivery_fee = delivery_fee

    def checkout(
        self,
        cart: Cart,
        patient: PatientIdentity,
        delivery_time: Optional[datetime],
        payment,
        special_instructions: str = "",
        ward_number: Optional[str] = None,
        bed_number: Optional[str] = None,
    ) -> OrderOut:
        if cart.is_empty():
            raise EmptyCartError()

        if delivery_time is None:
            raise ValidationError("Please select a delivery time")

        if isinstance(payment, BaseModel):
            payment = payment.model_dump()

        try:
            delivery = DeliveryDetailsIn(
                ward_number=ward_number or patient.ward_number,
                bed_number=bed_number or patient.bed_number,
                delivery_time=delivery_time,
                special_instructions=special_instructions,
            )
            payment_in = payment_adapter.validate_python(payment)
        except SchemaValidationError as e:
            raise ValidationError(describe_errors(e)) from e

        totals = compute_totals(cart.subtotal(), tax_rate=self.tax_rate, delivery_fee=self.delivery_fee)

        payload = OrderCreate(
            user_id=patient.user_id,
            items=cart.snapshot(),
            subtotal=totals.subtotal,
            delivery_fee=totals.delivery_fee,
            tax=totals.tax,
            total_amount=totals.total,
            delivery_details=delivery,
            payment=payment_in,
        )

        logger.info(
            f"Checkout for user {patient.user_id}: {cart.item_count()} items, total {totals.total}"
        )

        order = self.orders.create(payload)

        cart.clear()
        logger.info(f"Order {order.order_number} placed, cart cleared")

        return order
