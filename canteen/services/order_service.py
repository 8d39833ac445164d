# canteen/services/order_service.py
import random
import time
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from tenacity import retry, stop_after_attempt, retry_if_exception_type

from canteen.data.models.order import OrderModel
from canteen.data.models.order_item import OrderItemModel
from canteen.domain.errors import OrderNotFound, StaleOrderState, ValidationError
from canteen.domain.order_status import (
    ActorRole,
    OrderStatus,
    action_label,
    next_status,
    transition,
)
from canteen.domain.pricing import compute_totals, to_money
from canteen.domain.schemas import (
    CardDetailsOut,
    DeliveryDetailsOut,
    OrderCreate,
    OrderItemOut,
    OrderOut,
    PaymentDetailsOut,
)
from canteen.repos.order_repo import OrderRepo
from canteen.services.notification_service import NotificationService
from canteen.services.payment_service import PaymentService
from canteen.utils.logging import get_logger

logger = get_logger(__name__)


def generate_order_number() -> str:
    timestamp = str(int(time.time() * 1000))
    return f"ORD-{timestamp[-6:]}-{random.randint(0, 999):03d}"


def to_order_out(order: OrderModel) -> OrderOut:
    card = None
    if order.card_last4:
        card = CardDetailsOut(
            last4=order.card_last4,
            brand=order.card_brand or "unknown",
            expiry_month=order.card_expiry_month,
            expiry_year=order.card_expiry_year,
        )

    upcoming = next_status(order.status)

    return OrderOut(
        id=order.id,
        order_number=order.order_number,
        user_id=order.user_id,
        status=order.status,
        items=[OrderItemOut.model_validate(i) for i in order.items],
        total_amount=order.total_amount,
        delivery_details=DeliveryDetailsOut(
            ward_number=order.ward_number,
            bed_number=order.bed_number,
            delivery_time=order.delivery_time,
            special_instructions=order.special_instructions or "",
        ),
        payment_details=PaymentDetailsOut(
            method=order.payment_method,
            status=order.payment_status,
            transaction_id=order.transaction_id,
            hospital_account_id=order.hospital_account_id,
            card_details=card,
            subtotal=order.subtotal,
            delivery_fee=order.delivery_fee,
            tax=order.tax,
            total_paid=order.total_amount,
        ),
        next_action=action_label(order.status, upcoming) if upcoming else None,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


class OrderService:
    """
    Persistence boundary of the Order resource.

    update_status is the only way a status changes: the state machine decides
    whether the move is allowed, the repo applies it with a compare-and-swap.
    """

    def __init__(
        self,
        db: Session,
        payment_service: PaymentService | None = None,
        notification_service: NotificationService | None = None,
        tax_rate: Decimal | None = None,
        delivery_fee: Decimal | None = None,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.payment_service = payment_service or PaymentService()
        self.notification_service = notification_service or NotificationService()
        self.tax_rate = tax_rate
        self.delivery_fee = delivery_fee

    #query
    def get(self, order_id: int, user_id: Optional[int] = None) -> OrderOut:
        order = self._load(order_id, user_id)
        return to_order_out(order)

    def list_by_user(self, user_id: int) -> List[OrderOut]:
        return [to_order_out(o) for o in self.repo.list_orders_by_user(user_id)]

    def list_all(self, status: Optional[str] = None, limit: int = 50, page: int = 1) -> List[OrderOut]:
        """Staff view of every order, newest first."""
        if limit < 1 or page < 1:
            raise ValidationError("limit and page must be positive")
        try:
            status_value = OrderStatus(status).value if status else None
        except ValueError as e:
            raise ValidationError(f"Unknown order status: {status}") from e
        orders = self.repo.list_orders(status=status_value, limit=limit, offset=(page - 1) * limit)
        return [to_order_out(o) for o in orders]

    #commands
    def create(self, payload: OrderCreate) -> OrderOut:
        """
        Store an order produced by checkout.

        1. rejects empty orders
        2. checks the frozen totals against the pricing policy
        3. charges the (simulated) payment
        4. inserts order + item snapshot with status pending
        """
        if not payload.items:
            raise ValidationError("Order must contain at least one item")

        subtotal = sum((i.unit_price * i.quantity for i in payload.items), Decimal("0.00"))
        totals = compute_totals(subtotal, tax_rate=self.tax_rate, delivery_fee=self.delivery_fee)

        submitted = (
            to_money(payload.subtotal),
            to_money(payload.delivery_fee),
            to_money(payload.tax),
            to_money(payload.total_amount),
        )
        if submitted != (totals.subtotal, totals.delivery_fee, totals.tax, totals.total):
            logger.warning(
                f"Rejected order for user {payload.user_id}: totals {submitted} "
                f"do not match pricing {totals}"
            )
            raise ValidationError("Order totals do not match the current pricing policy")

        payment = self.payment_service.charge(payload.payment, totals.total)

        def build() -> OrderModel:
            delivery = payload.delivery_details
            return OrderModel(
                order_number=generate_order_number(),
                user_id=payload.user_id,
                status=OrderStatus.PENDING.value,
                subtotal=totals.subtotal,
                delivery_fee=totals.delivery_fee,
                tax=totals.tax,
                total_amount=totals.total,
                ward_number=delivery.ward_number,
                bed_number=delivery.bed_number,
                delivery_time=delivery.delivery_time,
                special_instructions=delivery.special_instructions,
                payment_method=payment.method,
                payment_status=payment.status,
                transaction_id=payment.transaction_id,
                hospital_account_id=payment.hospital_account_id,
                card_last4=payment.card_last4,
                card_brand=payment.card_brand,
                card_expiry_month=payment.card_expiry_month,
                card_expiry_year=payment.card_expiry_year,
                items=[
                    OrderItemModel(
                        menu_item_id=i.menu_item_id,
                        name=i.name,
                        unit_price=i.unit_price,
                        quantity=i.quantity,
                        category=i.category,
                        allergens=list(i.allergens),
                    )
                    for i in payload.items
                ],
            )

        created = self._insert(build)

        logger.info(
            f"Order {created.order_number} (id {created.id}) created for user {created.user_id}, "
            f"total {created.total_amount}"
        )

        self.notification_service.send_order_placed(created.user_id, created.order_number)

        return to_order_out(created)

    def update_status(
        self,
        order_id: int,
        requested_status,
        actor_role,
        user_id: Optional[int] = None,
        expected_status=None,
    ) -> OrderOut:
        actor = ActorRole(actor_role)
        requested = getattr(requested_status, "value", requested_status)

        order = self._load(order_id, user_id if actor == ActorRole.PATIENT else None)
        if actor == ActorRole.PATIENT and user_id is None:
            raise PermissionError("Patients can only change their own orders")

        current = order.status

        #client sent the status it was looking at
        if expected_status is not None:
            expected = getattr(expected_status, "value", expected_status)
            if expected != current:
                raise StaleOrderState(expected, current, requested, actor.value)

        new_status = transition(current, requested, actor)

        new_data = {"status": new_status.value}

        if new_status == OrderStatus.ACCEPTED and order.payment_status == "pending":
            new_data["payment_status"] = "completed"

        if (
            new_status == OrderStatus.CANCELLED
            and order.payment_status == "completed"
            and order.payment_method in ("card", "hospital-account")
        ):
            new_data["payment_status"] = "refunded"
            new_data["transaction_id"] = self.payment_service.refund(order.payment_method, order.total_amount)

        logger.info(f"Order {order.order_number}: {current} -> {new_status.value} by {actor.value}")

        rowcount = self.repo.compare_and_set_status(order.id, current, new_data)

        if rowcount == 0:
            self.repo.rollback()
            latest = self.repo.get_order(order_id)
            latest_status = latest.status if latest else current
            logger.warning(
                f"Order {order_id}: concurrent update, expected {current} but found {latest_status}"
            )
            raise StaleOrderState(current, latest_status, requested, actor.value)

        self.repo.commit()
        self.repo.refresh(order)

        self.notification_service.send_status_changed(order.user_id, order.order_number, order.status)

        return to_order_out(order)

    def cancel(self, order_id: int, user_id: int) -> OrderOut:
        return self.update_status(order_id, OrderStatus.CANCELLED, ActorRole.PATIENT, user_id=user_id)

    def _load(self, order_id: int, user_id: Optional[int]) -> OrderModel:
        order = self.repo.get_order(order_id)

        if not order:
            raise OrderNotFound(order_id)

        if user_id is not None and order.user_id != user_id:
            raise PermissionError("You do not have access to this order")

        return order

    @retry(reraise=True, stop=stop_after_attempt(3), retry=retry_if_exception_type(IntegrityError))
    def _insert(self, build) -> OrderModel:
        #order_number is unique, a collision just retries with a fresh number
        try:
            return self.repo.create_order(build())
        except IntegrityError:
            self.repo.rollback()
            logger.warning("Order number collision, retrying")
            raise
