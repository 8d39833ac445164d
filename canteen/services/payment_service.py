# canteen/services/payment_service.py
import uuid
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from canteen.domain.schemas import CardPaymentIn, CashPaymentIn, HospitalAccountPaymentIn
from canteen.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class PaymentRecord:
    """What gets stored on the order. Full card numbers never leave this module."""

    method: str
    status: str
    transaction_id: Optional[str] = None
    hospital_account_id: Optional[str] = None
    card_last4: Optional[str] = None
    card_brand: Optional[str] = None
    card_expiry_month: Optional[int] = None
    card_expiry_year: Optional[int] = None


def card_brand(card_number: str) -> str:
    if card_number.startswith("4"):
        return "visa"
    if card_number.startswith(("5", "2")):
        return "mastercard"
    if card_number.startswith("3"):
        return "amex"
    if card_number.startswith("6"):
        return "discover"
    return "unknown"


def _transaction_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12].upper()}"


class PaymentService:
    """
    Simulated payment processing.

    Hospital account and card charges complete immediately; cash stays
    pending until staff accept the order.
    """

    def charge(self, payment, amount: Decimal) -> PaymentRecord:
        if isinstance(payment, HospitalAccountPaymentIn):
            logger.info(f"Charging {amount} to hospital account {payment.hospital_account_id}")
            return PaymentRecord(
                method=payment.method,
                status="completed",
                transaction_id=_transaction_id("HSP"),
                hospital_account_id=payment.hospital_account_id,
            )

        if isinstance(payment, CardPaymentIn):
            logger.info(f"Charging {amount} to card ending {payment.card_number[-4:]}")
            return PaymentRecord(
                method=payment.method,
                status="completed",
                transaction_id=_transaction_id("CARD"),
                card_last4=payment.card_number[-4:],
                card_brand=card_brand(payment.card_number),
                card_expiry_month=payment.expiry_month,
                card_expiry_year=payment.expiry_year,
            )

        if isinstance(payment, CashPaymentIn):
            return PaymentRecord(
                method=payment.method,
                status="pending",
                transaction_id=_transaction_id("CASH"),
            )

        raise TypeError(f"Unsupported payment type: {type(payment).__name__}")

    def refund(self, method: str, amount: Decimal) -> str:
        """Reverse a completed charge, returns the refund transaction id."""
        transaction_id = _transaction_id("REFUND")
        logger.info(f"Refunding {amount} paid by {method}, transaction {transaction_id}")
        return transaction_id
