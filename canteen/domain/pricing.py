# canteen/domain/pricing.py
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP

from canteen.domain.errors import ValidationError
from canteen.utils.settings import TAX_RATE, DELIVERY_FEE

CENT = Decimal("0.01")


def to_money(value) -> Decimal:
    """Round a currency amount half-up to cents."""
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PricingTotals:
    subtotal: Decimal
    delivery_fee: Decimal
    tax: Decimal
    total: Decimal


def compute_totals(subtotal, tax_rate=None, delivery_fee=None) -> PricingTotals:
    """
    Derive delivery fee, tax and total from a cart subtotal.

    All arithmetic stays in unrounded Decimal; only the returned values are
    quantized to cents.
    """
    subtotal = Decimal(str(subtotal))
    tax_rate = TAX_RATE if tax_rate is None else Decimal(str(tax_rate))
    delivery_fee = DELIVERY_FEE if delivery_fee is None else Decimal(str(delivery_fee))

    if subtotal < 0:
        raise ValidationError("Subtotal cannot be negative")

    tax = subtotal * tax_rate
    total = subtotal + delivery_fee + tax

    return PricingTotals(
        subtotal=to_money(subtotal),
        delivery_fee=to_money(delivery_fee),
        tax=to_money(tax),
        total=to_money(total),
    )
