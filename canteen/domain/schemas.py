# canteen/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from canteen.domain.order_status import ActorRole, OrderStatus


class MenuItem(BaseModel):
    """Menu record as served by the menu collaborator (read only)."""

    id: str
    name: str
    description: str = ""
    price: Decimal = Field(..., ge=0)
    category: str = ""
    allergens: List[str] = Field(default_factory=list)
    available: bool = True


class PatientIdentity(BaseModel):
    """Authenticated patient as handed over by the identity collaborator."""

    user_id: int = Field(..., gt=0)
    full_name: str = ""
    ward_number: str
    bed_number: str


class OrderItemIn(BaseModel):
    menu_item_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    unit_price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=1)
    category: str = ""
    allergens: List[str] = Field(default_factory=list)


class DeliveryDetailsIn(BaseModel):
    ward_number: str = Field(..., min_length=1)
    bed_number: str = Field(..., min_length=1)
    delivery_time: datetime
    special_instructions: str = Field("", max_length=500)


# -- payment, one variant per method keyed by "method" --

def _luhn_ok(number: str) -> bool:
    total = 0
    for i, ch in enumerate(reversed(number)):
        digit = int(ch)
        if i % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


class HospitalAccountPaymentIn(BaseModel):
    method: Literal["hospital-account"]
    hospital_account_id: str = Field(..., min_length=6)


class CashPaymentIn(BaseModel):
    method: Literal["cash"]


class CardPaymentIn(BaseModel):
    method: Literal["card"]
    card_number: str
    expiry_month: int = Field(..., ge=1, le=12)
    expiry_year: int = Field(..., ge=2000)
    cvv: str = Field(..., pattern=r"^\d{3,4}$")
    cardholder_name: str = Field(..., min_length=1)

    @field_validator("card_number")
    @classmethod
    def _check_card_number(cls, value: str) -> str:
        digits = "".join(ch for ch in value if ch.isdigit())
        if not 13 <= len(digits) <= 19 or not _luhn_ok(digits):
            raise ValueError("Invalid card number")
        return digits


PaymentIn = Annotated[
    Union[HospitalAccountPaymentIn, CashPaymentIn, CardPaymentIn],
    Field(discriminator="method"),
]

payment_adapter = TypeAdapter(PaymentIn)


class OrderCreate(BaseModel):
    """Fully formed order payload produced by checkout."""

    user_id: int = Field(..., gt=0)
    items: List[OrderItemIn] = Field(..., min_length=1)
    subtotal: Decimal = Field(..., ge=0)
    delivery_fee: Decimal = Field(..., ge=0)
    tax: Decimal = Field(..., ge=0)
    total_amount: Decimal = Field(..., gt=0)
    delivery_details: DeliveryDetailsIn
    payment: PaymentIn


class StatusUpdateIn(BaseModel):
    status: OrderStatus
    actor_role: ActorRole
    user_id: Optional[int] = Field(None, gt=0)
    expected_status: Optional[OrderStatus] = None


class OrderItemOut(BaseModel):
    menu_item_id: str
    name: str
    unit_price: Decimal
    quantity: int
    category: str
    allergens: List[str]

    model_config = ConfigDict(from_attributes=True)


class DeliveryDetailsOut(BaseModel):
    ward_number: str
    bed_number: str
    delivery_time: datetime
    special_instructions: str


class CardDetailsOut(BaseModel):
    last4: str
    brand: str
    expiry_month: int
    expiry_year: int


class PaymentDetailsOut(BaseModel):
    method: str
    status: str
    transaction_id: Optional[str] = None
    hospital_account_id: Optional[str] = None
    card_details: Optional[CardDetailsOut] = None
    subtotal: Decimal
    delivery_fee: Decimal
    tax: Decimal
    total_paid: Decimal


class OrderOut(BaseModel):
    id: int
    order_number: str
    user_id: int
    status: OrderStatus
    items: List[OrderItemOut]
    total_amount: Decimal
    delivery_details: DeliveryDetailsOut
    payment_details: PaymentDetailsOut
    next_action: Optional[str] = None
    created_at: datetime
    updated_at: datetime
