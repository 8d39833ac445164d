# canteen/data/models/order.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, Numeric, Text
from sqlalchemy.orm import relationship

from canteen.data.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    order_number = Column(String(32), nullable=False, unique=True, index=True)
    user_id = Column(Integer, nullable=False, index=True)

    # pending, accepted, processing, ready, delivered, cancelled
    # written only through OrderRepo.compare_and_set_status
    status = Column(String(20), nullable=False, default="pending", index=True)

    subtotal = Column(Numeric(10, 2), nullable=False)
    delivery_fee = Column(Numeric(10, 2), nullable=False, default=0)
    tax = Column(Numeric(10, 2), nullable=False, default=0)
    total_amount = Column(Numeric(10, 2), nullable=False)

    ward_number = Column(String(32), nullable=False)
    bed_number = Column(String(32), nullable=False)
    delivery_time = Column(DateTime(timezone=True), nullable=False)
    special_instructions = Column(Text, nullable=False, default="")

    payment_method = Column(String(20), nullable=False)  # hospital-account, cash, card
    payment_status = Column(String(20), nullable=False, default="pending")
    transaction_id = Column(String(64), nullable=True)
    hospital_account_id = Column(String(64), nullable=True)
    card_last4 = Column(String(4), nullable=True)
    card_brand = Column(String(20), nullable=True)
    card_expiry_month = Column(Integer, nullable=True)
    card_expiry_year = Column(Integer, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )
