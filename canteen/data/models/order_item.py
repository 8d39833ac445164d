from sqlalchemy import Column, Integer, ForeignKey, Numeric, String, JSON
from sqlalchemy.orm import relationship

from canteen.data.database import Base


class OrderItemModel(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_item_id = Column(String(64), nullable=False)

    name = Column(String(200), nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)  # price snapshot taken at checkout
    quantity = Column(Integer, nullable=False)
    category = Column(String(100), nullable=False, default="")
    allergens = Column(JSON, nullable=False, default=list)

    order = relationship("OrderModel", back_populates="items")
