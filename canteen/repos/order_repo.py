# canteen/repos/order_repo.py
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from canteen.data.models.order import OrderModel


class OrderRepo:
    """
    Storage access for orders.

    Status only changes through compare_and_set_status, guarded by the
    status the caller validated. There is no plain status setter.
    """

    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order

    def get_order(self, order_id: int) -> Optional[OrderModel]:
        return self.db.get(OrderModel, order_id)

    def list_orders_by_user(self, user_id: int) -> List[OrderModel]:
        stmt = (
            select(OrderModel)
            .where(OrderModel.user_id == user_id)
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_orders(self, status: Optional[str] = None, limit: int = 50, offset: int = 0) -> List[OrderModel]:
        stmt = select(OrderModel)
        if status:
            stmt = stmt.where(OrderModel.status == status)
        stmt = stmt.order_by(OrderModel.created_at.desc(), OrderModel.id.desc()).limit(limit).offset(offset)
        return list(self.db.execute(stmt).scalars().all())

    def compare_and_set_status(self, order_id: int, expected_status: str, new_data: dict) -> int:
        #update orders set status='ready' where id=1 and status='processing'
        #0 rows affected -> someone else changed the status first
        values = dict(new_data)
        values.setdefault("updated_at", datetime.now(timezone.utc))

        result = self.db.execute(
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status == expected_status)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

    def refresh(self, order: OrderModel):
        self.db.refresh(order)
