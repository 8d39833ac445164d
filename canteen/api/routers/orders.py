# canteen/api/routers/orders.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from canteen.api.errors import to_http_error
from canteen.data.database import get_db
from canteen.domain.errors import OrderError
from canteen.domain.schemas import OrderCreate, OrderOut, StatusUpdateIn
from canteen.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


class CancelIn(BaseModel):
    user_id: int = Field(..., gt=0)


def get_service(db: Session):
    return OrderService(db)


@router.post("/", response_model=OrderOut, status_code=201)
def create_order(payload: OrderCreate, db: Session = Depends(get_db)):
    """
    Stores an order built by checkout.
    Totals are checked against the pricing policy and frozen.
    """
    svc = get_service(db)
    try:
        return svc.create(payload)
    except OrderError as e:
        raise to_http_error(e)


@router.get("/", response_model=List[OrderOut])
def list_orders(user_id: int = Query(..., gt=0), db: Session = Depends(get_db)):
    """Order history of one patient, newest first."""
    return get_service(db).list_by_user(user_id)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user_id: Optional[int] = Query(None, gt=0),
    db: Session = Depends(get_db),
):
    """Single order; with user_id the order must belong to that patient."""
    svc = get_service(db)
    try:
        return svc.get(order_id, user_id=user_id)
    except (OrderError, PermissionError) as e:
        raise to_http_error(e)


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_status(order_id: int, payload: StatusUpdateIn, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.update_status(
            order_id,
            payload.status,
            payload.actor_role,
            user_id=payload.user_id,
            expected_status=payload.expected_status,
        )
    except (OrderError, PermissionError) as e:
        raise to_http_error(e)


@router.patch("/{order_id}/cancel", response_model=OrderOut)
def cancel_order(order_id: int, payload: CancelIn, db: Session = Depends(get_db)):
    """Patient cancellation, only while the order is still pending."""
    svc = get_service(db)
    try:
        return svc.cancel(order_id, payload.user_id)
    except (OrderError, PermissionError) as e:
        raise to_http_error(e)
