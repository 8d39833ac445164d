# canteen/api/routers/admin_orders.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from canteen.data.database import get_db
from canteen.domain.order_status import OrderStatus
from canteen.domain.schemas import OrderOut
from canteen.services.order_service import OrderService

router = APIRouter(prefix="/admin/orders", tags=["admin"])


@router.get("/", response_model=List[OrderOut])
def list_all_orders(
    status: Optional[OrderStatus] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    page: int = Query(1, ge=1),
    db: Session = Depends(get_db),
):
    """Staff enumeration of all orders, optionally filtered by status."""
    svc = OrderService(db)
    return svc.list_all(status=status.value if status else None, limit=limit, page=page)
