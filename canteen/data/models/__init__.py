#import all models so SQLAlchemy registers them on Base.metadata

from canteen.data.models.order import OrderModel
from canteen.data.models.order_item import OrderItemModel

__all__ = ["OrderModel", "OrderItemModel"]
