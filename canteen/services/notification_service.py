# canteen/services/notification_service.py
from canteen.celery_worker import celery_app
from canteen.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Hands order events over to the notification collaborator.
    Celery keeps delivery out of the request path.
    """

    @staticmethod
    def send_order_placed(user_id: int, order_number: str):
        send_order_notification_task.delay(user_id, order_number, "pending")

    @staticmethod
    def send_status_changed(user_id: int, order_number: str, status: str):
        send_order_notification_task.delay(user_id, order_number, status)


@celery_app.task(name="canteen.services.notification_service.send_order_notification_task")
def send_order_notification_task(user_id: int, order_number: str, status: str):
    """
    Delivery (ward display, SMS, email) belongs to the notification service,
    this task only records the event.
    """
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_number} is now {status}")

    return {"user_id": user_id, "order_number": order_number, "status": status}
