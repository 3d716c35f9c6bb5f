# marketplace/services/notification_service.py
from decimal import Decimal

from marketplace.celery_worker import celery_app
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Fire-and-forget notifications, processed by the Celery worker.
    A failure to enqueue is logged and never propagates: by the time we
    notify, the order is already committed.
    """

    @staticmethod
    def send_order_placed(user_id: int, order_id: int, total_amount: Decimal):
        try:
            send_order_placed_task.delay(user_id, order_id, str(total_amount))
        except Exception as e:
            logger.warning(f"Failed to enqueue order-placed notification for order {order_id}: {e}")

    @staticmethod
    def send_status_changed(user_id: int, order_id: int, status: str):
        try:
            send_status_changed_task.delay(user_id, order_id, status)
        except Exception as e:
            logger.warning(f"Failed to enqueue status notification for order {order_id}: {e}")


@celery_app.task(name="marketplace.services.notification_service.send_order_placed_task")
def send_order_placed_task(user_id: int, order_id: int, total_amount: str):
    #delivery channel (email/SMS) lives outside this service, only logged here
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} placed, total {total_amount}")
    return {"user_id": user_id, "order_id": order_id, "status": "sent"}


@celery_app.task(name="marketplace.services.notification_service.send_status_changed_task")
def send_status_changed_task(user_id: int, order_id: int, status: str):
    logger.info(f"[NOTIFICATION] User {user_id}: order {order_id} is now {status}")
    return {"user_id": user_id, "order_id": order_id, "status": "sent"}
