# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """
    Powiadomienia o zmianie statusu zamowienia.
    Uzywa Celery do asynchronicznego przetwarzania.
    """

    @staticmethod
    def send_order_notification(order_id: int, status: str, user_id: int | None = None, email: str | None = None):
        send_order_notification_task.delay(order_id, status, user_id, email)


def notify_after_commit(notifier, order_id: int, status: str, user_id: int | None = None, email: str | None = None) -> bool:
    """
    Kolejkuje powiadomienie po commit. Zamowienie juz jest zapisane, wiec
    blad brokera tylko logujemy - nie zamienia sie w blad odpowiedzi.
    """
    try:
        notifier.send_order_notification(order_id, status, user_id=user_id, email=email)
    except Exception as e:
        logger.error(f"Notification for order {order_id} ({status}) was not queued: {e}", exc_info=True)
        return False
    return True


@celery_app.task(name="storefront.services.notification_service.send_order_notification_task")
def send_order_notification_task(order_id: int, status: str, user_id: int | None = None, email: str | None = None):
    """
    Celery task - w prawdziwym systemie wyslalby email/SMS/push.
    Teraz tylko loguje.
    """
    recipient = f"user {user_id}" if user_id is not None else (email or "guest")
    logger.info(f"[NOTIFICATION] {recipient}: order {order_id} is now {status}")

    return {"order_id": order_id, "status": status, "recipient": recipient}
