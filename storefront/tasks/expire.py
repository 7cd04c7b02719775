# storefront/tasks/expire.py
from datetime import datetime, timedelta, timezone

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from storefront.celery_worker import celery_app
from storefront.data.database import SessionLocal
from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.order_state import OrderStatus
from storefront.services.lock_service import LockService
from storefront.utils.settings import CART_RETENTION_HOURS, CART_SWEEP_LOCK_TTL
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

SWEEP_LOCK = "expire-carts"


def _stale(cutoff: datetime):
    # ten sam warunek przy wyborze i przy DELETE - checkout w trakcie zmienia
    # status, wiec taki wiersz juz nie pasuje i nie zostanie usuniety
    return (
        OrderModel.status == int(OrderStatus.CART),
        OrderModel.last_updated < cutoff,
    )


def expire_carts(db: Session, now: datetime | None = None, retention_hours: int = CART_RETENTION_HOURS) -> int:
    """Usuwa porzucone koszyki. Blad jednego wiersza nie przerywa calosci."""
    now = now or datetime.now(timezone.utc)
    cutoff = now - timedelta(hours=retention_hours)

    cart_ids = list(db.execute(select(OrderModel.id).where(*_stale(cutoff))).scalars())
    db.commit()
    logger.info(f"Found {len(cart_ids)} carts to expire (older than {cutoff.isoformat()})")

    removed = 0
    for cart_id in cart_ids:
        try:
            result = db.execute(
                delete(OrderModel)
                .where(OrderModel.id == cart_id, *_stale(cutoff))
                .execution_options(synchronize_session=False)
            )
            if result.rowcount:
                db.execute(
                    delete(OrderItemModel)
                    .where(OrderItemModel.order_id == cart_id)
                    .execution_options(synchronize_session=False)
                )
                removed += result.rowcount
            db.commit()
        except Exception as e:
            db.rollback()
            logger.warning(f"Failed to expire cart {cart_id}: {e}")

    logger.info(f"Expired {removed} carts")
    return removed


@celery_app.task(name="storefront.tasks.expire.expire_carts_task")
def expire_carts_task():
    logger.info("Expire carts task started")

    lock_service = LockService()
    token = lock_service.acquire(SWEEP_LOCK, ttl=CART_SWEEP_LOCK_TTL)
    if token is None:
        logger.info("Another cart sweep is running, skipping")
        return 0

    db = SessionLocal()
    try:
        return expire_carts(db)
    finally:
        db.close()
        lock_service.release(SWEEP_LOCK, token)
