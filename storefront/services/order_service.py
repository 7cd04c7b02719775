# storefront/services/order_service.py
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from storefront.domain.errors import Conflict, Forbidden, InvalidTransition, NotFound
from storefront.domain.order_state import STOCK_HOLDING, OrderStatus, ensure_transition, to_state
from storefront.repos.order_repo import OrderRepo
from storefront.services.inventory import InventoryLedger
from storefront.services.notification_service import NotificationService, notify_after_commit
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def order_view(order) -> Dict[str, Any]:
    return {
        "order_id": order.id,
        "user_id": order.user_id,
        "status": OrderStatus(order.status).name,
        "created_at": order.created_at,
        "last_updated": order.last_updated,
        "delivery_address": order.delivery_address,
        "telephone": order.telephone,
        "payment_method": order.payment_method,
        "email": order.email,
        "name": order.name,
        "items": [
            {
                "id": i.id,
                "article_number": i.article_number,
                "size": i.size,
                "quantity": i.quantity,
            }
            for i in order.items
        ],
    }


class OrderService:
    """
    Serwis odpowiedzialny za cykl zycia zlozonego zamowienia.

    PLACED -> CONFIRMED | CANCELLED, CONFIRMED -> FULFILLED | CANCELLED.
    Stan magazynu zdejmuje tylko checkout; potwierdzenie i realizacja go
    nie ruszaja, anulowanie oddaje pozycje na magazyn.
    """

    def __init__(self, db: Session, notification_service: Optional[NotificationService] = None):
        self.db = db
        self.repo = OrderRepo(db)
        self.inventory = InventoryLedger(db)
        self.notification_service = notification_service or NotificationService()

    # =====================================================
    # QUERY
    # =====================================================
    def get_order(self, order_id: int, user_id: Optional[int] = None) -> Dict[str, Any]:
        """Use Case: pobranie zamowienia. user_id=None -> admin (bez sprawdzania wlasciciela)."""
        order = self.repo.get_order(order_id)

        if not order or (user_id is not None and order.status == int(OrderStatus.CART)):
            raise NotFound(f"Order {order_id} not found")

        if user_id is not None and order.user_id != user_id:
            raise Forbidden("Order belongs to another user")

        return order_view(order)

    def list_orders(self, user_id: int) -> List[Dict[str, Any]]:
        """Historia zamowien usera (bez koszyka)."""
        return [order_view(o) for o in self.repo.list_by_user(user_id)]

    def list_all_orders(self, status: Optional[OrderStatus] = None) -> List[Dict[str, Any]]:
        return [order_view(o) for o in self.repo.list_all(status)]

    # =====================================================
    # COMMANDS
    # =====================================================
    def change_status(self, order_id: int, target: OrderStatus) -> Dict[str, Any]:
        target = OrderStatus(target)

        try:
            order = self.repo.get_order(order_id, for_update=True)
            if not order:
                raise NotFound(f"Order {order_id} not found")

            current = OrderStatus(order.status)
            ensure_transition(current, target)

            if target == OrderStatus.CANCELLED and current in STOCK_HOLDING:
                # zwrot na magazyn, stala kolejnosc blokad
                for item in sorted(order.items, key=lambda i: (i.article_number, i.size)):
                    self.inventory.restock(item.article_number, item.size, item.quantity)

            order.status = int(target)
            order.last_updated = datetime.now(timezone.utc)
            self.repo.commit()

        except (IntegrityError, OperationalError) as e:
            self.repo.rollback()
            logger.error(f"Status change of order {order_id} failed on database error: {e}")
            raise Conflict() from e
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Order {order_id}: {current.name} -> {target.name}")
        notify_after_commit(
            self.notification_service, order_id, target.name, user_id=order.user_id, email=order.email
        )
        return order_view(order)

    def confirm_order(self, order_id: int) -> Dict[str, Any]:
        return self.change_status(order_id, OrderStatus.CONFIRMED)

    def fulfill_order(self, order_id: int) -> Dict[str, Any]:
        return self.change_status(order_id, OrderStatus.FULFILLED)

    def cancel_order(self, order_id: int) -> Dict[str, Any]:
        return self.change_status(order_id, OrderStatus.CANCELLED)

    def update_shipping(
        self,
        order_id: int,
        delivery_address: Optional[str] = None,
        telephone: Optional[str] = None,
        payment_method: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Edycja danych dostawy przez admina (tylko zlozone zamowienia)."""
        try:
            order = self.repo.get_order(order_id, for_update=True)
            if not order:
                raise NotFound(f"Order {order_id} not found")

            if OrderStatus(order.status) == OrderStatus.CART:
                raise InvalidTransition(
                    OrderStatus.CART.name,
                    OrderStatus.CART.name,
                    "Shipping details are set at checkout",
                )

            if delivery_address is not None:
                order.delivery_address = delivery_address
            if telephone is not None:
                order.telephone = telephone
            if payment_method is not None:
                order.payment_method = payment_method
            order.last_updated = datetime.now(timezone.utc)

            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Order {order_id}: shipping details updated")
        return order_view(order)

    def remove_line(self, order_id: int, line_id: int) -> Dict[str, Any]:
        """
        Usuniecie pozycji przez admina.
        Koszyk: ostatnia pozycja usuwa caly naglowek.
        Zlozone/potwierdzone: pozycja wraca na magazyn, zamowienie zostaje.
        """
        order_deleted = False
        try:
            order = self.repo.get_order(order_id, for_update=True)
            if not order:
                raise NotFound(f"Order {order_id} not found")

            item = next((i for i in order.items if i.id == line_id), None)
            if item is None:
                raise NotFound(f"Line {line_id} not found in order {order_id}")

            status = OrderStatus(order.status)
            if status in (OrderStatus.FULFILLED, OrderStatus.CANCELLED):
                raise InvalidTransition(status.name, status.name, f"Order {order_id} is closed")

            if status in STOCK_HOLDING:
                self.inventory.restock(item.article_number, item.size, item.quantity)

            order.items.remove(item)
            self.db.flush()

            if status == OrderStatus.CART and not order.items:
                self.repo.delete_order(order)
                order_deleted = True
            else:
                order.last_updated = datetime.now(timezone.utc)

            self.repo.commit()

        except (IntegrityError, OperationalError) as e:
            self.repo.rollback()
            logger.error(f"Removing line {line_id} of order {order_id} failed: {e}")
            raise Conflict() from e
        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Order {order_id}: line {line_id} removed" + (", order deleted" if order_deleted else ""))
        if order_deleted:
            return {"order_id": order_id, "deleted": True, "order": None}
        return {"order_id": order_id, "deleted": False, "order": order_view(order)}

    def get_state(self, order_id: int):
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFound(f"Order {order_id} not found")
        return to_state(order)
