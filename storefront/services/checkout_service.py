# storefront/services/checkout_service.py
from datetime import datetime, timezone
from typing import Any, Dict, List, MutableMapping, Optional

import requests
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.errors import (
    Conflict,
    EmptyCart,
    NotFound,
    InvalidRequest,
    VerificationFailed,
)
from storefront.domain.order_state import GuestContact, OrderStatus, Shipping
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.services.guest_cart_service import CART_KEY, read_session_lines
from storefront.services.inventory import InventoryLedger
from storefront.services.notification_service import NotificationService, notify_after_commit
from storefront.services.verifier_client import VerifierClient
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def _merge_lines(lines) -> List[Dict[str, Any]]:
    """Sumuje powtorzone (article, size) i sortuje - stala kolejnosc blokad wierszy."""
    merged: Dict[tuple, int] = {}
    for line in lines:
        key = (line["article_number"], line["size"])
        merged[key] = merged.get(key, 0) + line["quantity"]

    return [
        {"article_number": a, "size": s, "quantity": q}
        for (a, s), q in sorted(merged.items())
    ]


class CheckoutService:
    """
    Use Case: zamiana koszyka w zlozone zamowienie.

    Jedna transakcja: sprawdzenie stanu kazdej pozycji, zdjecie stanu,
    zmiana statusu CART -> PLACED (albo nowy wiersz dla goscia).
    Jakikolwiek blad = rollback calosci, koszyk zostaje bez zmian.
    Stan magazynu zdejmowany jest tylko tutaj.
    """

    def __init__(
        self,
        db: Session,
        verifier: Optional[VerifierClient] = None,
        notification_service: Optional[NotificationService] = None,
    ):
        self.db = db
        self.carts = CartRepo(db)
        self.orders = OrderRepo(db)
        self.inventory = InventoryLedger(db)
        self.verifier = verifier or VerifierClient()
        self.notification_service = notification_service or NotificationService()

    def checkout(
        self,
        user_id: Optional[int],
        shipping: Shipping,
        contact: Optional[GuestContact] = None,
        session: Optional[MutableMapping] = None,
        captcha_token: Optional[str] = None,
        remote_ip: Optional[str] = None,
    ) -> Dict[str, Any]:
        if user_id is not None:
            return self.checkout_user(user_id, shipping)
        return self.checkout_guest(session, shipping, contact, captcha_token, remote_ip)

    def checkout_user(self, user_id: int, shipping: Shipping) -> Dict[str, Any]:
        try:
            # pusty albo brakujacy koszyk odrzucamy zanim cokolwiek zablokujemy
            cart = self.carts.get_active_cart_by_user(user_id)
            if not cart:
                raise NotFound("No active cart")
            if self.carts.count_items(cart.id) == 0:
                raise EmptyCart()

            # blokada naglowka - drugi rownolegly checkout czeka, potem nie znajdzie koszyka
            cart = self.carts.get_active_cart_by_user(user_id, for_update=True)
            if not cart:
                raise NotFound("No active cart")

            lines = _merge_lines(
                {"article_number": i.article_number, "size": i.size, "quantity": i.quantity}
                for i in self.carts.get_cart_items(cart.id)
            )
            if not lines:
                raise EmptyCart()

            self._deduct(lines)

            cart.status = int(OrderStatus.PLACED)
            cart.delivery_address = shipping.delivery_address
            cart.telephone = shipping.telephone
            cart.payment_method = shipping.payment_method
            cart.last_updated = datetime.now(timezone.utc)

            order_id = cart.id
            self.orders.commit()

        except (IntegrityError, OperationalError) as e:
            self.orders.rollback()
            logger.error(f"Checkout of user {user_id} failed on database error: {e}")
            raise Conflict() from e
        except Exception:
            self.orders.rollback()
            raise

        logger.info(f"Order {order_id} placed by user {user_id} ({len(lines)} lines)")
        notify_after_commit(
            self.notification_service, order_id, OrderStatus.PLACED.name, user_id=user_id
        )
        return {"order_id": order_id, "message": "Order placed"}

    def checkout_guest(
        self,
        session: Optional[MutableMapping],
        shipping: Shipping,
        contact: Optional[GuestContact],
        captcha_token: Optional[str] = None,
        remote_ip: Optional[str] = None,
    ) -> Dict[str, Any]:
        if session is None:
            raise InvalidRequest("Guest checkout requires a session")
        if contact is None:
            raise InvalidRequest("Guest checkout requires email and name")

        lines = _merge_lines(read_session_lines(session))
        if not lines:
            raise EmptyCart()

        # weryfikacja anty-bot zanim dotkniemy bazy
        try:
            passed = self.verifier.verify(captcha_token, remote_ip)
        except requests.RequestException as e:
            logger.error(f"Bot verification service unavailable: {e}")
            raise VerificationFailed("Bot verification service unavailable") from e
        if not passed:
            raise VerificationFailed()

        now = datetime.now(timezone.utc)
        try:
            order = self.orders.create_order(
                OrderModel(
                    user_id=None,
                    status=int(OrderStatus.PLACED),
                    created_at=now,
                    last_updated=now,
                    delivery_address=shipping.delivery_address,
                    telephone=shipping.telephone,
                    payment_method=shipping.payment_method,
                    email=contact.email,
                    name=contact.name,
                )
            )

            self._deduct(lines)

            for line in lines:
                self.orders.add_item(
                    OrderItemModel(
                        order_id=order.id,
                        article_number=line["article_number"],
                        size=line["size"],
                        quantity=line["quantity"],
                    )
                )

            order_id = order.id
            self.orders.commit()

        except (IntegrityError, OperationalError) as e:
            self.orders.rollback()
            logger.error(f"Guest checkout failed on database error: {e}")
            raise Conflict() from e
        except Exception:
            self.orders.rollback()
            raise

        # sesje czyscimy dopiero po commit
        session[CART_KEY] = []

        logger.info(f"Order {order_id} placed by guest {contact.email} ({len(lines)} lines)")
        notify_after_commit(
            self.notification_service, order_id, OrderStatus.PLACED.name, email=contact.email
        )
        return {"order_id": order_id, "message": "Order placed"}

    def _deduct(self, lines: List[Dict[str, Any]]) -> None:
        for line in lines:
            self.inventory.deduct(line["article_number"], line["size"], line["quantity"])
