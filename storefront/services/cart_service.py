# storefront/services/cart_service.py
from typing import Any, Dict, Iterable, List, Tuple

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.errors import (
    Conflict,
    Forbidden,
    InvalidQuantity,
    InvalidTransition,
    NotFound,
    OutOfStock,
)
from storefront.domain.order_state import CartState, LineItem, OrderStatus, to_state
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.user_repo import UserRepo
from storefront.services.inventory import InventoryLedger
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def unit_price(product) -> int:
    """Cena po rabacie (discount w procentach), w groszach."""
    return product.price * (100 - (product.discount or 0)) // 100


def describe_lines(products: ProductRepo, lines: Iterable[Dict[str, Any]]) -> Tuple[List[Dict[str, Any]], int]:
    """Dokleja dane produktu do pozycji koszyka i liczy total."""
    lines = list(lines)
    catalog = products.get_products(line["article_number"] for line in lines)

    items = []
    total = 0
    for line in lines:
        product = catalog.get(line["article_number"])
        item = {
            "id": line.get("id"),
            "article_number": line["article_number"],
            "size": line["size"],
            "quantity": line["quantity"],
            "name": product.name if product else "Unknown product",
            "price": product.price if product else 0,
            "discount": product.discount if product else 0,
            "image_urls": list(product.image_urls or []) if product else [],
        }
        if product:
            total += unit_price(product) * line["quantity"]
        items.append(item)

    return items, total


class CartService:
    """
    Koszyk zalogowanego usera = wiersz orders ze statusem CART.

    commands (add, update, remove, get_or_create) modyfikuja stan,
    query (get_cart, count_items) tylko odczyt.
    Stan magazynu sprawdzamy przy dodawaniu, ale zdejmujemy dopiero przy checkout.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)
        self.inventory = InventoryLedger(db)

    #query - odczyt
    def get_cart(self, user_id: int) -> Dict[str, Any]:
        cart = self.repo.get_active_cart_by_user(user_id)

        if not cart:
            return {"order_id": None, "items": [], "total": 0, "last_updated": None}

        lines = [
            {
                "id": i.id,
                "article_number": i.article_number,
                "size": i.size,
                "quantity": i.quantity,
            }
            for i in self.repo.get_cart_items(cart.id)
        ]
        items, total = describe_lines(self.products, lines)

        return {
            "order_id": cart.id,
            "items": items,
            "total": total,
            "last_updated": cart.last_updated,
        }

    def count_items(self, user_id: int) -> int:
        # liczba pozycji, nie suma ilosci
        cart = self.repo.get_active_cart_by_user(user_id)
        if not cart:
            return 0
        return self.repo.count_items(cart.id)

    #commands
    def ensure_active_cart(self, user_id: int) -> OrderModel:
        """Get-or-create bez commit; do uzycia wewnatrz wiekszej transakcji."""
        cart = self.repo.get_active_cart_by_user(user_id)
        if cart:
            return cart

        # brak wiersza users to nie wyscig o koszyk - FK odrzucilby INSERT
        if self.users.get_user(user_id) is None:
            raise NotFound(f"User {user_id} not found")

        created = self.repo.create_cart(user_id)
        if created is not None:
            logger.info(f"Created cart {created.id} for user {user_id}")
            return created

        # rownolegle zapytanie utworzylo koszyk pierwsze - bierzemy jego
        cart = self.repo.get_active_cart_by_user(user_id)
        if cart is None:
            raise Conflict(f"Could not create cart for user {user_id}")

        logger.info(f"Cart for user {user_id} created concurrently, reusing {cart.id}")
        return cart

    def get_or_create_active_cart(self, user_id: int) -> CartState:
        try:
            cart = self.ensure_active_cart(user_id)
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        return to_state(cart)

    def add_item(self, user_id: int, article_number: str, size: str, quantity: int) -> LineItem:
        if quantity <= 0:
            raise InvalidQuantity()

        try:
            available = self.inventory.available(article_number, size)
            cart = self.ensure_active_cart(user_id)

            existing = self.repo.get_cart_item(cart.id, article_number, size)
            requested = quantity + (existing.quantity if existing else 0)

            if requested > available:
                raise OutOfStock(
                    f"Only {available} of {article_number} size {size} in stock"
                )

            if existing:
                logger.info(
                    f"{article_number}/{size} already in cart {cart.id}, quantity "
                    f"{existing.quantity} -> {requested}"
                )
                existing.quantity = requested
                item = existing
            else:
                logger.info(f"Adding {article_number}/{size} x{quantity} to cart {cart.id}")
                item = self.repo.add_cart_item(
                    OrderItemModel(
                        order_id=cart.id,
                        article_number=article_number,
                        size=size,
                        quantity=quantity,
                    )
                )

            self.repo.touch(cart)
            self.repo.commit()

        except (IntegrityError, OperationalError) as e:
            self.repo.rollback()
            logger.error(f"Database error while adding to cart of user {user_id}: {e}")
            raise Conflict() from e
        except Exception:
            self.repo.rollback()
            raise

        return LineItem.model_validate(item)

    def _owned_cart_line(self, user_id: int, line_id: int) -> OrderItemModel:
        item = self.repo.get_item(line_id)
        if not item:
            raise NotFound(f"Cart line {line_id} not found")

        order = item.order
        if order is None or order.user_id != user_id:
            raise Forbidden("Cart line belongs to another user")

        if OrderStatus(order.status) != OrderStatus.CART:
            raise InvalidTransition(
                OrderStatus(order.status).name,
                OrderStatus.CART.name,
                "Only lines of an active cart can be changed",
            )

        return item

    def update_item(self, user_id: int, line_id: int, size: str, quantity: int) -> LineItem:
        # bez ponownego sprawdzania stanu - rozstrzyga checkout
        if quantity <= 0:
            raise InvalidQuantity()

        try:
            item = self._owned_cart_line(user_id, line_id)
            cart = item.order
            self.inventory.get_size(item.article_number, size)

            other = self.repo.get_cart_item(cart.id, item.article_number, size)
            if other is not None and other.id != item.id:
                # zmiana rozmiaru na taki, ktory juz jest w koszyku - laczymy pozycje
                other.quantity += quantity
                self.repo.delete_cart_item(item)
                item = other
            else:
                item.size = size
                item.quantity = quantity

            self.repo.touch(cart)
            self.repo.commit()

        except Exception:
            self.repo.rollback()
            raise

        logger.info(f"Cart line {item.id} of user {user_id} set to {item.size} x{item.quantity}")
        return LineItem.model_validate(item)

    def remove_item(self, user_id: int, line_id: int) -> Dict[str, Any]:
        try:
            item = self._owned_cart_line(user_id, line_id)
            cart = item.order

            self.repo.delete_cart_item(item)

            # pusty koszyk nie ma sensu - usuwamy naglowek
            cart_deleted = self.repo.count_items(cart.id) == 0
            if cart_deleted:
                self.repo.delete_cart(cart)
            else:
                self.repo.touch(cart)

            self.repo.commit()

        except Exception:
            self.repo.rollback()
            raise

        logger.info(
            f"Removed cart line {line_id} of user {user_id}"
            + (", cart deleted" if cart_deleted else "")
        )
        return {"line_id": line_id, "cart_deleted": cart_deleted}
