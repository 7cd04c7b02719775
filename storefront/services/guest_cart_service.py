# storefront/services/guest_cart_service.py
from typing import Any, Dict, List, MutableMapping

from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from storefront.data.models.favorite import FavoriteModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.errors import Conflict, InvalidQuantity, NotFound, OutOfStock
from storefront.repos.cart_repo import CartRepo
from storefront.repos.favorite_repo import FavoriteRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.cart_service import CartService, describe_lines
from storefront.services.inventory import InventoryLedger
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# klucze w sesji; wartosci musza byc JSON-owalne (cookie sesji)
CART_KEY = "cart"
FAVORITES_KEY = "favorites"


def read_session_lines(session: MutableMapping) -> List[Dict[str, Any]]:
    return [
        {
            "article_number": entry["articleNumber"],
            "size": entry["size"],
            "quantity": int(entry["quantity"]),
        }
        for entry in (session.get(CART_KEY) or [])
    ]


def _to_session(lines: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {"articleNumber": l["article_number"], "size": l["size"], "quantity": l["quantity"]}
        for l in lines
    ]


class GuestCartService:
    """
    Koszyk i ulubione goscia trzymane w sesji (bez wiersza w bazie).
    Te same reguly co CartService; po zalogowaniu migrate() przenosi
    wszystko do bazy i czysci sesje.
    """

    def __init__(self, db: Session, session: MutableMapping):
        self.db = db
        self.session = session
        self.products = ProductRepo(db)
        self.inventory = InventoryLedger(db)

    def _lines(self) -> List[Dict[str, Any]]:
        return read_session_lines(self.session)

    def _save(self, lines: List[Dict[str, Any]]) -> None:
        self.session[CART_KEY] = _to_session(lines)

    def _find(self, lines, article_number: str, size: str) -> int:
        for index, line in enumerate(lines):
            if line["article_number"] == article_number and line["size"] == size:
                return index
        return -1

    #query
    def list_items(self) -> Dict[str, Any]:
        items, total = describe_lines(self.products, self._lines())
        return {"order_id": None, "items": items, "total": total, "last_updated": None}

    def count_items(self) -> int:
        return len(self._lines())

    #commands
    def add_item(self, article_number: str, size: str, quantity: int) -> Dict[str, Any]:
        if quantity <= 0:
            raise InvalidQuantity()

        available = self.inventory.available(article_number, size)
        lines = self._lines()
        index = self._find(lines, article_number, size)
        requested = quantity + (lines[index]["quantity"] if index != -1 else 0)

        if requested > available:
            raise OutOfStock(f"Only {available} of {article_number} size {size} in stock")

        if index != -1:
            lines[index]["quantity"] = requested
            line = lines[index]
        else:
            line = {"article_number": article_number, "size": size, "quantity": quantity}
            lines.append(line)

        self._save(lines)
        logger.info(f"Guest cart: {article_number}/{size} now x{line['quantity']}")
        return line

    def update_item(self, article_number: str, size: str, quantity: int, new_size: str | None = None) -> Dict[str, Any]:
        if quantity <= 0:
            raise InvalidQuantity()

        lines = self._lines()
        index = self._find(lines, article_number, size)
        if index == -1:
            raise NotFound(f"{article_number} size {size} is not in the cart")

        target_size = new_size or size
        if target_size != size:
            self.inventory.get_size(article_number, target_size)

        other = self._find(lines, article_number, target_size)
        if other != -1 and other != index:
            lines[other]["quantity"] += quantity
            line = lines[other]
            del lines[index]
        else:
            lines[index]["size"] = target_size
            lines[index]["quantity"] = quantity
            line = lines[index]

        self._save(lines)
        return line

    def remove_item(self, article_number: str, size: str) -> None:
        lines = self._lines()
        index = self._find(lines, article_number, size)
        if index == -1:
            raise NotFound(f"{article_number} size {size} is not in the cart")

        del lines[index]
        self._save(lines)

    def clear(self) -> None:
        self.session[CART_KEY] = []
        self.session[FAVORITES_KEY] = []

    # ulubione
    def list_favorites(self) -> List[str]:
        return list(self.session.get(FAVORITES_KEY) or [])

    def add_favorite(self, article_number: str) -> List[str]:
        favorites = self.list_favorites()
        if article_number in favorites:
            raise Conflict(f"{article_number} is already a favorite")
        if self.products.get_product(article_number) is None:
            raise NotFound(f"Product {article_number} not found")

        favorites.append(article_number)
        self.session[FAVORITES_KEY] = favorites
        return favorites

    def remove_favorite(self, article_number: str) -> List[str]:
        favorites = self.list_favorites()
        if article_number not in favorites:
            raise NotFound(f"{article_number} is not a favorite")

        favorites.remove(article_number)
        self.session[FAVORITES_KEY] = favorites
        return favorites

    def migrate(self, user_id: int) -> Dict[str, int]:
        """
        Use Case: przeniesienie sesji goscia do bazy po logowaniu/rejestracji.

        - ulubione: dodajemy tylko te, ktorych user jeszcze nie ma
        - koszyk: pozycje laczone (suma ilosci) z aktywnym koszykiem usera
        Sesja czyszczona dopiero po udanym commit.
        """
        lines = self._lines()
        favorites = self.list_favorites()
        if not lines and not favorites:
            return {"items": 0, "favorites": 0}

        cart_repo = CartRepo(self.db)
        favorite_repo = FavoriteRepo(self.db)
        added_favorites = 0

        try:
            for article_number in favorites:
                if favorite_repo.get(user_id, article_number) is None:
                    favorite_repo.add(FavoriteModel(user_id=user_id, article_number=article_number))
                    added_favorites += 1

            if lines:
                cart = CartService(self.db).ensure_active_cart(user_id)
                for line in lines:
                    existing = cart_repo.get_cart_item(cart.id, line["article_number"], line["size"])
                    if existing:
                        existing.quantity += line["quantity"]
                    else:
                        cart_repo.add_cart_item(
                            OrderItemModel(
                                order_id=cart.id,
                                article_number=line["article_number"],
                                size=line["size"],
                                quantity=line["quantity"],
                            )
                        )
                cart_repo.touch(cart)

            cart_repo.commit()

        except (IntegrityError, OperationalError) as e:
            cart_repo.rollback()
            logger.error(f"Migrating guest session to user {user_id} failed: {e}")
            raise Conflict() from e
        except Exception:
            cart_repo.rollback()
            raise

        self.clear()

        logger.info(
            f"Migrated guest session to user {user_id}: "
            f"{len(lines)} cart lines, {added_favorites} favorites"
        )
        return {"items": len(lines), "favorites": added_favorites}
