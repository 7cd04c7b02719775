# storefront/services/inventory.py
from sqlalchemy.orm import Session

from storefront.data.models.product_size import ProductSizeModel
from storefront.domain.errors import InsufficientStock, InvalidQuantity, NotFound
from storefront.repos.inventory_repo import InventoryRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class InventoryLedger:
    """
    Jedyne miejsce, ktore zmienia product_sizes.stock.

    Nie robi commit - transakcja nalezy do wywolujacego (checkout,
    zmiana statusu, admin). Kazda zmiana dotyczy jednego wiersza
    (article_number, size), nigdy calej tabeli.
    """

    def __init__(self, db: Session):
        self.repo = InventoryRepo(db)

    def get_size(self, article_number: str, size: str) -> ProductSizeModel:
        row = self.repo.get_size(article_number, size)
        if row is None:
            raise NotFound(f"Size {size} of product {article_number} not found")
        return row

    def available(self, article_number: str, size: str) -> int:
        return self.get_size(article_number, size).stock

    def deduct(self, article_number: str, size: str, quantity: int) -> None:
        if quantity <= 0:
            raise InvalidQuantity()

        # blokada wiersza, potem warunkowy UPDATE (stock >= q) - nigdy ponizej zera
        row = self.repo.lock_size(article_number, size)
        if row is None:
            raise NotFound(f"Size {size} of product {article_number} not found")

        if self.repo.decrement_if_available(article_number, size, quantity) == 0:
            raise InsufficientStock(article_number, size)

        logger.info(f"Stock {article_number}/{size} -{quantity}")

    def restock(self, article_number: str, size: str, quantity: int) -> None:
        if quantity <= 0:
            raise InvalidQuantity()

        if self.repo.increment(article_number, size, quantity) == 0:
            # rozmiar usuniety w miedzyczasie - odtwarzamy wiersz
            logger.warning(
                f"Size {article_number}/{size} missing on restock, recreating with stock {quantity}"
            )
            self.repo.add_size(
                ProductSizeModel(article_number=article_number, size=size, stock=quantity)
            )
            return

        logger.info(f"Stock {article_number}/{size} +{quantity}")

    def set_stock(self, article_number: str, size: str, stock: int) -> ProductSizeModel:
        """Reczna inwentaryzacja (admin)."""
        if stock < 0:
            raise InvalidQuantity("Stock cannot be negative")

        row = self.repo.lock_size(article_number, size)
        if row is None:
            row = self.repo.add_size(
                ProductSizeModel(article_number=article_number, size=size, stock=stock)
            )
        else:
            row.stock = stock
            self.repo.db.flush()

        logger.info(f"Stock {article_number}/{size} set to {stock}")
        return row
