# storefront/repos/inventory_repo.py
from sqlalchemy import select, update
from sqlalchemy.orm import Session

from storefront.data.models.product_size import ProductSizeModel


class InventoryRepo:
    def __init__(self, db: Session):
        self.db = db

    def _where(self, article_number: str, size: str):
        return (
            ProductSizeModel.article_number == article_number,
            ProductSizeModel.size == size,
        )

    def get_size(self, article_number: str, size: str) -> ProductSizeModel | None:
        return self.db.execute(
            select(ProductSizeModel).where(*self._where(article_number, size))
        ).scalar_one_or_none()

    def lock_size(self, article_number: str, size: str) -> ProductSizeModel | None:
        # SELECT ... FOR UPDATE - blokada tylko tego wiersza
        return self.db.execute(
            select(ProductSizeModel)
            .where(*self._where(article_number, size))
            .with_for_update()
        ).scalar_one_or_none()

    def decrement_if_available(self, article_number: str, size: str, quantity: int) -> int:
        # UPDATE ... SET stock = stock - q WHERE ... AND stock >= q
        result = self.db.execute(
            update(ProductSizeModel)
            .where(
                *self._where(article_number, size),
                ProductSizeModel.stock >= quantity,
            )
            .values(stock=ProductSizeModel.stock - quantity)
        )
        return result.rowcount

    def increment(self, article_number: str, size: str, quantity: int) -> int:
        result = self.db.execute(
            update(ProductSizeModel)
            .where(*self._where(article_number, size))
            .values(stock=ProductSizeModel.stock + quantity)
        )
        return result.rowcount

    def add_size(self, row: ProductSizeModel) -> ProductSizeModel:
        self.db.add(row)
        self.db.flush()
        return row
