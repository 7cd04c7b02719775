# storefront/repos/product_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_product(self, article_number: str) -> ProductModel | None:
        return self.db.get(ProductModel, article_number)

    def get_products(self, article_numbers) -> dict[str, ProductModel]:
        numbers = set(article_numbers)
        if not numbers:
            return {}
        rows = self.db.execute(
            select(ProductModel).where(ProductModel.article_number.in_(numbers))
        ).scalars()
        return {p.article_number: p for p in rows}

    def list_active(self) -> list[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel)
                .where(ProductModel.is_active.is_(True))
                .options(selectinload(ProductModel.sizes))
                .order_by(ProductModel.article_number)
            ).scalars()
        )
