# storefront/services/product_service.py
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.domain.errors import Conflict, NotFound
from storefront.repos.product_repo import ProductRepo
from storefront.services.inventory import InventoryLedger
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


def product_view(product) -> Dict[str, Any]:
    return {
        "article_number": product.article_number,
        "name": product.name,
        "price": product.price,
        "discount": product.discount,
        "description": product.description,
        "image_urls": list(product.image_urls or []),
        "sizes": [{"size": s.size, "stock": s.stock} for s in product.sizes],
    }


class ProductService:
    """Odczyt katalogu (tylko aktywne produkty) i reczna zmiana stanu przez admina."""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ProductRepo(db)
        self.inventory = InventoryLedger(db)

    def list_products(self) -> List[Dict[str, Any]]:
        return [product_view(p) for p in self.repo.list_active()]

    def get_product(self, article_number: str) -> Dict[str, Any]:
        product = self.repo.get_product(article_number)
        if not product or not product.is_active:
            raise NotFound(f"Product {article_number} not found")
        return product_view(product)

    def set_stock(self, article_number: str, size: str, stock: int) -> Dict[str, Any]:
        if self.repo.get_product(article_number) is None:
            raise NotFound(f"Product {article_number} not found")

        try:
            row = self.inventory.set_stock(article_number, size, stock)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict() from e
        except Exception:
            self.db.rollback()
            raise

        return {"size": row.size, "stock": row.stock}
