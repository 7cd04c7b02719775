# storefront/services/favorite_service.py
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.favorite import FavoriteModel
from storefront.domain.errors import Conflict, NotFound
from storefront.repos.favorite_repo import FavoriteRepo
from storefront.repos.product_repo import ProductRepo
from storefront.repos.user_repo import UserRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class FavoriteService:
    def __init__(self, db: Session):
        self.repo = FavoriteRepo(db)
        self.products = ProductRepo(db)
        self.users = UserRepo(db)

    def list(self, user_id: int) -> List[str]:
        return self.repo.list_articles(user_id)

    def count(self, user_id: int) -> int:
        return self.repo.count(user_id)

    def add(self, user_id: int, article_number: str) -> List[str]:
        if self.repo.get(user_id, article_number):
            raise Conflict(f"{article_number} is already a favorite")
        if self.users.get_user(user_id) is None:
            raise NotFound(f"User {user_id} not found")
        if self.products.get_product(article_number) is None:
            raise NotFound(f"Product {article_number} not found")

        try:
            self.repo.add(FavoriteModel(user_id=user_id, article_number=article_number))
            self.repo.commit()
        except IntegrityError as e:
            # rownolegle dodanie tego samego - unikalny indeks
            self.repo.rollback()
            raise Conflict(f"{article_number} is already a favorite") from e

        logger.info(f"User {user_id} added favorite {article_number}")
        return self.list(user_id)

    def remove(self, user_id: int, article_number: str) -> List[str]:
        favorite = self.repo.get(user_id, article_number)
        if not favorite:
            raise NotFound(f"{article_number} is not a favorite")

        self.repo.delete(favorite)
        self.repo.commit()

        logger.info(f"User {user_id} removed favorite {article_number}")
        return self.list(user_id)
