# storefront/repos/favorite_repo.py
from sqlalchemy import select, func
from sqlalchemy.orm import Session

from storefront.data.models.favorite import FavoriteModel


class FavoriteRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int, article_number: str) -> FavoriteModel | None:
        return self.db.execute(
            select(FavoriteModel).where(
                FavoriteModel.user_id == user_id,
                FavoriteModel.article_number == article_number,
            )
        ).scalar_one_or_none()

    def list_articles(self, user_id: int) -> list[str]:
        return list(
            self.db.execute(
                select(FavoriteModel.article_number)
                .where(FavoriteModel.user_id == user_id)
                .order_by(FavoriteModel.id)
            ).scalars()
        )

    def count(self, user_id: int) -> int:
        return self.db.execute(
            select(func.count(FavoriteModel.id)).where(FavoriteModel.user_id == user_id)
        ).scalar_one()

    def add(self, favorite: FavoriteModel) -> FavoriteModel:
        self.db.add(favorite)
        self.db.flush()
        return favorite

    def delete(self, favorite: FavoriteModel) -> None:
        self.db.delete(favorite)
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
