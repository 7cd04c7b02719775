# storefront/repos/cart_repo.py
from datetime import datetime, timezone

from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.order_state import OrderStatus


class CartRepo:
    """Dostep do koszyka, czyli wiersza orders ze statusem CART."""

    def __init__(self, db: Session):
        self.db = db

    def get_active_cart_by_user(self, user_id: int, for_update: bool = False) -> OrderModel | None:
        stmt = select(OrderModel).where(
            OrderModel.user_id == user_id,
            OrderModel.status == int(OrderStatus.CART),
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def create_cart(self, user_id: int) -> OrderModel | None:
        """
        INSERT w SAVEPOINT. Gdy unikalny indeks (user_id, status=CART) odrzuci
        wiersz, bo rownolegle zapytanie juz utworzylo koszyk, zwraca None.
        """
        now = datetime.now(timezone.utc)
        cart = OrderModel(
            user_id=user_id,
            status=int(OrderStatus.CART),
            created_at=now,
            last_updated=now,
        )
        try:
            with self.db.begin_nested():
                self.db.add(cart)
        except IntegrityError:
            return None
        return cart

    def get_cart_items(self, order_id: int) -> list[OrderItemModel]:
        return list(
            self.db.execute(
                select(OrderItemModel)
                .where(OrderItemModel.order_id == order_id)
                .order_by(OrderItemModel.id)
            ).scalars()
        )

    def get_cart_item(self, order_id: int, article_number: str, size: str) -> OrderItemModel | None:
        return self.db.execute(
            select(OrderItemModel).where(
                OrderItemModel.order_id == order_id,
                OrderItemModel.article_number == article_number,
                OrderItemModel.size == size,
            )
        ).scalar_one_or_none()

    def get_item(self, line_id: int) -> OrderItemModel | None:
        return self.db.get(OrderItemModel, line_id)

    def add_cart_item(self, item: OrderItemModel) -> OrderItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_cart_item(self, item: OrderItemModel) -> None:
        self.db.delete(item)
        self.db.flush()

    def count_items(self, order_id: int) -> int:
        return self.db.execute(
            select(func.count(OrderItemModel.id)).where(OrderItemModel.order_id == order_id)
        ).scalar_one()

    def delete_cart(self, cart: OrderModel) -> None:
        self.db.delete(cart)
        self.db.flush()

    def touch(self, cart: OrderModel) -> None:
        cart.last_updated = datetime.now(timezone.utc)
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
