# storefront/repos/order_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.domain.order_state import OrderStatus


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def add_item(self, item: OrderItemModel) -> OrderItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def get_order(self, order_id: int, for_update: bool = False) -> OrderModel | None:
        if not for_update:
            return self.db.get(OrderModel, order_id)
        return self.db.execute(
            select(OrderModel).where(OrderModel.id == order_id).with_for_update()
        ).scalar_one_or_none()

    def list_by_user(self, user_id: int) -> list[OrderModel]:
        # historia = wszystko poza koszykiem
        return list(
            self.db.execute(
                select(OrderModel)
                .where(
                    OrderModel.user_id == user_id,
                    OrderModel.status != int(OrderStatus.CART),
                )
                .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            ).scalars()
        )

    def list_all(self, status: OrderStatus | None = None) -> list[OrderModel]:
        stmt = select(OrderModel).order_by(OrderModel.id.desc())
        if status is not None:
            stmt = stmt.where(OrderModel.status == int(status))
        return list(self.db.execute(stmt).scalars())

    def delete_order(self, order: OrderModel) -> None:
        self.db.delete(order)
        self.db.flush()

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
