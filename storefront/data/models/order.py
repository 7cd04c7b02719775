from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Index
from sqlalchemy.orm import relationship

from storefront.data.database import Base
from storefront.domain.order_state import OrderStatus


def _now():
    return datetime.now(timezone.utc)


class OrderModel(Base):
    """
    Wiersz zamowienia. Dopoki status == CART jest to aktywny koszyk usera,
    po checkout staje sie zlozonym zamowieniem (adres, telefon, platnosc).
    """

    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)

    status = Column(Integer, nullable=False, default=int(OrderStatus.CART))
    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    last_updated = Column(DateTime(timezone=True), nullable=False, default=_now)

    delivery_address = Column(String, nullable=True)
    telephone = Column(String, nullable=True)
    payment_method = Column(String, nullable=True)

    # tylko dla gosci
    email = Column(String, nullable=True)
    name = Column(String, nullable=True)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )

    __table_args__ = (
        # jeden aktywny koszyk na usera
        Index(
            "uq_orders_active_cart",
            "user_id",
            unique=True,
            postgresql_where=(status == int(OrderStatus.CART)),
            sqlite_where=(status == int(OrderStatus.CART)),
        ),
    )
