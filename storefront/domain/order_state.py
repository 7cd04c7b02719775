# storefront/domain/order_state.py
"""
Stan zamowienia jako typ sumy zamiast "wiersza ze statusem":

- CartState         -> aktywny koszyk (mutowalny, jeden na usera)
- PlacedOrderState  -> zlozone zamowienie (adres/platnosc ustalone przy checkout)

Oba warianty dziela ta sama liste pozycji (LineItem).
"""
from datetime import datetime
from enum import IntEnum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict

from storefront.domain.errors import InvalidTransition


class OrderStatus(IntEnum):
    CART = 1
    PLACED = 2
    CONFIRMED = 3
    FULFILLED = 4
    CANCELLED = 5


# CART -> PLACED tylko przez checkout, nie przez change_status
TRANSITIONS = {
    OrderStatus.CART: frozenset(),
    OrderStatus.PLACED: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.FULFILLED, OrderStatus.CANCELLED}),
    OrderStatus.FULFILLED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

# statusy, dla ktorych stan magazynu jest juz pomniejszony o pozycje
STOCK_HOLDING = frozenset({OrderStatus.PLACED, OrderStatus.CONFIRMED})


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in TRANSITIONS[OrderStatus(current)]


def ensure_transition(current: OrderStatus, target: OrderStatus) -> None:
    current, target = OrderStatus(current), OrderStatus(target)
    if not can_transition(current, target):
        raise InvalidTransition(current.name, target.name)


class LineItem(BaseModel):
    model_config = ConfigDict(frozen=True, from_attributes=True)

    id: Optional[int] = None
    article_number: str
    size: str
    quantity: int


class Shipping(BaseModel):
    model_config = ConfigDict(frozen=True)

    delivery_address: Optional[str] = None
    telephone: Optional[str] = None
    payment_method: Optional[str] = None


class GuestContact(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str
    name: str


class CartState(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: int
    user_id: Optional[int]
    last_updated: datetime
    items: List[LineItem]

    @property
    def status(self) -> OrderStatus:
        return OrderStatus.CART


class PlacedOrderState(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: int
    user_id: Optional[int]
    status: OrderStatus
    created_at: datetime
    shipping: Shipping
    contact: Optional[GuestContact] = None
    items: List[LineItem]


OrderState = Union[CartState, PlacedOrderState]


def to_state(order) -> OrderState:
    """Mapuje wiersz OrderModel na odpowiedni wariant."""
    items = [LineItem.model_validate(i) for i in order.items]

    if OrderStatus(order.status) == OrderStatus.CART:
        return CartState(
            order_id=order.id,
            user_id=order.user_id,
            last_updated=order.last_updated,
            items=items,
        )

    contact = None
    if order.email and order.name:
        contact = GuestContact(email=order.email, name=order.name)

    return PlacedOrderState(
        order_id=order.id,
        user_id=order.user_id,
        status=OrderStatus(order.status),
        created_at=order.created_at,
        shipping=Shipping(
            delivery_address=order.delivery_address,
            telephone=order.telephone,
            payment_method=order.payment_method,
        ),
        contact=contact,
        items=items,
    )
