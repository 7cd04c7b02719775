# storefront/api/routers/cart.py
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import current_user_id, guest_session, require_user, to_http
from storefront.data.database import get_db
from storefront.domain.errors import Forbidden, ShopError
from storefront.domain.schemas import (
    CartItemIn,
    CartItemUpdate,
    CartOut,
    CountOut,
    LineItemOut,
    MessageOut,
    SessionItemUpdate,
)
from storefront.services.cart_service import CartService
from storefront.services.guest_cart_service import GuestCartService

router = APIRouter(prefix="/cart", tags=["cart"])


@router.get("", response_model=CartOut)
def get_cart(
    user_id: Optional[int] = Depends(current_user_id),
    session: dict = Depends(guest_session),
    db: Session = Depends(get_db),
):
    if user_id is not None:
        return CartService(db).get_cart(user_id)
    return GuestCartService(db, session).list_items()


@router.get("/count", response_model=CountOut)
def count_items(
    user_id: Optional[int] = Depends(current_user_id),
    session: dict = Depends(guest_session),
    db: Session = Depends(get_db),
):
    if user_id is not None:
        return {"count": CartService(db).count_items(user_id)}
    return {"count": GuestCartService(db, session).count_items()}


@router.post("/items", response_model=LineItemOut, status_code=201)
def add_item(
    payload: CartItemIn,
    user_id: Optional[int] = Depends(current_user_id),
    session: dict = Depends(guest_session),
    db: Session = Depends(get_db),
):
    try:
        if user_id is not None:
            return CartService(db).add_item(
                user_id=user_id,
                article_number=payload.article_number,
                size=payload.size,
                quantity=payload.quantity,
            )
        return GuestCartService(db, session).add_item(
            payload.article_number, payload.size, payload.quantity
        )
    except ShopError as e:
        raise to_http(e)


@router.put("/items/{line_id}", response_model=LineItemOut)
def update_item(
    line_id: int,
    payload: CartItemUpdate,
    user_id: int = Depends(require_user),
    db: Session = Depends(get_db),
):
    try:
        return CartService(db).update_item(user_id, line_id, payload.size, payload.quantity)
    except ShopError as e:
        raise to_http(e)


@router.delete("/items/{line_id}", response_model=MessageOut)
def remove_item(
    line_id: int,
    user_id: int = Depends(require_user),
    db: Session = Depends(get_db),
):
    try:
        result = CartService(db).remove_item(user_id, line_id)
    except ShopError as e:
        raise to_http(e)

    if result["cart_deleted"]:
        return {"message": "Line removed, cart is now empty"}
    return {"message": "Line removed"}


@router.put("/session-items", response_model=LineItemOut)
def update_session_item(
    payload: SessionItemUpdate,
    user_id: Optional[int] = Depends(current_user_id),
    session: dict = Depends(guest_session),
    db: Session = Depends(get_db),
):
    try:
        if user_id is not None:
            raise Forbidden("Session cart is only available to guests")
        return GuestCartService(db, session).update_item(
            payload.article_number, payload.size, payload.quantity, payload.new_size
        )
    except ShopError as e:
        raise to_http(e)


@router.delete("/session-items/{article_number}/{size}", response_model=MessageOut)
def remove_session_item(
    article_number: str,
    size: str,
    user_id: Optional[int] = Depends(current_user_id),
    session: dict = Depends(guest_session),
    db: Session = Depends(get_db),
):
    try:
        if user_id is not None:
            raise Forbidden("Session cart is only available to guests")
        GuestCartService(db, session).remove_item(article_number, size)
    except ShopError as e:
        raise to_http(e)
    return {"message": "Line removed"}
