# storefront/api/routers/orders.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from storefront.api.deps import current_user_id, require_user, to_http
from storefront.data.database import get_db
from storefront.domain.errors import InvalidRequest, ShopError
from storefront.domain.order_state import GuestContact, Shipping
from storefront.domain.schemas import CheckoutIn, CheckoutOut, OrderOut
from storefront.services.checkout_service import CheckoutService
from storefront.services.order_service import OrderService
from storefront.services.verifier_client import VerifierClient

router = APIRouter(prefix="/orders", tags=["orders"])


def get_verifier() -> VerifierClient:
    return VerifierClient()


@router.post("/checkout", response_model=CheckoutOut)
def checkout(
    payload: CheckoutIn,
    request: Request,
    user_id: Optional[int] = Depends(current_user_id),
    verifier: VerifierClient = Depends(get_verifier),
    db: Session = Depends(get_db),
):
    """
    Zamienia koszyk w zamowienie. Zalogowany: aktywny koszyk z bazy,
    gosc: koszyk z sesji + email/imie + token anty-bot.
    """
    svc = CheckoutService(db, verifier=verifier)
    shipping = Shipping(
        delivery_address=payload.delivery_address,
        telephone=payload.telephone,
        payment_method=payload.payment_method,
    )
    try:
        if user_id is not None:
            return svc.checkout_user(user_id, shipping)

        if not payload.email or not payload.name:
            raise InvalidRequest("Email and name are required for guest checkout")

        return svc.checkout_guest(
            request.session,
            shipping,
            GuestContact(email=payload.email, name=payload.name),
            captcha_token=payload.captcha_token,
            remote_ip=request.client.host if request.client else None,
        )
    except ShopError as e:
        raise to_http(e)


@router.get("", response_model=List[OrderOut])
def list_orders(
    user_id: int = Depends(require_user),
    db: Session = Depends(get_db),
):
    """Historia zamowien (bez aktywnego koszyka)."""
    return OrderService(db).list_orders(user_id)


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: int,
    user_id: int = Depends(require_user),
    db: Session = Depends(get_db),
):
    try:
        return OrderService(db).get_order(order_id, user_id)
    except ShopError as e:
        raise to_http(e)
