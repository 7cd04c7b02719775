# storefront/api/deps.py
from typing import Optional

from fastapi import Header, HTTPException, Request

from storefront.domain.errors import Forbidden, ShopError, Unauthorized


def to_http(error: ShopError) -> HTTPException:
    return HTTPException(status_code=error.status_code, detail=error.to_dict())


def current_user_id(x_user_id: Optional[int] = Header(default=None)) -> Optional[int]:
    """Tozsamosc ustawia zewnetrzny middleware auth; brak naglowka = gosc."""
    return x_user_id


def require_user(x_user_id: Optional[int] = Header(default=None)) -> int:
    if x_user_id is None:
        raise to_http(Unauthorized())
    return x_user_id


def require_admin(x_user_role: Optional[str] = Header(default=None)) -> str:
    if (x_user_role or "").lower() != "admin":
        raise to_http(Forbidden("Admin role required"))
    return x_user_role


def guest_session(request: Request) -> dict:
    return request.session
