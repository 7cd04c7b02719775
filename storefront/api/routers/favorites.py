# storefront/api/routers/favorites.py
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import current_user_id, guest_session, to_http
from storefront.data.database import get_db
from storefront.domain.errors import ShopError
from storefront.domain.schemas import CountOut, FavoriteIn, FavoritesOut
from storefront.services.favorite_service import FavoriteService
from storefront.services.guest_cart_service import GuestCartService

router = APIRouter(prefix="/favorites", tags=["favorites"])


def _out(items):
    return {"items": items, "count": len(items)}


@router.get("", response_model=FavoritesOut)
def list_favorites(
    user_id: Optional[int] = Depends(current_user_id),
    session: dict = Depends(guest_session),
    db: Session = Depends(get_db),
):
    if user_id is not None:
        return _out(FavoriteService(db).list(user_id))
    return _out(GuestCartService(db, session).list_favorites())


@router.get("/count", response_model=CountOut)
def count_favorites(
    user_id: Optional[int] = Depends(current_user_id),
    session: dict = Depends(guest_session),
    db: Session = Depends(get_db),
):
    if user_id is not None:
        return {"count": FavoriteService(db).count(user_id)}
    return {"count": len(GuestCartService(db, session).list_favorites())}


@router.post("", response_model=FavoritesOut, status_code=201)
def add_favorite(
    payload: FavoriteIn,
    user_id: Optional[int] = Depends(current_user_id),
    session: dict = Depends(guest_session),
    db: Session = Depends(get_db),
):
    try:
        if user_id is not None:
            return _out(FavoriteService(db).add(user_id, payload.article_number))
        return _out(GuestCartService(db, session).add_favorite(payload.article_number))
    except ShopError as e:
        raise to_http(e)


@router.delete("/{article_number}", response_model=FavoritesOut)
def remove_favorite(
    article_number: str,
    user_id: Optional[int] = Depends(current_user_id),
    session: dict = Depends(guest_session),
    db: Session = Depends(get_db),
):
    try:
        if user_id is not None:
            return _out(FavoriteService(db).remove(user_id, article_number))
        return _out(GuestCartService(db, session).remove_favorite(article_number))
    except ShopError as e:
        raise to_http(e)
