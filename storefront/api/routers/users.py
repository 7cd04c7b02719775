from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from storefront.api.deps import guest_session, require_user, to_http
from storefront.data.database import get_db
from storefront.domain.errors import ShopError
from storefront.domain.schemas import UserCreate, UserRead
from storefront.services.guest_cart_service import GuestCartService
from storefront.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=201)
def register(
    payload: UserCreate,
    session: dict = Depends(guest_session),
    db: Session = Depends(get_db),
):
    """Rejestracja + przeniesienie koszyka/ulubionych goscia."""
    try:
        user = UserService(db).create_user(payload)
        GuestCartService(db, session).migrate(user.id)
    except ShopError as e:
        raise to_http(e)
    return user


@router.post("/login", response_model=UserRead)
def login(
    user_id: int = Depends(require_user),
    session: dict = Depends(guest_session),
    db: Session = Depends(get_db),
):
    """Hasla sprawdza dostawca tozsamosci; tu tylko migracja sesji goscia."""
    try:
        user = UserService(db).get_user(user_id)
        GuestCartService(db, session).migrate(user.id)
    except ShopError as e:
        raise to_http(e)
    return user


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: int, db: Session = Depends(get_db)):
    try:
        return UserService(db).get_user(user_id)
    except ShopError as e:
        raise to_http(e)
