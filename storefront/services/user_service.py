from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.models.user import UserModel
from storefront.domain.errors import Conflict, NotFound
from storefront.domain.schemas import UserCreate, UserRead
from storefront.repos.user_repo import UserRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    """
    Rejestracja i odczyt kont. Hasla i sesje logowania obsluguje
    zewnetrzny dostawca tozsamosci; tu trzymamy tylko profil.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        """Idempotentne dla tego samego id; zajety email = Conflict."""
        existing = self.repo.get_user(payload.id)
        if existing:
            return UserRead.model_validate(existing)

        if payload.email and self.repo.get_by_email(payload.email):
            raise Conflict(f"Email {payload.email} is already registered")

        try:
            user = self.repo.add(UserModel(id=payload.id, name=payload.name, email=payload.email))
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise Conflict("User already exists") from e

        logger.info(f"Registered user {user.id}")
        return UserRead.model_validate(user)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise NotFound(f"User {user_id} not found")
        return UserRead.model_validate(user)
