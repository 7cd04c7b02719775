import pytest

from storefront.domain.errors import Conflict, NotFound
from storefront.domain.schemas import UserCreate
from storefront.services.user_service import UserService


class TestUserService:
    def test_register_and_read(self, db):
        svc = UserService(db)

        created = svc.create_user(UserCreate(id=5, name="Ola", email="ola@example.com"))

        assert created.id == 5
        assert svc.get_user(5).email == "ola@example.com"

    def test_register_is_idempotent_for_same_id(self, db):
        svc = UserService(db)
        svc.create_user(UserCreate(id=5, name="Ola"))

        again = svc.create_user(UserCreate(id=5, name="Other"))

        assert again.name == "Ola"

    def test_email_must_be_unique(self, db):
        svc = UserService(db)
        svc.create_user(UserCreate(id=5, name="Ola", email="ola@example.com"))

        with pytest.raises(Conflict):
            svc.create_user(UserCreate(id=6, name="Ala", email="ola@example.com"))

    def test_unknown_user(self, db):
        with pytest.raises(NotFound):
            UserService(db).get_user(404)
