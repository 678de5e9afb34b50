"""Tests for registration, login and profile updates."""
import pytest

from conftest import add_user
from market.core.errors import Conflict, Unauthorized, UserNotFound, ValidationError
from market.core.security import decode_access_token
from market.models.user import Role
from market.services.users import UserService


class TestRegister:
    def test_register_hashes_password(self, db):
        user = UserService(db).register("Alice@Example.com", "secret123", "alice")
        assert user.email == "alice@example.com"
        assert user.role is Role.customer
        assert user.hashed_password != "secret123"

    def test_duplicate_email(self, db):
        add_user(db)
        with pytest.raises(Conflict):
            UserService(db).register("ALICE@example.com", "another1", "alice2")

    def test_short_password(self, db):
        with pytest.raises(ValidationError):
            UserService(db).register("bob@example.com", "123", "bob")


class TestLogin:
    def test_login_returns_token_with_claims(self, db):
        user = add_user(db)
        token = UserService(db).login("alice@example.com", "secret123")

        claims = decode_access_token(token)
        assert claims.user_id == user.id
        assert claims.role is Role.customer
        assert claims.email == "alice@example.com"

    @pytest.mark.parametrize("email, password", [
        ("alice@example.com", "wrong-password"),
        ("nobody@example.com", "secret123"),
    ])
    def test_bad_credentials(self, db, email, password):
        add_user(db)
        with pytest.raises(Unauthorized):
            UserService(db).login(email, password)


class TestProfile:
    def test_change_username(self, db):
        user = add_user(db)
        updated = UserService(db).update_profile(user.id, username="alicia")
        assert updated.username == "alicia"

    def test_change_password(self, db):
        user = add_user(db)
        users = UserService(db)
        users.update_profile(user.id, password="secret123", new_password="newsecret")

        assert users.login("alice@example.com", "newsecret")
        with pytest.raises(Unauthorized):
            users.login("alice@example.com", "secret123")

    def test_wrong_current_password(self, db):
        user = add_user(db)
        with pytest.raises(ValidationError):
            UserService(db).update_profile(user.id, password="nope", new_password="newsecret")

    def test_unknown_user(self, db):
        with pytest.raises(UserNotFound):
            UserService(db).get_user(404)


class TestEnsureAdmin:
    def test_creates_admin(self, db):
        admin = UserService(db).ensure_admin("root@example.com", "rootpass", "root")
        assert admin.role is Role.admin

    def test_promotes_existing_user(self, db):
        user = add_user(db)
        admin = UserService(db).ensure_admin("alice@example.com", "ignored", "alice")
        assert admin.id == user.id
        assert admin.role is Role.admin
        assert len(UserService(db).all_users()) == 1


def test_create_admin_script(capsys):
    from scripts.create_admin import main
    from market.db.session import SessionLocal

    assert main(["boss@example.com", "bosspass"]) == 0
    assert "boss@example.com" in capsys.readouterr().out
    with SessionLocal() as session:
        assert UserService(session).get_by_email("boss@example.com").role is Role.admin


def test_create_admin_script_usage():
    from scripts.create_admin import main

    assert main([]) == 2
