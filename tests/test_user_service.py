# tests/test_user_service.py

import pytest

from app import auth_service, user_service
from app.errors import Conflict, InvalidCredentials, NotFound, Unauthenticated
from app.models import User
from auth.jwt_handler import create_access_token


def test_password_is_stored_hashed(alice):
    assert alice.password_hash != "alice-pw"
    assert alice.password_hash.startswith("$2")
    assert "password_hash" not in alice.to_dict()


def test_duplicate_email_is_rejected_and_nothing_is_added(db, alice):
    with pytest.raises(Conflict, match="email"):
        user_service.create_user(db, "someone-else", "alice@example.com", "pw")
    assert db.query(User).count() == 1


def test_duplicate_username_is_rejected(db, alice):
    with pytest.raises(Conflict, match="username"):
        user_service.create_user(db, "alice", "other@example.com", "pw")


def test_email_is_checked_before_username(db, alice):
    with pytest.raises(Conflict, match="email"):
        user_service.create_user(db, "alice", "alice@example.com", "pw")


def test_list_and_delete(db, alice, bob):
    assert [u.username for u in user_service.list_users(db)] == ["alice", "bob"]
    bob_id = bob.id
    user_service.delete_user(db, bob_id)
    assert [u.username for u in user_service.list_users(db)] == ["alice"]

    with pytest.raises(NotFound):
        user_service.delete_user(db, bob_id)


def test_update_phone_number_only(db, alice):
    user = user_service.update_profile(db, alice.id, phone_number="+1 555 0100")
    assert user.phone_number == "+1 555 0100"


def test_change_password_requires_current_password(db, alice):
    with pytest.raises(InvalidCredentials):
        user_service.update_profile(db, alice.id, current_password="wrong", new_password="new-pw")
    with pytest.raises(InvalidCredentials):
        user_service.update_profile(db, alice.id, new_password="new-pw")

    user_service.update_profile(db, alice.id, current_password="alice-pw", new_password="new-pw")
    token, _ = auth_service.login(db, "alice@example.com", "new-pw")
    assert token
    with pytest.raises(InvalidCredentials):
        auth_service.login(db, "alice@example.com", "alice-pw")


def test_failed_password_change_leaves_phone_untouched(db, alice):
    with pytest.raises(InvalidCredentials):
        user_service.update_profile(
            db, alice.id, phone_number="123", current_password="wrong", new_password="x"
        )
    db.refresh(alice)
    assert alice.phone_number is None


def test_phone_and_password_together(db, alice):
    user = user_service.update_profile(
        db, alice.id, phone_number="42", current_password="alice-pw", new_password="pw2"
    )
    assert user.phone_number == "42"
    auth_service.login(db, "alice@example.com", "pw2")


def test_login_and_verify_round_trip(db, alice):
    token, user = auth_service.login(db, "alice@example.com", "alice-pw")
    assert user.id == alice.id
    assert auth_service.verify(db, token).id == alice.id


@pytest.mark.parametrize("email, password", [
    ("alice@example.com", "wrong"),
    ("nobody@example.com", "alice-pw"),
])
def test_login_rejects_bad_credentials(db, alice, email, password):
    with pytest.raises(InvalidCredentials):
        auth_service.login(db, email, password)


def test_verify_rejects_bad_tokens(db, alice):
    with pytest.raises(Unauthenticated):
        auth_service.verify(db, None)
    with pytest.raises(Unauthenticated):
        auth_service.verify(db, "not-a-jwt")
    with pytest.raises(Unauthenticated):
        auth_service.verify(db, create_access_token({"sub": "9999"}))
    with pytest.raises(Unauthenticated):
        auth_service.verify(db, create_access_token({"foo": "bar"}))
