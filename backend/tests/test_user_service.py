import pytest

from app.core.exceptions import DuplicateEmailError, InvalidCredentialsError
from app.core.security import verify_password
from app.schemas.user import UserCreate
from app.services.user_service import UserService


def test_signup_normalizes_email_and_hashes_password(make_user):
    user = make_user(email="  Alice@X.com ", password="pw123")
    assert user.email == "alice@x.com"
    assert user.password_hash != "pw123"
    assert len(user.id) == 32


def test_duplicate_email_is_a_conflict(db, make_user, user_service):
    make_user(email="a@x.com")
    with pytest.raises(DuplicateEmailError) as exc_info:
        user_service.create_user(db, UserCreate(email="A@X.COM", password="other"))
    assert exc_info.value.status_code == 409


def test_store_is_usable_after_conflict(db, make_user, user_service):
    make_user(email="a@x.com")
    with pytest.raises(DuplicateEmailError):
        make_user(email="a@x.com")
    assert make_user(email="b@x.com").email == "b@x.com"


def test_authenticate_with_correct_password(db, make_user, user_service):
    user = make_user(email="a@x.com", password="pw123")
    assert user_service.authenticate_user(db, "A@x.com", "pw123").id == user.id


def test_bad_password_and_unknown_email_are_indistinguishable(db, make_user, user_service):
    make_user(email="a@x.com", password="pw123")

    with pytest.raises(InvalidCredentialsError) as wrong_password:
        user_service.authenticate_user(db, "a@x.com", "nope")
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        user_service.authenticate_user(db, "ghost@x.com", "pw123")

    assert wrong_password.value.message == unknown_email.value.message
    assert wrong_password.value.status_code == unknown_email.value.status_code == 401


def test_invalid_email_is_rejected_by_schema():
    with pytest.raises(ValueError):
        UserCreate(email="not-an-email", password="pw123")


def test_unknown_email_does_not_hash_on_demand(db, user_service, monkeypatch):
    calls = []
    monkeypatch.setattr(
        "app.services.user_service.get_password_hash",
        lambda *args, **kwargs: calls.append(args),
    )

    with pytest.raises(InvalidCredentialsError):
        user_service.authenticate_user(db, "ghost@x.com", "pw123")

    assert calls == []


def test_timing_hash_is_built_with_the_service(settings):
    service = UserService(settings)
    assert verify_password("timing-equalization", service._dummy_hash)
