import pytest

from app.core.exceptions import (
    SessionExpiredError,
    SessionNotFoundError,
    TokenGenerationError,
    UserNotFoundError,
)
from app.models.session import UserSession


def _session_count(db, user_id):
    return db.query(UserSession).filter(UserSession.user_id == user_id).count()


def test_create_then_validate_returns_same_user(db, make_user, session_manager):
    user = make_user()
    token = session_manager.create_session(db, user)

    found_user, session = session_manager.validate(db, user.id, token)

    assert found_user.id == user.id
    assert session.token == token


def test_session_expiry_is_fixed_at_creation(db, make_user, session_manager, clock):
    user = make_user()
    token = session_manager.create_session(db, user)

    _, session = session_manager.validate(db, user.id, token)
    assert session.expires_at == clock() + session_manager.refresh_ttl


def test_validate_unknown_user(db, make_user, session_manager):
    user = make_user()
    token = session_manager.create_session(db, user)
    with pytest.raises(UserNotFoundError):
        session_manager.validate(db, "0" * 32, token)


def test_validate_unknown_token(db, make_user, session_manager):
    user = make_user()
    session_manager.create_session(db, user)
    with pytest.raises(SessionNotFoundError):
        session_manager.validate(db, user.id, "f" * 128)


def test_token_of_another_user_is_not_found(db, make_user, session_manager):
    alice = make_user("alice@x.com")
    bob = make_user("bob@x.com")
    alice_token = session_manager.create_session(db, alice)
    with pytest.raises(SessionNotFoundError):
        session_manager.validate(db, bob.id, alice_token)


def test_session_valid_until_just_before_expiry(db, make_user, session_manager, clock):
    user = make_user()
    token = session_manager.create_session(db, user)
    clock.advance(seconds=session_manager.refresh_ttl.total_seconds() - 1)
    assert session_manager.validate(db, user.id, token)[0].id == user.id


def test_session_expired_at_boundary(db, make_user, session_manager, clock):
    user = make_user()
    token = session_manager.create_session(db, user)
    clock.advance(seconds=session_manager.refresh_ttl.total_seconds())
    with pytest.raises(SessionExpiredError):
        session_manager.validate(db, user.id, token)


def test_validate_does_not_extend_or_rotate(db, make_user, session_manager, clock):
    user = make_user()
    token = session_manager.create_session(db, user)
    _, before = session_manager.validate(db, user.id, token)
    expires_at = before.expires_at

    clock.advance(days=1)
    _, after = session_manager.validate(db, user.id, token)

    assert after.token == token
    assert after.expires_at == expires_at


def test_multiple_sessions_are_all_valid(db, make_user, session_manager):
    user = make_user()
    first = session_manager.create_session(db, user)
    second = session_manager.create_session(db, user)

    assert first != second
    session_manager.validate(db, user.id, first)
    session_manager.validate(db, user.id, second)
    assert _session_count(db, user.id) == 2


def test_expired_sessions_are_pruned_on_next_create(db, make_user, session_manager, clock):
    user = make_user()
    old = session_manager.create_session(db, user)
    clock.advance(seconds=session_manager.refresh_ttl.total_seconds())

    new = session_manager.create_session(db, user)

    assert _session_count(db, user.id) == 1
    session_manager.validate(db, user.id, new)
    with pytest.raises(SessionNotFoundError):
        session_manager.validate(db, user.id, old)


@pytest.mark.parametrize("settings_overrides", [{"MAX_SESSIONS_PER_USER": 2}])
def test_session_cap_drops_oldest(db, make_user, session_manager):
    user = make_user()
    first = session_manager.create_session(db, user)
    second = session_manager.create_session(db, user)
    third = session_manager.create_session(db, user)

    assert _session_count(db, user.id) == 2
    with pytest.raises(SessionNotFoundError):
        session_manager.validate(db, user.id, first)
    session_manager.validate(db, user.id, second)
    session_manager.validate(db, user.id, third)


def test_token_collision_is_a_generation_failure(db, make_user, session_manager, token_service, monkeypatch):
    alice = make_user("alice@x.com")
    bob = make_user("bob@x.com")
    monkeypatch.setattr(token_service, "mint_refresh_token", lambda: "c" * 128)

    token = session_manager.create_session(db, alice)
    with pytest.raises(TokenGenerationError):
        session_manager.create_session(db, bob)

    assert session_manager.validate(db, alice.id, token)[0].id == alice.id
    assert _session_count(db, bob.id) == 0


def test_end_session_removes_only_that_session(db, make_user, session_manager):
    user = make_user()
    first = session_manager.create_session(db, user)
    second = session_manager.create_session(db, user)

    assert session_manager.end_session(db, user.id, first) is True
    assert session_manager.end_session(db, user.id, first) is False

    with pytest.raises(SessionNotFoundError):
        session_manager.validate(db, user.id, first)
    session_manager.validate(db, user.id, second)
