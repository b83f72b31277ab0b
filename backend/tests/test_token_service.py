from datetime import datetime, timedelta

import pytest

from app.core.exceptions import InvalidSignatureError, TokenExpiredError
from app.services.token_service import TokenService


def test_access_token_carries_user_id(token_service):
    token = token_service.mint_access_token("abc123")
    assert token_service.verify_access_token(token) == "abc123"


def test_access_token_valid_for_whole_ttl(token_service, clock, settings):
    token = token_service.mint_access_token("abc123")
    clock.advance(seconds=settings.access_token_ttl_seconds - 1)
    assert token_service.verify_access_token(token) == "abc123"


def test_access_token_expires_exactly_at_ttl(token_service, clock, settings):
    token = token_service.mint_access_token("abc123")
    clock.advance(seconds=settings.access_token_ttl_seconds)
    with pytest.raises(TokenExpiredError):
        token_service.verify_access_token(token)


def test_access_ttl_follows_settings(token_service, settings):
    assert token_service.access_ttl == timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)


def test_tokens_from_another_secret_are_rejected(token_service, settings, clock):
    other = TokenService(settings.model_copy(update={"SECRET_KEY": "x" * 40}), clock=clock)
    with pytest.raises(InvalidSignatureError):
        token_service.verify_access_token(other.mint_access_token("abc123"))


def test_access_tokens_differ_between_mints(token_service):
    assert token_service.mint_access_token("abc123") != token_service.mint_access_token("abc123")


def test_refresh_tokens_are_opaque(token_service, settings):
    token = token_service.mint_refresh_token()
    assert "." not in token
    assert len(token) == settings.REFRESH_TOKEN_BYTES * 2
    assert token != token_service.mint_refresh_token()


@pytest.mark.parametrize("clock_start", [datetime(2026, 1, 1, 12, 0, 0, 900000)])
def test_sub_second_mint_is_valid_until_full_ttl(token_service, clock, settings):
    token = token_service.mint_access_token("abc123")
    clock.advance(seconds=settings.access_token_ttl_seconds - 0.5)
    assert token_service.verify_access_token(token) == "abc123"
    clock.advance(microseconds=499_999)
    assert token_service.verify_access_token(token) == "abc123"
    clock.advance(microseconds=1)
    with pytest.raises(TokenExpiredError):
        token_service.verify_access_token(token)
