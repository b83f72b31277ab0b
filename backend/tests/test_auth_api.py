import pytest

from app.core.exceptions import TokenExpiredError, TokenGenerationError

USERS = "/api/v1/users"


def _signup(client, email="a@x.com", password="pw123"):
    return client.post(USERS, json={"email": email, "password": password})


def _login(client, email="a@x.com", password="pw123"):
    return client.post(f"{USERS}/login", json={"email": email, "password": password})


def _refresh(client, user_id, refresh_token):
    return client.get(
        f"{USERS}/me/access-token",
        headers={"x-refresh-token": refresh_token, "_id": user_id},
    )


def _lists(client, access_token):
    return client.get("/api/v1/lists", headers={"x-access-token": access_token})


def test_signup_returns_user_and_both_tokens(client):
    response = _signup(client, email="A@X.com")

    assert response.status_code == 200
    body = response.json()
    assert body["email"] == "a@x.com"
    assert "password_hash" not in body
    assert response.headers["x-refresh-token"]
    assert response.headers["x-access-token"]


def test_signup_login_refresh_scenario(client, app, clock, settings):
    signup = _signup(client)
    user_id = signup.json()["id"]
    refresh_token = signup.headers["x-refresh-token"]
    access_token = signup.headers["x-access-token"]

    assert _lists(client, access_token).status_code == 200
    assert client.get(f"{USERS}/me", headers={"x-access-token": access_token}).json()["id"] == user_id
    assert _refresh(client, user_id, refresh_token).status_code == 200

    clock.advance(seconds=settings.access_token_ttl_seconds + 1)

    assert _lists(client, access_token).status_code == 401
    with pytest.raises(TokenExpiredError):
        app.state.token_service.verify_access_token(access_token)

    refreshed = _refresh(client, user_id, refresh_token)
    assert refreshed.status_code == 200
    new_access_token = refreshed.json()["accessToken"]
    assert refreshed.headers["x-access-token"] == new_access_token
    assert _lists(client, new_access_token).status_code == 200


def test_two_logins_give_two_valid_sessions(client):
    user_id = _signup(client).json()["id"]

    first = _login(client).headers["x-refresh-token"]
    second = _login(client).headers["x-refresh-token"]

    assert first != second
    assert _refresh(client, user_id, first).status_code == 200
    assert _refresh(client, user_id, second).status_code == 200


def test_login_failures_are_indistinguishable(client):
    _signup(client)

    wrong_password = _login(client, password="nope")
    unknown_email = _login(client, email="ghost@x.com")

    assert wrong_password.status_code == unknown_email.status_code == 401
    assert wrong_password.json()["error"] == unknown_email.json()["error"]
    assert "x-access-token" not in wrong_password.headers
    assert "x-refresh-token" not in wrong_password.headers


def test_duplicate_signup_is_conflict(client):
    _signup(client)
    response = _signup(client, email="A@x.com", password="other")
    assert response.status_code == 409
    assert "x-refresh-token" not in response.headers


def _fail_session_creation(app, monkeypatch):
    def _raise(db, user):
        raise TokenGenerationError()

    monkeypatch.setattr(app.state.session_manager, "create_session", _raise)


def _assert_no_tokens(response):
    assert response.status_code == 500
    assert "x-access-token" not in response.headers
    assert "x-refresh-token" not in response.headers


def test_signup_session_failure_issues_no_tokens(client, app, monkeypatch):
    _fail_session_creation(app, monkeypatch)

    _assert_no_tokens(_signup(client))

    monkeypatch.undo()
    login = _login(client)
    assert login.status_code == 200
    assert login.headers["x-refresh-token"]


def test_login_session_failure_issues_no_tokens(client, app, monkeypatch):
    assert _signup(client).status_code == 200
    _fail_session_creation(app, monkeypatch)

    response = _login(client)

    _assert_no_tokens(response)
    assert response.json()["success"] is False


def test_login_refresh_token_failure_issues_no_tokens(client, app, monkeypatch):
    assert _signup(client).status_code == 200

    def _raise():
        raise TokenGenerationError()

    monkeypatch.setattr(app.state.token_service, "mint_refresh_token", _raise)

    _assert_no_tokens(_login(client))


def test_signup_validation_error(client):
    response = _signup(client, email="nope")
    assert response.status_code == 422
    assert response.json()["success"] is False


def test_refresh_failures_collapse_to_unauthorized(client, clock, settings):
    signup = _signup(client)
    user_id = signup.json()["id"]
    refresh_token = signup.headers["x-refresh-token"]

    responses = [
        _refresh(client, user_id, "not-a-session"),
        _refresh(client, "0" * 32, refresh_token),
        client.get(f"{USERS}/me/access-token"),
    ]
    clock.advance(days=settings.REFRESH_TOKEN_EXPIRE_DAYS)
    responses.append(_refresh(client, user_id, refresh_token))

    assert [r.status_code for r in responses] == [401, 401, 401, 401]
    assert {r.json()["error"] for r in responses} == {"Unauthorized"}


def test_missing_or_tampered_access_token(client):
    access_token = _signup(client).headers["x-access-token"]
    header, payload, signature = access_token.split(".")
    middle = len(signature) // 2
    flipped = "A" if signature[middle] != "A" else "B"
    tampered = ".".join([header, payload, signature[:middle] + flipped + signature[middle + 1:]])

    assert client.get("/api/v1/lists").status_code == 401
    assert _lists(client, tampered).status_code == 401


def test_logout_ends_session_but_not_access_token(client):
    signup = _signup(client)
    user_id = signup.json()["id"]
    refresh_token = signup.headers["x-refresh-token"]
    access_token = signup.headers["x-access-token"]

    response = client.post(
        f"{USERS}/logout",
        headers={"x-refresh-token": refresh_token, "_id": user_id},
    )

    assert response.status_code == 200
    assert _refresh(client, user_id, refresh_token).status_code == 401
    assert _lists(client, access_token).status_code == 200


@pytest.mark.parametrize("settings_overrides", [{"LOGIN_RATE_LIMIT_PER_MINUTE": 2}])
def test_login_rate_limit(client):
    _signup(client)
    assert _login(client).status_code == 200
    assert _login(client, password="nope").status_code == 401
    assert _login(client).status_code == 429


def test_cors_exposes_token_headers(client):
    response = client.post(
        USERS,
        json={"email": "a@x.com", "password": "pw123"},
        headers={"Origin": "http://localhost:4200"},
    )
    exposed = response.headers["access-control-expose-headers"].lower()
    assert "x-access-token" in exposed
    assert "x-refresh-token" in exposed


def test_health_and_metrics(client):
    health = client.get("/health")
    assert health.status_code == 200
    assert health.json()["database"]["ok"] is True

    metrics = client.get("/metrics")
    assert metrics.status_code == 200
    assert "taskmanager_http_requests_total" in metrics.text
