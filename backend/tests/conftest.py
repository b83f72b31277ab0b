from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.core.database import Database
from app.main import create_app
from app.schemas.user import UserCreate
from app.services.session_manager import SessionManager
from app.services.token_service import TokenService
from app.services.user_service import UserService


class FrozenClock:
    """Clock that only moves when told to"""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, 0)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def settings_overrides():
    return {}


@pytest.fixture
def settings(settings_overrides):
    values = {
        "DATABASE_URL": "sqlite:///:memory:",
        "BCRYPT_ROUNDS": 4,
        "DB_INIT_MODE": "create_all",
        "LOG_LEVEL": "WARNING",
        "SECRET_KEY": "test-secret-key-0123456789abcdef0123456789",
    }
    values.update(settings_overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def clock_start():
    return datetime(2026, 1, 1, 12, 0, 0)


@pytest.fixture
def clock(clock_start):
    return FrozenClock(clock_start)


@pytest.fixture
def database(settings):
    database = Database(settings.get_database_url())
    database.create_all()
    yield database
    database.dispose()


@pytest.fixture
def db(database):
    session = database.session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def token_service(settings, clock):
    return TokenService(settings, clock=clock)


@pytest.fixture
def session_manager(token_service, settings, clock):
    return SessionManager(token_service, settings, clock=clock)


@pytest.fixture
def user_service(settings):
    return UserService(settings)


@pytest.fixture
def make_user(db, user_service):
    def _make(email="a@x.com", password="pw123"):
        return user_service.create_user(db, UserCreate(email=email, password=password))

    return _make


@pytest.fixture
def app(settings, database, clock):
    return create_app(settings=settings, database=database, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client
