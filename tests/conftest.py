import os
from contextlib import contextmanager


def _set_test_env() -> None:
    defaults = {
        "APP_NAME": "SMS Reseller Pricing Test",
        "ENVIRONMENT": "test",
        "LOG_LEVEL": "WARNING",
        "SECRET_KEY": "test-secret-with-enough-length-for-hs256",
        "ACCESS_TOKEN_EXPIRE_MINUTES": "30",
        "AUTO_CREATE_TABLES": "false",
        "DATABASE_URL": "sqlite://",
        "ARKESEL_BASE_URL": "https://sms.arkesel.com",
        "ARKESEL_API_KEY": "arkesel_key",
        "ARKESEL_TIMEOUT_SECONDS": "5",
        "ARKESEL_RETRY_COUNT": "2",
        "ARKESEL_TEST_MODE": "true",
        "DEFAULT_SMS_BASE_COST": "0.01",
        "CORS_ORIGINS": "http://localhost:5173,http://localhost:3000",
    }
    for key, value in defaults.items():
        os.environ.setdefault(key, value)


_set_test_env()

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.core.database import Base, create_session_factory, get_db  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.middlewares.rate_limit import limiter  # noqa: E402
from app.models import User, UserRole  # noqa: E402

# Endpoint tests share one client address.
limiter.enabled = False


@pytest.fixture
def db():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(bind=engine)
    session = create_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(role: UserRole = UserRole.RESELLER, is_active: bool = True) -> User:
        counter["n"] += 1
        user = User(
            email=f"user{counter['n']}@example.com",
            full_name=f"User {counter['n']}",
            role=role,
            is_active=is_active,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make


@pytest.fixture
def reseller(make_user):
    return make_user(UserRole.RESELLER)


def auth_headers(user: User) -> dict:
    token = create_access_token(str(user.id), user.role.value)
    return {"Authorization": f"Bearer {token}"}


@contextmanager
def client_with_db(session):
    from app.main import app

    app.dependency_overrides.clear()

    def _override_get_db():
        yield session

    app.dependency_overrides[get_db] = _override_get_db
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()

