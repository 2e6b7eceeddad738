import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("APP_ENV", "test")

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi import Depends
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from chat_identity import models  # noqa: F401
from chat_identity.database import Base, get_db
from chat_identity.deps import get_otp_service, get_token_issuer
from chat_identity.limiter import limiter
from chat_identity.main import app
from chat_identity.services.auth_service import AuthService
from chat_identity.services.otp_service import OTPService
from chat_identity.utils.security import TokenConfig, TokenIssuer

OTP_TTL_SECONDS = 120
OTP_MAX_ATTEMPTS = 5


class FakeClock:
    """Controllable replacement for datetime.now(timezone.utc)."""

    def __init__(self, start=None):
        self.now = start or datetime.now(timezone.utc).replace(microsecond=0)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


class FakeSms:
    """Records dispatched codes instead of hitting a gateway."""

    def __init__(self):
        self.sent = []
        self.fail = False

    async def __call__(self, phone_number, code):
        if self.fail:
            raise RuntimeError("SMS gateway unavailable")
        self.sent.append((phone_number, code))

    def last_code(self, phone_number):
        return [code for phone, code in self.sent if phone == phone_number][-1]


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fake_sms():
    return FakeSms()


@pytest.fixture
def token_config():
    # A distinct key per test run
    return TokenConfig(
        secret_key=f"test-secret-{uuid.uuid4().hex}",
        issuer="chat-identity-test",
        access_ttl=timedelta(minutes=15),
        refresh_ttl=timedelta(days=7),
    )


@pytest.fixture
def token_issuer(token_config):
    return TokenIssuer(token_config)


def make_otp_service(db, fake_sms, clock, **kwargs):
    return OTPService(
        db,
        sms_sender=fake_sms,
        clock=clock,
        ttl_seconds=OTP_TTL_SECONDS,
        max_attempts=OTP_MAX_ATTEMPTS,
        **kwargs,
    )


@pytest.fixture
def otp_service(db, fake_sms, clock):
    return make_otp_service(db, fake_sms, clock)


@pytest.fixture
def auth_service(db, otp_service, token_issuer):
    return AuthService(db, otp_service, token_issuer)


@pytest.fixture
def client(session_factory, fake_sms, clock, token_issuer):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    def override_get_otp_service(db: Session = Depends(get_db)):
        return make_otp_service(db, fake_sms, clock)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_otp_service] = override_get_otp_service
    app.dependency_overrides[get_token_issuer] = lambda: token_issuer
    limiter.enabled = False

    yield TestClient(app)

    app.dependency_overrides.clear()
    limiter.enabled = True
