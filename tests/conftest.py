import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ['DATABASE_URL'] = 'sqlite://'
os.environ.setdefault('JWT_SECRET_KEY', 'test-secret-key')
os.environ['SCHEDULER_ENABLED'] = 'false'
os.environ['SMTP_HOST'] = ''

from app.config.settings import Settings, get_settings  # noqa: E402
from app.database import Base, get_db  # noqa: E402
from app.utils.dependencies import get_email_service  # noqa: E402
from app.utils.errors import DeliveryError  # noqa: E402
from main import app  # noqa: E402


class FakeMailer:
    """Records every code it is asked to send; set ``fail`` to simulate an SMTP outage."""

    def __init__(self) -> None:
        self.sent = []
        self.fail = False

    def _deliver(self, kind: str, to_email: str, code: str) -> None:
        if self.fail:
            raise DeliveryError('Failed to send email. Please try again.')
        self.sent.append((kind, to_email, code))

    def send_verification_code(self, to_email: str, code: str) -> None:
        self._deliver('verify', to_email, code)

    def send_password_reset_code(self, to_email: str, code: str, expires_minutes: int) -> None:
        self._deliver('reset', to_email, code)

    def last_code(self, kind: str, to_email: str) -> str:
        for sent_kind, sent_email, code in reversed(self.sent):
            if sent_kind == kind and sent_email == to_email:
                return code
        raise AssertionError(f'no {kind} code sent to {to_email}')


@pytest.fixture
def settings() -> Settings:
    test_settings = Settings()
    test_settings.jwt_secret_key = 'test-secret-key'
    test_settings.jwt_algorithm = 'HS256'
    test_settings.jwt_expires_minutes = 60
    test_settings.reset_token_expire_minutes = 10
    test_settings.password_min_length = 6
    test_settings.unverified_account_ttl_hours = 48
    return test_settings


@pytest.fixture
def engine():
    test_engine = create_engine(
        'sqlite://',
        connect_args={'check_same_thread': False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    yield test_engine
    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def mailer() -> FakeMailer:
    return FakeMailer()


@pytest.fixture
def client(session_factory, settings, mailer):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_email_service] = lambda: mailer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def registration_payload(email: str = 'alice@example.com', **overrides) -> dict:
    payload = {
        'fullName': 'Alice Example',
        'email': email,
        'password': 'pw123456',
        'profession': 'Developer',
        'gender': 'female',
        'age': 30,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def register_user(client, mailer):
    """Register (and by default verify) a user, returning a bearer token for them."""

    def _register(email: str = 'alice@example.com', password: str = 'pw123456', verify: bool = True):
        response = client.post('/auth/register', json=registration_payload(email, password=password))
        assert response.status_code == 201, response.json()
        if not verify:
            return None
        code = mailer.last_code('verify', email)
        assert client.post('/auth/verify-email', json={'email': email, 'otp': code}).status_code == 200
        login = client.post('/auth/login', json={'email': email, 'password': password})
        assert login.status_code == 200, login.json()
        return login.json()['token']

    return _register


def auth_header(token: str) -> dict:
    return {'Authorization': f'Bearer {token}'}
