import pytest
from fastapi.testclient import TestClient

from emargement.auth.credentials import CredentialStore
from emargement.auth.jwt_handler import TokenService
from emargement.core.config import Settings
from emargement.database import build_engine, build_session_factory, ensure_schema
from emargement.main import create_app

TEST_SETTINGS = Settings(
    database_url='sqlite:///:memory:',
    jwt_key='test-signing-key',
    bcrypt_rounds=4,
)


@pytest.fixture
def db():
    engine = build_engine(TEST_SETTINGS.database_url)
    ensure_schema(engine)
    session_local = build_session_factory(engine)

    session = session_local()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def users(db) -> CredentialStore:
    return CredentialStore(db, bcrypt_rounds=TEST_SETTINGS.bcrypt_rounds)


@pytest.fixture
def tokens() -> TokenService:
    return TokenService.from_settings(TEST_SETTINGS)


@pytest.fixture
def client():
    app = create_app(TEST_SETTINGS)
    with TestClient(app) as test_client:
        yield test_client
