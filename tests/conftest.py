import pytest
from fastapi.testclient import TestClient

from demoapi.config import JwtSettings
from demoapi.keys import generate_key_pair
from demoapi.main import create_app


@pytest.fixture(scope="session")
def key_pair():
    """One RSA key pair for the whole test session."""
    return generate_key_pair()


@pytest.fixture
def jwt_settings(key_pair):
    private_key, public_key = key_pair
    return JwtSettings(
        private_key=private_key,
        public_key=public_key,
        issuer="https://issuer.test",
        audience="demoapi-tests",
    )


@pytest.fixture
def demo_app(jwt_settings):
    return create_app(jwt_settings)


@pytest.fixture
def demo_client(demo_app):
    with TestClient(demo_app) as client:
        yield client
