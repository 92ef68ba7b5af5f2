"""Test factories shared by fixtures and tests."""

from httpx import ASGITransport, AsyncClient

from app.api.dependencies import AuthenticatedUser
from app.config import Settings

TEST_USER = AuthenticatedUser(uid="user-1", email="ada@example.com", name="Ada")


def make_settings(**overrides) -> Settings:
    return Settings(_env_file=None, **overrides)


def client_for(application) -> AsyncClient:
    return AsyncClient(
        transport=ASGITransport(app=application), base_url="http://test",
    )
