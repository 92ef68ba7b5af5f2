"""Root conftest: settings, in-memory store and ASGI clients.

Invariants:
    - Apps are built with create_app(settings, InMemoryDocumentStore()): no Firebase
    - get_current_user is overridden with a fixed test user unless a test opts out
    - Settings never read a .env file during tests
"""

import os

import pytest

from app.api.dependencies import get_current_user
from app.main import create_app
from tests.factories import TEST_USER, client_for, make_settings
from tests.fake_store import InMemoryDocumentStore

for _var in (
    "ENVIRONMENT", "NODE_ENV", "PORT", "ALLOWED_ORIGINS", "DEV_ALLOWED_ORIGINS",
    "FIREBASE_SERVICE_ACCOUNT", "SERVICE_ACCOUNT_PATH", "MAX_BODY_BYTES",
):
    os.environ.pop(_var, None)


@pytest.fixture
def dev_settings():
    return make_settings(environment="development")


@pytest.fixture
def prod_settings():
    return make_settings(environment="production")


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def app(dev_settings, store):
    application = create_app(dev_settings, store)
    application.dependency_overrides[get_current_user] = lambda: TEST_USER
    return application


@pytest.fixture
def prod_app(prod_settings, store):
    application = create_app(prod_settings, store)
    application.dependency_overrides[get_current_user] = lambda: TEST_USER
    return application


@pytest.fixture
async def client(app):
    async with client_for(app) as c:
        yield c


@pytest.fixture
async def prod_client(prod_app):
    async with client_for(prod_app) as c:
        yield c
