"""Shared fixtures: an in-memory API and a logged-in client."""

import pytest
import pytest_asyncio

from tenderadmin.core.api.client import ApiClient
from tenderadmin.core.api.mock import MockApi
from tenderadmin.core.auth.session import AuthContext, Navigator
from tenderadmin.core.auth.store import MemoryStore
from tenderadmin.core.notify import Notifier

BASE_URL = "http://api.test/api"
TOKEN = "test-token-0123456789"
ADMIN = {"id": 1, "username": "admin", "name": "Ada", "surname": "Admin"}


@pytest.fixture
def mock_api():
    return MockApi()


@pytest.fixture
def navigator():
    return Navigator()


@pytest.fixture
def auth_context(navigator):
    context = AuthContext(MemoryStore(), navigator)
    context.save_session(TOKEN, ADMIN)
    return context


@pytest.fixture
def notifier():
    return Notifier(echo=False)


@pytest_asyncio.fixture
async def client(mock_api, auth_context):
    api_client = ApiClient(BASE_URL, auth=auth_context, transport=mock_api.transport())
    yield api_client
    await api_client.close()
