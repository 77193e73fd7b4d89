import httpx
import pytest

from admin_client import AuthenticatedHttpClient, MemoryNavigator
from credentials import MemoryCredentialStore

from .fakes import BASE_URL, FakeBackend, build_stub_app


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def store():
    return MemoryCredentialStore()


@pytest.fixture
def navigator():
    return MemoryNavigator("/dashboard")


@pytest.fixture
def api(backend, store, navigator):
    return AuthenticatedHttpClient(
        BASE_URL,
        store,
        navigator=navigator,
        transport=httpx.MockTransport(backend),
    )


@pytest.fixture
def users():
    return [
        {"id": str(i), "email": f"user{i}@example.com", "fullName": f"User {i}", "isActive": i % 2 == 0}
        for i in range(1, 24)
    ]


@pytest.fixture
def stub_app(users):
    return build_stub_app(
        users,
        [
            {"resource": "blog_post_management", "action": "share_blogs", "type": "write"},
            {"resource": "USER_MANAGEMENT", "action": "*", "type": "READ"},
        ],
    )


@pytest.fixture
def stub_api(stub_app, store, navigator):
    return AuthenticatedHttpClient(
        "http://testserver",
        store,
        navigator=navigator,
        transport=httpx.ASGITransport(app=stub_app),
    )
