import pytest
from fastapi.testclient import TestClient

from todo_service.core.config import Settings
from todo_service.core.store import InMemoryTodoStore
from todo_service.main import create_app
from todo_service.utils.security import create_access_token


@pytest.fixture()
def settings() -> Settings:
    test_settings = Settings()
    test_settings.auth_mode = "jwt"
    test_settings.api_prefix = "/api"
    test_settings.login_path = "/login"
    test_settings.public_routes = ["/login", "/api/auth", "/health"]
    return test_settings


@pytest.fixture()
def store() -> InMemoryTodoStore:
    return InMemoryTodoStore()


@pytest.fixture()
def app(settings, store):
    return create_app(settings=settings, store=store)


@pytest.fixture()
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture()
def make_headers():
    def _make(user_id: str = "user-1", email: str = "user@example.com") -> dict:
        return {"Authorization": f"Bearer {create_access_token(user_id, email=email)}"}
    return _make


@pytest.fixture()
def auth_headers(make_headers) -> dict:
    return make_headers()
