"""Shared test fixtures for API tests."""

import os

os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-api-tests")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from interview_prep.api.dependencies import (  # noqa: E402
    get_generate_rate_limiter,
    get_generation_adapter,
    get_jwt_service,
    get_storage,
)
from interview_prep.api.main import app  # noqa: E402
from interview_prep.api.rate_limiting import RateLimiter  # noqa: E402
from interview_prep.core.memory_storage import MemoryQuestionStore  # noqa: E402
from interview_prep.providers.adapter import GenerationAdapter  # noqa: E402
from interview_prep.providers.demo import DemoBackend  # noqa: E402
from tests.mocks.mock_transport import RecordingSleep  # noqa: E402

USER_ID = "user-alice"
OTHER_USER_ID = "user-bob"


@pytest.fixture
def store():
    return MemoryQuestionStore()


@pytest.fixture
def adapter():
    """Demo adapter that never waits; tests needing a live backend override this."""
    return GenerationAdapter(DemoBackend(sleep=RecordingSleep()), model="openai/gpt-3.5-turbo")


@pytest.fixture
def rate_limiter():
    return RateLimiter(max_requests=3, window_seconds=60)


@pytest.fixture
def client(store, adapter, rate_limiter):
    """Create a test client with isolated storage, generation and rate limits."""
    app.dependency_overrides[get_storage] = lambda: store
    app.dependency_overrides[get_generation_adapter] = lambda: adapter
    app.dependency_overrides[get_generate_rate_limiter] = lambda: rate_limiter
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_auth_headers(user_id: str) -> dict[str, str]:
    token = get_jwt_service().create_access_token(user_id, email=f"{user_id}@example.com")
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers():
    return make_auth_headers(USER_ID)


@pytest.fixture
def other_auth_headers():
    return make_auth_headers(OTHER_USER_ID)
