import pytest

from interview_prep.core.models import Language
from interview_prep.providers.adapter import GenerationAdapter
from interview_prep.providers.demo import MOCK_QUESTIONS
from interview_prep.providers.exceptions import ErrorCode, ProviderError
from interview_prep.providers.live import LiveBackend
from tests.api.conftest import USER_ID
from tests.mocks.mock_transport import (
    ENGLISH_POSTING,
    POLISH_POSTING,
    VALID_QUESTIONS,
    ScriptedTransport,
    chat_completion,
    questions_completion,
)

GENERATE_URL = "/api/v1/questions/generate"


def live_adapter(*responses):
    return GenerationAdapter(LiveBackend(ScriptedTransport(*responses)), model="openai/gpt-3.5-turbo")


class TestGenerateDemoMode:
    def test_creates_five_questions(self, client, auth_headers, store):
        response = client.post(GENERATE_URL, json={"jobPosting": ENGLISH_POSTING}, headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["demo_mode"] is True
        assert data["message"] == "Questions generated successfully (demo mode)"
        assert len(data["questions"]) == 5
        assert sorted(q["content"] for q in data["questions"]) == sorted(MOCK_QUESTIONS[Language.EN])
        assert [q["position"] for q in data["questions"]] == [1, 2, 3, 4, 5]
        assert all(q["practiced"] is False for q in data["questions"])
        assert all("user_id" not in q for q in data["questions"])

        assert store.list_by_owner(USER_ID).total == 5

    def test_answers_in_posting_language(self, client, auth_headers):
        response = client.post(GENERATE_URL, json={"jobPosting": POLISH_POSTING}, headers=auth_headers)

        assert response.status_code == 201
        contents = {q["content"] for q in response.json()["questions"]}
        assert contents == set(MOCK_QUESTIONS[Language.PL])

    def test_snake_case_field_is_accepted(self, client, auth_headers):
        response = client.post(GENERATE_URL, json={"job_posting": ENGLISH_POSTING}, headers=auth_headers)
        assert response.status_code == 201


class TestGenerateValidation:
    """Bad input is rejected with 400 before any generation happens."""

    @pytest.mark.parametrize(
        "body",
        [
            {},
            {"jobPosting": ""},
            {"jobPosting": "Too short to be a real job posting."},
            {"jobPosting": "x" * 10001},
            {"jobPosting": "   " + "a" * 50 + "   " * 30},
            {"jobPosting": 12345},
        ],
    )
    def test_invalid_bodies(self, client, auth_headers, store, body):
        response = client.post(GENERATE_URL, json=body, headers=auth_headers)

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "validation_failed"
        assert data["status_code"] == 400
        assert data["details"]
        assert store.list_by_owner(USER_ID).total == 0

    def test_boundary_lengths_are_accepted(self, client, auth_headers):
        for length in (100, 10000):
            response = client.post(GENERATE_URL, json={"jobPosting": "a" * length}, headers=auth_headers)
            assert response.status_code == 201

    def test_requires_authentication(self, client):
        response = client.post(GENERATE_URL, json={"jobPosting": ENGLISH_POSTING})
        assert response.status_code == 401


class TestGenerateLive:
    @pytest.fixture
    def adapter(self):
        return live_adapter(chat_completion("en"), questions_completion(VALID_QUESTIONS))

    def test_live_generation(self, client, auth_headers):
        response = client.post(GENERATE_URL, json={"jobPosting": ENGLISH_POSTING}, headers=auth_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["demo_mode"] is False
        assert data["message"] == "Questions generated successfully"
        assert [q["content"] for q in data["questions"]] == VALID_QUESTIONS


@pytest.mark.parametrize(
    ("error", "status_code", "error_type"),
    [
        (ProviderError(ErrorCode.API_KEY_INVALID, "Invalid API key", status_code=401), 500, "service_unavailable"),
        (ProviderError(ErrorCode.RATE_LIMIT, "Rate limit exceeded", status_code=429), 429, "rate_limit_exceeded"),
        (ProviderError(ErrorCode.TIMEOUT, "Request timed out"), 500, "generation_timeout"),
        (ProviderError(ErrorCode.SERVER_ERROR, "Bad gateway", status_code=502), 500, "generation_failed"),
        (ProviderError(ErrorCode.UNKNOWN_ERROR, "Failed to generate questions"), 500, "generation_failed"),
    ],
)
def test_generation_errors_map_to_http(client, auth_headers, store, adapter, error, status_code, error_type):
    adapter.backend = LiveBackend(ScriptedTransport(chat_completion("en"), error))

    response = client.post(GENERATE_URL, json={"jobPosting": ENGLISH_POSTING}, headers=auth_headers)

    assert response.status_code == status_code
    data = response.json()
    assert data["error"] == error_type
    assert data["status_code"] == status_code
    assert "Invalid API key" not in data["message"]
    assert store.list_by_owner(USER_ID).total == 0


def test_quality_failure_is_422(client, auth_headers, store, adapter):
    adapter.backend = LiveBackend(ScriptedTransport(chat_completion("en"), questions_completion(VALID_QUESTIONS[:3])))

    response = client.post(GENERATE_URL, json={"jobPosting": ENGLISH_POSTING}, headers=auth_headers)

    assert response.status_code == 422
    assert response.json()["error"] == "generation_quality"
    assert store.list_by_owner(USER_ID).total == 0


class TestGenerateRateLimit:
    def test_limit_per_user(self, client, auth_headers, other_auth_headers):
        for _ in range(3):
            response = client.post(GENERATE_URL, json={"jobPosting": ENGLISH_POSTING}, headers=auth_headers)
            assert response.status_code == 201

        limited = client.post(GENERATE_URL, json={"jobPosting": ENGLISH_POSTING}, headers=auth_headers)
        assert limited.status_code == 429
        assert limited.json()["error"] == "rate_limit_exceeded"
        assert int(limited.headers["Retry-After"]) >= 1

        other = client.post(GENERATE_URL, json={"jobPosting": ENGLISH_POSTING}, headers=other_auth_headers)
        assert other.status_code == 201

    def test_rejected_bodies_do_not_use_up_slots(self, client, auth_headers, rate_limiter):
        for _ in range(rate_limiter.max_requests):
            rejected = client.post(GENERATE_URL, json={"jobPosting": "too short"}, headers=auth_headers)
            assert rejected.status_code == 400

        response = client.post(GENERATE_URL, json={"jobPosting": ENGLISH_POSTING}, headers=auth_headers)

        assert response.status_code == 201
        assert len(rate_limiter.requests[USER_ID]) == 1
