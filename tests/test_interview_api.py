import pytest
from fastapi.testclient import TestClient

import main
from candidex.api.dependencies import get_orchestrator
from candidex.core.exceptions import ConfigurationError

from conftest import QUESTIONS, FakeProvider, evaluation_payload

ANSWERS = ["An answer with enough detail to be useful."] * 5
ALICE = {"X-User-Id": "alice"}


@pytest.fixture
def api(make_orchestrator):
    """TestClient wired to an orchestrator backed by a fake provider."""
    def _make(provider=None, max_requests=5):
        orchestrator, provider = make_orchestrator(provider, max_requests=max_requests)
        main.app.dependency_overrides[get_orchestrator] = lambda: orchestrator
        return TestClient(main.app), provider

    yield _make
    main.app.dependency_overrides.clear()


def start(client, headers=ALICE, role="Backend Engineer", difficulty="medium"):
    return client.post(
        "/api/interview/start",
        json={"role": role, "difficulty": difficulty},
        headers=headers,
    )


def test_start_returns_questions(api):
    client, _ = api()

    response = start(client)

    assert response.status_code == 201
    body = response.json()
    assert body["questions"] == QUESTIONS
    assert body["difficulty"] == "medium"
    assert body["session_id"]
    assert "ai_usage" not in body


@pytest.mark.parametrize("payload", [{"role": "Engineer", "difficulty": "expert"}, {"role": " ", "difficulty": "easy"}])
def test_start_rejects_invalid_input(api, payload):
    client, provider = api()

    response = client.post("/api/interview/start", json=payload, headers=ALICE)

    assert response.status_code == 400
    assert provider.calls == []


def test_sixth_ai_request_is_rate_limited(api):
    client, provider = api()

    statuses = [start(client).status_code for _ in range(6)]

    assert statuses == [201] * 5 + [429]
    assert len(provider.calls) == 5


def test_rate_limit_response_has_retry_after(api):
    client, _ = api(max_requests=1)
    start(client)

    response = start(client)

    assert response.status_code == 429
    assert response.headers["Retry-After"] == "60"
    assert "Maximum 1 AI requests per minute" in response.json()["detail"]


def test_submit_returns_evaluation(api):
    client, _ = api()
    session_id = start(client).json()["session_id"]

    response = client.post(
        "/api/interview/submit",
        json={"session_id": session_id, "answers": ANSWERS},
        headers=ALICE,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["overall_score"] == 80
    assert len(body["evaluation"]["per_question"]) == 5
    assert body["strongest_question_index"] == 0
    assert body["weakest_question_index"] == 0


def test_submit_wrong_answer_count_is_bad_request(api):
    client, _ = api()
    session_id = start(client).json()["session_id"]

    response = client.post(
        "/api/interview/submit",
        json={"session_id": session_id, "answers": ANSWERS[:2]},
        headers=ALICE,
    )

    assert response.status_code == 400


def test_submit_foreign_session_is_not_found(api):
    client, _ = api()
    session_id = start(client).json()["session_id"]

    response = client.post(
        "/api/interview/submit",
        json={"session_id": session_id, "answers": ANSWERS},
        headers={"X-User-Id": "mallory"},
    )

    assert response.status_code == 404


def test_submit_per_question_mismatch_is_bad_gateway(api):
    client, _ = api(FakeProvider(evaluation=evaluation_payload(2)))
    session_id = start(client).json()["session_id"]

    response = client.post(
        "/api/interview/submit",
        json={"session_id": session_id, "answers": ANSWERS},
        headers=ALICE,
    )

    assert response.status_code == 502
    assert "perQuestionEvaluations" not in response.text


def test_history_and_analytics(api):
    client, _ = api()
    session_id = start(client).json()["session_id"]
    client.post(
        "/api/interview/submit",
        json={"session_id": session_id, "answers": ANSWERS},
        headers=ALICE,
    )
    start(client)

    history = client.get("/api/interview/history", headers=ALICE).json()
    analytics = client.get("/api/interview/analytics", headers=ALICE).json()

    assert len(history) == 2
    assert analytics["total_interviews"] == 1
    assert analytics["average_score"] == 80
    assert analytics["strongest_skill"] == "clarity"
    assert analytics["trend"] == "stable"
    assert [p["score"] for p in analytics["last_five"]] == [80]

    assert client.get("/api/interview/history", headers={"X-User-Id": "bob"}).json() == []


def test_health_reports_unconfigured_provider(monkeypatch):
    def unconfigured():
        raise ConfigurationError("OPENAI_API_KEY is not set")

    monkeypatch.setattr(main, "get_gateway", unconfigured)

    response = TestClient(main.app).get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"


def test_health_reports_configured_provider(monkeypatch):
    monkeypatch.setattr(main, "get_gateway", lambda: object())

    response = TestClient(main.app).get("/health")

    assert response.status_code == 200
    assert response.json()["provider"] == "configured"


def test_startup_fails_fast_without_provider_key(monkeypatch):
    def unconfigured():
        raise ConfigurationError("OPENAI_API_KEY is not set")

    monkeypatch.setattr(main, "get_gateway", unconfigured)

    with pytest.raises(ConfigurationError):
        with TestClient(main.app):
            pass
