import pytest
from fastapi.testclient import TestClient

from hcw_assistant.main import build_assistant_service, create_app
from hcw_assistant.routers.assistant import GENERIC_ERROR
from hcw_assistant.services.policy.schema import AssistantPolicy

from fixtures.fake_backends import NOW, FakeLLM


def _client(app, service):
    app.state.assistant = service
    return TestClient(app)


@pytest.fixture
def llm():
    return FakeLLM(
        '```json\n{"type": "text", "content": "Today: 2 orders, ₹1500.00 revenue", '
        '"actions": [{"label": "Compare", "query": "Compare today vs yesterday"}], "insights": ["Steady"]}\n```'
    )


@pytest.fixture
def service(seeded_store, session_store, llm):
    svc = build_assistant_service(
        business_store=seeded_store,
        session_store=session_store,
        llm=llm,
        policy=AssistantPolicy(),
        tz_name="UTC",
    )
    svc.clock = lambda: NOW
    return svc


CHAT = "/api/v1/staff-assistant/chat"


def test_chat_returns_envelope_and_logs_exchange(service, session_store, llm):
    with _client(create_app(), service) as client:
        r = client.post(CHAT, json={"message": "What were sales today?", "sessionId": "s-1", "staffUserId": "u-1"})

    assert r.status_code == 200
    body = r.json()
    assert body["sessionId"] == "s-1"
    assert body["timestamp"] == NOW.isoformat()
    assert body["response"]["type"] == "text"
    assert body["response"]["content"] == "Today: 2 orders, ₹1500.00 revenue"
    assert body["response"]["actions"] == [{"label": "Compare", "query": "Compare today vs yesterday"}]
    assert r.headers["x-request-id"]

    assert "- Total Revenue: ₹1500.00" in llm.prompts[0].system
    entries = session_store.rows["s-1"]["session_data"]
    assert entries[0]["userMessage"] == "What were sales today?"


def test_model_failure_still_returns_200_envelope(seeded_store, session_store):
    svc = build_assistant_service(
        business_store=seeded_store,
        session_store=session_store,
        llm=FakeLLM(),
        policy=AssistantPolicy(),
        tz_name="UTC",
    )
    with _client(create_app(), svc) as client:
        r = client.post(CHAT, json={"message": "sales", "sessionId": "s-9", "staffUserId": "u-1"})

    assert r.status_code == 200
    assert len(r.json()["response"]["actions"]) == 4


@pytest.mark.parametrize(
    "body",
    [
        {"sessionId": "s-1", "staffUserId": "u-1"},
        {"message": "   ", "sessionId": "s-1", "staffUserId": "u-1"},
        {"message": "hi", "staffUserId": "u-1"},
    ],
)
def test_invalid_body_gets_400_with_error_envelope(service, body):
    with _client(create_app(), service) as client:
        r = client.post(CHAT, json=body)

    assert r.status_code == 400
    assert r.json()["error"] == GENERIC_ERROR
    assert r.json()["response"]["type"] == "text"


def test_non_json_body_gets_400(service):
    with _client(create_app(), service) as client:
        r = client.post(CHAT, content=b"not json", headers={"content-type": "application/json"})
    assert r.status_code == 400


def test_unexpected_failure_gets_500_with_error_envelope():
    class Broken:
        async def ask(self, **kwargs):
            raise RuntimeError("store exploded")

    with _client(create_app(), Broken()) as client:
        r = client.post(CHAT, json={"message": "hi", "sessionId": "s-1", "staffUserId": "u-1"})

    assert r.status_code == 500
    assert r.json()["error"] == GENERIC_ERROR
    assert r.json()["response"]["content"].startswith("I apologize")


def test_session_history(service):
    with _client(create_app(), service) as client:
        client.post(CHAT, json={"message": "What were sales today?", "sessionId": "s-1", "staffUserId": "u-1"})
        r = client.get("/api/v1/staff-assistant/sessions/s-1")

    assert r.status_code == 200
    body = r.json()
    assert body["sessionId"] == "s-1"
    assert [e["userMessage"] for e in body["exchanges"]] == ["What were sales today?"]


def test_health_reports_loaded_policy(service):
    with _client(create_app(), service) as client:
        r = client.get("/api/v1/health")

    assert r.status_code == 200
    assert r.json() == {"status": "ok", "policy": "hcw_staff_assistant (v1)"}


def test_request_id_is_echoed(service):
    with _client(create_app(), service) as client:
        r = client.get("/api/v1/health", headers={"x-request-id": "req-42"})
    assert r.headers["x-request-id"] == "req-42"


def test_session_history_store_failure_gets_500_with_error_envelope():
    class Broken:
        async def session_history(self, session_id):
            raise ConnectionError("staff_chat_sessions unavailable")

    with _client(create_app(), Broken()) as client:
        r = client.get("/api/v1/staff-assistant/sessions/s-1")

    assert r.status_code == 500
    assert r.json()["error"] == GENERIC_ERROR
    assert r.json()["response"]["type"] == "text"
