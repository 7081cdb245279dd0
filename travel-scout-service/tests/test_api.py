"""
Web API Tests
=============

Purpose
-------
Exercise the HTTP contract end to end with FastAPI's TestClient:
- 200 with grounded results, including the empty case
- 400 for invalid and undecodable bodies, with no model call
- 429 after the per-client budget is spent, with no model call
- 500 for gateway and unexpected failures

Scope
-----
- `llm.generate` is monkeypatched; nothing leaves the process.
"""

# -----------------------------------------------------------------------------
# Libraries
# -----------------------------------------------------------------------------

# Third-party libraries
import pytest                                # Pytest framework for isolated and reproducible testing
from fastapi.testclient import TestClient    # In-process HTTP client

# Local modules
import app                                   # Application under test
import llm                                   # Gateway patched per test
from errors import AIGatewayError

# ----------------------------
# Fixtures
# ----------------------------

@pytest.fixture
def client():
    return TestClient(app.app)

@pytest.fixture
def model_reply(monkeypatch):
    """Install a canned model reply and count gateway calls."""
    state = {"calls": 0, "reply": "[]"}

    def fake_generate(prompt, instruction, general_cfg=None):
        state["calls"] += 1
        if isinstance(state["reply"], Exception):
            raise state["reply"]
        return state["reply"]

    monkeypatch.setattr(llm, "generate", fake_generate)
    return state

# ----------------------------
# Success Paths
# ----------------------------

def test_beach_request_end_to_end(client, model_reply):
    model_reply["reply"] = '[{"id":4,"reason":"matches beach and budget"}]'
    resp = client.post("/api/search", json={"prompt": "a chilled beach weekend under $100"})

    assert resp.status_code == 200
    assert resp.json() == {
        "results": [
            {
                "id": 4,
                "title": "Surf & Chill Retreat",
                "location": "Arugam Bay",
                "price": 80,
                "tags": ["beach", "surfing", "young-vibe"],
                "reason": "matches beach and budget",
            }
        ]
    }

def test_empty_match_is_success(client, model_reply):
    model_reply["reply"] = "[]"
    resp = client.post("/api/search", json={"prompt": "ski trip in Norway"})
    assert resp.status_code == 200
    assert resp.json() == {"results": []}

def test_unknown_ids_never_reach_the_client(client, model_reply):
    model_reply["reply"] = '{"matches":[{"id":99,"reason":"invented"},{"id":3,"reason":"safari"}]}'
    resp = client.post("/api/search", json={"prompt": "wildlife"})
    assert resp.status_code == 200
    assert [r["id"] for r in resp.json()["results"]] == [3]

def test_health(client):
    assert client.get("/health").json() == {"ok": True}

def test_inventory_listing(client):
    items = client.get("/api/inventory").json()["items"]
    assert [i["id"] for i in items] == [1, 2, 3, 4, 5]

# ----------------------------
# Validation Failures
# ----------------------------

@pytest.mark.parametrize(
    "payload, message",
    [
        ({}, "prompt is required"),
        ({"prompt": ""}, "prompt cannot be empty"),
        ({"prompt": "a" * 501}, "prompt must be 500 characters or fewer"),
        ({"prompt": ["beach"]}, "prompt must be a string"),
    ],
)
def test_invalid_body_is_rejected_without_model_call(client, model_reply, payload, message):
    resp = client.post("/api/search", json=payload)
    assert resp.status_code == 400
    assert resp.json() == {"error": message}
    assert model_reply["calls"] == 0

def test_undecodable_body_counts_as_empty_object(client, model_reply):
    resp = client.post("/api/search", content=b"not json", headers={"content-type": "application/json"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "prompt is required"}
    assert model_reply["calls"] == 0

# ----------------------------
# Rate Limiting
# ----------------------------

def test_sixth_request_in_window_is_throttled(client, model_reply):
    headers = {"X-Forwarded-For": "203.0.113.9, 10.0.0.1"}
    for _ in range(5):
        assert client.post("/api/search", json={"prompt": "beach"}, headers=headers).status_code == 200

    resp = client.post("/api/search", json={"prompt": "beach"}, headers=headers)
    assert resp.status_code == 429
    assert resp.json()["error"].startswith("Too many requests")
    assert int(resp.headers["Retry-After"]) > 0
    assert model_reply["calls"] == 5

def test_other_clients_are_not_affected(client, model_reply):
    for _ in range(6):
        client.post("/api/search", json={"prompt": "beach"}, headers={"X-Real-IP": "198.51.100.1"})
    resp = client.post("/api/search", json={"prompt": "beach"}, headers={"X-Real-IP": "198.51.100.2"})
    assert resp.status_code == 200

def test_throttling_happens_before_validation(client, model_reply):
    headers = {"X-Forwarded-For": "192.0.2.44"}
    for _ in range(5):
        assert client.post("/api/search", json={}, headers=headers).status_code == 400
    assert client.post("/api/search", json={}, headers=headers).status_code == 429

# ----------------------------
# Server Failures
# ----------------------------

def test_gateway_error_is_500_with_message(client, model_reply):
    model_reply["reply"] = AIGatewayError("provider unavailable")
    resp = client.post("/api/search", json={"prompt": "beach"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "provider unavailable"}

def test_unexpected_error_is_500(client, model_reply):
    model_reply["reply"] = RuntimeError("boom")
    resp = client.post("/api/search", json={"prompt": "beach"})
    assert resp.status_code == 500
    assert resp.json() == {"error": "boom"}
