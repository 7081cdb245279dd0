"""
Search Pipeline Tests
=====================

Purpose
-------
Validate request validation rules, result assembly, and the orchestrated
pipeline with the AI gateway stubbed out.

Scope
-----
- Does NOT call external APIs or LLMs. `llm.generate` is monkeypatched.
"""

# -----------------------------------------------------------------------------
# Libraries
# -----------------------------------------------------------------------------

# Third-party libraries
import pytest             # Pytest framework for isolated and reproducible testing

# Local modules
import llm                # Gateway patched in pipeline tests
import search             # Module under test
from errors import AIGatewayError, PromptValidationError
from sanitizer import AiMatch

# ----------------------------
# Unit Test: Request Validation
# ----------------------------

@pytest.mark.parametrize("length", [1, 2, 250, 499, 500])
def test_prompts_within_bounds_are_accepted(length):
    req = search.validate_request({"prompt": "a" * length})
    assert req.prompt == "a" * length

def test_prompt_is_trimmed():
    assert search.validate_request({"prompt": "  beach  "}).prompt == "beach"

@pytest.mark.parametrize(
    "raw, message",
    [
        ({}, "prompt is required"),
        ({"prompt": None}, "prompt is required"),
        ({"query": "beach"}, "prompt is required"),
        ([], "prompt is required"),
        ("beach", "prompt is required"),
        (None, "prompt is required"),
        ({"prompt": 42}, "prompt must be a string"),
        ({"prompt": ""}, "prompt cannot be empty"),
        ({"prompt": "   \n\t"}, "prompt cannot be empty"),
        ({"prompt": "a" * 501}, "prompt must be 500 characters or fewer"),
    ],
)
def test_invalid_requests_report_first_violation(raw, message):
    with pytest.raises(PromptValidationError) as excinfo:
        search.validate_request(raw)
    assert excinfo.value.message == message
    assert excinfo.value.status_code == 400

def test_length_is_measured_after_trimming():
    padded = "  " + "a" * 500 + "  "
    assert len(search.validate_request({"prompt": padded}).prompt) == 500

def test_custom_max_chars():
    with pytest.raises(PromptValidationError, match="10 characters or fewer"):
        search.validate_request({"prompt": "a" * 11}, max_chars=10)

# ----------------------------
# Unit Test: Result Assembly
# ----------------------------

def test_assemble_joins_inventory_fields_and_reason():
    results = search.assemble([AiMatch(id=2, reason="old fort walk")])
    assert len(results) == 1
    r = results[0]
    assert (r.id, r.title, r.location, r.price) == (2, "Coastal Heritage Wander", "Galle Fort", 45)
    assert r.tags == ["history", "culture", "walking"]
    assert r.reason == "old fort walk"

def test_assemble_preserves_model_order():
    matches = [AiMatch(id=5, reason="a"), AiMatch(id=1, reason="b"), AiMatch(id=3, reason="c")]
    assert [r.id for r in search.assemble(matches)] == [5, 1, 3]

def test_assemble_drops_unknown_ids():
    """Defensive re-check even if an unvalidated match slips through."""
    rogue = AiMatch.model_construct(id=99, reason="made up")
    results = search.assemble([rogue, AiMatch(id=4, reason="beach")])
    assert [r.id for r in results] == [4]

# ----------------------------
# Pipeline Tests
# ----------------------------

def test_run_search_grounds_the_model_and_returns_results(monkeypatch):
    calls = {}

    def fake_generate(prompt, instruction, general_cfg=None):
        calls["prompt"] = prompt
        calls["instruction"] = instruction
        return '[{"id":4,"reason":"matches beach and budget"}]'

    monkeypatch.setattr(llm, "generate", fake_generate)
    response = search.run_search("a chilled beach weekend under $100")

    assert calls["prompt"] == "a chilled beach weekend under $100"
    assert "Surf & Chill Retreat" in calls["instruction"]
    assert response.model_dump() == {
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

def test_run_search_with_no_matches(monkeypatch):
    monkeypatch.setattr(llm, "generate", lambda prompt, instruction, general_cfg=None: "[]")
    assert search.run_search("skiing in the Alps").results == []

def test_run_search_with_garbage_output(monkeypatch):
    monkeypatch.setattr(llm, "generate", lambda prompt, instruction, general_cfg=None: "I cannot help")
    assert search.run_search("anything").results == []

def test_run_search_propagates_gateway_errors(monkeypatch):
    def failing(prompt, instruction, general_cfg=None):
        raise AIGatewayError("provider unavailable")

    monkeypatch.setattr(llm, "generate", failing)
    with pytest.raises(AIGatewayError):
        search.run_search("beach")
