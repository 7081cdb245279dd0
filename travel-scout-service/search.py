"""
Search Pipeline
===============

Overview
--------
Validates an inbound travel request, asks the model for grounded picks, and
joins the surviving picks back to full inventory records.

Business Flow
-------------
1) Validate the request body (first violated rule wins).
2) Build the grounded instruction from the inventory.
3) Call the AI gateway once.
4) Sanitize the reply against the inventory whitelist.
5) Assemble results in the model's order, attaching its reasons.

Rate limiting happens before step 1, in the web layer.
"""

# -----------------------------------------------------------------------------
# Libraries
# -----------------------------------------------------------------------------

# Python future features
from __future__ import annotations                 # Postponed evaluation of type annotations

# Standard libraries
import logging                                     # Pipeline diagnostics
from typing import Any, Iterable, List, Optional

# Third-party libraries
from pydantic import BaseModel                     # Request and response payloads

# Local modules
import llm                                         # AI gateway (module import keeps it patchable)
from config import get_config                      # Prompt length limit
from errors import PromptValidationError           # Client input errors
from grounding import build_instruction            # Grounded system instruction
from inventory import get_inventory, get_item      # Catalog access
from sanitizer import AiMatch, sanitize            # Untrusted output validation

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Data models
# -----------------------------------------------------------------------------

class SearchRequest(BaseModel):
    prompt: str

class SearchResult(BaseModel):
    """An inventory record enriched with the model's justification."""
    id: int
    title: str
    location: str
    price: float
    tags: List[str]
    reason: str

class SearchResponse(BaseModel):
    results: List[SearchResult]

# -----------------------------------------------------------------------------
# Request validation
# -----------------------------------------------------------------------------

def validate_request(raw: Any, max_chars: Optional[int] = None) -> SearchRequest:
    """
    Check an already-decoded request body.

    Parameters
    ----------
    raw : Any
        Decoded JSON body. Anything that is not an object is treated as an
        empty object.
    max_chars : int, optional
        Upper bound on the trimmed prompt length. Defaults to
        `search.max_prompt_chars` from settings.toml.

    Returns
    -------
    SearchRequest
        Request carrying the trimmed prompt.

    Raises
    ------
    PromptValidationError
        Describing the first violated rule: missing, wrong type, empty,
        or too long.
    """
    if max_chars is None:
        max_chars = int(get_config()["search"]["max_prompt_chars"])
    body = raw if isinstance(raw, dict) else {}

    if "prompt" not in body or body["prompt"] is None:
        raise PromptValidationError("prompt is required")

    prompt = body["prompt"]
    if not isinstance(prompt, str):
        raise PromptValidationError("prompt must be a string")

    prompt = prompt.strip()
    if not prompt:
        raise PromptValidationError("prompt cannot be empty")
    if len(prompt) > max_chars:
        raise PromptValidationError(f"prompt must be {max_chars} characters or fewer")

    return SearchRequest(prompt=prompt)

# -----------------------------------------------------------------------------
# Result assembly
# -----------------------------------------------------------------------------

def assemble(matches: Iterable[AiMatch]) -> List[SearchResult]:
    """Join validated matches to inventory records, dropping any unknown id."""
    results = []
    for match in matches:
        item = get_item(match.id)
        if item is None:
            continue
        results.append(SearchResult(**item.model_dump(), reason=match.reason))
    return results

# -----------------------------------------------------------------------------
# Orchestration
# -----------------------------------------------------------------------------

def run_search(prompt: str) -> SearchResponse:
    """
    Run the grounded search for an already validated prompt.

    Raises
    ------
    AIGatewayError
        When the model call fails. Malformed model output never raises; it
        only shrinks the result list.
    """
    instruction = build_instruction(get_inventory())
    raw = llm.generate(prompt, instruction)

    outcome = sanitize(raw)
    results = assemble(outcome.matches)
    logger.info(
        "Search finished: prompt_len=%d status=%s results=%d",
        len(prompt), outcome.status.value, len(results),
    )
    return SearchResponse(results=results)
