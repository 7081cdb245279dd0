"""
Response Sanitizer
==================

Overview
--------
Turns untrusted model text into inventory-safe matches. Decoding happens in
two stages: a syntactic JSON parse, then semantic validation against the ID
whitelist and the `{id, reason}` shape.

Degrade Policy
--------------
1. Unparseable text yields no matches.
2. A bare array is used directly. An object is searched for its first array
   value, which tolerates envelopes such as {"matches": [...]}.
3. The whole candidate list is validated strictly.
4. If strict validation fails, each element is validated on its own and only
   the conforming ones are kept. One malformed element never suppresses the
   valid ones.

The outcome is a tagged value (valid, partial, empty). This module never
raises on model output.

Runtime Contract
----------------
    sanitize(raw_text: str, valid_ids: frozenset[int] | None) -> SanitizeOutcome
"""

# -----------------------------------------------------------------------------
# Libraries
# -----------------------------------------------------------------------------

# Python future features
from __future__ import annotations                 # Postponed evaluation of type annotations

# Standard libraries
import json                                        # Syntactic decode of the model reply
import re                                          # Markdown code fence detection
from dataclasses import dataclass                  # Immutable outcome container
from enum import Enum                              # Outcome tags
from typing import Any, FrozenSet, List, Optional, Tuple

# Third-party libraries
from pydantic import (                             # Schema validation for untrusted matches
    BaseModel,
    ConfigDict,
    StrictStr,
    TypeAdapter,
    ValidationError,
    ValidationInfo,
    field_validator,
)

# Local modules
from inventory import valid_ids as inventory_ids

# Some models wrap JSON in ```json ... ``` fences despite JSON mode
_FENCE_RE = re.compile(r"^```[a-zA-Z]*\s*(.*?)\s*```$", re.DOTALL)

# -----------------------------------------------------------------------------
# Data models
# -----------------------------------------------------------------------------

def coerce_id(value: Any) -> Optional[int]:
    """
    Normalize a model-supplied identifier to int.

    Accepts ints and integral floats (4.0). Rejects booleans, strings, and
    anything else by returning None.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None

class AiMatch(BaseModel):
    """
    One item pick proposed by the model.

    Validation context may carry "valid_ids"; without it the inventory
    whitelist applies.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    reason: StrictStr

    @field_validator("id", mode="before")
    @classmethod
    def _integral_id(cls, value: Any) -> int:
        coerced = coerce_id(value)
        if coerced is None:
            raise ValueError("id must be an integer")
        return coerced

    @field_validator("id")
    @classmethod
    def _known_id(cls, value: int, info: ValidationInfo) -> int:
        allowed = (info.context or {}).get("valid_ids")
        if allowed is None:
            allowed = inventory_ids()
        if value not in allowed:
            raise ValueError("id is not in the inventory")
        return value

    @field_validator("reason")
    @classmethod
    def _non_blank_reason(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("reason must not be empty")
        return value

_MATCH_LIST = TypeAdapter(List[AiMatch])

class MatchStatus(str, Enum):
    """How much of the model reply survived validation."""
    VALID = "valid"
    PARTIAL = "partial"
    EMPTY = "empty"

@dataclass(frozen=True)
class SanitizeOutcome:
    status: MatchStatus
    matches: Tuple[AiMatch, ...] = ()

_EMPTY = SanitizeOutcome(status=MatchStatus.EMPTY)

# -----------------------------------------------------------------------------
# Decoding
# -----------------------------------------------------------------------------

def parse_json_or_none(raw: Any) -> Any:
    """
    Parse model text as JSON.

    Strategy
    --------
    1. Attempt direct json.loads
    2. Strip a surrounding Markdown code fence and parse again

    Returns
    -------
    Any
        The decoded value, or None when neither attempt succeeds.
    """
    if not isinstance(raw, str):
        return None
    s = raw.strip()

    try:
        return json.loads(s)
    except (ValueError, RecursionError):
        pass

    fenced = _FENCE_RE.match(s)
    if fenced:
        try:
            return json.loads(fenced.group(1))
        except (ValueError, RecursionError):
            pass
    return None

def extract_candidates(parsed: Any) -> list:
    """Return the list of candidate matches from a bare array or an envelope object."""
    if isinstance(parsed, list):
        return parsed
    if isinstance(parsed, dict):
        return next((value for value in parsed.values() if isinstance(value, list)), [])
    return []

# -----------------------------------------------------------------------------
# Validation
# -----------------------------------------------------------------------------

def sanitize(raw_text: Any, valid_ids: Optional[FrozenSet[int]] = None) -> SanitizeOutcome:
    """
    Validate raw model output against the inventory whitelist.

    Parameters
    ----------
    raw_text : str
        Reply text exactly as returned by the gateway.
    valid_ids : frozenset of int, optional
        Whitelist of acceptable ids. Defaults to the inventory ids.

    Returns
    -------
    SanitizeOutcome
        VALID when the whole list conformed, PARTIAL when only some elements
        did, EMPTY when nothing usable remained. Matches keep the model's
        order.
    """
    context = {"valid_ids": valid_ids if valid_ids is not None else inventory_ids()}

    candidates = extract_candidates(parse_json_or_none(raw_text))
    if not candidates:
        return _EMPTY

    try:
        strict = _MATCH_LIST.validate_python(candidates, context=context)
        return SanitizeOutcome(status=MatchStatus.VALID, matches=tuple(strict))
    except ValidationError:
        pass

    # Lenient pass: keep each element that conforms on its own
    kept = []
    for element in candidates:
        try:
            kept.append(AiMatch.model_validate(element, context=context))
        except ValidationError:
            continue

    if not kept:
        return _EMPTY
    return SanitizeOutcome(status=MatchStatus.PARTIAL, matches=tuple(kept))
