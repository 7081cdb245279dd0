"""
Error Taxonomy
==============

Exceptions raised along the search pipeline. Each carries the HTTP status the
endpoint should answer with and a client-safe message, so the web layer can
convert them to a `{"error": ...}` body without inspecting the concrete type.

Malformed model output is intentionally absent from this module: it never
becomes an error and only degrades the result set (see `sanitizer.py`).
"""

# -----------------------------------------------------------------------------
# Exceptions
# -----------------------------------------------------------------------------

class SearchError(Exception):
    """Base class for failures that end a search request early."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class PromptValidationError(SearchError):
    """The inbound request body violates the prompt constraints."""

    status_code = 400


class RateLimitError(SearchError):
    """The client exhausted its request budget for the current window."""

    status_code = 429

    def __init__(self, message: str, retry_after: int = 0) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class AIGatewayError(SearchError):
    """The model provider could not be reached or returned an error."""

    status_code = 500
