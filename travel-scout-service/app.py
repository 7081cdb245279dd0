"""
Travel Scout Service
====================

Overview
--------
Grounded travel search over a small fixed inventory. A free-text request is
matched by an LLM against the embedded catalog, and only verified picks are
returned, each with the model's one-sentence justification.

Design Principles
-----------------
- Prompts and configuration externalized in `prompts/settings.toml`
- Grounded answers: the full inventory is embedded in the system instruction
- Untrusted model output is whitelisted against inventory ids before use
- Malformed model output degrades to fewer results, never to an error
- Per-client fixed-window throttling held in process memory

Runtime Contract
----------------
POST /api/search with {"prompt": str} returns {"results": [...]}. Every
failure answers {"error": str} with 400, 429 or 500.

Usage
-----
    python app.py          # Web API
    python app.py --cli    # Interactive console search
"""

# -----------------------------------------------------------------------------
# Libraries
# -----------------------------------------------------------------------------

# Standard libraries
import os                                                # Environment variables
import sys                                               # Command-line mode selection
import asyncio                                           # Run the blocking model call off the event loop
import logging                                           # Service diagnostics
from datetime import datetime                            # Timestamp labels for console I/O

# Third-party libraries
from rich import print                                   # Styled console output for readability
from rich.logging import RichHandler                     # Readable log lines on the console
from rich.prompt import Prompt                           # Console input for the CLI mode
from fastapi import FastAPI, Request                     # Web API framework
from fastapi.responses import JSONResponse               # Explicit status codes and {"error": ...} bodies
import uvicorn                                           # ASGI server for running FastAPI apps

# Local modules
from config import get_config                            # Cached, validated settings.toml
from errors import RateLimitError, SearchError           # Pipeline error taxonomy
from inventory import get_inventory                      # Fixed catalog
from rate_limiter import RateLimiter, client_id_from_headers
from search import run_search, validate_request          # Validation and grounded search

# -----------------------------------------------------------------------------
# Configuration bootstrap
# -----------------------------------------------------------------------------

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(message)s",
    datefmt="[%X]",
    handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
)
logger = logging.getLogger("travel_scout")

# Fail fast on a broken settings file before serving any request
CONFIG = get_config()

RATE_LIMIT_MESSAGE = "Too many requests. Please wait a moment before trying again."

# One limiter per process, shared by every request handler
rate_limiter = RateLimiter(
    limit=CONFIG["rate_limit"]["limit"],
    window_seconds=CONFIG["rate_limit"]["window_seconds"],
)

# -----------------------------------------------------------------------------
# Utilities
# -----------------------------------------------------------------------------

def timestamp_str() -> str:
    """Current local time as 'YYYY-MM-DD HH:MM:SS' for console lines."""
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")

def error_response(err: SearchError) -> JSONResponse:
    """Convert a pipeline error into the structured error body."""
    headers = None
    if isinstance(err, RateLimitError) and err.retry_after:
        headers = {"Retry-After": str(err.retry_after)}
    return JSONResponse({"error": err.message}, status_code=err.status_code, headers=headers)

# -----------------------------------------------------------------------------
# Web API interface
# -----------------------------------------------------------------------------

app = FastAPI(title="Travel Scout Service")

@app.get("/health")
def health() -> dict:
    """
    Health check endpoint

    Returns
    -------
    dict
        JSON object confirming that the service is running
    """
    return {"ok": True}

@app.get("/api/inventory")
def inventory() -> dict:
    """Expose the fixed catalog read-only."""
    return {"items": [item.model_dump(mode="json") for item in get_inventory()]}

@app.post("/api/search")
async def search(request: Request) -> JSONResponse:
    """
    Handle a grounded travel search.

    Runtime behavior
    ----------------
    1. Throttle by client identity before any other work.
    2. Decode the body; undecodable JSON counts as an empty object.
    3. Validate the prompt.
    4. Run the search pipeline in a worker thread. The limiter lock is not
       held while the model call is in flight.

    Every handled failure becomes {"error": ...}. Nothing propagates past
    this boundary.
    """
    client_id = client_id_from_headers(request.headers)
    try:
        if not rate_limiter.check_and_record(client_id):
            logger.warning("Rate limit exceeded for client %s", client_id)
            raise RateLimitError(RATE_LIMIT_MESSAGE, retry_after=rate_limiter.retry_after(client_id))

        try:
            body = await request.json()
        except ValueError:
            body = {}

        req = validate_request(body)
        response = await asyncio.to_thread(run_search, req.prompt)
        return JSONResponse(response.model_dump(mode="json"))

    except SearchError as err:
        if err.status_code >= 500:
            logger.error("Search failed for client %s: %s", client_id, err.message)
        elif err.status_code == 400:
            logger.info("Rejected request from %s: %s", client_id, err.message)
        return error_response(err)
    except Exception as err:
        logger.exception("Unexpected error in /api/search")
        return JSONResponse({"error": str(err)[:200] or "Internal server error"}, status_code=500)

# -----------------------------------------------------------------------------
# Command-line interface
# -----------------------------------------------------------------------------

def run_cli_search_session() -> None:
    """
    Run searches interactively from the console.

    Each line is validated and searched exactly like a web request, minus
    throttling. An empty line, "exit", Ctrl-C or Ctrl-D ends the session.
    """
    print(f"[Scout] {timestamp_str()} : Describe the trip you have in mind.")
    while True:
        try:
            text = Prompt.ask(f"[Client] {timestamp_str()}", default="", show_default=False)
        except (EOFError, KeyboardInterrupt):
            print()
            return

        if not text.strip() or text.strip().lower() in {"exit", "quit"}:
            return

        try:
            req = validate_request({"prompt": text})
            response = run_search(req.prompt)
        except SearchError as err:
            print(f"[red][Scout] {timestamp_str()} : {err.message}[/red]")
            continue

        if not response.results:
            print(f"[Scout] {timestamp_str()} : Nothing in the inventory matches that request.")
            continue

        for result in response.results:
            print(
                f"[bold]{result.title}[/bold] - {result.location} - "
                f"${result.price:g} [dim]({', '.join(result.tags)})[/dim]\n  {result.reason}"
            )

# -----------------------------------------------------------------------------
# Application entrypoint
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    if "--cli" in sys.argv:
        run_cli_search_session()
    else:
        port = int(os.getenv("PORT", os.getenv("BACKEND_PORT", "8000")))
        uvicorn.run("app:app", host="0.0.0.0", port=port)
