"""
AI Gateway
==========

Overview
--------
Thin wrapper over the OpenAI Chat Completions API. Sends the grounded system
instruction plus the user's request and returns the raw reply text, which is
treated as untrusted and handed to the sanitizer.

Design Principles
-----------------
- Model, temperature, and timeout come from `prompts/settings.toml`
- A single attempt per request; failures surface as AIGatewayError
- JSON response mode whenever the configured model supports it
- Missing API key fails at import so the service never runs ungrounded

Runtime Contract
----------------
    generate(prompt: str, instruction: str, general_cfg: dict | None) -> str
"""

# -----------------------------------------------------------------------------
# Libraries
# -----------------------------------------------------------------------------

# Standard libraries
import os                                                # Environment variables
import logging                                           # Gateway failure diagnostics
from typing import Optional                              # Type hints for clarity and safety

# Third-party libraries
from dotenv import load_dotenv                           # Load environment variables
from openai import OpenAI, OpenAIError                   # Official OpenAI Python SDK

# Local modules
from config import get_config                            # Cached settings.toml
from errors import AIGatewayError                        # Provider failure surfaced to the endpoint

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Client bootstrap
# -----------------------------------------------------------------------------

# Load secrets from environment (e.g., OPENAI_API_KEY). Model params come from TOML.
load_dotenv()

API_KEY = os.getenv("OPENAI_API_KEY")
if not API_KEY:
    raise RuntimeError("OPENAI_API_KEY environment variable is required but not set.")

client = OpenAI(api_key=API_KEY)

# Reply used when the provider answers without any text
EMPTY_REPLY = "[]"

# Models known to support response_format={"type":"json_object"}
JSON_MODE_MODELS = {
    "gpt-4o",
    "gpt-4o-2024-05-13",
    "gpt-4o-2024-08-06",
    "gpt-4o-mini",
    "gpt-4o-mini-2024-07-18",
    "gpt-4.1-mini",
}

# -----------------------------------------------------------------------------
# LLM interaction
# -----------------------------------------------------------------------------

def generate(prompt: str, instruction: str, general_cfg: Optional[dict] = None) -> str:
    """
    Ask the model to pick inventory items for a travel request.

    Parameters
    ----------
    prompt : str
        The validated user request, sent as the user message.
    instruction : str
        Grounded system instruction embedding the inventory.
    general_cfg : dict, optional
        The [general] section of settings.toml. Must include 'model',
        'temperature' and 'request_timeout'. Defaults to the cached config.

    Returns
    -------
    str
        Raw text of the assistant reply, or "[]" when the provider returns no
        text at all.

    Raises
    ------
    AIGatewayError
        When the request fails for any transport or provider reason. There is
        no retry.
    """
    if general_cfg is None:
        general_cfg = get_config()["general"]

    model = general_cfg["model"]
    kwargs = {
        "model": model,
        "messages": [
            {"role": "system", "content": instruction},
            {"role": "user", "content": prompt},
        ],
        "temperature": float(general_cfg["temperature"]),
        "timeout": float(general_cfg["request_timeout"]),
    }
    if model in JSON_MODE_MODELS:
        kwargs["response_format"] = {"type": "json_object"}

    try:
        resp = client.chat.completions.create(**kwargs)
    except OpenAIError as err:
        logger.error("Model request failed (%s): %s", model, err)
        raise AIGatewayError(str(err)[:200] or "The model could not process the request.") from err

    if not resp.choices:
        return EMPTY_REPLY
    return resp.choices[0].message.content or EMPTY_REPLY
