"""
Configuration Loader
====================

Overview
--------
Reads `prompts/settings.toml` once per process and validates it before any
request is served. Model selection, sampling parameters, rate-limit budgets,
prompt limits, and the grounding instruction template all live in that file.

Secrets never live in TOML. The provider API key is read from the environment
(optionally populated from a `.env` file) by the gateway module.
"""

# -----------------------------------------------------------------------------
# Libraries
# -----------------------------------------------------------------------------

# Standard libraries
import os                                                # Path handling for the settings file
from functools import lru_cache                          # Load the configuration once per process

# Third-party libraries
import tomli                                             # TOML parser for configuration and prompts

# -----------------------------------------------------------------------------
# Paths
# -----------------------------------------------------------------------------

ROOT = os.path.dirname(os.path.abspath(__file__))
TOML_PATH = os.path.join(ROOT, "prompts", "settings.toml")

# Placeholder replaced with the serialized inventory in the instruction template
INVENTORY_PLACEHOLDER = "{{inventory}}"

# -----------------------------------------------------------------------------
# Loaders
# -----------------------------------------------------------------------------

def load_config(path: str = TOML_PATH) -> dict:
    """
    Load and validate the application configuration from `settings.toml`.

    Contract
    --------
    Required keys:
      - [general]: chat_models (list), model (str), temperature (float/int),
        request_timeout (float/int)
      - [rate_limit]: limit (int), window_seconds (float/int)
      - [search]: max_prompt_chars (int)
      - [prompts]: travel_scout (str containing the {{inventory}} placeholder)

    Parameters
    ----------
    path : str
        Location of the TOML file. Defaults to the bundled settings.

    Returns
    -------
    dict
        Parsed TOML with every section above present.

    Raises
    ------
    RuntimeError
        If a section or key is missing or holds an invalid value.
    """
    with open(path, "rb") as f:
        cfg = tomli.load(f)

    for section in ("general", "rate_limit", "search", "prompts"):
        if section not in cfg:
            raise RuntimeError(f"settings.toml must include a [{section}] section.")

    # Model governance and sampling parameters
    g = cfg["general"]
    for key in ("chat_models", "model", "temperature", "request_timeout"):
        if key not in g:
            raise RuntimeError(f"settings.toml missing required key general.{key}")

    allowed = g["chat_models"]
    if not isinstance(allowed, list) or g["model"] not in allowed:
        raise RuntimeError(f"general.model must be one of general.chat_models: {allowed}")

    if not 0 <= float(g["temperature"]) <= 2:
        raise RuntimeError("general.temperature must be between 0 and 2")

    if float(g["request_timeout"]) <= 0:
        raise RuntimeError("general.request_timeout must be positive")

    # Per-client throttling budget
    rl = cfg["rate_limit"]
    for key in ("limit", "window_seconds"):
        if key not in rl:
            raise RuntimeError(f"settings.toml missing required key rate_limit.{key}")
    if int(rl["limit"]) < 1 or float(rl["window_seconds"]) <= 0:
        raise RuntimeError("rate_limit.limit and rate_limit.window_seconds must be positive")

    s = cfg["search"]
    if "max_prompt_chars" not in s or int(s["max_prompt_chars"]) < 1:
        raise RuntimeError("settings.toml missing required key search.max_prompt_chars")

    # The instruction template must carry the inventory placeholder
    template = cfg["prompts"].get("travel_scout")
    if not isinstance(template, str) or not template.strip():
        raise RuntimeError("settings.toml missing required key prompts.travel_scout")
    if INVENTORY_PLACEHOLDER not in template:
        raise RuntimeError(f"prompts.travel_scout must contain the {INVENTORY_PLACEHOLDER} placeholder")

    return cfg

@lru_cache(maxsize=1)
def get_config() -> dict:
    """Return cached configuration loaded once"""
    return load_config()
