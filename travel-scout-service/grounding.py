"""
Grounding Prompt Builder
========================

Embeds the full inventory into the system instruction sent to the model. This
is the only place the model learns which items exist; the sanitizer enforces
the same whitelist again on the way out because instruction-following is not
trusted.

Runtime Contract
----------------
    build_instruction(catalog, template=None) -> str
"""

# -----------------------------------------------------------------------------
# Libraries
# -----------------------------------------------------------------------------

# Python future features
from __future__ import annotations                 # Postponed evaluation of type annotations

# Standard libraries
import json                                        # Deterministic serialization of the catalog
from typing import Iterable, Optional

# Local modules
from config import INVENTORY_PLACEHOLDER, get_config
from inventory import InventoryItem

# -----------------------------------------------------------------------------
# Instruction rendering
# -----------------------------------------------------------------------------

def render_inventory_block(catalog: Iterable[InventoryItem]) -> str:
    """Serialize the catalog as an indented JSON array, preserving catalog order."""
    records = [item.model_dump(mode="json") for item in catalog]
    return json.dumps(records, indent=2, ensure_ascii=False)

def build_instruction(catalog: Iterable[InventoryItem], template: Optional[str] = None) -> str:
    """
    Build the grounded system instruction for the travel scout.

    Parameters
    ----------
    catalog : Iterable[InventoryItem]
        Items the model may choose from. Serialized verbatim into the prompt.
    template : str, optional
        Instruction text carrying the {{inventory}} placeholder. Defaults to
        `prompts.travel_scout` from settings.toml.

    Returns
    -------
    str
        The instruction with the serialized catalog substituted in. The same
        catalog and template always produce the same string.
    """
    if template is None:
        template = get_config()["prompts"]["travel_scout"]
    return template.replace(INVENTORY_PLACEHOLDER, render_inventory_block(catalog)).strip()
