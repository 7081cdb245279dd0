"""
Inventory Catalog
=================

Overview
--------
The fixed set of bookable experiences the model is allowed to recommend. The
catalog is defined once at import time and never mutated, which makes it the
single source of truth for valid item identifiers.

Runtime Contract
----------------
    get_inventory() -> tuple[InventoryItem, ...]
    valid_ids() -> frozenset[int]
    get_item(item_id) -> InventoryItem | None

A dynamic inventory would replace this module behind the same three functions
without touching grounding or validation.
"""

# -----------------------------------------------------------------------------
# Libraries
# -----------------------------------------------------------------------------

# Python future features
from __future__ import annotations                 # Postponed evaluation of type annotations

# Standard libraries
from typing import Dict, FrozenSet, Optional, Tuple

# Third-party libraries
from pydantic import BaseModel, ConfigDict, Field  # Immutable, validated inventory records

# -----------------------------------------------------------------------------
# Data models
# -----------------------------------------------------------------------------

class InventoryItem(BaseModel):
    """A single experience offered by the catalog."""

    model_config = ConfigDict(frozen=True)

    id: int = Field(ge=1)
    title: str
    location: str
    price: float = Field(gt=0)
    tags: Tuple[str, ...]

# -----------------------------------------------------------------------------
# Catalog
# -----------------------------------------------------------------------------

INVENTORY: Tuple[InventoryItem, ...] = (
    InventoryItem(id=1, title="High-Altitude Tea Trails", location="Nuwara Eliya", price=120, tags=("cold", "nature", "hiking")),
    InventoryItem(id=2, title="Coastal Heritage Wander", location="Galle Fort", price=45, tags=("history", "culture", "walking")),
    InventoryItem(id=3, title="Wild Safari Expedition", location="Yala", price=250, tags=("animals", "adventure", "photography")),
    InventoryItem(id=4, title="Surf & Chill Retreat", location="Arugam Bay", price=80, tags=("beach", "surfing", "young-vibe")),
    InventoryItem(id=5, title="Ancient City Exploration", location="Sigiriya", price=110, tags=("history", "climbing", "view")),
)

_BY_ID: Dict[int, InventoryItem] = {item.id: item for item in INVENTORY}

# Duplicate ids would make lookups ambiguous
if len(_BY_ID) != len(INVENTORY):
    raise RuntimeError("inventory ids must be unique")

VALID_IDS: FrozenSet[int] = frozenset(_BY_ID)

# -----------------------------------------------------------------------------
# Public access
# -----------------------------------------------------------------------------

def get_inventory() -> Tuple[InventoryItem, ...]:
    """Return the ordered, immutable catalog."""
    return INVENTORY

def valid_ids() -> FrozenSet[int]:
    """Return the whitelist of identifiers the model may reference."""
    return VALID_IDS

def get_item(item_id: int) -> Optional[InventoryItem]:
    """
    Look up an item by identifier.

    Returns
    -------
    InventoryItem or None
        The matching record, or None when the id is not part of the catalog.
    """
    # bool is an int subclass and True would otherwise resolve to id 1
    if isinstance(item_id, bool):
        return None
    return _BY_ID.get(item_id)
