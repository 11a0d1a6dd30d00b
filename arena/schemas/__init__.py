"""Snapshot schemas and their persisted document format."""

from arena.schemas.snapshot import (
    SCHEMA_VERSION,
    EquipmentEntry,
    InventoryEntry,
    LoadoutItem,
    SessionSnapshot,
    Vector3,
    utcnow,
)

__all__ = [
    "SCHEMA_VERSION",
    "EquipmentEntry",
    "InventoryEntry",
    "LoadoutItem",
    "SessionSnapshot",
    "Vector3",
    "utcnow",
]
