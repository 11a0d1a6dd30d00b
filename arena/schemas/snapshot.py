"""Schemas for captured player state.

A SessionSnapshot is the "before" picture of a player taken when they enter
the arena. It is persisted as two JSON documents (player and progression
categories) and read back on exit to restore the player exactly.
"""

import math
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer
from pydantic.alias_generators import to_camel


SCHEMA_VERSION = 1

PLAYER_FIELDS = frozenset(
    {
        "schema_version",
        "captured_at_utc",
        "player_id",
        "character_name",
        "position",
        "health",
        "blood_type",
        "blood_quality",
        "inventory",
        "equipment",
        "missing_components",
    }
)

PROGRESSION_FIELDS = frozenset(
    {
        "schema_version",
        "captured_at_utc",
        "player_id",
        "ability_ids",
        "unlocked_boss_ids",
    }
)


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class DocumentModel(BaseModel):
    """Base for models stored as camelCase JSON documents."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class Vector3(DocumentModel):
    """World position."""

    model_config = ConfigDict(frozen=True)

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def distance_to(self, other: "Vector3") -> float:
        """Euclidean distance to another position."""
        return math.dist((self.x, self.y, self.z), (other.x, other.y, other.z))


class InventoryEntry(DocumentModel):
    """Contents of one inventory slot."""

    item_id: int
    amount: int = Field(default=1, gt=0)


class EquipmentEntry(DocumentModel):
    """An item sitting in an equipment slot."""

    slot_id: int
    item_id: int
    amount: int = Field(default=1, gt=0)
    quality: int = 0


class LoadoutItem(DocumentModel):
    """An item granted to a player on arena entry."""

    item_id: int
    amount: int = Field(default=1, gt=0)


class SessionSnapshot(DocumentModel):
    """Complete pre-arena state of one player.

    Attributes:
        player_id: Stable platform identifier of the player.
        schema_version: Version of the stored document format.
        captured_at_utc: When the capture was taken.
        character_name: Display name before any arena tag was applied.
        position: World position at capture.
        health: Current health at capture.
        blood_type: Blood type identifier.
        blood_quality: Blood quality, 0 to 100.
        inventory: Sparse slot index -> item map, non-empty slots only.
        equipment: One entry per occupied equipment slot, in slot order.
        ability_ids: Unlocked abilities within the arena allow-list.
        unlocked_boss_ids: Boss/VBlood unlocks held at capture.
        missing_components: Live components that could not be read. Their
            fields hold zero values and are not written back on restore.
    """

    player_id: int
    schema_version: int = SCHEMA_VERSION
    captured_at_utc: datetime = Field(default_factory=utcnow)
    character_name: str = ""
    position: Vector3 = Field(default_factory=Vector3)
    health: float = 0.0
    blood_type: int = 0
    blood_quality: float = Field(default=0.0, ge=0.0, le=100.0)
    inventory: dict[int, InventoryEntry] = Field(default_factory=dict)
    equipment: list[EquipmentEntry] = Field(default_factory=list)
    ability_ids: set[int] = Field(default_factory=set)
    unlocked_boss_ids: set[int] = Field(default_factory=set)
    missing_components: set[str] = Field(default_factory=set)

    @field_serializer("ability_ids", "unlocked_boss_ids", "missing_components")
    def _serialize_sorted(self, value: set) -> list:
        return sorted(value)

    @field_serializer("inventory")
    def _serialize_inventory(self, value: dict[int, InventoryEntry]) -> dict[str, Any]:
        return {
            str(slot): entry.model_dump(mode="json", by_alias=True)
            for slot, entry in sorted(value.items())
        }

    def is_missing(self, component: str) -> bool:
        """Whether a live component was absent when this snapshot was taken."""
        return component in self.missing_components

    def to_documents(self) -> dict[str, dict[str, Any]]:
        """Split into the per-category documents that get persisted.

        Returns:
            Mapping of category name ("player", "progression") to a
            JSON-ready camelCase document.
        """
        return {
            "player": self.model_dump(
                mode="json", by_alias=True, include=set(PLAYER_FIELDS)
            ),
            "progression": self.model_dump(
                mode="json", by_alias=True, include=set(PROGRESSION_FIELDS)
            ),
        }

    @classmethod
    def from_documents(
        cls,
        player_document: dict[str, Any],
        progression_document: dict[str, Any],
    ) -> "SessionSnapshot":
        """Merge the per-category documents back into one snapshot.

        Raises:
            pydantic.ValidationError: If a document is malformed.
            ValueError: If the two documents belong to different players.
        """
        player = dict(player_document)
        progression = dict(progression_document)
        if player.get("playerId") != progression.get("playerId"):
            raise ValueError(
                f"Snapshot documents disagree on player id: "
                f"{player.get('playerId')} != {progression.get('playerId')}"
            )
        merged = {**player}
        merged["abilityIds"] = progression.get("abilityIds", [])
        merged["unlockedBossIds"] = progression.get("unlockedBossIds", [])
        return cls.model_validate(merged)
