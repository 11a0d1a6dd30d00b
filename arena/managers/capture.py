"""Capture of a live player's state into a SessionSnapshot."""

import logging
from typing import Callable, Iterable, TypeVar

from arena.host.protocols import GameHost
from arena.schemas.snapshot import (
    EquipmentEntry,
    InventoryEntry,
    SessionSnapshot,
    Vector3,
    utcnow,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CaptureRoutine:
    """Reads a live player into a SessionSnapshot without mutating anything.

    A component the host cannot provide is captured as its zero value and
    recorded in ``missing_components``, so a partial capture is visible but
    never fatal.
    """

    def __init__(
        self,
        host: GameHost,
        ability_allow_list: Iterable[int] = (),
        clock: Callable[[], object] = utcnow,
    ) -> None:
        """Initialize the capture routine.

        Args:
            host: Game host to read live state from.
            ability_allow_list: Abilities the arena may grant or revoke.
                Only these are captured.
            clock: Source of the capture timestamp.
        """
        self.host = host
        self.ability_allow_list = frozenset(ability_allow_list)
        self.clock = clock

    def capture(self, player_id: int) -> SessionSnapshot:
        """Capture a player's current state.

        Args:
            player_id: Player to capture.

        Returns:
            The captured snapshot.
        """
        missing: set[str] = set()

        position = self._read(player_id, "position", self.host.get_position, missing)
        health = self._read(player_id, "health", self.host.get_health, missing)
        blood = self._read(player_id, "blood", self.host.get_blood, missing)
        name = self._read(player_id, "name", self.host.get_character_name, missing)
        inventory = self._read(player_id, "inventory", self.host.list_inventory, missing)
        equipment = self._read(player_id, "equipment", self.host.list_equipment, missing)
        abilities = self._read(
            player_id, "abilities", self.host.list_unlocked_abilities, missing
        )
        bosses = self._read(player_id, "bosses", self.host.list_unlocked_bosses, missing)

        blood_type, blood_quality = blood if blood is not None else (0, 0.0)

        snapshot = SessionSnapshot(
            player_id=player_id,
            captured_at_utc=self.clock(),
            character_name=name or "",
            position=position or Vector3(),
            health=float(health or 0.0),
            blood_type=blood_type,
            blood_quality=max(0.0, min(100.0, float(blood_quality))),
            inventory=self._occupied_slots(inventory or {}),
            equipment=self._occupied_equipment(equipment or []),
            ability_ids=set(abilities or ()) & self.ability_allow_list,
            unlocked_boss_ids=set(bosses or ()),
            missing_components=missing,
        )

        logger.info(
            f"Captured player {player_id}: {len(snapshot.inventory)} inventory slots, "
            f"{len(snapshot.equipment)} equipped, {len(snapshot.ability_ids)} abilities, "
            f"{len(snapshot.unlocked_boss_ids)} bosses"
        )
        if missing:
            logger.warning(
                f"Partial capture for player {player_id}: missing {sorted(missing)}"
            )
        return snapshot

    def _read(
        self,
        player_id: int,
        component: str,
        getter: Callable[[int], T | None],
        missing: set[str],
    ) -> T | None:
        try:
            value = getter(player_id)
        except Exception as e:
            logger.warning(f"Could not read {component} of player {player_id}: {e}")
            missing.add(component)
            return None
        if value is None:
            logger.warning(f"Player {player_id} has no {component} component; using default")
            missing.add(component)
        return value

    @staticmethod
    def _occupied_slots(inventory: dict[int, InventoryEntry]) -> dict[int, InventoryEntry]:
        return {
            int(slot): entry.model_copy()
            for slot, entry in sorted(inventory.items())
            if entry.item_id != 0 and entry.amount > 0
        }

    @staticmethod
    def _occupied_equipment(equipment: list[EquipmentEntry]) -> list[EquipmentEntry]:
        return [entry.model_copy() for entry in equipment if entry.item_id != 0]
