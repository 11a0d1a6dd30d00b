"""Restoration of a captured snapshot onto a live player.

Steps run in a fixed order and each one is independently fault tolerant: a
failing step is logged and recorded, then the next step runs. A stuck player
is worse than a cosmetically incomplete restore.

Order:
    1. teleport     - back to the captured position
    2. vitals       - health and blood
       identity     - character name (drops the arena tag)
    3. clear        - remove all arena inventory and equipment
    4. inventory    - captured slots, never merged with leftovers
    5. equipment    - equip, or fall back to the first free inventory slot
    6. abilities    - exactly the captured subset of the allow-list
    7. bosses       - exactly the captured unlock set

Clearing before restoring makes a repeated restore idempotent. Equipment
follows inventory so its fallback path pushes into a known inventory.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable

from arena.exceptions import PartialApplicationWarning, StepFailedError
from arena.host.protocols import GameHost
from arena.schemas.snapshot import EquipmentEntry, InventoryEntry, SessionSnapshot

logger = logging.getLogger(__name__)


@dataclass
class RestoreReport:
    """What a restoration run did."""

    player_id: int
    completed_steps: list[str] = field(default_factory=list)
    warnings: list[PartialApplicationWarning] = field(default_factory=list)
    displaced_items: list[EquipmentEntry] = field(default_factory=list)
    lost_items: list[InventoryEntry] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True when every step succeeded without warnings."""
        return not self.warnings

    def warn(self, step: str, cause: BaseException | None = None, detail: str | None = None) -> None:
        warning = PartialApplicationWarning(step, self.player_id, cause=cause, detail=detail)
        logger.warning(f"Restore: {warning}")
        self.warnings.append(warning)


class RestorationEngine:
    """Applies a SessionSnapshot back onto live player state."""

    STEP_ORDER = (
        "teleport",
        "vitals",
        "identity",
        "clear",
        "inventory",
        "equipment",
        "abilities",
        "bosses",
    )

    def __init__(self, host: GameHost, ability_allow_list: Iterable[int] = ()) -> None:
        """Initialize the engine.

        Args:
            host: Game host whose live state is restored.
            ability_allow_list: Abilities the arena may grant or revoke.
                Abilities outside this list are never touched.
        """
        self.host = host
        self.ability_allow_list = frozenset(ability_allow_list)

    def restore(self, player_id: int, snapshot: SessionSnapshot) -> RestoreReport:
        """Restore a player from a snapshot.

        Args:
            player_id: Player to restore.
            snapshot: State captured before the player entered the arena.

        Returns:
            Report listing completed steps, warnings, and displaced or lost
            items.
        """
        report = RestoreReport(player_id=player_id)
        steps: dict[str, Callable[[int, SessionSnapshot, RestoreReport], None]] = {
            "teleport": self._restore_position,
            "vitals": self._restore_vitals,
            "identity": self._restore_identity,
            "clear": self._clear,
            "inventory": self._restore_inventory,
            "equipment": self._restore_equipment,
            "abilities": self._restore_abilities,
            "bosses": self._restore_bosses,
        }

        for name in self.STEP_ORDER:
            warnings_before = len(report.warnings)
            try:
                steps[name](player_id, snapshot, report)
            except Exception as e:
                report.warn(name, cause=e)
                continue
            if len(report.warnings) == warnings_before:
                report.completed_steps.append(name)

        if report.complete:
            logger.info(f"Restored player {player_id} from snapshot")
        else:
            logger.warning(
                f"Restored player {player_id} with {len(report.warnings)} failed steps: "
                f"{sorted({w.step for w in report.warnings})}"
            )
        return report

    # --- Steps ---

    def _restore_position(self, player_id: int, snapshot: SessionSnapshot, report: RestoreReport) -> None:
        if snapshot.is_missing("position"):
            logger.info(f"Skipping position restore for player {player_id}: not captured")
            return
        self.host.teleport(player_id, snapshot.position)

    def _restore_vitals(self, player_id: int, snapshot: SessionSnapshot, report: RestoreReport) -> None:
        # Blood is attempted even if health fails
        try:
            if not snapshot.is_missing("health"):
                self.host.set_health(player_id, snapshot.health)
        except Exception as e:
            report.warn("vitals", cause=e, detail=f"health: {e}")
        if not snapshot.is_missing("blood"):
            self.host.set_blood(player_id, snapshot.blood_type, snapshot.blood_quality)

    def _restore_identity(self, player_id: int, snapshot: SessionSnapshot, report: RestoreReport) -> None:
        if snapshot.is_missing("name") or not snapshot.character_name:
            return
        self.host.set_character_name(player_id, snapshot.character_name)

    def _clear(self, player_id: int, snapshot: SessionSnapshot, report: RestoreReport) -> None:
        if not self.host.clear_inventory(player_id):
            raise StepFailedError("host refused to clear inventory")

    def _restore_inventory(self, player_id: int, snapshot: SessionSnapshot, report: RestoreReport) -> None:
        for slot, entry in sorted(snapshot.inventory.items()):
            try:
                placed = self.host.set_inventory_slot(player_id, slot, entry.item_id, entry.amount)
            except Exception as e:
                logger.debug(f"Slot {slot} restore raised for player {player_id}: {e}")
                placed = False
            if placed:
                continue
            if self._push_to_free_slot(player_id, entry.item_id, entry.amount) is None:
                report.lost_items.append(entry)
                report.warn(
                    "inventory",
                    detail=f"item {entry.item_id} x{entry.amount} from slot {slot} did not fit",
                )

    def _restore_equipment(self, player_id: int, snapshot: SessionSnapshot, report: RestoreReport) -> None:
        for entry in snapshot.equipment:
            try:
                equipped = self.host.equip_item(player_id, entry.slot_id, entry.item_id)
            except Exception as e:
                logger.debug(
                    f"Equip of item {entry.item_id} in slot {entry.slot_id} raised "
                    f"for player {player_id}: {e}"
                )
                equipped = False
            if equipped:
                continue

            slot = self._push_to_free_slot(player_id, entry.item_id, entry.amount)
            if slot is None:
                report.lost_items.append(
                    InventoryEntry(item_id=entry.item_id, amount=entry.amount)
                )
                report.warn(
                    "equipment",
                    detail=f"item {entry.item_id} from equipment slot {entry.slot_id} "
                    "could not be equipped or stored",
                )
            else:
                logger.info(
                    f"Item {entry.item_id} could not be equipped for player {player_id}; "
                    f"placed in inventory slot {slot}"
                )
                report.displaced_items.append(entry)

    def _restore_abilities(self, player_id: int, snapshot: SessionSnapshot, report: RestoreReport) -> None:
        if snapshot.is_missing("abilities"):
            logger.info(f"Skipping ability restore for player {player_id}: not captured")
            return
        current = self.host.list_unlocked_abilities(player_id)
        if current is None:
            raise StepFailedError("host has no ability component")
        current_allowed = set(current) & self.ability_allow_list
        target = snapshot.ability_ids & self.ability_allow_list

        for ability_id in sorted(current_allowed - target):
            self.host.revoke_ability(player_id, ability_id)
        for ability_id in sorted(target - current_allowed):
            self.host.unlock_ability(player_id, ability_id)

    def _restore_bosses(self, player_id: int, snapshot: SessionSnapshot, report: RestoreReport) -> None:
        if snapshot.is_missing("bosses"):
            logger.info(f"Skipping boss unlock restore for player {player_id}: not captured")
            return
        current = self.host.list_unlocked_bosses(player_id)
        if current is None:
            raise StepFailedError("host has no boss unlock component")
        current = set(current)
        target = set(snapshot.unlocked_boss_ids)

        for boss_id in sorted(current - target):
            self.host.lock_boss(player_id, boss_id)
        for boss_id in sorted(target - current):
            self.host.unlock_boss(player_id, boss_id)

    def _push_to_free_slot(self, player_id: int, item_id: int, amount: int) -> int | None:
        try:
            return self.host.add_item(player_id, item_id, amount)
        except Exception as e:
            logger.debug(f"add_item({item_id}) raised for player {player_id}: {e}")
            return None
