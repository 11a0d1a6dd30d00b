"""Capability protocols the arena engine needs from the game host.

The engine never touches the host's entity store directly. Each concern is
a narrow protocol so the contract stays stable when the underlying game API
changes. Getters return ``None`` when the player lacks the component.
"""

from typing import Iterable, Protocol, Sequence, runtime_checkable

from arena.schemas.snapshot import EquipmentEntry, InventoryEntry, LoadoutItem, Vector3


@runtime_checkable
class PlayerStateAccess(Protocol):
    """Position, vitals, blood and identity of a live player."""

    def get_position(self, player_id: int) -> Vector3 | None:
        ...

    def teleport(self, player_id: int, position: Vector3) -> None:
        ...

    def get_health(self, player_id: int) -> float | None:
        ...

    def set_health(self, player_id: int, health: float) -> None:
        ...

    def get_blood(self, player_id: int) -> tuple[int, float] | None:
        """Return (blood_type, quality)."""
        ...

    def set_blood(self, player_id: int, blood_type: int, quality: float) -> None:
        ...

    def get_character_name(self, player_id: int) -> str | None:
        ...

    def set_character_name(self, player_id: int, name: str) -> None:
        ...


@runtime_checkable
class InventoryProvider(Protocol):
    """Inventory and equipment access for a live player."""

    def list_inventory(self, player_id: int) -> dict[int, InventoryEntry] | None:
        """Return occupied slots keyed by slot index."""
        ...

    def list_equipment(self, player_id: int) -> list[EquipmentEntry] | None:
        """Return occupied equipment slots."""
        ...

    def clear_inventory(self, player_id: int) -> bool:
        """Remove every inventory item and unequip every equipment slot."""
        ...

    def set_inventory_slot(
        self, player_id: int, slot: int, item_id: int, amount: int
    ) -> bool:
        ...

    def add_item(self, player_id: int, item_id: int, amount: int) -> int | None:
        """Place an item in the first free slot; return the slot or None if full."""
        ...

    def equip_item(self, player_id: int, slot_id: int, item_id: int) -> bool:
        """Equip directly; False when the host cannot equip this item or slot."""
        ...

    def give_loadout(self, player_id: int, items: Sequence[LoadoutItem]) -> int:
        """Grant a loadout and return how many item specs succeeded."""
        ...


@runtime_checkable
class UnlockProvider(Protocol):
    """Boss/VBlood and ability unlock flags of a player."""

    def unlock_boss(self, player_id: int, boss_id: int) -> None:
        ...

    def lock_boss(self, player_id: int, boss_id: int) -> None:
        ...

    def list_unlocked_bosses(self, player_id: int) -> set[int] | None:
        ...

    def list_all_bosses(self) -> Iterable[int]:
        ...

    def unlock_ability(self, player_id: int, ability_id: int) -> None:
        ...

    def revoke_ability(self, player_id: int, ability_id: int) -> None:
        ...

    def list_unlocked_abilities(self, player_id: int) -> set[int] | None:
        ...


@runtime_checkable
class GameHost(PlayerStateAccess, InventoryProvider, UnlockProvider, Protocol):
    """Everything the arena engine reads from and writes to the host."""

    pass
