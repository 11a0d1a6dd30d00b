"""Interfaces to the game host and the simulation-thread hand-off."""

from arena.host.dispatch import Dispatcher, InlineDispatcher, TickDispatcher
from arena.host.protocols import (
    GameHost,
    InventoryProvider,
    PlayerStateAccess,
    UnlockProvider,
)

__all__ = [
    "Dispatcher",
    "InlineDispatcher",
    "TickDispatcher",
    "GameHost",
    "InventoryProvider",
    "PlayerStateAccess",
    "UnlockProvider",
]
