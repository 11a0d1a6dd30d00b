"""Registry of arena sessions keyed by player id.

The registry is the single owner of session membership. It is injected into
the coordinator and the progression guard instead of living in module
globals, so several servers (or tests) can run side by side in one process.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Generator, Iterable

from arena.database.models.enums import SessionState
from arena.exceptions import ALREADY_IN_ARENA, NOT_IN_ARENA, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionRecord:
    """Session state of one player.

    Attributes:
        player_id: Stable platform id of the player.
        state: Current lifecycle state.
        entered_at_utc: When the current session was entered.
        recovered: True if the session was adopted from a leftover snapshot
            after a restart.
    """

    player_id: int
    state: SessionState = SessionState.IDLE
    entered_at_utc: datetime | None = None
    recovered: bool = False

    @property
    def in_session(self) -> bool:
        return self.state is not SessionState.IDLE


class SessionRegistry:
    """Thread-safe player id -> SessionRecord mapping.

    State changes are compare-and-set under one mutex, so of two racing
    requests exactly one wins. Whole enter/exit flows are additionally
    serialized per player with ``lock(player_id)``.
    """

    def __init__(self) -> None:
        self._records: dict[int, SessionRecord] = {}
        self._mutex = threading.Lock()
        self._player_locks: dict[int, threading.RLock] = {}

    def get(self, player_id: int) -> SessionRecord:
        """Get a player's record; players never seen are IDLE."""
        with self._mutex:
            return self._records.get(player_id) or SessionRecord(player_id=player_id)

    def state_of(self, player_id: int) -> SessionState:
        return self.get(player_id).state

    def is_active(self, player_id: int) -> bool:
        return self.state_of(player_id) is SessionState.ACTIVE

    def in_session(self, player_id: int) -> bool:
        """True for any state other than IDLE, including flows in flight."""
        return self.get(player_id).in_session

    def transition(
        self,
        player_id: int,
        expected: SessionState | Iterable[SessionState],
        target: SessionState,
        *,
        entered_at_utc: datetime | None = None,
        recovered: bool | None = None,
    ) -> SessionRecord:
        """Atomically move a player from an expected state to a target state.

        Args:
            player_id: Player to transition.
            expected: State (or states) the player must currently be in.
            target: State to move to.
            entered_at_utc: Entry time to record; kept from the current
                record when omitted.
            recovered: Recovery flag to record; kept when omitted.

        Returns:
            The new record.

        Raises:
            ValidationError: If the player is not in an expected state.
        """
        allowed = {expected} if isinstance(expected, SessionState) else set(expected)
        with self._mutex:
            current = self._records.get(player_id) or SessionRecord(player_id=player_id)
            if current.state not in allowed:
                raise ValidationError(
                    self._rejection_message(current.state, allowed),
                    player_id=player_id,
                    state=current.state,
                )

            updated = replace(current, state=target)
            if entered_at_utc is not None:
                updated = replace(updated, entered_at_utc=entered_at_utc)
            if recovered is not None:
                updated = replace(updated, recovered=recovered)
            if target is SessionState.IDLE:
                updated = SessionRecord(player_id=player_id)
            self._records[player_id] = updated

        logger.debug(f"Player {player_id}: {current.state.value} -> {target.value}")
        return updated

    def reset(self, player_id: int) -> None:
        """Force a player back to IDLE regardless of current state."""
        with self._mutex:
            previous = self._records.pop(player_id, None)
        if previous is not None and previous.in_session:
            logger.info(f"Player {player_id}: {previous.state.value} -> idle (reset)")

    def players_in(self, *states: SessionState) -> list[int]:
        """Ids of players currently in any of the given states."""
        with self._mutex:
            return sorted(
                player_id
                for player_id, record in self._records.items()
                if record.state in states
            )

    def records(self) -> list[SessionRecord]:
        """Snapshot of every non-idle record."""
        with self._mutex:
            return [record for record in self._records.values() if record.in_session]

    @contextmanager
    def lock(self, player_id: int) -> Generator[None, None, None]:
        """Serialize whole flows for one player."""
        with self._mutex:
            player_lock = self._player_locks.setdefault(player_id, threading.RLock())
        with player_lock:
            yield

    @staticmethod
    def _rejection_message(state: SessionState, allowed: set[SessionState]) -> str:
        if SessionState.IDLE in allowed:
            return ALREADY_IN_ARENA
        if state is SessionState.IDLE:
            return NOT_IN_ARENA
        expected = ", ".join(sorted(s.value for s in allowed))
        return f"session is {state.value}, expected {expected}"
