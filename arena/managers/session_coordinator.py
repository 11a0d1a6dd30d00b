"""Session coordinator: the enter/exit state machine of the arena.

States move IDLE -> ENTERING -> ACTIVE -> EXITING -> IDLE. A snapshot is
always persisted before the first arena mutation, and only deleted after
restoration has run, so a crash at any point leaves a recoverable player.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Iterable

from sqlalchemy.orm import sessionmaker

from arena.config import Settings, get_settings
from arena.database.models.enums import SessionState
from arena.exceptions import (
    ALREADY_IN_ARENA,
    NOT_IN_ARENA,
    FatalRestoreError,
    PartialApplicationWarning,
    StepFailedError,
    ValidationError,
)
from arena.host.dispatch import Dispatcher, InlineDispatcher, TickDispatcher
from arena.host.protocols import GameHost
from arena.managers.capture import CaptureRoutine
from arena.managers.restoration import RestorationEngine, RestoreReport
from arena.managers.session_registry import SessionRegistry
from arena.managers.snapshot_store import SnapshotStore
from arena.observability.events import (
    RestoreBlockedEvent,
    SessionEnteredEvent,
    SessionExitedEvent,
    SessionRecoveredEvent,
    StepFailedEvent,
)
from arena.observability.hooks import NullHook, ObservabilityHook
from arena.schemas.snapshot import LoadoutItem, SessionSnapshot, Vector3, utcnow

logger = logging.getLogger(__name__)


@dataclass
class SessionOutcome:
    """Result of an enter or exit request.

    Truthy when the request changed the player's session. Step failures do
    not make an outcome falsy; they are listed in ``warnings``.
    """

    player_id: int
    success: bool
    state: SessionState
    message: str = ""
    warnings: list[PartialApplicationWarning] = field(default_factory=list)
    report: RestoreReport | None = None

    def __bool__(self) -> bool:
        return self.success

    @property
    def partial(self) -> bool:
        return bool(self.warnings)


@dataclass
class PendingRestore:
    """A leftover snapshot found at startup."""

    player_id: int
    captured_at: datetime | None
    character_name: str = ""
    adopted: bool = False


class SessionCoordinator:
    """Drives arena entry and exit for players.

    Live-state work (capture, arena mutations, restoration) goes through the
    dispatcher; snapshot I/O runs on the calling thread.
    """

    def __init__(
        self,
        registry: SessionRegistry,
        store: SnapshotStore,
        host: GameHost,
        *,
        capture: CaptureRoutine | None = None,
        restoration: RestorationEngine | None = None,
        spawn_position: Vector3 | None = None,
        loadout: Iterable[LoadoutItem] = (),
        ability_allow_list: Iterable[int] = (),
        arena_boss_ids: Iterable[int] = (),
        arena_blood_type: int = 0,
        arena_blood_quality: float = 100.0,
        name_tag: str = "",
        dispatcher: Dispatcher | None = None,
        hook: ObservabilityHook | None = None,
    ) -> None:
        """Initialize the coordinator.

        Args:
            registry: Shared session registry.
            store: Durable snapshot store.
            host: Game host to read and mutate players on.
            capture: Capture routine; built from the host when omitted.
            restoration: Restoration engine; built from the host when omitted.
            spawn_position: Where entering players are teleported. None
                skips the teleport.
            loadout: Items granted on entry.
            ability_allow_list: Abilities unlocked on entry and restored on
                exit. Abilities outside this list are never touched.
            arena_boss_ids: Bosses unlocked on entry; empty unlocks every
                boss the host knows.
            arena_blood_type: Blood set on entry; 0 leaves blood untouched.
            arena_blood_quality: Quality of the arena blood.
            name_tag: Prefix added to the character name on entry.
            dispatcher: Where live-state work runs. Defaults to inline.
            hook: Receives lifecycle events.
        """
        self.registry = registry
        self.store = store
        self.host = host
        self.ability_allow_list = frozenset(ability_allow_list)
        self.capture = capture or CaptureRoutine(host, self.ability_allow_list)
        self.restoration = restoration or RestorationEngine(host, self.ability_allow_list)
        self.spawn_position = spawn_position
        self.loadout = list(loadout)
        self.arena_boss_ids = list(arena_boss_ids)
        self.arena_blood_type = arena_blood_type
        self.arena_blood_quality = arena_blood_quality
        self.name_tag = name_tag
        self.dispatcher = dispatcher or InlineDispatcher()
        self.hook = hook or NullHook()
        self._cache: dict[int, SessionSnapshot] = {}

    @classmethod
    def from_settings(
        cls,
        host: GameHost,
        settings: Settings | None = None,
        *,
        registry: SessionRegistry | None = None,
        session_factory: sessionmaker | None = None,
        dispatcher: Dispatcher | None = None,
        hook: ObservabilityHook | None = None,
    ) -> "SessionCoordinator":
        """Build a coordinator wired from application settings.

        Without an explicit dispatcher a TickDispatcher bound to the calling
        thread is used, so this should be called from the simulation thread.
        """
        settings = settings or get_settings()
        return cls(
            registry=registry or SessionRegistry(),
            store=SnapshotStore(session_factory),
            host=host,
            spawn_position=settings.spawn_position,
            loadout=settings.loadout,
            ability_allow_list=settings.ability_allow_list,
            arena_boss_ids=settings.arena_boss_ids,
            arena_blood_type=settings.arena_blood_type,
            arena_blood_quality=settings.arena_blood_quality,
            name_tag=settings.name_tag,
            dispatcher=dispatcher or TickDispatcher(timeout=settings.dispatch_timeout_seconds),
            hook=hook,
        )

    # =========================================================================
    # Queries
    # =========================================================================

    def is_active(self, player_id: int) -> bool:
        return self.registry.is_active(player_id)

    def state_of(self, player_id: int) -> SessionState:
        return self.registry.state_of(player_id)

    def has_persisted_snapshot(self, player_id: int) -> bool:
        return self.store.exists(player_id)

    # =========================================================================
    # Enter
    # =========================================================================

    def enter_requested(self, player_id: int) -> SessionOutcome:
        """Move a player into the arena.

        Args:
            player_id: Player entering.

        Returns:
            Outcome listing any arena mutation that failed.

        Raises:
            ValidationError: If the player is not IDLE, or a snapshot from an
                earlier session is still stored. That snapshot is adopted
                as ACTIVE so the next exit restores the player.
            StorageError: If the snapshot could not be persisted. Nothing
                has been mutated and the player stays IDLE.
        """
        with self.registry.lock(player_id):
            if not self.registry.in_session(player_id) and self.store.exists(player_id):
                self._adopt_leftover_snapshot(player_id)
            self.registry.transition(player_id, SessionState.IDLE, SessionState.ENTERING)
            started = time.perf_counter()

            try:
                snapshot = self.dispatcher.call(self.capture.capture, player_id)
                self.store.save(player_id, snapshot)
            except Exception as e:
                logger.error(f"Arena entry aborted for player {player_id}: {e}")
                self.registry.transition(player_id, SessionState.ENTERING, SessionState.IDLE)
                raise

            self._cache[player_id] = snapshot
            self.registry.transition(
                player_id,
                SessionState.ENTERING,
                SessionState.ACTIVE,
                entered_at_utc=utcnow(),
                recovered=False,
            )

            warnings = self.dispatcher.call(self._apply_arena_profile, player_id, snapshot)
            duration_ms = (time.perf_counter() - started) * 1000

        for warning in warnings:
            self._emit_step_failed("enter", warning)
        self.hook.on_session_entered(
            SessionEnteredEvent(
                player_id=player_id,
                duration_ms=duration_ms,
                failed_steps=[w.step for w in warnings],
            )
        )

        if warnings:
            logger.warning(
                f"Player {player_id} entered the arena with {len(warnings)} failed steps"
            )
        else:
            logger.info(f"Player {player_id} entered the arena")
        return SessionOutcome(
            player_id=player_id,
            success=True,
            state=SessionState.ACTIVE,
            warnings=warnings,
        )

    def _adopt_leftover_snapshot(self, player_id: int) -> None:
        record = self.registry.transition(
            player_id, SessionState.IDLE, SessionState.ACTIVE, recovered=True
        )
        logger.warning(
            f"Player {player_id} has a stored snapshot from an earlier session; "
            "adopted as active instead of capturing over it"
        )
        self.hook.on_session_recovered(
            SessionRecoveredEvent(player_id=player_id, captured_at=None, adopted=True)
        )
        raise ValidationError(ALREADY_IN_ARENA, player_id=player_id, state=record.state)

    async def enter_requested_async(self, player_id: int) -> SessionOutcome:
        """Run enter_requested on a worker thread."""
        return await asyncio.to_thread(self.enter_requested, player_id)

    def _apply_arena_profile(
        self, player_id: int, snapshot: SessionSnapshot
    ) -> list[PartialApplicationWarning]:
        steps: list[tuple[str, Callable[[], None]]] = [
            ("teleport", lambda: self._teleport_to_spawn(player_id)),
            ("clear", lambda: self._clear(player_id)),
            ("loadout", lambda: self._grant_loadout(player_id)),
            (("abilities", lambda: self._unlock_abilities(player_id, snapshot))),
            (("bosses", lambda: self._unlock_bosses(player_id, snapshot))),
            ("blood", lambda: self._set_arena_blood(player_id)),
            ("name_tag", lambda: self._tag_name(player_id, snapshot)),
        ]

        warnings: list[PartialApplicationWarning] = []
        for name, step in steps:
            try:
                step()
            except Exception as e:
                warning = PartialApplicationWarning(name, player_id, cause=e)
                logger.warning(f"Arena entry: {warning}")
                warnings.append(warning)
        return warnings

    def _teleport_to_spawn(self, player_id: int) -> None:
        if self.spawn_position is None:
            return
        self.host.teleport(player_id, self.spawn_position)

    def _clear(self, player_id: int) -> None:
        if not self.host.clear_inventory(player_id):
            raise StepFailedError("host refused to clear inventory")

    def _grant_loadout(self, player_id: int) -> None:
        if not self.loadout:
            return
        granted = self.host.give_loadout(player_id, self.loadout)
        if granted < len(self.loadout):
            raise StepFailedError(f"only {granted} of {len(self.loadout)} loadout items granted")

    def _unlock_abilities(self, player_id: int, snapshot: SessionSnapshot) -> None:
        # Unlocks that cannot be reverted on exit must not be granted
        if snapshot.is_missing("abilities"):
            raise StepFailedError("abilities were not captured; arena abilities not granted")
        for ability_id in sorted(self.ability_allow_list):
            self.host.unlock_ability(player_id, ability_id)

    def _unlock_bosses(self, player_id: int, snapshot: SessionSnapshot) -> None:
        if snapshot.is_missing("bosses"):
            raise StepFailedError("boss unlocks were not captured; arena bosses not unlocked")
        boss_ids = self.arena_boss_ids or list(self.host.list_all_bosses())
        for boss_id in boss_ids:
            self.host.unlock_boss(player_id, boss_id)

    def _set_arena_blood(self, player_id: int) -> None:
        if not self.arena_blood_type:
            return
        self.host.set_blood(player_id, self.arena_blood_type, self.arena_blood_quality)

    def _tag_name(self, player_id: int, snapshot: SessionSnapshot) -> None:
        name = snapshot.character_name
        if not self.name_tag or not name or name.startswith(self.name_tag):
            return
        self.host.set_character_name(player_id, f"{self.name_tag}{name}")

    # =========================================================================
    # Exit
    # =========================================================================

    def exit_requested(self, player_id: int) -> SessionOutcome:
        """Restore a player and end their arena session.

        Calling this for a player who is not in the arena is a no-op that
        returns a falsy outcome.

        Args:
            player_id: Player leaving.

        Returns:
            Outcome carrying the restore report and its warnings.

        Raises:
            ValidationError: If the player is still entering.
            FatalRestoreError: If no snapshot exists. The player stays ACTIVE.
        """
        with self.registry.lock(player_id):
            state = self.registry.state_of(player_id)
            if state in (SessionState.IDLE, SessionState.EXITING):
                logger.info(f"Exit requested for player {player_id} who is {state.value}; ignoring")
                return SessionOutcome(
                    player_id=player_id,
                    success=False,
                    state=state,
                    message=NOT_IN_ARENA,
                )

            self.registry.transition(player_id, SessionState.ACTIVE, SessionState.EXITING)
            started = time.perf_counter()

            snapshot = self._cache.get(player_id) or self.store.load(player_id)
            if snapshot is None:
                logger.critical(
                    f"No snapshot for active player {player_id}; cannot restore"
                )
                self.registry.transition(player_id, SessionState.EXITING, SessionState.ACTIVE)
                self.hook.on_restore_blocked(
                    RestoreBlockedEvent(player_id=player_id, reason="no snapshot found")
                )
                raise FatalRestoreError(player_id)

            try:
                report = self.dispatcher.call(self.restoration.restore, player_id, snapshot)
            except Exception as e:
                logger.error(
                    f"Restore of player {player_id} aborted, snapshot kept for retry: {e}"
                )
                self.registry.transition(player_id, SessionState.EXITING, SessionState.ACTIVE)
                raise

            self.store.delete(player_id)
            self._cache.pop(player_id, None)
            if self.store.exists(player_id):
                logger.error(
                    f"Player {player_id} restored but the snapshot could not be deleted; "
                    "discard it before the player enters again"
                )
            self.registry.transition(player_id, SessionState.EXITING, SessionState.IDLE)
            duration_ms = (time.perf_counter() - started) * 1000

        for warning in report.warnings:
            self._emit_step_failed("exit", warning)
        self.hook.on_session_exited(
            SessionExitedEvent(
                player_id=player_id,
                duration_ms=duration_ms,
                failed_steps=[w.step for w in report.warnings],
                displaced_items=len(report.displaced_items),
                lost_items=len(report.lost_items),
            )
        )

        logger.info(f"Player {player_id} left the arena")
        return SessionOutcome(
            player_id=player_id,
            success=True,
            state=SessionState.IDLE,
            warnings=list(report.warnings),
            report=report,
        )

    async def exit_requested_async(self, player_id: int) -> SessionOutcome:
        """Run exit_requested on a worker thread."""
        return await asyncio.to_thread(self.exit_requested, player_id)

    # =========================================================================
    # Recovery and operator actions
    # =========================================================================

    def recover_sessions(self, adopt: bool = True) -> list[PendingRestore]:
        """Find snapshots left behind by a previous process.

        Args:
            adopt: Mark each such player ACTIVE so their next exit restores
                them from disk.

        Returns:
            One entry per player needing a restore.

        Raises:
            StorageError: If the store could not be scanned.
        """
        entries = {entry.player_id: entry for entry in self.store.list_entries()}
        pending: list[PendingRestore] = []

        for player_id in self.store.list_player_ids():
            entry = entries.get(player_id)
            captured_at = entry.captured_at if entry else None
            adopted = False
            if adopt:
                try:
                    self.registry.transition(
                        player_id,
                        SessionState.IDLE,
                        SessionState.ACTIVE,
                        entered_at_utc=captured_at,
                        recovered=True,
                    )
                    adopted = True
                except ValidationError:
                    logger.debug(f"Player {player_id} already has a live session; not adopting")

            pending.append(
                PendingRestore(
                    player_id=player_id,
                    captured_at=captured_at,
                    character_name=entry.character_name if entry else "",
                    adopted=adopted,
                )
            )
            self.hook.on_session_recovered(
                SessionRecoveredEvent(player_id=player_id, captured_at=captured_at, adopted=adopted)
            )

        if pending:
            logger.warning(f"{len(pending)} sessions need restore: {[p.player_id for p in pending]}")
        return pending

    def discard_snapshot(self, player_id: int) -> bool:
        """Drop a player's snapshot and session without restoring them.

        Returns:
            True if a persisted snapshot was deleted.
        """
        with self.registry.lock(player_id):
            deleted = self.store.delete(player_id)
            self._cache.pop(player_id, None)
            self.registry.reset(player_id)
        logger.warning(f"Discarded snapshot for player {player_id} without restoring")
        return deleted

    def _emit_step_failed(self, flow: str, warning: PartialApplicationWarning) -> None:
        self.hook.on_step_failed(
            StepFailedEvent(
                player_id=warning.player_id,
                flow=flow,
                step=warning.step,
                error=str(warning),
            )
        )
