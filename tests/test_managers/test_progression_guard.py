"""Tests for ProgressionGuard and ProgressionLedger."""

import logging

import pytest

from arena.database.models.enums import SessionState
from arena.managers.progression_guard import ProgressionGuard, ProgressionLedger
from arena.observability.events import ProgressionSuppressedEvent


@pytest.fixture
def ledger(session_factory) -> ProgressionLedger:
    return ProgressionLedger(session_factory)


@pytest.fixture
def guard(registry, ledger, hook) -> ProgressionGuard:
    return ProgressionGuard(registry, ledger, hook=hook)


class TestProgressionLedger:
    """Tests for the persistent defeated-boss set."""

    def test_mark_boss_defeated(self, ledger: ProgressionLedger):
        assert ledger.mark_boss_defeated(42, 1) is True

        assert ledger.defeated_bosses(42) == {1}

    def test_duplicate_defeat_not_recorded_twice(self, ledger: ProgressionLedger):
        ledger.mark_boss_defeated(42, 1)

        assert ledger.mark_boss_defeated(42, 1) is False
        assert ledger.defeated_bosses(42) == {1}

    def test_players_are_separate(self, ledger: ProgressionLedger):
        ledger.mark_boss_defeated(42, 1)

        assert ledger.defeated_bosses(7) == set()


class TestProgressionGuard:
    """Tests for suppressing progression during arena sessions."""

    def test_idle_player_progresses(self, guard: ProgressionGuard, ledger):
        assert guard.record_boss_defeat(42, 1) is True

        assert ledger.defeated_bosses(42) == {1}

    def test_active_player_suppressed(self, guard: ProgressionGuard, ledger, hook, caplog):
        """A boss killed in the arena never reaches the persistent set."""
        caplog.set_level(logging.INFO)
        guard.registry.transition(42, SessionState.IDLE, SessionState.ACTIVE)

        assert guard.record_boss_defeat(42, 1) is False

        assert ledger.defeated_bosses(42) == set()
        assert "ignored: in arena" in caplog.text
        assert hook.of_type(ProgressionSuppressedEvent)[0].player_id == 42

    def test_suppressed_defeat_stays_absent_after_session(self, guard: ProgressionGuard, ledger):
        """Ending the session does not replay suppressed effects."""
        guard.registry.transition(42, SessionState.IDLE, SessionState.ACTIVE)
        guard.record_boss_defeat(42, 1)

        guard.registry.transition(42, SessionState.ACTIVE, SessionState.IDLE)

        assert ledger.defeated_bosses(42) == set()

    @pytest.mark.parametrize("state", [SessionState.ENTERING, SessionState.EXITING])
    def test_in_flight_states_suppressed(self, guard: ProgressionGuard, state):
        guard.registry.transition(42, SessionState.IDLE, state)

        assert guard.should_suppress(42)

    def test_commit_returns_effect_result(self, guard: ProgressionGuard):
        assert guard.commit(42, "grant currency", lambda: 250) == 250

    def test_commit_skips_effect_in_arena(self, guard: ProgressionGuard):
        calls = []
        guard.registry.transition(42, SessionState.IDLE, SessionState.ACTIVE)

        result = guard.commit(42, "grant currency", lambda: calls.append(1))

        assert result is None
        assert calls == []

    def test_full_session_leaks_nothing(self, coordinator, registry, ledger):
        """A boss defeated between enter and exit is absent before and after."""
        guard = ProgressionGuard(registry, ledger)
        coordinator.enter_requested(42)

        guard.record_boss_defeat(42, 3)
        assert ledger.defeated_bosses(42) == set()

        coordinator.exit_requested(42)
        assert ledger.defeated_bosses(42) == set()
        assert 3 not in coordinator.host.players[42].bosses
