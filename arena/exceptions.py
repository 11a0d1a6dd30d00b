"""Arena exception definitions.

Custom exception hierarchy for arena session operations.
"""

ALREADY_IN_ARENA = "already in arena"
NOT_IN_ARENA = "not in arena"
NO_SNAPSHOT = "no snapshot found, cannot restore; contact an administrator"


class ArenaError(Exception):
    """Base exception for arena session operations."""

    pass


class ValidationError(ArenaError):
    """A session transition was requested from the wrong state.

    Attributes:
        player_id: Player whose session was addressed.
        state: Session state observed when the request was rejected.
    """

    def __init__(self, message: str, player_id: int, state: object | None = None) -> None:
        super().__init__(message)
        self.player_id = player_id
        self.state = state


class StorageError(ArenaError):
    """Snapshot persistence failed.

    Attributes:
        player_id: Player whose snapshot was being accessed.
        operation: The store operation that failed ("save", "load", ...).
    """

    def __init__(self, message: str, player_id: int | None = None, operation: str = "") -> None:
        super().__init__(message)
        self.player_id = player_id
        self.operation = operation


class FatalRestoreError(ArenaError):
    """An active player tried to leave but no snapshot exists to restore."""

    def __init__(self, player_id: int, message: str = NO_SNAPSHOT) -> None:
        super().__init__(message)
        self.player_id = player_id


class PartialApplicationWarning(ArenaError, Warning):
    """One step of an arena mutation or restore failed; the flow continued.

    These are collected on outcomes and logged, never raised out of the
    enter or exit flows.

    Attributes:
        step: Name of the step that failed.
        player_id: Player the step was applied to.
        cause: The underlying exception, if any.
    """

    def __init__(
        self,
        step: str,
        player_id: int,
        cause: BaseException | None = None,
        detail: str | None = None,
    ) -> None:
        reason = detail or (f"{type(cause).__name__}: {cause}" if cause else "step failed")
        super().__init__(f"{step} failed for player {player_id}: {reason}")
        self.step = step
        self.player_id = player_id
        self.cause = cause


class StepFailedError(ArenaError):
    """Raised inside a step when the host reports failure without raising."""

    pass
