"""Hand-off of live-state work to the host simulation thread.

The host's entity store is not safe for concurrent mutation, so anything
that reads or writes a live player runs on the thread that drives the
simulation tick. Snapshot I/O stays on the calling thread.
"""

import logging
import queue
import threading
from concurrent.futures import Future
from typing import Any, Callable, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Dispatcher(Protocol):
    """Runs a callable where live game state may be touched."""

    def call(self, fn: Callable[..., T], *args: Any) -> T:
        ...


class InlineDispatcher:
    """Runs work immediately on the calling thread.

    For single-threaded hosts where every request already arrives on the
    simulation thread.
    """

    def call(self, fn: Callable[..., T], *args: Any) -> T:
        return fn(*args)


class TickDispatcher:
    """Queues work for the simulation thread and waits for the result.

    The host calls ``run_pending()`` once per tick from its update loop.
    Calls made from the simulation thread itself run inline, so a flow
    started on the tick never waits on its own queue.
    """

    def __init__(self, timeout: float | None = 30.0) -> None:
        """Initialize bound to the constructing thread.

        Args:
            timeout: Seconds a worker waits for the tick before giving up.
                None waits forever.
        """
        self.timeout = timeout
        self._queue: queue.SimpleQueue[tuple[Callable[..., Any], tuple, Future]] = (
            queue.SimpleQueue()
        )
        self._simulation_thread = threading.get_ident()

    def bind_to_current_thread(self) -> None:
        """Declare the current thread as the simulation thread."""
        self._simulation_thread = threading.get_ident()

    def in_simulation_thread(self) -> bool:
        return threading.get_ident() == self._simulation_thread

    def call(self, fn: Callable[..., T], *args: Any) -> T:
        if self.in_simulation_thread():
            return fn(*args)
        future = self.submit(fn, *args)
        try:
            return future.result(timeout=self.timeout)
        except TimeoutError:
            # Work still queued must not run after the caller gave up
            if not future.cancel():
                logger.warning(
                    f"Dispatched work {getattr(fn, '__name__', fn)} timed out while running; "
                    "it will complete on the simulation thread"
                )
            raise

    def submit(self, fn: Callable[..., T], *args: Any) -> "Future[T]":
        """Queue work for the next tick without waiting."""
        future: Future = Future()
        self._queue.put((fn, args, future))
        return future

    def pending(self) -> int:
        """Approximate number of queued work items."""
        return self._queue.qsize()

    def run_pending(self, limit: int | None = None) -> int:
        """Run queued work on the simulation thread.

        Args:
            limit: Maximum number of items to run this tick.

        Returns:
            Number of work items executed.
        """
        executed = 0
        while limit is None or executed < limit:
            try:
                fn, args, future = self._queue.get_nowait()
            except queue.Empty:
                break
            if not future.set_running_or_notify_cancel():
                continue
            try:
                result = fn(*args)
            except Exception as exc:
                logger.debug(f"Dispatched work {getattr(fn, '__name__', fn)} raised: {exc}")
                future.set_exception(exc)
            else:
                future.set_result(result)
            executed += 1
        return executed
