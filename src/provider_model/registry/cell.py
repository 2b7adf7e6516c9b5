"""Compute-once cell backing each declared provider.

A :class:`ProviderCell` runs its build function at most once per lifetime
and publishes the outcome, value or exception, to every caller. Concurrent
callers block on a per-cell condition variable while the single winning
caller builds, so building one provider never blocks requests for another.

State machine::

    EMPTY --get()--> RUNNING --ok--> DONE(value)
                        |
                        +--raise--> FAILED(error)   (terminal unless retry_failed)

With ``retry_failed=True`` a FAILED cell is rebuilt by the next caller that
arrives after the failure; callers that were already waiting on the failed
attempt still observe its error.
"""

import enum
import threading
from collections.abc import Callable
from types import TracebackType
from typing import Any


class CellState(enum.Enum):
    EMPTY = "empty"
    RUNNING = "running"
    DONE = "done"
    FAILED = "failed"


class ProviderCell:
    """One-shot construction-and-cache unit for a single provider name."""

    def __init__(self, build: Callable[[], Any], retry_failed: bool = False):
        """
        Args:
            build: Zero-argument function producing the provider instance
            retry_failed: Rebuild after a failure instead of memoizing it
        """
        self._build = build
        self._retry_failed = retry_failed
        self._condition = threading.Condition(threading.Lock())
        self._state = CellState.EMPTY
        self._value: Any = None
        self._error: Exception | None = None
        self._error_tb: TracebackType | None = None
        self._attempts = 0

    @property
    def state(self) -> CellState:
        return self._state

    @property
    def attempts(self) -> int:
        """Number of times the build function has been started."""
        return self._attempts

    @property
    def error(self) -> Exception | None:
        return self._error

    def peek(self) -> Any:
        """Return the cached instance without building, or None."""
        with self._condition:
            return self._value if self._state is CellState.DONE else None

    def get(self) -> Any:
        """Return the cached instance, building it on first use.

        Raises:
            Exception: The memoized build failure, re-raised unchanged
        """
        with self._condition:
            waited = False
            while self._state is CellState.RUNNING:
                waited = True
                self._condition.wait()

            if self._state is CellState.DONE:
                return self._value
            if self._state is CellState.FAILED and (waited or not self._retry_failed):
                # Re-raise from the failure-time traceback
                raise self._error.with_traceback(self._error_tb)

            self._state = CellState.RUNNING
            self._attempts += 1

        try:
            value = self._build()
        except Exception as exc:
            with self._condition:
                self._error = exc
                self._error_tb = exc.__traceback__
                self._state = CellState.FAILED
                self._condition.notify_all()
            raise
        except BaseException:
            # Interrupted (e.g. KeyboardInterrupt): leave the cell buildable
            with self._condition:
                self._state = CellState.EMPTY
                self._condition.notify_all()
            raise

        with self._condition:
            self._value = value
            self._error = None
            self._error_tb = None
            self._state = CellState.DONE
            self._condition.notify_all()
        return value
