"""Termination policy — decides after every tick whether polling goes on.

Rules, in priority order:

1. ``NOT_FOUND`` / ``UNAUTHORIZED`` fetch failures stop with an error.
2. ``TRANSIENT`` failures keep polling until ``max_transient_failures``
   of them happen in a row, then stop with an error.
3. ``UNEXPECTED`` fetch failures stop with an error.
4. No work outstanding on the first snapshot of the session stops empty.
5. No work outstanding later, or a reported ETA of zero, stops successfully.
6. Anything else continues.

Terminal states (STOP_*) have no outgoing transitions.
"""

from __future__ import annotations

import logging
from enum import Enum

from pollwatch.core.errors import FetchError, FetchErrorKind
from pollwatch.models.snapshots import Snapshot

logger = logging.getLogger(__name__)

DEFAULT_MAX_TRANSIENT_FAILURES = 3


class PolicyState(str, Enum):
    CONTINUE = "continue"
    STOP_SUCCESS = "stop_success"
    STOP_EMPTY = "stop_empty"
    STOP_ERROR = "stop_error"

    @property
    def is_terminal(self) -> bool:
        return self != PolicyState.CONTINUE


class PolicyClosedError(RuntimeError):
    """Raised when a policy is asked to evaluate after reaching a terminal state."""


class TerminationPolicy:
    """Tracks one session's termination state.

    Parameters
    ----------
    max_transient_failures:
        Number of consecutive transient fetch failures that ends the
        session.  Any successful fetch resets the count.
    """

    def __init__(
        self, max_transient_failures: int = DEFAULT_MAX_TRANSIENT_FAILURES
    ) -> None:
        if max_transient_failures < 1:
            raise ValueError("max_transient_failures must be at least 1")
        self.max_transient_failures = max_transient_failures
        self._state = PolicyState.CONTINUE
        self._consecutive_failures = 0
        self._reason: str | None = None

    @property
    def state(self) -> PolicyState:
        return self._state

    @property
    def reason(self) -> str | None:
        """Why the policy stopped, when it stopped on an error."""
        return self._reason

    @property
    def consecutive_failures(self) -> int:
        return self._consecutive_failures

    def on_fetch_error(self, error: FetchError) -> PolicyState:
        """Evaluate a failed fetch."""
        self._ensure_open()

        if error.kind == FetchErrorKind.TRANSIENT:
            self._consecutive_failures += 1
            if self._consecutive_failures >= self.max_transient_failures:
                return self._stop(
                    PolicyState.STOP_ERROR,
                    f"{self._consecutive_failures} consecutive transient failures, "
                    f"last: {error.message}",
                )
            logger.warning(
                "Transient fetch failure %d/%d: %s",
                self._consecutive_failures,
                self.max_transient_failures,
                error.message,
            )
            return self._state

        return self._stop(PolicyState.STOP_ERROR, error.describe())

    def on_snapshot(self, snapshot: Snapshot, *, first: bool) -> PolicyState:
        """Evaluate a successful fetch.

        Parameters
        ----------
        snapshot:
            The snapshot just recorded.
        first:
            Whether this is the first snapshot of the session.
        """
        self._ensure_open()
        self._consecutive_failures = 0

        if not snapshot.has_outstanding_work:
            if first:
                return self._stop(PolicyState.STOP_EMPTY)
            return self._stop(PolicyState.STOP_SUCCESS)

        if snapshot.reported_eta_seconds == 0:
            return self._stop(PolicyState.STOP_SUCCESS)

        return self._state

    def _stop(self, state: PolicyState, reason: str | None = None) -> PolicyState:
        self._state = state
        self._reason = reason
        if state == PolicyState.STOP_ERROR:
            logger.error("Monitoring stopped: %s", reason)
        else:
            logger.info("Monitoring finished: %s", state.value)
        return state

    def _ensure_open(self) -> None:
        if self._state.is_terminal:
            raise PolicyClosedError(
                f"Policy already reached terminal state {self._state.value}"
            )
