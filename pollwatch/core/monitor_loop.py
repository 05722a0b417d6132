"""MonitorLoop — drives one monitoring session to a terminal outcome.

Each tick runs fetch -> record -> compute -> evaluate -> report, then
waits for the poll interval.  Rates are taken over the real gap between
the two latest snapshots, which spans any polls lost to transient
errors.  The wait is an ``Event.wait`` so an operator interrupt ends the
session between or during ticks; the history is append-only, so
stopping at any point leaves it consistent.
"""

from __future__ import annotations

import logging
import signal
import threading
from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console

from pollwatch.core.errors import FetchError, FetchErrorKind
from pollwatch.core.fetcher import SnapshotFetcher
from pollwatch.core.history import HistoryOrderError, HistoryStore
from pollwatch.core.metrics import MetricsEngine
from pollwatch.core.termination import PolicyState, TerminationPolicy
from pollwatch.models.snapshots import MonitorResult, Outcome
from pollwatch.monitor.reporter import Reporter

logger = logging.getLogger(__name__)

INTERRUPTED_REASON = "interrupted by operator"


class MonitorLoop:
    """Polls one remote operation until the termination policy stops it.

    Parameters
    ----------
    fetcher:
        Reads one snapshot per tick.
    handle:
        Identifies the remote operation (cluster name, job URL, scope).
    reporter:
        Renders the growing transcript for this operation family.
    interval_seconds:
        Fixed delay between ticks.  Must be positive.
    policy:
        Termination policy; a default one is created if not provided.
    console:
        Output sink.  A new Rich Console is created if not provided.
    stop_event:
        Event that ends the session when set; also the interruptible
        wait between ticks.
    """

    def __init__(
        self,
        fetcher: SnapshotFetcher,
        handle: str,
        reporter: Reporter,
        *,
        interval_seconds: float,
        policy: TerminationPolicy | None = None,
        console: Console | None = None,
        stop_event: threading.Event | None = None,
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.handle = handle
        self.interval_seconds = interval_seconds
        self._fetcher = fetcher
        self._reporter = reporter
        self._policy = policy or TerminationPolicy()
        self._metrics = MetricsEngine(reporter.schema.unit_scale_factor)
        self._history = HistoryStore()
        self._console = console or Console()
        self._stop = stop_event or threading.Event()

    @property
    def history(self) -> HistoryStore:
        return self._history

    @property
    def policy(self) -> TerminationPolicy:
        return self._policy

    def stop(self) -> None:
        """Request the loop to end at the next suspension point."""
        self._stop.set()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    # ------------------------------------------------------------------
    # Session
    # ------------------------------------------------------------------

    def run(self) -> MonitorResult:
        """Run ticks until a terminal state, then print one status line."""
        logger.info(
            "Monitoring %s every %ss", self.handle or "(all)", self.interval_seconds
        )
        try:
            result = self._run_ticks()
        except KeyboardInterrupt:
            result = self._result(Outcome.FAILED, INTERRUPTED_REASON)

        self._emit(self._reporter.render_status(result))
        return result

    def _run_ticks(self) -> MonitorResult:
        while not self._stop.is_set():
            state = self.tick()
            if state == PolicyState.STOP_SUCCESS:
                return self._result(Outcome.COMPLETED)
            if state == PolicyState.STOP_EMPTY:
                return self._result(Outcome.NOTHING_TO_DO)
            if state == PolicyState.STOP_ERROR:
                return self._result(Outcome.FAILED, self._policy.reason)

            if self._stop.wait(self.interval_seconds):
                break

        return self._result(Outcome.FAILED, INTERRUPTED_REASON)

    def tick(self) -> PolicyState:
        """Run a single fetch/evaluate/report step."""
        try:
            snapshot = self._fetcher.fetch(self.handle)
        except FetchError as exc:
            return self._policy.on_fetch_error(exc)

        try:
            self._history.append(snapshot)
        except HistoryOrderError as exc:
            # The wall clock stepped backwards; the history cannot order it.
            return self._policy.on_fetch_error(
                FetchError(FetchErrorKind.UNEXPECTED, str(exc))
            )

        first = self._history.count() == 1
        state = self._policy.on_snapshot(snapshot, first=first)

        if state == PolicyState.STOP_EMPTY:
            self._emit(self._reporter.render_empty())
            return state

        previous = self._history.previous()
        gap = self.interval_seconds
        if previous is not None:
            gap = (snapshot.captured_at - previous.captured_at).total_seconds()
        metrics = self._metrics.compute(snapshot, previous, gap)
        self._emit(self._reporter.render(self._history, metrics))
        return state

    def _result(self, outcome: Outcome, reason: str | None = None) -> MonitorResult:
        return MonitorResult(
            outcome=outcome, reason=reason, snapshots=self._history.count()
        )

    def _emit(self, text: str) -> None:
        self._console.out(text, highlight=False)


@contextmanager
def stop_on_signals(
    loop: MonitorLoop, signals: tuple[int, ...] = (signal.SIGINT, signal.SIGTERM)
) -> Iterator[MonitorLoop]:
    """Route *signals* to ``loop.stop()`` for the duration of the block.

    Handlers can only be installed from the main thread; elsewhere the
    block runs with the existing handlers.
    """
    if threading.current_thread() is not threading.main_thread():
        yield loop
        return

    def _handler(signum: int, _frame: object) -> None:
        logger.info("Received signal %d, stopping after the current tick", signum)
        loop.stop()

    previous = {sig: signal.signal(sig, _handler) for sig in signals}
    try:
        yield loop
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)
