"""Shared test fixtures for Pollwatch."""

from __future__ import annotations

import io
from collections.abc import Callable, Iterable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest
from rich.console import Console

from pollwatch.core.errors import FetchError, FetchErrorKind
from pollwatch.models.snapshots import Snapshot, StatusReading

T0 = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


class FakeClock:
    """Deterministic clock advancing a fixed step per call.

    The fetcher calls it once per read attempt, failed reads included.
    """

    def __init__(self, start: datetime = T0, step_seconds: float = 300) -> None:
        self._now = start
        self._step = timedelta(seconds=step_seconds)

    def __call__(self) -> datetime:
        now = self._now
        self._now += self._step
        return now


class ScriptedSource:
    """StatusSource replaying a fixed script of readings and errors.

    Once the script is exhausted the last entry repeats.
    """

    def __init__(self, script: Iterable[StatusReading | BaseException]) -> None:
        self._script = list(script)
        self.handles: list[str] = []

    def read(self, handle: str) -> StatusReading:
        self.handles.append(handle)
        index = min(len(self.handles) - 1, len(self._script) - 1)
        item = self._script[index]
        if isinstance(item, BaseException):
            raise item
        return item


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def capture_console() -> Callable[[], tuple[Console, io.StringIO]]:
    """Factory fixture: a plain-text Console writing into a buffer."""

    def _factory() -> tuple[Console, io.StringIO]:
        buffer = io.StringIO()
        console = Console(file=buffer, width=200, color_system=None, highlight=False)
        return console, buffer

    return _factory


@pytest.fixture
def make_reading() -> Callable[..., StatusReading]:
    """Factory fixture: build a StatusReading with sensible defaults."""

    def _factory(remaining_work: float | None = 100.0, **overrides: Any) -> StatusReading:
        defaults: dict[str, Any] = {
            "scope": "cluster-01",
            "remaining_work": remaining_work,
            "raw_state": "Resyncing",
        }
        defaults.update(overrides)
        return StatusReading(**defaults)

    return _factory


@pytest.fixture
def make_snapshot() -> Callable[..., Snapshot]:
    """Factory fixture: build a Snapshot at T0 + *offset_seconds*."""

    def _factory(
        remaining_work: float | None = 100.0,
        offset_seconds: float = 0,
        **overrides: Any,
    ) -> Snapshot:
        defaults: dict[str, Any] = {
            "scope": "cluster-01",
            "remaining_work": remaining_work,
            "raw_state": "Resyncing",
            "captured_at": T0 + timedelta(seconds=offset_seconds),
        }
        defaults.update(overrides)
        return Snapshot(**defaults)

    return _factory


@pytest.fixture
def make_clock() -> Callable[..., FakeClock]:
    return FakeClock


@pytest.fixture
def make_source() -> Callable[..., ScriptedSource]:
    """Factory fixture: a ScriptedSource over readings and errors."""
    return ScriptedSource


@pytest.fixture
def transient() -> Callable[..., FetchError]:
    """Factory fixture: a TRANSIENT fetch error."""

    def _factory(message: str = "connection reset") -> FetchError:
        return FetchError(FetchErrorKind.TRANSIENT, message)

    return _factory
