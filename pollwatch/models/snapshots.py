"""Snapshot and outcome models for one monitoring session."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class StatusReading(BaseModel):
    """One raw status read, as returned by a ``StatusSource``.

    Carries everything a ``Snapshot`` does except the capture time, which
    the fetcher stamps so that sources stay free of clock handling.
    """

    model_config = ConfigDict(frozen=True)

    scope: str
    remaining_work: float | None = Field(default=None, ge=0)
    secondary_count: int | None = Field(default=None, ge=0)
    raw_state: str = ""
    started_at: datetime | None = None
    reported_eta_seconds: float | None = Field(default=None, ge=0)


class Snapshot(StatusReading):
    """Immutable record captured at one poll tick."""

    captured_at: datetime

    @classmethod
    def from_reading(cls, reading: StatusReading, captured_at: datetime) -> Snapshot:
        return cls(captured_at=captured_at, **reading.model_dump())

    @property
    def has_outstanding_work(self) -> bool:
        """True when the remote reports a positive amount of work left."""
        return bool(self.remaining_work)


class EtaSource(str, Enum):
    REPORTED = "reported"
    EXTRAPOLATED = "extrapolated"
    UNKNOWN = "unknown"


class DerivedMetrics(BaseModel):
    """Trend metrics for the latest snapshot.

    Computed fresh on every tick from two adjacent snapshots; never stored
    independently of the history it was derived from.
    """

    model_config = ConfigDict(frozen=True)

    elapsed: timedelta | None = None
    throughput: int | None = None  # floored, signed
    rate: float | None = None  # unfloored, signed, same unit as throughput
    eta_minutes: float | None = None
    eta_source: EtaSource = EtaSource.UNKNOWN

    @property
    def eta_hours_part(self) -> int | None:
        """Whole hours of the ETA, for the split hours/minutes columns."""
        if self.eta_minutes is None:
            return None
        return int(self.eta_minutes // 60)

    @property
    def eta_minutes_part(self) -> int | None:
        """Minutes left over after ``eta_hours_part``."""
        if self.eta_minutes is None:
            return None
        return int(self.eta_minutes % 60)


class Outcome(str, Enum):
    """Terminal outcome of a monitoring session."""

    COMPLETED = "completed"
    NOTHING_TO_DO = "nothing_to_do"
    FAILED = "failed"


class MonitorResult(BaseModel):
    """Produced exactly once, when the Monitor Loop exits."""

    model_config = ConfigDict(frozen=True)

    outcome: Outcome
    reason: str | None = None
    snapshots: int = 0

    @property
    def succeeded(self) -> bool:
        return self.outcome in (Outcome.COMPLETED, Outcome.NOTHING_TO_DO)

    @property
    def exit_code(self) -> int:
        return 0 if self.succeeded else 1

    def status_line(self) -> str:
        """The single human-readable line printed at session end."""
        if self.outcome == Outcome.COMPLETED:
            return "Completed normally."
        if self.outcome == Outcome.NOTHING_TO_DO:
            return f"Nothing to do: {self.reason or 'no work outstanding'}."
        return f"Stopped on error: {self.reason or 'unknown error'}"
