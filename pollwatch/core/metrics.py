"""Trend metrics derived from adjacent snapshots.

Pure functions of their arguments: the same snapshot pair and interval
always yield the same metrics, with no reads of the wall clock.
"""

from __future__ import annotations

import math
from datetime import timedelta

from pollwatch.models.snapshots import DerivedMetrics, EtaSource, Snapshot

# Floor for the divisor when extrapolating an ETA from a positive rate.
RATE_EPSILON = 1e-9


def format_elapsed(delta: timedelta) -> str:
    """Format a duration by its largest nonzero unit.

    >>> format_elapsed(timedelta(days=1, hours=2, minutes=3))
    '1 Days 2 Hours'
    >>> format_elapsed(timedelta(minutes=5, seconds=10))
    '5 Minutes'
    >>> format_elapsed(timedelta(seconds=9))
    '9 Seconds'
    """
    total = max(int(delta.total_seconds()), 0)
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)

    if days > 0:
        return f"{days} Days {hours} Hours"
    if hours > 0:
        return f"{hours} Hours {minutes} Minutes"
    if minutes > 0:
        return f"{minutes} Minutes"
    return f"{seconds} Seconds"


class MetricsEngine:
    """Computes elapsed time, throughput and ETA for the latest snapshot.

    Parameters
    ----------
    unit_scale_factor:
        Converts remaining-work units per second into the displayed rate
        unit (GB/s to MiB/s is ``1024``; tasks/s to tasks/min is ``60``).
    """

    def __init__(self, unit_scale_factor: float = 1.0) -> None:
        if unit_scale_factor <= 0:
            raise ValueError("unit_scale_factor must be positive")
        self.unit_scale_factor = unit_scale_factor

    def compute(
        self,
        current: Snapshot,
        previous: Snapshot | None,
        interval_seconds: float,
    ) -> DerivedMetrics:
        """Derive metrics for *current* given the snapshot before it."""
        rate = self._rate(current, previous, interval_seconds)
        throughput = math.floor(rate) if rate is not None else None
        eta_minutes, eta_source = self._eta(current, rate, throughput)

        elapsed = None
        if current.started_at is not None:
            elapsed = current.captured_at - current.started_at

        return DerivedMetrics(
            elapsed=elapsed,
            throughput=throughput,
            rate=rate,
            eta_minutes=eta_minutes,
            eta_source=eta_source,
        )

    def _rate(
        self,
        current: Snapshot,
        previous: Snapshot | None,
        interval_seconds: float,
    ) -> float | None:
        if previous is None or interval_seconds <= 0:
            return None
        if previous.remaining_work is None or current.remaining_work is None:
            return None
        # Signed: a growing backlog is a negative rate and is reported as such.
        done = previous.remaining_work - current.remaining_work
        return done / interval_seconds * self.unit_scale_factor

    def _eta(
        self, current: Snapshot, rate: float | None, throughput: int | None
    ) -> tuple[float | None, EtaSource]:
        if current.reported_eta_seconds is not None:
            return current.reported_eta_seconds / 60.0, EtaSource.REPORTED

        # Unknown unless the displayed throughput is positive; the unfloored
        # rate only sharpens the division.
        if (
            rate is None
            or throughput is None
            or throughput <= 0
            or current.remaining_work is None
        ):
            return None, EtaSource.UNKNOWN

        seconds = current.remaining_work * self.unit_scale_factor / max(rate, RATE_EPSILON)
        return seconds / 60.0, EtaSource.EXTRAPOLATED
