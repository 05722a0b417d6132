"""Append-only, in-memory snapshot history for one monitoring session.

Design:
- Append-only: only ``append()``; no update, no delete, no reorder.
- Ordered: ``captured_at`` must strictly increase.
- Session-scoped: owned by one MonitorLoop, discarded when it exits.
"""

from __future__ import annotations

from collections.abc import Iterator

from pollwatch.models.snapshots import Snapshot


class HistoryOrderError(ValueError):
    """Raised when a snapshot would break capture-time ordering."""


class HistoryStore:
    """Ordered sequence of the snapshots seen during one session."""

    def __init__(self) -> None:
        self._snapshots: list[Snapshot] = []

    def append(self, snapshot: Snapshot) -> None:
        """Record a snapshot at the end of the history.

        Raises
        ------
        HistoryOrderError
            If ``snapshot.captured_at`` is not strictly later than the
            latest recorded snapshot.
        """
        latest = self.latest()
        if latest is not None and snapshot.captured_at <= latest.captured_at:
            raise HistoryOrderError(
                f"Snapshot captured at {snapshot.captured_at.isoformat()} is not "
                f"after the latest one ({latest.captured_at.isoformat()})"
            )
        self._snapshots.append(snapshot)

    def latest(self) -> Snapshot | None:
        return self._snapshots[-1] if self._snapshots else None

    def previous(self) -> Snapshot | None:
        """The snapshot recorded just before ``latest()``, if any."""
        return self._snapshots[-2] if len(self._snapshots) > 1 else None

    def count(self) -> int:
        return len(self._snapshots)

    @property
    def snapshots(self) -> list[Snapshot]:
        """Return a copy of the recorded snapshots, oldest first."""
        return list(self._snapshots)

    def __len__(self) -> int:
        return len(self._snapshots)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(list(self._snapshots))
