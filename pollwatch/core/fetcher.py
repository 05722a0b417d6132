"""Snapshot fetcher — one remote read per call, stamped with a capture time."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import TYPE_CHECKING

from pollwatch.core.errors import FetchError, FetchErrorKind
from pollwatch.models.snapshots import Snapshot

if TYPE_CHECKING:
    from pollwatch.sources.base import StatusSource

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SnapshotFetcher:
    """Reads one status snapshot of a remote operation.

    Holds no state between calls.  Every failure leaves this class as a
    ``FetchError``; errors the source did not classify become
    ``FetchErrorKind.UNEXPECTED``.

    Parameters
    ----------
    source:
        The remote status collaborator.
    clock:
        Called once per read attempt for the capture time.  Defaults to
        UTC now.
    """

    def __init__(
        self,
        source: StatusSource,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._source = source
        self._clock = clock

    def fetch(self, handle: str) -> Snapshot:
        """Fetch one snapshot of the operation identified by *handle*.

        The capture time is taken when the read starts, so failed reads
        still consume clock time.
        """
        captured_at = self._clock()
        try:
            reading = self._source.read(handle)
        except FetchError:
            raise
        except Exception as exc:  # noqa: BLE001
            logger.debug("Unclassified error reading %s", handle, exc_info=True)
            raise FetchError(
                FetchErrorKind.UNEXPECTED, f"{type(exc).__name__}: {exc}"
            ) from exc

        snapshot = Snapshot.from_reading(reading, captured_at=captured_at)
        logger.debug(
            "Fetched %s: remaining=%s state=%s",
            snapshot.scope,
            snapshot.remaining_work,
            snapshot.raw_state,
        )
        return snapshot
