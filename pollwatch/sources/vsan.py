"""vSAN object resync status.

The cluster is resolved by name through the vSphere Automation API on
every read; an unknown name is NOT_FOUND rather than a read of every
cluster.  The resync summary carries the fields of vSAN's
``VsanSyncingObjectQueryResult``: ``totalBytesToSync``,
``totalObjectsToSync`` and ``totalRecoveryETA`` (seconds, negative when
vSAN cannot estimate).
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from pollwatch.core.errors import FetchError, FetchErrorKind
from pollwatch.models.snapshots import StatusReading
from pollwatch.sources.base import request_json

logger = logging.getLogger(__name__)

BYTES_PER_GB = 1024**3

DEFAULT_RESYNC_PATH = "/api/vsan/clusters/{cluster}/resync-summary"


class VsanResyncSource:
    """Reads the resync backlog of one vSAN cluster.

    Parameters
    ----------
    client:
        Authenticated vCenter client (see ``VsphereSessionProvider``).
    resync_path:
        Path template of the resync summary endpoint; ``{cluster}`` is
        replaced with the resolved cluster identifier.
    """

    def __init__(
        self, client: httpx.Client, resync_path: str = DEFAULT_RESYNC_PATH
    ) -> None:
        self._client = client
        self._resync_path = resync_path

    def resolve_cluster(self, name: str) -> str:
        """Return the managed object id of the cluster called *name*."""
        if not name:
            raise FetchError(FetchErrorKind.NOT_FOUND, "No cluster name given")

        clusters = request_json(
            self._client,
            "GET",
            "/api/vcenter/cluster",
            f"cluster lookup '{name}'",
            params={"names": name},
        )
        matches = [c for c in clusters or [] if c.get("name") == name]
        if not matches:
            raise FetchError(FetchErrorKind.NOT_FOUND, f"Cluster '{name}' not found")
        return matches[0]["cluster"]

    def read(self, handle: str) -> StatusReading:
        cluster_id = self.resolve_cluster(handle)
        summary = request_json(
            self._client,
            "GET",
            self._resync_path.format(cluster=cluster_id),
            f"resync summary for '{handle}'",
        )
        return self._parse(handle, summary)

    @staticmethod
    def _parse(cluster_name: str, summary: dict[str, Any]) -> StatusReading:
        try:
            bytes_left = int(summary.get("totalBytesToSync") or 0)
            objects_left = int(summary.get("totalObjectsToSync") or 0)
            eta = summary.get("totalRecoveryETA")
            eta_seconds = float(eta) if eta is not None and float(eta) >= 0 else None
        except (TypeError, ValueError, AttributeError) as exc:
            raise FetchError(
                FetchErrorKind.UNEXPECTED,
                f"Malformed resync summary for '{cluster_name}': {exc}",
            ) from exc

        if bytes_left == 0:
            # Nothing left: an ETA from a finished resync is meaningless.
            eta_seconds = None

        return StatusReading(
            scope=cluster_name,
            remaining_work=bytes_left / BYTES_PER_GB,
            secondary_count=objects_left,
            raw_state="Resyncing" if bytes_left else "Idle",
            reported_eta_seconds=eta_seconds,
        )
