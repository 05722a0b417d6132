"""vSphere running tasks (``GET /api/cis/tasks``).

Remaining work is the number of outstanding tasks (running or pending);
the operation is finished once none are outstanding.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from pollwatch.core.errors import FetchError, FetchErrorKind
from pollwatch.models.snapshots import StatusReading
from pollwatch.sources.base import request_json

OUTSTANDING_STATUSES = ("RUNNING", "PENDING")

_timestamp = TypeAdapter(datetime)


class VsphereTaskSource:
    """Counts outstanding vSphere tasks, optionally for one operation.

    The handle is an operation identifier such as
    ``com.vmware.vcenter.vm.clone``; an empty handle watches every task.
    """

    def __init__(self, client: httpx.Client) -> None:
        self._client = client

    def read(self, handle: str) -> StatusReading:
        params: dict[str, Any] = {"statuses": list(OUTSTANDING_STATUSES)}
        if handle:
            params["operations"] = handle

        tasks = request_json(
            self._client, "GET", "/api/cis/tasks", "task list", params=params
        )
        if not isinstance(tasks, dict):
            raise FetchError(
                FetchErrorKind.UNEXPECTED, "Task list response is not an object"
            )
        return self._summarize(handle or "all operations", tasks.values())

    @staticmethod
    def _summarize(scope: str, tasks: Any) -> StatusReading:
        running = 0
        pending = 0
        starts: list[datetime] = []
        for info in tasks:
            status = str(info.get("status", "")).upper()
            if status == "RUNNING":
                running += 1
                if info.get("start_time"):
                    try:
                        started = _timestamp.validate_python(info["start_time"])
                    except ValidationError as exc:
                        raise FetchError(
                            FetchErrorKind.UNEXPECTED,
                            f"Bad task start_time {info['start_time']!r}",
                        ) from exc
                    if started.tzinfo is None:
                        started = started.replace(tzinfo=timezone.utc)
                    starts.append(started)
            elif status == "PENDING":
                pending += 1

        if running:
            state = "Running"
        elif pending:
            state = "Pending"
        else:
            state = "Idle"

        return StatusReading(
            scope=scope,
            remaining_work=float(running + pending),
            secondary_count=pending,
            raw_state=state,
            started_at=min(starts) if starts else None,
        )
