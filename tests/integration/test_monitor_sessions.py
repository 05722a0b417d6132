"""Integration tests — full monitoring sessions against mocked endpoints.

Each test wires a real source, fetcher, reporter and MonitorLoop together
over an ``httpx.MockTransport`` and checks the printed transcript.
"""

from __future__ import annotations

import threading

import httpx
import pytest

from pollwatch.core.fetcher import SnapshotFetcher
from pollwatch.core.monitor_loop import MonitorLoop
from pollwatch.core.termination import TerminationPolicy
from pollwatch.models.reports import VSAN_RESYNC_SCHEMA, VSPHERE_TASKS_SCHEMA
from pollwatch.models.snapshots import Outcome
from pollwatch.monitor.reporter import Reporter
from pollwatch.sources.tasks import VsphereTaskSource
from pollwatch.sources.vsan import BYTES_PER_GB, VsanResyncSource


class NoWaitEvent(threading.Event):
    def wait(self, timeout=None):
        return self.is_set()


def _client(handler) -> httpx.Client:
    return httpx.Client(
        base_url="https://vcsa.example.com", transport=httpx.MockTransport(handler)
    )


def _loop(source, handle, schema, console, clock) -> MonitorLoop:
    return MonitorLoop(
        SnapshotFetcher(source, clock=clock),
        handle,
        Reporter(schema),
        interval_seconds=300,
        policy=TerminationPolicy(3),
        console=console,
        stop_event=NoWaitEvent(),
    )


class TestResyncSession:
    def test_resync_survives_transient_error(self, capture_console, clock):
        backlog = iter([133, 112, 0])
        polls = {"count": 0}

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/vcenter/cluster":
                return httpx.Response(200, json=[{"cluster": "domain-c8", "name": "cluster-01"}])
            polls["count"] += 1
            if polls["count"] == 2:
                return httpx.Response(503)
            gb = next(backlog)
            return httpx.Response(
                200,
                json={
                    "totalBytesToSync": gb * BYTES_PER_GB,
                    "totalObjectsToSync": gb // 4,
                    "totalRecoveryETA": gb * 60 if gb else 0,
                },
            )

        console, buffer = capture_console()
        loop = _loop(
            VsanResyncSource(_client(handler)), "cluster-01", VSAN_RESYNC_SCHEMA, console, clock
        )

        result = loop.run()

        assert result.outcome == Outcome.COMPLETED
        assert result.snapshots == 3
        lines = [line for line in buffer.getvalue().splitlines() if line.strip()]
        # header, rule, three rows, status line
        assert len(lines) == 6
        assert "GB Left" in lines[0]
        assert lines[-1] == "Completed normally."

        # 21 GB over the 600 s since the last good poll
        second_row = lines[3].split()
        assert second_row[3] == "112"
        assert second_row[5:7] == ["1", "52"]
        assert second_row[-1] == "35"

    def test_consecutive_polls(self, capture_console, clock):
        backlog = iter([133, 112, 0])

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path == "/api/vcenter/cluster":
                return httpx.Response(200, json=[{"cluster": "domain-c8", "name": "cluster-01"}])
            gb = next(backlog)
            return httpx.Response(
                200, json={"totalBytesToSync": gb * BYTES_PER_GB, "totalObjectsToSync": 1}
            )

        console, buffer = capture_console()
        loop = _loop(
            VsanResyncSource(_client(handler)), "cluster-01", VSAN_RESYNC_SCHEMA, console, clock
        )
        loop.run()

        rows = [line for line in buffer.getvalue().splitlines() if "cluster-01" in line]
        assert rows[0].split()[-1] == "N/A"
        assert rows[1].split()[-1] == "71"


class TestTaskSession:
    def test_no_running_tasks_prints_only_message(self, capture_console, clock):
        client = _client(lambda _: httpx.Response(200, json={}))
        console, buffer = capture_console()
        loop = _loop(VsphereTaskSource(client), "", VSPHERE_TASKS_SCHEMA, console, clock)

        result = loop.run()

        assert result.outcome == Outcome.NOTHING_TO_DO
        assert result.exit_code == 0
        lines = [line for line in buffer.getvalue().splitlines() if line.strip()]
        assert lines[0] == VSPHERE_TASKS_SCHEMA.empty_message
        assert "Outstanding" not in buffer.getvalue()

    @pytest.mark.parametrize("status", [401, 403])
    def test_expired_session_stops(self, capture_console, clock, status):
        client = _client(lambda _: httpx.Response(status))
        console, buffer = capture_console()
        loop = _loop(VsphereTaskSource(client), "", VSPHERE_TASKS_SCHEMA, console, clock)

        result = loop.run()

        assert result.outcome == Outcome.FAILED
        assert result.reason.startswith("unauthorized")
        assert "Stopped on error" in buffer.getvalue()
