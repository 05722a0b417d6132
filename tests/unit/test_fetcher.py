"""Tests for the SnapshotFetcher — stamping and error classification."""

from __future__ import annotations

import pytest

from pollwatch.core.errors import FetchError, FetchErrorKind
from pollwatch.core.fetcher import SnapshotFetcher
from pollwatch.sources.base import StatusSource


class TestSnapshotFetcher:
    def test_stamps_capture_time(self, make_source, make_reading, clock):
        source = make_source([make_reading(50.0)])
        fetcher = SnapshotFetcher(source, clock=clock)

        first = fetcher.fetch("cluster-01")
        second = fetcher.fetch("cluster-01")

        assert first.remaining_work == 50.0
        assert second.captured_at > first.captured_at
        assert source.handles == ["cluster-01", "cluster-01"]

    def test_fetch_error_passes_through(self, make_source, transient, clock):
        fetcher = SnapshotFetcher(make_source([transient("socket timeout")]), clock=clock)
        with pytest.raises(FetchError) as excinfo:
            fetcher.fetch("cluster-01")
        assert excinfo.value.kind == FetchErrorKind.TRANSIENT
        assert excinfo.value.retryable

    def test_unclassified_error_becomes_unexpected(self, make_source, clock):
        fetcher = SnapshotFetcher(make_source([KeyError("cluster")]), clock=clock)
        with pytest.raises(FetchError) as excinfo:
            fetcher.fetch("cluster-01")
        assert excinfo.value.kind == FetchErrorKind.UNEXPECTED
        assert "KeyError" in excinfo.value.message
        assert not excinfo.value.retryable

    def test_scripted_source_satisfies_protocol(self, make_source, make_reading):
        assert isinstance(make_source([make_reading()]), StatusSource)

    def test_failed_read_consumes_clock_time(self, make_source, make_reading, transient, clock):
        source = make_source([make_reading(50.0), transient(), make_reading(40.0)])
        fetcher = SnapshotFetcher(source, clock=clock)

        first = fetcher.fetch("cluster-01")
        with pytest.raises(FetchError):
            fetcher.fetch("cluster-01")
        third = fetcher.fetch("cluster-01")

        assert (third.captured_at - first.captured_at).total_seconds() == 600
