"""Shared plumbing for the monitor commands.

Loads configuration, configures logging, builds HTTP clients and runs a
``MonitorLoop`` to completion, turning startup failures into one error
line and a non-zero exit code.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, NoReturn

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler

from pollwatch.config import WatchConfig, load_config
from pollwatch.core.errors import ConfigError, FetchError, SessionError
from pollwatch.core.fetcher import SnapshotFetcher
from pollwatch.core.monitor_loop import MonitorLoop, stop_on_signals
from pollwatch.core.termination import TerminationPolicy
from pollwatch.models.reports import ReportSchema
from pollwatch.models.snapshots import MonitorResult, Outcome
from pollwatch.monitor.reporter import Reporter
from pollwatch.sources.base import StatusSource

console = Console()
err_console = Console(stderr=True)


def configure_logging(level: str) -> None:
    """Send log records to stderr through Rich, once per process."""
    root = logging.getLogger()
    if any(isinstance(h, RichHandler) for h in root.handlers):
        root.setLevel(level.upper())
        return
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def load_or_exit(**overrides: Any) -> WatchConfig:
    """Load configuration, exiting with code 1 on any ``ConfigError``."""
    try:
        config = load_config(**overrides)
    except ConfigError as exc:
        fail(f"Configuration {exc.kind.value}", exc.message)
    configure_logging(config.log_level)
    return config


def fail(title: str, message: str) -> NoReturn:
    console.print(f"[bold red]{title}:[/bold red] {message}")
    raise typer.Exit(code=1)


def build_client(config: WatchConfig, base_url: str) -> httpx.Client:
    return httpx.Client(
        base_url=base_url,
        timeout=config.http_timeout_seconds,
        verify=config.httpx_verify(),
    )


@contextmanager
def startup_errors() -> Iterator[None]:
    """Report config/session failures raised before polling begins."""
    try:
        yield
    except ConfigError as exc:
        fail(f"Configuration {exc.kind.value}", exc.message)
    except SessionError as exc:
        fail("Session error", exc.message)
    except FetchError as exc:
        result = MonitorResult(outcome=Outcome.FAILED, reason=exc.describe())
        fail("Startup failed", result.status_line())


def run_monitor(
    source: StatusSource,
    handle: str,
    schema: ReportSchema,
    config: WatchConfig,
    *,
    label: str | None = None,
) -> MonitorResult:
    """Run one monitoring session against *source* and return its result."""
    reporter = Reporter(schema)
    loop = MonitorLoop(
        SnapshotFetcher(source),
        handle,
        reporter,
        interval_seconds=config.poll_interval_seconds,
        policy=TerminationPolicy(config.max_transient_failures),
        console=console,
    )
    console.print(
        f"[dim]{reporter.render_title(label or handle)}, polling every "
        f"{config.poll_interval_seconds}s. Press Ctrl+C to stop.[/dim]"
    )
    with stop_on_signals(loop):
        return loop.run()


def exit_with(result: MonitorResult) -> None:
    raise typer.Exit(code=result.exit_code)
