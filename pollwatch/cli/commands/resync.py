"""``pollwatch resync CLUSTER`` — watch a vSAN object resync to completion.

Prints one row per poll: GB and objects left, ETA split into hours and
minutes, and the resync rate in MiB/s.
"""

from __future__ import annotations

import typer

from pollwatch.cli.commands._runner import (
    build_client,
    exit_with,
    load_or_exit,
    run_monitor,
    startup_errors,
)
from pollwatch.models.reports import VSAN_RESYNC_SCHEMA
from pollwatch.sources.session import VsphereSessionProvider
from pollwatch.sources.vsan import DEFAULT_RESYNC_PATH, VsanResyncSource


def resync_cmd(
    cluster: str = typer.Argument(
        None,
        help="vSAN cluster name (defaults to POLLWATCH_OPERATION_SCOPE).",
        show_default=False,
    ),
    server: str = typer.Option(
        None, "--server", "-s", help="vCenter URL, e.g. https://vcsa.example.com."
    ),
    user: str = typer.Option(None, "--user", "-u", help="vCenter SSO user."),
    interval: int = typer.Option(
        None, "--interval", "-i", help="Seconds between polls [default: 60]."
    ),
    max_failures: int = typer.Option(
        None,
        "--max-failures",
        help="Consecutive transient failures tolerated [default: 3].",
    ),
    insecure: bool = typer.Option(
        False, "--insecure", "-k", help="Skip TLS certificate verification."
    ),
    resync_path: str = typer.Option(
        DEFAULT_RESYNC_PATH, "--resync-path", help="Resync summary endpoint template."
    ),
) -> None:
    """Monitor the vSAN resync backlog of one cluster."""
    config = load_or_exit(
        poll_interval_seconds=interval,
        max_transient_failures=max_failures,
        operation_scope=cluster,
        vcenter_server=server,
        vcenter_user=user,
        verify_tls=False if insecure else None,
    )

    with startup_errors():
        handle = config.require("operation_scope")
        sso_user = config.require("vcenter_user")
        password = config.require("vcenter_password").get_secret_value()
        client = build_client(config, config.require("vcenter_server"))

    with client:
        session = VsphereSessionProvider(client, sso_user, password)
        with startup_errors():
            session.open()
        try:
            result = run_monitor(
                VsanResyncSource(client, resync_path), handle, VSAN_RESYNC_SCHEMA, config
            )
        finally:
            session.close()
    exit_with(result)
