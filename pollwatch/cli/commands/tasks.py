"""``pollwatch tasks`` — watch vSphere tasks until none are outstanding."""

from __future__ import annotations

import typer

from pollwatch.cli.commands._runner import (
    build_client,
    exit_with,
    load_or_exit,
    run_monitor,
    startup_errors,
)
from pollwatch.models.reports import VSPHERE_TASKS_SCHEMA
from pollwatch.sources.session import VsphereSessionProvider
from pollwatch.sources.tasks import VsphereTaskSource


def tasks_cmd(
    operation: str = typer.Option(
        None,
        "--operation",
        "-o",
        help="Only watch tasks of this operation, e.g. com.vmware.vcenter.vm.clone.",
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
) -> None:
    """Monitor running and pending vSphere tasks."""
    config = load_or_exit(
        poll_interval_seconds=interval,
        max_transient_failures=max_failures,
        operation_scope=operation,
        vcenter_server=server,
        vcenter_user=user,
        verify_tls=False if insecure else None,
    )

    with startup_errors():
        sso_user = config.require("vcenter_user")
        password = config.require("vcenter_password").get_secret_value()
        client = build_client(config, config.require("vcenter_server"))

    with client:
        session = VsphereSessionProvider(client, sso_user, password)
        with startup_errors():
            session.open()
        try:
            result = run_monitor(
                VsphereTaskSource(client),
                config.operation_scope or "",
                VSPHERE_TASKS_SCHEMA,
                config,
            )
        finally:
            session.close()
    exit_with(result)
