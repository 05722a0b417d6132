"""``pollwatch policy-scan`` — trigger an Azure Policy compliance scan and
watch it until Azure reports it finished.
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
from pollwatch.models.reports import POLICY_SCAN_SCHEMA
from pollwatch.sources.policy import PolicyScanSource
from pollwatch.sources.session import AzureTokenSession


def policy_scan_cmd(
    resource_group: str = typer.Option(
        None,
        "--resource-group",
        "-g",
        help="Scan only this resource group (defaults to the whole subscription).",
    ),
    subscription: str = typer.Option(
        None, "--subscription", help="Azure subscription id."
    ),
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
    """Start an on-demand compliance evaluation and monitor it."""
    config = load_or_exit(
        poll_interval_seconds=interval,
        max_transient_failures=max_failures,
        operation_scope=resource_group,
        azure_subscription_id=subscription,
        verify_tls=False if insecure else None,
    )

    with startup_errors():
        subscription_id = config.require("azure_subscription_id")
        token = config.require("azure_token").get_secret_value()
        client = build_client(config, config.azure_management_url)

    with client, AzureTokenSession(client, token):
        source = PolicyScanSource(client, subscription_id, config.operation_scope)
        with startup_errors():
            location = source.trigger()
        result = run_monitor(
            source, location, POLICY_SCAN_SCHEMA, config, label=source.scope_label
        )
    exit_with(result)
