"""Azure Policy compliance scan (on-demand evaluation).

``trigger()`` starts an evaluation with
``POST {scope}/providers/Microsoft.PolicyInsights/policyStates/latest/triggerEvaluation``.
Azure answers ``202 Accepted`` with a ``Location`` URL; polling that URL
returns ``202`` while the scan runs and ``200`` once it has finished.
The ``Location`` URL is the operation handle handed to the monitor loop.

A resource group that does not exist is NOT_FOUND; the scan is never
widened to the whole subscription.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

import httpx

from pollwatch.core.errors import FetchError, FetchErrorKind
from pollwatch.core.fetcher import utc_now
from pollwatch.models.snapshots import StatusReading
from pollwatch.sources.base import (
    classified_transport_errors,
    raise_for_classified_status,
)

logger = logging.getLogger(__name__)

POLICY_INSIGHTS_API_VERSION = "2019-10-01"
RESOURCES_API_VERSION = "2021-04-01"


class PolicyScanSource:
    """Starts and observes one compliance evaluation.

    Parameters
    ----------
    client:
        Authenticated ARM client (see ``AzureTokenSession``) whose
        ``base_url`` is the management endpoint.
    subscription_id:
        Subscription that owns the scope.
    resource_group:
        Optional resource group; ``None`` scans the whole subscription.
    """

    def __init__(
        self,
        client: httpx.Client,
        subscription_id: str,
        resource_group: str | None = None,
        *,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._client = client
        self._subscription_id = subscription_id
        self._resource_group = resource_group
        self._clock = clock
        self._started_at: datetime | None = None

    @property
    def scope_path(self) -> str:
        path = f"/subscriptions/{self._subscription_id}"
        if self._resource_group:
            path += f"/resourceGroups/{self._resource_group}"
        return path

    @property
    def scope_label(self) -> str:
        return self._resource_group or f"subscription {self._subscription_id}"

    def check_scope(self) -> None:
        """Confirm the resource group exists before starting a scan."""
        if not self._resource_group:
            return
        what = f"resource group '{self._resource_group}'"
        with classified_transport_errors(what):
            response = self._client.get(
                f"/subscriptions/{self._subscription_id}"
                f"/resourcegroups/{self._resource_group}",
                params={"api-version": RESOURCES_API_VERSION},
            )
        if response.status_code == 404:
            raise FetchError(
                FetchErrorKind.NOT_FOUND,
                f"Resource group '{self._resource_group}' not found in "
                f"subscription {self._subscription_id}",
            )
        raise_for_classified_status(response, what)

    def trigger(self) -> str:
        """Start an evaluation and return the URL that reports its status."""
        self.check_scope()
        what = f"compliance scan trigger for {self.scope_label}"
        with classified_transport_errors(what):
            response = self._client.post(
                f"{self.scope_path}/providers/Microsoft.PolicyInsights"
                "/policyStates/latest/triggerEvaluation",
                params={"api-version": POLICY_INSIGHTS_API_VERSION},
            )
        raise_for_classified_status(response, what)

        location = response.headers.get("location")
        if not location:
            raise FetchError(
                FetchErrorKind.UNEXPECTED, f"{what}: no Location header in response"
            )
        self._started_at = self._clock()
        logger.info("Started compliance scan for %s", self.scope_label)
        return location

    def read(self, handle: str) -> StatusReading:
        what = f"compliance scan status for {self.scope_label}"
        with classified_transport_errors(what):
            response = self._client.get(handle)
        raise_for_classified_status(response, what)

        if response.status_code == 202:
            remaining, state = 1.0, "Running"
        elif response.status_code == 200:
            remaining, state = 0.0, "Completed"
        else:
            raise FetchError(
                FetchErrorKind.UNEXPECTED,
                f"{what}: unexpected HTTP {response.status_code}",
            )

        return StatusReading(
            scope=self.scope_label,
            remaining_work=remaining,
            raw_state=state,
            started_at=self._started_at,
        )
