"""Session providers — authenticate an httpx client before polling starts.

A provider is opened once at startup.  Failing to authenticate raises
``SessionError`` and the process exits before the first fetch; a session
that expires mid-run surfaces later as ``FetchErrorKind.UNAUTHORIZED``.
"""

from __future__ import annotations

import logging

import httpx

from pollwatch.core.errors import SessionError

logger = logging.getLogger(__name__)

VSPHERE_SESSION_HEADER = "vmware-api-session-id"


class VsphereSessionProvider:
    """vSphere Automation API session (``POST /api/session``).

    Parameters
    ----------
    client:
        Client whose ``base_url`` points at the vCenter server.  The
        session token is attached to its headers on ``open()``.
    user, password:
        vCenter SSO credentials.
    """

    def __init__(self, client: httpx.Client, user: str, password: str) -> None:
        self._client = client
        self._user = user
        self._password = password
        self._token: str | None = None

    @property
    def is_open(self) -> bool:
        return self._token is not None

    def open(self) -> httpx.Client:
        """Create the session and return the authenticated client."""
        try:
            response = self._client.post(
                "/api/session", auth=(self._user, self._password)
            )
        except httpx.HTTPError as exc:
            raise SessionError(f"Cannot reach vCenter: {exc}") from exc

        if response.status_code in (401, 403):
            raise SessionError(f"vCenter rejected credentials for {self._user}")
        if not response.is_success:
            raise SessionError(
                f"vCenter session request failed: HTTP {response.status_code}"
            )

        token = response.json()
        if not isinstance(token, str) or not token:
            raise SessionError("vCenter returned no session token")

        self._token = token
        self._client.headers[VSPHERE_SESSION_HEADER] = token
        logger.info("Opened vCenter session for %s", self._user)
        return self._client

    def close(self) -> None:
        """Delete the session.  Failures are logged, not raised."""
        if self._token is None:
            return
        try:
            self._client.delete("/api/session")
        except httpx.HTTPError as exc:
            logger.warning("Could not close vCenter session: %s", exc)
        finally:
            self._client.headers.pop(VSPHERE_SESSION_HEADER, None)
            self._token = None

    def __enter__(self) -> httpx.Client:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class AzureTokenSession:
    """Azure Resource Manager session from a pre-issued bearer token.

    Token acquisition (``az account get-access-token``, managed identity)
    happens outside pollwatch; this provider only attaches the token.
    """

    def __init__(self, client: httpx.Client, token: str) -> None:
        self._client = client
        self._token = token

    def open(self) -> httpx.Client:
        if not self._token:
            raise SessionError("No Azure access token configured")
        self._client.headers["Authorization"] = f"Bearer {self._token}"
        return self._client

    def close(self) -> None:
        self._client.headers.pop("Authorization", None)

    def __enter__(self) -> httpx.Client:
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()
