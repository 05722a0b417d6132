"""StatusSource protocol and the shared HTTP error classification."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Protocol, runtime_checkable

import httpx

from pollwatch.core.errors import FetchError, FetchErrorKind
from pollwatch.models.snapshots import StatusReading

# Statuses worth another try on the next tick.
TRANSIENT_STATUS_CODES = frozenset({408, 425, 429, 500, 502, 503, 504})


@runtime_checkable
class StatusSource(Protocol):
    """Protocol for remote status backends.

    Any object with a ``read(handle) -> StatusReading`` method satisfies
    this protocol.
    """

    def read(self, handle: str) -> StatusReading:
        """Perform one remote read of the operation identified by *handle*.

        Raises
        ------
        FetchError
            Classified as NOT_FOUND, UNAUTHORIZED, TRANSIENT or UNEXPECTED.
        """
        ...


def classify_status(status_code: int) -> FetchErrorKind:
    """Map an HTTP error status to a fetch error kind."""
    if status_code in (401, 403):
        return FetchErrorKind.UNAUTHORIZED
    if status_code == 404:
        return FetchErrorKind.NOT_FOUND
    if status_code in TRANSIENT_STATUS_CODES or status_code >= 500:
        return FetchErrorKind.TRANSIENT
    return FetchErrorKind.UNEXPECTED


def raise_for_classified_status(response: httpx.Response, what: str) -> None:
    """Raise a ``FetchError`` for any non-2xx response."""
    if response.is_success:
        return
    kind = classify_status(response.status_code)
    raise FetchError(kind, f"{what}: HTTP {response.status_code}")


@contextmanager
def classified_transport_errors(what: str) -> Iterator[None]:
    """Convert httpx transport failures into transient fetch errors."""
    try:
        yield
    except httpx.TimeoutException as exc:
        raise FetchError(FetchErrorKind.TRANSIENT, f"{what}: timed out") from exc
    except httpx.TransportError as exc:
        raise FetchError(FetchErrorKind.TRANSIENT, f"{what}: {exc}") from exc


def request_json(
    client: httpx.Client, method: str, url: str, what: str, **kwargs: Any
) -> Any:
    """Send one request and return the decoded JSON body."""
    with classified_transport_errors(what):
        response = client.request(method, url, **kwargs)
    raise_for_classified_status(response, what)
    try:
        return response.json()
    except ValueError as exc:
        raise FetchError(
            FetchErrorKind.UNEXPECTED, f"{what}: response is not JSON"
        ) from exc
