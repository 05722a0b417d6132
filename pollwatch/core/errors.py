"""Error taxonomy shared by every monitor.

``FetchError`` is the only error the Monitor Loop expects during polling;
``ConfigError`` and ``SessionError`` are startup failures that end the
process before the first fetch.
"""

from __future__ import annotations

from enum import Enum


class FetchErrorKind(str, Enum):
    """Classification of a failed snapshot fetch."""

    NOT_FOUND = "not_found"
    UNAUTHORIZED = "unauthorized"
    TRANSIENT = "transient"
    UNEXPECTED = "unexpected"


class ConfigErrorKind(str, Enum):
    MISSING = "missing"
    INVALID = "invalid"


class SessionErrorKind(str, Enum):
    NOT_AUTHENTICATED = "not_authenticated"


class PollwatchError(RuntimeError):
    """Base class for all classified pollwatch errors."""


class FetchError(PollwatchError):
    """Raised when one remote status read fails.

    Parameters
    ----------
    kind:
        How the failure is treated by the termination policy.
    message:
        Human-readable reason, shown once in the terminal status line.
    """

    def __init__(self, kind: FetchErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def retryable(self) -> bool:
        """Whether the failure may clear up on its own."""
        return self.kind == FetchErrorKind.TRANSIENT

    def describe(self) -> str:
        return f"{self.kind.value.replace('_', ' ')}: {self.message}"


class ConfigError(PollwatchError):
    """Raised when a required option is absent or a value is malformed."""

    def __init__(self, kind: ConfigErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


class SessionError(PollwatchError):
    """Raised when no authenticated session can be established."""

    def __init__(
        self,
        message: str,
        kind: SessionErrorKind = SessionErrorKind.NOT_AUTHENTICATED,
    ) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
