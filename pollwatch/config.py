"""Runtime configuration — env-driven, validated at startup.

Centralized config using pydantic-settings.  Reads from a .env file and
POLLWATCH_* environment variables; CLI options override both.

Only ``poll_interval_seconds`` and ``operation_scope`` shape the monitor
loop itself; the rest configures connections to the remote APIs.
"""

from __future__ import annotations

import ssl
from pathlib import Path
from typing import Any

from pydantic import Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from pollwatch.core.errors import ConfigError, ConfigErrorKind


class WatchConfig(BaseSettings):
    """Pollwatch configuration with environment variable overrides.

    Examples
    --------
    Override via environment::

        export POLLWATCH_POLL_INTERVAL_SECONDS=300
        export POLLWATCH_VCENTER_SERVER=https://vcsa.example.com
        export POLLWATCH_LOG_LEVEL=DEBUG

    Or via .env file::

        POLLWATCH_AZURE_SUBSCRIPTION_ID=00000000-0000-0000-0000-000000000000
        POLLWATCH_VERIFY_TLS=false
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="POLLWATCH_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Runtime environment
    environment: str = "development"
    log_level: str = "INFO"

    # Monitor loop
    poll_interval_seconds: int = Field(default=60, gt=0)
    operation_scope: str | None = None
    max_transient_failures: int = Field(default=3, ge=1)

    # HTTP and certificate trust
    http_timeout_seconds: float = Field(default=30.0, gt=0)
    verify_tls: bool = True
    ca_bundle: Path | None = None

    # vCenter
    vcenter_server: str | None = None
    vcenter_user: str | None = None
    vcenter_password: SecretStr | None = None

    # Azure
    azure_subscription_id: str | None = None
    azure_token: SecretStr | None = None
    azure_management_url: str = "https://management.azure.com"

    def require(self, name: str) -> Any:
        """Return a setting that must be present, or raise ``ConfigError``."""
        value = getattr(self, name)
        if value is None or value == "":
            env_name = f"POLLWATCH_{name.upper()}"
            raise ConfigError(
                ConfigErrorKind.MISSING,
                f"'{name}' is not set (use the CLI option or {env_name})",
            )
        if isinstance(value, SecretStr) and not value.get_secret_value():
            raise ConfigError(ConfigErrorKind.MISSING, f"'{name}' is empty")
        return value

    def httpx_verify(self) -> bool | ssl.SSLContext:
        """The ``verify`` argument for httpx clients.

        A CA bundle takes precedence; ``verify_tls=False`` disables
        certificate checks (self-signed lab appliances).
        """
        if self.ca_bundle is not None:
            if not self.ca_bundle.exists():
                raise ConfigError(
                    ConfigErrorKind.INVALID, f"CA bundle not found: {self.ca_bundle}"
                )
            return ssl.create_default_context(cafile=str(self.ca_bundle))
        return self.verify_tls

    def masked(self) -> dict[str, Any]:
        """Settings as a dict with secrets hidden, for display."""
        data = self.model_dump()
        for key, value in data.items():
            if isinstance(value, SecretStr):
                data[key] = "********" if value.get_secret_value() else ""
        return data


def load_config(**overrides: Any) -> WatchConfig:
    """Build a ``WatchConfig``, converting validation errors to ``ConfigError``.

    ``None`` overrides are dropped so unset CLI options fall through to the
    environment and defaults.
    """
    values = {key: value for key, value in overrides.items() if value is not None}
    try:
        return WatchConfig(**values)
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in exc.errors()
        )
        raise ConfigError(ConfigErrorKind.INVALID, problems) from exc
