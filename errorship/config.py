"""Shipper configuration: env-driven via pydantic-settings.

Reads ``ERRORSHIP_*`` environment variables and an optional ``.env`` file.
The write key gets one extra rule: when ``ERRORSHIP_API_KEY`` is present in
the environment at handler start, it wins over an explicitly configured key.

Examples
--------
Configure via environment::

    export ERRORSHIP_API_KEY=0123456789abcdef
    export ERRORSHIP_ENVIRONMENT=production
    export ERRORSHIP_ASYNC_MODE=false
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping

from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_VAR_API_KEY = "ERRORSHIP_API_KEY"
DEFAULT_URL = "https://api.rollbar.com/api/1/item/"


class ShipperSettings(BaseSettings):
    """Settings for a report handler and its shared worker pool."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="ERRORSHIP_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Destination
    url: str = DEFAULT_URL
    api_key: str = ""
    environment: str = ""
    context: str | None = None

    # Delivery
    async_mode: bool = True
    timeout_seconds: float = 10.0

    # Shared worker pool sizing
    max_workers: int = 4
    max_pending: int = 256

    # Minimum record level shipped by the handler
    log_level: str = "ERROR"

    @property
    def masked_api_key(self) -> str:
        """The write key with all but the last four characters hidden."""
        if not self.api_key:
            return ""
        return "*" * max(len(self.api_key) - 4, 0) + self.api_key[-4:]


def resolve_api_key(
    configured: str | None,
    environ: Mapping[str, str] | None = None,
    on_denied: Callable[[PermissionError], None] | None = None,
) -> str | None:
    """Return the effective write key.

    ``ERRORSHIP_API_KEY`` in *environ* (default ``os.environ``) overrides
    *configured* when present.  If the environment cannot be read, the
    denial is passed to *on_denied* and *configured* is returned.
    """
    source = os.environ if environ is None else environ
    try:
        from_env = source.get(ENV_VAR_API_KEY)
    except PermissionError as exc:
        if on_denied is not None:
            on_denied(exc)
        return configured
    return from_env if from_env is not None else configured
