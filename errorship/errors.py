"""Exception hierarchy for errorship."""

from __future__ import annotations


class ErrorshipError(Exception):
    """Base class for every error raised by errorship."""


class ConfigurationError(ErrorshipError, ValueError):
    """Raised when a component is configured so that no valid report could be produced."""


class DeliveryRejected(ErrorshipError, RuntimeError):
    """Raised by the worker pool when it has no room for another delivery."""
