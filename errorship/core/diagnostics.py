"""Diagnostic sink: where operational warnings and errors end up.

Delivery failures and configuration problems are never raised into the
application's logging call.  They are reported here instead.  The default
``StatusLog`` keeps a bounded list of recent statuses for inspection and
mirrors each one to the ``errorship.diagnostics`` logger, which the
handler itself never ships.
"""

from __future__ import annotations

import collections
import logging
import threading
from enum import Enum
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

DIAGNOSTICS_LOGGER = "errorship.diagnostics"

logger = logging.getLogger(DIAGNOSTICS_LOGGER)


@runtime_checkable
class DiagnosticSink(Protocol):
    """Protocol for receivers of non-fatal operational reports."""

    def warn(self, message: str, exc: BaseException | None = None) -> None:
        ...

    def error(self, message: str, exc: BaseException | None = None) -> None:
        ...


class StatusLevel(str, Enum):
    WARN = "warn"
    ERROR = "error"


class Status(BaseModel):
    """One recorded diagnostic."""

    model_config = ConfigDict(frozen=True)

    level: StatusLevel
    message: str
    detail: str | None = None


class StatusLog:
    """Default diagnostic sink.

    Parameters
    ----------
    capacity:
        How many recent statuses to keep; older ones are discarded.
    """

    def __init__(self, capacity: int = 128) -> None:
        self._statuses: collections.deque[Status] = collections.deque(maxlen=capacity)
        self._lock = threading.Lock()

    def warn(self, message: str, exc: BaseException | None = None) -> None:
        self._record(StatusLevel.WARN, message, exc)
        logger.warning(message, exc_info=exc)

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self._record(StatusLevel.ERROR, message, exc)
        logger.error(message, exc_info=exc)

    @property
    def statuses(self) -> list[Status]:
        """Return a copy of the recorded statuses, oldest first."""
        with self._lock:
            return list(self._statuses)

    def errors(self) -> list[Status]:
        return [s for s in self.statuses if s.level is StatusLevel.ERROR]

    def warnings(self) -> list[Status]:
        return [s for s in self.statuses if s.level is StatusLevel.WARN]

    def clear(self) -> None:
        with self._lock:
            self._statuses.clear()

    def _record(
        self, level: StatusLevel, message: str, exc: BaseException | None
    ) -> None:
        detail = None if exc is None else f"{type(exc).__name__}: {exc}"
        with self._lock:
            self._statuses.append(Status(level=level, message=message, detail=detail))
