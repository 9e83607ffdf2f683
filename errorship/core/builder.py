"""PayloadBuilder: turns one log event into a self-contained ReportDocument.

The builder is constructed once per configured destination and reused for
every record.  All of its state is fixed at construction time, so a single
instance can be shared by any number of logging threads.

``build`` never raises for well-typed input: every value is coerced to a
safe string form and copied, so the returned document holds no reference
to the caller's mutable state.
"""

from __future__ import annotations

import logging
import socket
import sys
import time
from collections.abc import Callable, Iterable, Mapping
from typing import Any

from pydantic import ValidationError

from errorship import __version__
from errorship.errors import ConfigurationError
from errorship.models.events import (
    ExceptionChain,
    ExceptionFrame,
    LogEvent,
    Severity,
    exception_chain,
    safe_str,
)
from errorship.models.report import (
    MessageBody,
    Notifier,
    ReportBody,
    ReportData,
    ReportDocument,
    Server,
    Trace,
    TraceException,
    TraceFrame,
)

logger = logging.getLogger(__name__)

NOTIFIER_NAME = "errorship"

SeverityLike = Severity | str | int
ExceptionLike = BaseException | Iterable[ExceptionFrame]


def normalize_level(severity: Any) -> str:
    """Return the lowercase severity token for *severity*.

    Known names (and Python level numbers) map onto the ``Severity``
    scale; anything else is lowercased verbatim.
    """
    if isinstance(severity, Severity):
        return severity.value
    if isinstance(severity, bool):
        return safe_str(severity).lower()
    if isinstance(severity, int):
        return Severity.from_levelno(severity).value
    token = safe_str(severity).strip()
    try:
        return Severity.parse(token).value
    except ValueError:
        return token.lower()


def _require(field: str, value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigurationError(f"{field} must be a non-empty string, got {value!r}")
    return value


def _trace(frame: ExceptionFrame, description: str | None = None) -> Trace:
    return Trace(
        frames=tuple(
            TraceFrame(
                filename=f.filename,
                lineno=f.lineno,
                method=f.method,
                class_name=f.class_name,
            )
            for f in frame.frames
        ),
        exception=TraceException(
            class_=frame.class_name,
            message=frame.message,
            description=description,
        ),
    )


class PayloadBuilder:
    """Builds report documents for one write key and environment.

    Parameters
    ----------
    api_key:
        Write key identifying the destination project.
    environment:
        Environment tag, e.g. ``"production"``.
    context:
        Optional free-form label for the code path or service instance.
    clock:
        Returns the current time in epoch seconds.  Injected for tests.
    host:
        Server host name; defaults to ``socket.gethostname()``.

    Raises
    ------
    ConfigurationError
        If *api_key* or *environment* is empty, or the fixed document
        template cannot be constructed.
    """

    def __init__(
        self,
        api_key: str,
        environment: str,
        context: str | None = None,
        *,
        clock: Callable[[], float] = time.time,
        host: str | None = None,
    ) -> None:
        self._api_key = _require("api_key", api_key)
        self._environment = _require("environment", environment)
        self._context = None if context is None else safe_str(context)
        self._clock = clock

        try:
            self._notifier = Notifier(name=NOTIFIER_NAME, version=__version__)
            self._server = Server(host=host if host is not None else socket.gethostname())
            self._platform = sys.platform
        except (ValidationError, OSError) as exc:
            raise ConfigurationError(f"Cannot build report template: {exc}") from exc

        logger.debug(
            "PayloadBuilder ready: environment=%s context=%s",
            self._environment,
            self._context,
        )

    @property
    def environment(self) -> str:
        return self._environment

    @property
    def context(self) -> str | None:
        return self._context

    def build(
        self,
        severity: SeverityLike,
        message: Any,
        exception: ExceptionLike | None = None,
        context: Mapping[Any, Any] | None = None,
    ) -> ReportDocument:
        """Build a report document.

        The body carries ``trace_chain`` iff *exception* is not ``None``,
        even when the exception has no stack frames; otherwise it carries
        the plain ``message``.
        """
        text = safe_str(message)

        if exception is None:
            body = ReportBody(message=MessageBody(body=text))
        else:
            body = ReportBody(trace_chain=self._trace_chain(exception, text))

        custom = {
            safe_str(key): safe_str(value)
            for key, value in (context or {}).items()
            if value is not None
        }

        data = ReportData(
            environment=self._environment,
            level=normalize_level(severity),
            body=body,
            custom=custom,
            context=self._context,
            timestamp=int(self._clock()),
            platform=self._platform,
            notifier=self._notifier,
            server=self._server,
        )
        return ReportDocument(access_token=self._api_key, data=data)

    def build_event(self, event: LogEvent) -> ReportDocument:
        """Build a report document from a ``LogEvent``."""
        return self.build(event.severity, event.message, event.exception, event.context)

    @staticmethod
    def _trace_chain(exception: ExceptionLike, text: str) -> tuple[Trace, ...]:
        chain: ExceptionChain
        if isinstance(exception, BaseException):
            chain = exception_chain(exception)
        else:
            chain = tuple(exception)

        traces: list[Trace] = []
        for index, frame in enumerate(chain):
            # The log message rides on the outermost exception when it adds something.
            description = text if index == 0 and text and text != frame.message else None
            traces.append(_trace(frame, description))
        return tuple(traces)
