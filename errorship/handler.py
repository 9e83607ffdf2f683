"""ReportHandler: a ``logging.Handler`` that ships records as error reports.

Lifecycle
---------
1. Construct the handler (directly, via ``logging.config.dictConfig`` or
   via ``ReportHandler.from_settings``).
2. ``start()`` resolves the write key, validates the configuration and
   builds the ``PayloadBuilder``.  The handler only accepts records once
   ``start()`` succeeds.  It runs automatically unless ``autostart=False``.
3. ``emit()`` turns each record into a report and hands it to the
   ``DeliveryDispatcher``.
4. ``stop()`` / ``close()`` deactivate the handler.

Nothing raised while shipping a record ever reaches the code that logged
it; failures are reported to the diagnostic sink instead.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from concurrent.futures import Executor
from typing import Any

from pydantic import HttpUrl, TypeAdapter, ValidationError

from errorship.config import DEFAULT_URL, ShipperSettings, resolve_api_key
from errorship.core.builder import PayloadBuilder
from errorship.core.diagnostics import DiagnosticSink, StatusLog
from errorship.core.dispatcher import DeliveryDispatcher
from errorship.core.pool import BoundedExecutor, shared_executor
from errorship.core.transport import HttpRequester, RequestsHttpRequester
from errorship.errors import ConfigurationError
from errorship.models.events import LogEvent

logger = logging.getLogger(__name__)

_URL_ADAPTER: TypeAdapter[HttpUrl] = TypeAdapter(HttpUrl)

# Records from these loggers are never shipped, so diagnostics cannot loop back.
IGNORED_LOGGER_PREFIX = "errorship"


def _is_valid_url(url: str) -> bool:
    try:
        _URL_ADAPTER.validate_python(url)
    except ValidationError:
        return False
    return True


def _is_blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


class ReportHandler(logging.Handler):
    """Ships log records to an error-tracking service.

    Parameters
    ----------
    url:
        Ingestion endpoint.  Defaults to the production item API.
    api_key:
        Write key.  ``ERRORSHIP_API_KEY`` overrides it at ``start()``.
    environment:
        Environment tag.  Required.
    context:
        Optional label for the code path or service instance.
    async_mode:
        Deliver on the worker pool (default) or inline on the logging thread.
    level:
        Minimum record level handled.
    requester:
        Transport backend.  Defaults to ``RequestsHttpRequester``.
    executor:
        Worker pool for async delivery.  Defaults to the shared pool.
    diagnostics:
        Sink for operational warnings and errors.  Defaults to ``StatusLog``.
    environ:
        Environment mapping consulted once at start.  Defaults to ``os.environ``.
    autostart:
        Call ``start()`` at the end of construction.
    """

    def __init__(
        self,
        url: str = DEFAULT_URL,
        api_key: str | None = None,
        environment: str | None = None,
        context: str | None = None,
        async_mode: bool = True,
        level: int | str = logging.NOTSET,
        *,
        requester: HttpRequester | None = None,
        executor: BoundedExecutor | Executor | None = None,
        diagnostics: DiagnosticSink | None = None,
        environ: Mapping[str, str] | None = None,
        autostart: bool = True,
    ) -> None:
        super().__init__(level)
        self.url = url
        self.api_key = api_key
        self.environment = environment
        self.context = context
        self.async_mode = async_mode
        self.requester = requester
        self.executor = executor
        self.diagnostics: DiagnosticSink = (
            diagnostics if diagnostics is not None else StatusLog()
        )
        self.environ = environ

        self._builder: PayloadBuilder | None = None
        self._dispatcher: DeliveryDispatcher | None = None
        self._owned_requester: RequestsHttpRequester | None = None
        self._started = False
        self._warned_not_started = False

        if autostart:
            self.start()

    @classmethod
    def from_settings(
        cls, settings: ShipperSettings | None = None, **overrides: Any
    ) -> ReportHandler:
        """Build a handler from ``ShipperSettings`` (read from the environment by default)."""
        settings = settings if settings is not None else ShipperSettings()
        kwargs: dict[str, Any] = {
            "url": settings.url,
            "api_key": settings.api_key or None,
            "environment": settings.environment or None,
            "context": settings.context,
            "async_mode": settings.async_mode,
            "level": settings.log_level.upper(),
        }
        if "requester" not in overrides:
            kwargs["requester"] = RequestsHttpRequester(timeout=settings.timeout_seconds)
        if "executor" not in overrides and settings.async_mode:
            kwargs["executor"] = shared_executor(
                max_workers=settings.max_workers, max_pending=settings.max_pending
            )
        kwargs.update(overrides)
        return cls(**kwargs)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def started(self) -> bool:
        return self._started

    @property
    def builder(self) -> PayloadBuilder | None:
        return self._builder

    def _label(self) -> str:
        return self.get_name() or type(self).__name__

    def start(self) -> bool:
        """Validate configuration and activate the handler.

        Every problem is reported separately to the diagnostic sink.
        Returns ``True`` if the handler is now accepting records.
        """
        diagnostics = self.diagnostics
        label = self._label()

        def _denied(exc: PermissionError) -> None:
            diagnostics.warn(f"Access to environment variables was denied. ({exc})")

        api_key = resolve_api_key(self.api_key, self.environ, on_denied=_denied)

        problems: list[str] = []
        if _is_blank(self.url):
            problems.append(f"No url set for the handler named [{label}].")
        elif not _is_valid_url(self.url):
            problems.append(f"Malformed url {self.url!r} for the handler named [{label}].")
        if _is_blank(api_key):
            problems.append(f"No api_key set for the handler named [{label}].")
        if _is_blank(self.environment):
            problems.append(f"No environment set for the handler named [{label}].")
        for problem in problems:
            diagnostics.error(problem)
        if problems:
            return False

        try:
            builder = PayloadBuilder(api_key, self.environment, self.context)
        except ConfigurationError as exc:
            diagnostics.error("Error building PayloadBuilder", exc)
            return False

        requester = self.requester
        if requester is None:
            requester = self._owned_requester = RequestsHttpRequester()

        self._builder = builder
        self._dispatcher = DeliveryDispatcher(
            requester, self.url, executor=self.executor, diagnostics=diagnostics
        )
        self._started = True
        self._warned_not_started = False
        logger.debug("Handler [%s] started: url=%s", label, self.url)
        return True

    def stop(self) -> None:
        """Stop accepting records.  The shared worker pool is left running."""
        self._started = False
        if self._owned_requester is not None:
            self._owned_requester.close()
            self._owned_requester = None

    def close(self) -> None:
        try:
            self.stop()
        finally:
            super().close()

    # ------------------------------------------------------------------
    # Record handling
    # ------------------------------------------------------------------

    def handle(self, record: logging.LogRecord) -> bool:
        """Filter and emit without taking the handler lock.

        The builder and dispatcher are safe for concurrent use, so
        records from different threads are shipped in parallel.
        """
        rv = self.filter(record)
        if isinstance(rv, logging.LogRecord):
            record = rv
        if rv:
            self.emit(record)
        return bool(rv)

    def emit(self, record: logging.LogRecord) -> None:
        name = record.name or ""
        if name == IGNORED_LOGGER_PREFIX or name.startswith(IGNORED_LOGGER_PREFIX + "."):
            return

        builder, dispatcher = self._builder, self._dispatcher
        if not self._started or builder is None or dispatcher is None:
            if not self._warned_not_started:
                self._warned_not_started = True
                self.diagnostics.warn(
                    f"Attempted to emit to non started handler [{self._label()}]."
                )
            return

        try:
            document = builder.build_event(LogEvent.from_record(record))
            dispatcher.send(document, async_=self.async_mode)
        except Exception as exc:  # noqa: BLE001
            self.diagnostics.error("Failed to ship log record", exc)
