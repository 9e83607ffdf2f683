"""DeliveryDispatcher: sends report documents, inline or on the worker pool.

Each document gets exactly one delivery attempt.  There is no retry, no
backoff, and no redelivery queue.  The outcome of every attempt is reported
to the diagnostic sink and never raised back to the caller, so a failure
for one event has no effect on the next.
"""

from __future__ import annotations

import logging
from concurrent.futures import Executor

from errorship.core.diagnostics import DiagnosticSink, StatusLog
from errorship.core.hasher import canonical_json_bytes
from errorship.core.pool import BoundedExecutor, shared_executor
from errorship.core.transport import HttpRequester
from errorship.errors import DeliveryRejected
from errorship.models.delivery import DeliveryOutcome, DeliveryRequest
from errorship.models.report import ReportDocument

logger = logging.getLogger(__name__)


class DeliveryDispatcher:
    """Wraps documents into requests and hands them to the transport.

    Parameters
    ----------
    requester:
        Transport backend returning HTTP status codes.
    url:
        Ingestion endpoint.
    executor:
        Pool used for asynchronous sends.  Defaults to the process-wide
        ``shared_executor()``, created on first asynchronous send.
    diagnostics:
        Sink receiving failure reports.  Defaults to a fresh ``StatusLog``.
    """

    def __init__(
        self,
        requester: HttpRequester,
        url: str,
        *,
        executor: BoundedExecutor | Executor | None = None,
        diagnostics: DiagnosticSink | None = None,
    ) -> None:
        self._requester = requester
        self._url = url
        self._executor = executor
        self._diagnostics = diagnostics if diagnostics is not None else StatusLog()

    @property
    def url(self) -> str:
        return self._url

    @property
    def diagnostics(self) -> DiagnosticSink:
        return self._diagnostics

    def wrap(self, document: ReportDocument) -> DeliveryRequest:
        """Serialize *document* into a POST request with JSON headers."""
        return DeliveryRequest(url=self._url, body=canonical_json_bytes(document.to_wire()))

    def send(self, document: ReportDocument, async_: bool = True) -> None:
        """Deliver *document*; fire-and-forget.

        With ``async_=False`` the transport call runs on the calling thread
        and this method blocks until it finishes.  With ``async_=True`` the
        call is submitted to the pool and this method returns immediately.
        A rejected submission is reported as a delivery failure.
        """
        request = self.wrap(document)
        if not async_:
            self.deliver(request)
            return

        executor = self._executor if self._executor is not None else shared_executor()
        try:
            executor.submit(self.deliver, request)
        except (DeliveryRejected, RuntimeError) as exc:
            self._diagnostics.error("Delivery rejected by worker pool", exc)

    def deliver(self, request: DeliveryRequest) -> DeliveryOutcome:
        """Make one transport call and report anything but a 2xx status."""
        try:
            status_code = self._requester.send(request)
        except OSError as exc:
            self._diagnostics.error("Exception sending request to error tracker", exc)
            return DeliveryOutcome(error=f"{type(exc).__name__}: {exc}")
        except Exception as exc:  # noqa: BLE001
            self._diagnostics.error("Unexpected failure in transport", exc)
            return DeliveryOutcome(error=f"{type(exc).__name__}: {exc}")

        outcome = DeliveryOutcome(status_code=status_code)
        if outcome.succeeded:
            logger.debug("Delivered report to %s (%d)", request.url, status_code)
        else:
            self._diagnostics.error(f"Non-2xx response from error tracker: {status_code}")
        return outcome
