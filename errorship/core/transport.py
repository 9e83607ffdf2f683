"""HTTP transport: the only place that touches the network.

The dispatcher talks to a ``HttpRequester``: anything with a
``send(request) -> int`` method that returns the HTTP status code and
raises ``OSError`` on I/O failure.  ``RequestsHttpRequester`` is the
default backend, built on a ``requests.Session``.

Timeouts are a transport concern and are configured here only.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import requests

from errorship.models.delivery import DeliveryRequest

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0


@runtime_checkable
class HttpRequester(Protocol):
    """Protocol for transport backends.

    ``requests.RequestException`` already subclasses ``OSError``, so a
    requests-based backend satisfies the failure contract as-is.
    """

    def send(self, request: DeliveryRequest) -> int:
        """Perform the request and return the HTTP status code.

        Raises
        ------
        OSError
            If no response could be obtained.
        """
        ...


class RequestsHttpRequester:
    """Sends delivery requests with ``requests``.

    Parameters
    ----------
    timeout:
        Connect and read timeout in seconds.
    session:
        Optional pre-configured session (proxies, TLS settings).  A new
        one is created when omitted.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: requests.Session | None = None,
    ) -> None:
        self._timeout = timeout
        self._session = session if session is not None else requests.Session()

    @property
    def timeout(self) -> float:
        return self._timeout

    def send(self, request: DeliveryRequest) -> int:
        response = self._session.request(
            request.method,
            request.url,
            data=request.body,
            headers=request.headers,
            timeout=self._timeout,
        )
        try:
            logger.debug(
                "%s %s -> %d", request.method, request.url, response.status_code
            )
            return response.status_code
        finally:
            response.close()

    def close(self) -> None:
        self._session.close()
