"""Shared test fixtures for errorship."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

import pytest

from errorship.core.builder import PayloadBuilder
from errorship.core.pool import BoundedExecutor
from errorship.models.delivery import DeliveryRequest

FIXED_TIMESTAMP = 1_700_000_000


# ---------------------------------------------------------------------------
# Fakes: shared across test modules
# ---------------------------------------------------------------------------


class FakeRequester:
    """Transport double: records requests and returns a fixed status.

    When *error* is set it is raised instead.  When *gate* is set, each
    send blocks until the gate is opened.
    """

    def __init__(
        self,
        status: int = 200,
        error: BaseException | None = None,
        gate: threading.Event | None = None,
    ) -> None:
        self.status = status
        self.error = error
        self.gate = gate
        self.requests: list[DeliveryRequest] = []
        self.entered = threading.Event()
        self.completed = threading.Event()
        self._lock = threading.Lock()

    @property
    def calls(self) -> int:
        with self._lock:
            return len(self.requests)

    def send(self, request: DeliveryRequest) -> int:
        with self._lock:
            self.requests.append(request)
        self.entered.set()
        try:
            if self.gate is not None:
                self.gate.wait(timeout=5)
            if self.error is not None:
                raise self.error
            return self.status
        finally:
            self.completed.set()


class RecordingSink:
    """Diagnostic sink that keeps every report in memory."""

    def __init__(self) -> None:
        self.warnings: list[tuple[str, BaseException | None]] = []
        self.errors: list[tuple[str, BaseException | None]] = []

    def warn(self, message: str, exc: BaseException | None = None) -> None:
        self.warnings.append((message, exc))

    def error(self, message: str, exc: BaseException | None = None) -> None:
        self.errors.append((message, exc))


@pytest.fixture
def requester() -> FakeRequester:
    """A transport double answering 200."""
    return FakeRequester()


@pytest.fixture
def make_requester() -> Callable[..., FakeRequester]:
    """Factory fixture: build a FakeRequester with custom behaviour."""
    return FakeRequester


@pytest.fixture
def sink() -> RecordingSink:
    """A fresh in-memory diagnostic sink."""
    return RecordingSink()


@pytest.fixture
def builder() -> PayloadBuilder:
    """A PayloadBuilder with a frozen clock and host."""
    return PayloadBuilder(
        "test-write-key",
        "test",
        "checkout-service",
        clock=lambda: FIXED_TIMESTAMP,
        host="test-host",
    )


@pytest.fixture
def executor():
    """A private bounded pool, shut down after the test."""
    pool = BoundedExecutor(max_workers=2, max_pending=8)
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture
def make_handler(requester: FakeRequester, sink: RecordingSink) -> Callable[..., Any]:
    """Factory fixture: build a synchronous ReportHandler wired to the fakes."""
    from errorship.handler import ReportHandler

    def _factory(**overrides: Any) -> ReportHandler:
        defaults: dict[str, Any] = {
            "api_key": "test-write-key",
            "environment": "test",
            "async_mode": False,
            "requester": requester,
            "diagnostics": sink,
            "environ": {},
        }
        defaults.update(overrides)
        return ReportHandler(**defaults)

    return _factory
