"""Unit tests for DeliveryDispatcher: request wrapping, sync/async paths, failure reporting."""

from __future__ import annotations

import json
import threading

import pytest

from errorship.core.dispatcher import DeliveryDispatcher
from errorship.errors import DeliveryRejected
from errorship.models.delivery import DeliveryOutcome, DeliveryRequest

URL = "https://errors.example.test/api/1/item/"


class _RejectingExecutor:
    def __init__(self, exc: BaseException) -> None:
        self.exc = exc

    def submit(self, fn, /, *args, **kwargs):
        raise self.exc


# ---------------------------------------------------------------------------
# Test: wrap
# ---------------------------------------------------------------------------


class TestWrap:
    def test_request_shape(self, builder, requester, sink):
        dispatcher = DeliveryDispatcher(requester, URL, diagnostics=sink)
        document = builder.build("error", "disk full", context={"host": "db1"})
        request = dispatcher.wrap(document)

        assert request.url == URL
        assert request.method == "POST"
        assert request.headers == {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        assert json.loads(request.body) == document.to_wire()

    def test_body_is_canonical(self, builder, requester):
        dispatcher = DeliveryDispatcher(requester, URL)
        body = dispatcher.wrap(builder.build("info", "m")).body
        assert body.startswith(b'{"access_token":')
        assert b": " not in body and b", " not in body

    def test_request_is_frozen(self, builder, requester):
        request = DeliveryDispatcher(requester, URL).wrap(builder.build("info", "m"))
        with pytest.raises(Exception):
            request.url = "http://elsewhere"


# ---------------------------------------------------------------------------
# Test: outcome classification
# ---------------------------------------------------------------------------


class TestDeliver:
    @pytest.mark.parametrize("status", [200, 201, 204, 299])
    def test_2xx_is_success(self, make_requester, sink, builder, status):
        requester = make_requester(status=status)
        dispatcher = DeliveryDispatcher(requester, URL, diagnostics=sink)
        outcome = dispatcher.deliver(dispatcher.wrap(builder.build("info", "m")))

        assert outcome.succeeded
        assert outcome.status_code == status
        assert sink.errors == []

    @pytest.mark.parametrize("status", [199, 300, 404, 500])
    def test_non_2xx_reported_once(self, make_requester, sink, builder, status):
        requester = make_requester(status=status)
        dispatcher = DeliveryDispatcher(requester, URL, diagnostics=sink)
        outcome = dispatcher.deliver(dispatcher.wrap(builder.build("info", "m")))

        assert not outcome.succeeded
        assert requester.calls == 1
        assert len(sink.errors) == 1
        assert str(status) in sink.errors[0][0]

    def test_io_failure_reported_once(self, make_requester, sink, builder):
        error = ConnectionError("connection refused")
        requester = make_requester(error=error)
        dispatcher = DeliveryDispatcher(requester, URL, diagnostics=sink)
        outcome = dispatcher.deliver(dispatcher.wrap(builder.build("info", "m")))

        assert not outcome.succeeded
        assert outcome.status_code is None
        assert "connection refused" in outcome.error
        assert requester.calls == 1
        assert len(sink.errors) == 1
        assert sink.errors[0][1] is error

    def test_unexpected_failure_is_not_raised(self, make_requester, sink, builder):
        requester = make_requester(error=ValueError("bug in transport"))
        dispatcher = DeliveryDispatcher(requester, URL, diagnostics=sink)
        outcome = dispatcher.deliver(dispatcher.wrap(builder.build("info", "m")))
        assert not outcome.succeeded
        assert len(sink.errors) == 1

    def test_outcome_model(self):
        assert DeliveryOutcome(status_code=204).succeeded
        assert not DeliveryOutcome(status_code=500).succeeded
        assert not DeliveryOutcome(error="boom").succeeded
        assert not DeliveryOutcome().succeeded


# ---------------------------------------------------------------------------
# Test: send
# ---------------------------------------------------------------------------


class TestSend:
    def test_sync_send_blocks_until_transport_completes(self, builder, make_requester, sink):
        gate = threading.Event()
        requester = make_requester(status=200, gate=gate)
        dispatcher = DeliveryDispatcher(requester, URL, diagnostics=sink)

        sender = threading.Thread(
            target=dispatcher.send, args=(builder.build("info", "m"),), kwargs={"async_": False}
        )
        sender.start()
        assert requester.entered.wait(timeout=5)
        sender.join(timeout=0.2)
        assert sender.is_alive()

        gate.set()
        sender.join(timeout=5)
        assert not sender.is_alive()
        assert requester.completed.is_set()
        assert sink.errors == []

    def test_sync_send_runs_on_calling_thread(self, builder, requester):
        seen: list[int] = []
        original = requester.send

        def _send(request):
            seen.append(threading.get_ident())
            return original(request)

        requester.send = _send
        DeliveryDispatcher(requester, URL).send(builder.build("info", "m"), async_=False)
        assert seen == [threading.get_ident()]

    def test_async_send_returns_before_transport_completes(
        self, builder, make_requester, sink, executor
    ):
        gate = threading.Event()
        requester = make_requester(status=204, gate=gate)
        dispatcher = DeliveryDispatcher(requester, URL, executor=executor, diagnostics=sink)

        dispatcher.send(builder.build("info", "m"), async_=True)
        assert not requester.completed.is_set()

        gate.set()
        assert requester.completed.wait(timeout=5)
        executor.shutdown(wait=True)
        assert requester.calls == 1
        assert sink.errors == []

    def test_async_failure_reported_via_sink(self, builder, make_requester, sink, executor):
        requester = make_requester(status=500)
        dispatcher = DeliveryDispatcher(requester, URL, executor=executor, diagnostics=sink)

        dispatcher.send(builder.build("error", "m"))
        executor.shutdown(wait=True)

        assert requester.calls == 1
        assert len(sink.errors) == 1

    @pytest.mark.parametrize(
        "exc", [DeliveryRejected("full"), RuntimeError("cannot schedule new futures after shutdown")]
    )
    def test_rejected_submission_reported(self, builder, requester, sink, exc):
        dispatcher = DeliveryDispatcher(
            requester, URL, executor=_RejectingExecutor(exc), diagnostics=sink
        )
        dispatcher.send(builder.build("error", "m"), async_=True)

        assert requester.calls == 0
        assert len(sink.errors) == 1
        assert sink.errors[0][1] is exc

    def test_failure_does_not_affect_next_event(self, builder, make_requester, sink):
        requester = make_requester(error=OSError("down"))
        dispatcher = DeliveryDispatcher(requester, URL, diagnostics=sink)

        dispatcher.send(builder.build("error", "first"), async_=False)
        requester.error = None
        requester.status = 200
        dispatcher.send(builder.build("error", "second"), async_=False)

        assert requester.calls == 2
        assert len(sink.errors) == 1
        assert isinstance(requester.requests[1], DeliveryRequest)
