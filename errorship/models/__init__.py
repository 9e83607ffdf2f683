"""errorship data models: all Pydantic v2, all frozen (immutable)."""

from errorship.models.delivery import JSON_HEADERS, DeliveryOutcome, DeliveryRequest
from errorship.models.events import (
    ExceptionChain,
    ExceptionFrame,
    LogEvent,
    Severity,
    StackFrame,
    exception_chain,
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

__all__ = [
    # events
    "Severity",
    "StackFrame",
    "ExceptionFrame",
    "ExceptionChain",
    "LogEvent",
    "exception_chain",
    # report
    "TraceFrame",
    "TraceException",
    "Trace",
    "MessageBody",
    "ReportBody",
    "Notifier",
    "Server",
    "ReportData",
    "ReportDocument",
    # delivery
    "JSON_HEADERS",
    "DeliveryRequest",
    "DeliveryOutcome",
]
