"""Report document models: the item payload accepted by the tracking service.

Field names here are fixed by the destination API, not chosen locally.
``ReportDocument.to_wire()`` renders the exact JSON tree that goes on the
wire; absent optional fields are omitted rather than sent as ``null``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class _WireModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class TraceFrame(_WireModel):
    filename: str | None = None
    lineno: int | None = None
    method: str | None = None
    class_name: str | None = None


class TraceException(_WireModel):
    class_: str = Field(alias="class")
    message: str = ""
    description: str | None = None


class Trace(_WireModel):
    """One exception of a chain: its frames plus class and message."""

    frames: tuple[TraceFrame, ...] = ()
    exception: TraceException


class MessageBody(_WireModel):
    body: str


class ReportBody(_WireModel):
    """Exactly one of ``message`` or ``trace_chain`` is set."""

    message: MessageBody | None = None
    trace_chain: tuple[Trace, ...] | None = None


class Notifier(_WireModel):
    name: str
    version: str


class Server(_WireModel):
    host: str | None = None


class ReportData(_WireModel):
    environment: str
    level: str
    body: ReportBody
    custom: dict[str, str] = Field(default_factory=dict)
    context: str | None = None
    timestamp: int
    platform: str
    language: str = "python"
    notifier: Notifier
    server: Server = Server()


class ReportDocument(_WireModel):
    """An immutable, self-contained error report."""

    access_token: str
    data: ReportData

    @property
    def level(self) -> str:
        return self.data.level

    @property
    def has_trace(self) -> bool:
        return self.data.body.trace_chain is not None

    def to_wire(self) -> dict[str, Any]:
        """Return the JSON-ready dict in the service's field naming."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
