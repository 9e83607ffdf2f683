"""Log event models: the read-only view of one intercepted log record.

A ``LogEvent`` is what the handler extracts from a ``logging.LogRecord``
before the record goes out of scope: severity, formatted message, context
metadata, and the causal exception chain.  Every model is frozen, so a
built event can be handed to a worker thread safely.
"""

from __future__ import annotations

import logging
import traceback
from enum import Enum
from types import TracebackType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

TRACE_LEVEL = 5

# Attributes every LogRecord carries; anything else came in through ``extra=``.
_RECORD_ATTRIBUTES = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__
) | {"message", "asctime", "context"}


class Severity(str, Enum):
    """Ordered log severity, ``trace < debug < info < warn < error < fatal``."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other: object) -> bool:
        if not isinstance(other, Severity):
            return NotImplemented
        return self.rank >= other.rank

    @classmethod
    def parse(cls, name: str) -> Severity:
        """Look up a severity by name, case-insensitively.

        Python's ``warning`` and ``critical`` spellings are accepted as
        aliases for ``warn`` and ``fatal``.

        Raises
        ------
        ValueError
            If *name* is not a known severity.
        """
        token = name.strip().lower()
        token = _ALIASES.get(token, token)
        try:
            return cls(token)
        except ValueError:
            raise ValueError(f"Unknown severity: {name!r}") from None

    @classmethod
    def from_levelno(cls, levelno: int) -> Severity:
        """Map a numeric ``logging`` level onto the severity scale."""
        if levelno <= TRACE_LEVEL:
            return cls.TRACE
        if levelno <= logging.DEBUG:
            return cls.DEBUG
        if levelno <= logging.INFO:
            return cls.INFO
        if levelno <= logging.WARNING:
            return cls.WARN
        if levelno <= logging.ERROR:
            return cls.ERROR
        return cls.FATAL


_RANKS = {severity: rank for rank, severity in enumerate(Severity)}
_ALIASES = {"warning": "warn", "critical": "fatal"}


class StackFrame(BaseModel):
    """One source location in a stack trace.  Every field may be absent."""

    model_config = ConfigDict(frozen=True)

    class_name: str | None = None
    method: str | None = None
    filename: str | None = None
    lineno: int | None = None


class ExceptionFrame(BaseModel):
    """One exception in a causal chain, with its own stack frames."""

    model_config = ConfigDict(frozen=True)

    class_name: str
    message: str = ""
    frames: tuple[StackFrame, ...] = ()


ExceptionChain = tuple[ExceptionFrame, ...]


def safe_str(value: Any) -> str:
    """``str(value)`` that never raises."""
    try:
        return str(value)
    except Exception:  # noqa: BLE001
        return f"<unprintable {type(value).__name__}>"


def qualified_type_name(exc: BaseException) -> str:
    cls = type(exc)
    module = cls.__module__
    if module in (None, "builtins", "__main__"):
        return cls.__qualname__
    return f"{module}.{cls.__qualname__}"


def extract_frames(tb: TracebackType | None) -> tuple[StackFrame, ...]:
    """Convert a traceback into stack frames, most recent call last."""
    frames: list[StackFrame] = []
    while tb is not None:
        frame = tb.tb_frame
        code = frame.f_code
        module = frame.f_globals.get("__name__")
        frames.append(
            StackFrame(
                class_name=module if isinstance(module, str) else None,
                method=code.co_name,
                filename=code.co_filename,
                lineno=tb.tb_lineno,
            )
        )
        tb = tb.tb_next
    return tuple(frames)


def _next_cause(exc: BaseException) -> BaseException | None:
    if exc.__cause__ is not None:
        return exc.__cause__
    if not exc.__suppress_context__:
        return exc.__context__
    return None


def exception_chain(exc: BaseException) -> ExceptionChain:
    """Walk *exc* and its causes, outermost first.

    ``__cause__`` (explicit ``raise ... from``) takes precedence over the
    implicit ``__context__``.  There is no depth limit; the walk stops at
    the end of the chain or at the first exception already visited.
    """
    chain: list[ExceptionFrame] = []
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        chain.append(
            ExceptionFrame(
                class_name=qualified_type_name(current),
                message=safe_str(current),
                frames=extract_frames(current.__traceback__),
            )
        )
        current = _next_cause(current)
    return tuple(chain)


def record_context(record: logging.LogRecord) -> dict[str, str | None]:
    """Collect context metadata from a record.

    Reads an explicit ``context`` mapping first, then any ``extra=`` keys.
    Values are coerced to strings; ``None`` is kept so the builder can
    decide to drop it.
    """
    context: dict[str, str | None] = {}
    explicit = getattr(record, "context", None)
    if isinstance(explicit, dict):
        for key, value in explicit.items():
            context[safe_str(key)] = None if value is None else safe_str(value)
    for key, value in record.__dict__.items():
        if key in _RECORD_ATTRIBUTES or key.startswith("_"):
            continue
        context[key] = None if value is None else safe_str(value)
    return context


class LogEvent(BaseModel):
    """A transient snapshot of one log record."""

    model_config = ConfigDict(frozen=True)

    severity: Severity
    message: str
    context: dict[str, str | None] = Field(default_factory=dict)
    exception: ExceptionChain | None = None

    @classmethod
    def from_record(cls, record: logging.LogRecord) -> LogEvent:
        try:
            message = record.getMessage()
        except Exception:  # noqa: BLE001
            message = safe_str(record.msg)

        chain: ExceptionChain | None = None
        if record.exc_info and record.exc_info[1] is not None:
            chain = exception_chain(record.exc_info[1])

        return cls(
            severity=Severity.from_levelno(record.levelno),
            message=message,
            context=record_context(record),
            exception=chain,
        )
