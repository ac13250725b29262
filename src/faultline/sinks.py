from __future__ import annotations

import logging
from typing import Any, Callable, Iterator, Mapping, Optional, Protocol, runtime_checkable

from .levels import LogLevel
from .types import DispatchReport, SinkResult, SinkStatus

_PY_LEVELS: dict[str, int] = {
    LogLevel.EMERGENCY: logging.CRITICAL,
    LogLevel.ALERT: logging.CRITICAL,
    LogLevel.CRITICAL: logging.CRITICAL,
    LogLevel.ERROR: logging.ERROR,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.NOTICE: logging.INFO,
    LogLevel.INFO: logging.INFO,
    LogLevel.DEBUG: logging.DEBUG,
}


@runtime_checkable
class LoggerSink(Protocol):
    """A structured logging endpoint accepting (level, message, context) triples."""

    def log(self, level: str, message: str, context: Mapping[str, Any]) -> None: ...


def sink_name(sink: Any) -> str:
    name = getattr(sink, "name", None)
    return name if isinstance(name, str) and name else type(sink).__name__


def to_python_level(level: str) -> int:
    """Map a level name onto a :mod:`logging` level; unknown names map to ERROR."""
    known = _PY_LEVELS.get(level.lower())
    if known is not None:
        return known
    candidate = logging.getLevelName(level.upper())
    return candidate if isinstance(candidate, int) else logging.ERROR


class StdlibLoggerSink:
    """
    Adapts a :class:`logging.Logger` to the sink interface.

    The context mapping travels on the record as ``record.error_context`` and the
    original level name as ``record.log_level``.

    Usage example
    -------------
        sink = StdlibLoggerSink(logging.getLogger("faultline"))
        sink.log("critical", "disk full", {"app": {"component": "uploads"}})
    """

    def __init__(self, logger: logging.Logger) -> None:
        self.logger = logger
        self.name = f"logging:{logger.name}"

    def log(self, level: str, message: str, context: Mapping[str, Any]) -> None:
        self.logger.log(
            to_python_level(level),
            message,
            extra={"error_context": dict(context), "log_level": level},
        )


class LoggerSinkSet:
    """
    Ordered collection of sinks. Append-only; iterated in insertion order.

    Delivery failures are captured as :class:`SinkResult` values, one per sink,
    so a failing sink never stops delivery to the sinks after it.
    """

    def __init__(self, sinks: Optional[list[LoggerSink]] = None) -> None:
        self._sinks: list[LoggerSink] = list(sinks or [])

    def add(self, sink: LoggerSink) -> None:
        if not callable(getattr(sink, "log", None)):
            raise TypeError(f"Sink must provide log(level, message, context), got {type(sink).__name__}")
        self._sinks.append(sink)

    def __iter__(self) -> Iterator[LoggerSink]:
        return iter(tuple(self._sinks))

    def __len__(self) -> int:
        return len(self._sinks)

    def dispatch(
        self,
        *,
        level_for: Callable[[LoggerSink], str],
        message: str,
        context: Mapping[str, Any],
        on_failure: Optional[Callable[[LoggerSink, BaseException], None]] = None,
    ) -> DispatchReport:
        """Deliver one record to every sink and report per-sink outcomes."""
        results: list[SinkResult] = []
        for sink in self:
            level: Optional[str] = None
            try:
                level = level_for(sink)
                sink.log(level, message, context)
            except Exception as exc:
                results.append(SinkResult.failed(sink=sink_name(sink), level=level, exc=exc))
                if on_failure is not None:
                    on_failure(sink, exc)
            else:
                results.append(SinkResult(sink=sink_name(sink), status=SinkStatus.OK, level=level))
        return DispatchReport(results=tuple(results))
