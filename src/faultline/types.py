from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional
import traceback as _traceback

from .exceptions import ContextErrorException
from .severity import classify


@dataclass(frozen=True)
class ErrorSignal:
    """
    A native runtime error occurrence, alive for one handler invocation.

    Usage example
    -------------
        sig = ErrorSignal(code=ErrorLevel.USER_WARNING, message="careful", file="app.py", line=12)
    """
    code: int
    message: str
    file: str = ""
    line: int = 0

    @property
    def label(self) -> str:
        return classify(self.code)


class SinkStatus(str, Enum):
    """Outcome of delivering one log record to one sink."""
    OK = "ok"
    FAILED = "failed"


@dataclass(frozen=True)
class SinkResult:
    """Delivery outcome for a single sink."""
    sink: str
    status: SinkStatus
    level: Optional[str] = None
    exc_type: Optional[str] = None
    message: Optional[str] = None

    @staticmethod
    def failed(*, sink: str, level: Optional[str], exc: BaseException) -> "SinkResult":
        return SinkResult(
            sink=sink,
            status=SinkStatus.FAILED,
            level=level,
            exc_type=type(exc).__name__,
            message=str(exc),
        )


@dataclass(frozen=True)
class DispatchReport:
    """
    Aggregated result of one logging pass over the sink set.

    Usage example
    -------------
        report = handler.log(exc)
        if report.has_failures():
            print(report.render_summary())
    """
    results: tuple[SinkResult, ...] = ()

    def delivered(self) -> int:
        return sum(1 for r in self.results if r.status == SinkStatus.OK)

    def failures(self) -> tuple[SinkResult, ...]:
        return tuple(r for r in self.results if r.status == SinkStatus.FAILED)

    def has_failures(self) -> bool:
        return bool(self.failures())

    def render_summary(self) -> str:
        lines = [f"Dispatch summary: {self.delivered()} delivered, {len(self.failures())} failed"]
        for rec in self.results:
            if rec.status == SinkStatus.FAILED:
                lines.append(f"  - FAIL {rec.sink}: {rec.exc_type}: {rec.message}")
            else:
                lines.append(f"  - OK   {rec.sink} ({rec.level})")
        return "\n".join(lines)


def format_exception(exc: BaseException) -> str:
    """Full string form of an exception: traceback, type and message."""
    text = "".join(_traceback.format_exception(type(exc), exc, exc.__traceback__)).rstrip("\n")
    if isinstance(exc, ContextErrorException) and exc.filename:
        text += f"\n  in {exc.filename}({exc.lineno})"
    return text


def exception_location(exc: BaseException) -> tuple[str, int]:
    """File and line where ``exc`` was raised (or the signal location for converted signals)."""
    if isinstance(exc, ContextErrorException) and exc.filename:
        return exc.filename, int(exc.lineno or 0)
    tb = exc.__traceback__
    if tb is None:
        return "", 0
    while tb.tb_next is not None:
        tb = tb.tb_next
    return tb.tb_frame.f_code.co_filename, tb.tb_lineno
