"""
Production error handler.

Converts native error signals into :class:`ContextErrorException`, logs every
uncaught exception, and either displays it (test/debug posture) or re-raises it
so the host shows its default failure output (production posture).
"""

from __future__ import annotations

import html
import logging
from typing import Any, Mapping, Optional, TextIO

from ..exceptions import ContextErrorException, FatalErrorException
from ..levels import DEFAULT_LEVEL_MAP, LevelMap, LevelResolver, LogLevel, TypeKey
from ..logging import NATIVE_LOGGER_NAME
from ..registry import HandlerRegistry
from ..severity import is_reported
from ..sinks import LoggerSink, LoggerSinkSet, sink_name
from ..types import DispatchReport, ErrorSignal, format_exception
from .base import RegisteredHandler

# Context key under which the exception is handed to the sinks.
EXCEPTION_KEY = "exception"


class ProductionErrorHandler(RegisteredHandler):
    """
    Registers itself as error, exception and shutdown callback on construction.

    Parameters
    ----------
    display_errors
        Print the exception (CLI) or emit an HTTP 500 page with the escaped
        exception (web) instead of re-raising it.
    notify_loggers
        Deliver exceptions to the sinks added with :meth:`add_logger`.
    notify_native_log
        Write every exception to the baseline diagnostic log first.
    level_map
        Extra exception-type -> level entries, checked before the defaults.

    Usage example
    -------------
        handler = ProductionErrorHandler(notify_loggers=True)
        handler.add_logger(StdlibLoggerSink(logging.getLogger("app")))
    """

    def __init__(
        self,
        display_errors: bool = False,
        notify_loggers: bool = False,
        notify_native_log: bool = True,
        *,
        level_map: Optional[Mapping[TypeKey, str]] = None,
        registry: Optional[HandlerRegistry] = None,
        register: bool = True,
        output: Optional[TextIO] = None,
        native_logger: Optional[logging.Logger] = None,
    ) -> None:
        self._display_errors = display_errors
        self._notify_loggers = notify_loggers
        self._notify_native_log = notify_native_log
        self._own_level_map = LevelMap.of(level_map)
        self._level_map = LevelMap.merged(level_map, DEFAULT_LEVEL_MAP)
        self._native = native_logger if native_logger is not None else logging.getLogger(NATIVE_LOGGER_NAME)
        self.loggers = LoggerSinkSet()
        super().__init__(registry=registry, register=register, output=output)

    @property
    def display_errors(self) -> bool:
        return self._display_errors

    @property
    def notify_loggers(self) -> bool:
        return self._notify_loggers

    @property
    def notify_native_log(self) -> bool:
        return self._notify_native_log

    @property
    def level_map(self) -> LevelMap:
        return self._level_map

    def add_logger(self, logger: LoggerSink) -> None:
        """Adds a sink to the handler."""
        self.loggers.add(logger)

    def log(self, exc: BaseException, is_emergency: bool = False) -> DispatchReport:
        """
        Log an exception to the baseline diagnostic log and the sinks.

        ``is_emergency`` is used for uncaught exceptions: unless the context
        severity or a caller level-map entry applies, the level is "emergency". It is
        passed on in the sink context.
        """
        text = format_exception(exc)
        if self._notify_native_log:
            self._native.error(text)

        # Test environments usually don't want to spam the (production) sinks.
        if not self._notify_loggers:
            return DispatchReport()

        message = ""
        request = self.request()
        if request is not None:
            message += request.describe()
        message += text

        context: dict[str, Any] = dict(getattr(exc, "context", None) or {})
        context[EXCEPTION_KEY] = exc
        # Uncaught exceptions resolve against the caller entries only, without the defaults.
        if is_emergency:
            context.setdefault("emergency", True)
            resolver = LevelResolver(level_map=self._own_level_map, default=LogLevel.EMERGENCY)
        else:
            resolver = LevelResolver(level_map=self._level_map)

        def _sink_failed(sink: LoggerSink, error: BaseException) -> None:
            # Notify the native log if another sink has died.
            self._native.error("Logger sink %s failed: %s", sink_name(sink), format_exception(error))

        return self.loggers.dispatch(
            level_for=lambda _sink: resolver.resolve(exc, context),
            message=message,
            context=context,
            on_failure=_sink_failed,
        )

    def handle_error(self, code: int, message: str, file: str, line: int) -> bool:
        """
        Convert a native error signal into a :class:`ContextErrorException` and raise it.

        Returns False without raising when ``code`` is excluded by the registry's
        reporting mask, so the previous display takes over.
        """
        signal = ErrorSignal(code=code, message=message, file=file, line=line)
        if not is_reported(code, self.registry.error_reporting):
            # Not included in error reporting: fall through to the default display.
            self.registry.record_last_error(signal)
            return False

        raise self._convert(signal, ContextErrorException)

    @staticmethod
    def _convert(signal: ErrorSignal, exc_class: type[ContextErrorException]) -> ContextErrorException:
        return exc_class(signal.message, code=0, severity=signal.code, filename=signal.file, lineno=signal.line)

    def handle_exception(self, exc: BaseException) -> None:
        """
        Handle an uncaught exception.

        Always logs first. With ``display_errors`` the exception is written to the
        output channel (or the bound request's 500 response); otherwise it is re-raised.
        """
        self.log(exc, is_emergency=True)

        if self._display_errors:
            request = self.request()
            if request is None:
                self.output.write(format_exception(exc) + "\n")
                self.output.flush()
            else:
                request.respond(500, "<pre>" + html.escape(format_exception(exc)) + "</pre>")
            return

        # Triggers the host's default failure output.
        raise exc

    def record_error(self, signal: ErrorSignal) -> None:
        """Record a fatal error observed outside the handler chain; shutdown replays it."""
        self.registry.record_last_error(signal)

    def handle_shutdown(self) -> None:
        """
        Replay the last unhandled error, if any, through the normal conversion path.

        Runs at most once per recorded error; a conversion that raises is routed to
        :meth:`handle_exception`.
        """
        signal = self.registry.take_last_error()
        if signal is None:
            return
        try:
            if is_reported(signal.code, self.registry.error_reporting):
                raise self._convert(signal, FatalErrorException)
        except ContextErrorException as exc:
            self.handle_exception(exc)
