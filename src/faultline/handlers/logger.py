from __future__ import annotations

from typing import Any, Mapping, Optional

from ..levels import DEFAULT_LEVEL_MAP, LevelMap, LevelResolver, TypeKey
from ..sinks import LoggerSink
from ..types import exception_location

# Key under which the exception is passed to the sink context.
ERROR_KEY = "error"


class LoggerErrorHandler:
    """
    Logs exceptions to a single sink with a level picked by :class:`LevelResolver`.

    Not registered with any hook: call :meth:`handle` from your own code.

    Notes
    -----
    The level map is checked in order, so fallbacks for types higher in the
    hierarchy belong at the end of the map.

    Usage example
    -------------
        handler = LoggerErrorHandler(StdlibLoggerSink(logger), {KeyError: "warning"})
        try:
            ...
        except Exception as exc:
            handler.handle(exc, {"user": {"id": 7}})
    """

    def __init__(self, logger: LoggerSink, level_map: Optional[Mapping[TypeKey, str]] = None) -> None:
        self.logger = logger
        # Keep the caller's order; defaults only fill in what the caller did not map.
        self.level_map = LevelMap.merged(level_map, DEFAULT_LEVEL_MAP)
        self._ignore_severity = False
        self._allow_non_psr_levels = False

    def ignore_severity(self, ignore_severity: bool = True) -> None:
        """Ignore the ``severity`` context key when detecting the level."""
        self._ignore_severity = ignore_severity

    def allow_non_psr_levels(self, allow_non_psr_levels: bool = True) -> None:
        """Accept level names outside the recognized set."""
        self._allow_non_psr_levels = allow_non_psr_levels

    def resolver(self) -> LevelResolver:
        return LevelResolver(
            level_map=self.level_map,
            ignore_severity=self._ignore_severity,
            allow_non_psr_levels=self._allow_non_psr_levels,
        )

    def handle(self, exc: BaseException, context: Optional[Mapping[str, Any]] = None) -> str:
        """Log ``exc`` and return the level it was logged at."""
        payload = dict(context or {})
        payload[ERROR_KEY] = exc

        level = self.resolver().resolve(exc, payload)
        file, line = exception_location(exc)
        klass = type(exc)
        self.logger.log(
            level,
            f"{_kind(exc)} '{klass.__module__}.{klass.__qualname__}' with message '{exc}' in {file}({line})",
            payload,
        )
        return level


def _kind(exc: BaseException) -> str:
    return "Exception" if isinstance(exc, Exception) else "BaseException"

