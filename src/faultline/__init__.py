"""
faultline: process-wide error handling for CLI programs and WSGI apps.

Key primitives
--------------
- ProductionErrorHandler: converts warnings to exceptions, logs to sinks, displays or re-raises
- DebugErrorHandler: renders a developer-facing HTML page
- LoggerErrorHandler: logs exceptions to one sink with level resolution
- HandlerRegistry: explicit installation/restoration of the process hooks
- LevelResolver / LevelMap: exception type -> log level
- classify(): native error code -> label
- Error: returnable error value
"""

from .config import ConfigError, ErrorHandlingConfig, load_config
from .exceptions import ContextErrorException, FatalErrorException
from .factory import Factory, bootstrap
from .handlers import DebugErrorHandler, LoggerErrorHandler, ProductionErrorHandler
from .levels import DEFAULT_LEVEL_MAP, LevelMap, LevelResolver, LogLevel, resolve_level
from .logging import JsonlSink, configure_logging
from .registry import HandlerRegistry, default_registry
from .returnable import Error, Returnable, is_error
from .severity import ErrorLevel, classify
from .sinks import LoggerSink, LoggerSinkSet, StdlibLoggerSink
from .types import DispatchReport, ErrorSignal
from .version import __version__
from .web import ErrorHandlerMiddleware

__all__ = [
    "ConfigError",
    "ErrorHandlingConfig",
    "load_config",
    "ContextErrorException",
    "FatalErrorException",
    "Factory",
    "bootstrap",
    "DebugErrorHandler",
    "LoggerErrorHandler",
    "ProductionErrorHandler",
    "DEFAULT_LEVEL_MAP",
    "LevelMap",
    "LevelResolver",
    "LogLevel",
    "resolve_level",
    "JsonlSink",
    "configure_logging",
    "HandlerRegistry",
    "default_registry",
    "Error",
    "Returnable",
    "is_error",
    "ErrorLevel",
    "classify",
    "LoggerSink",
    "LoggerSinkSet",
    "StdlibLoggerSink",
    "DispatchReport",
    "ErrorSignal",
    "ErrorHandlerMiddleware",
    "__version__",
]
