"""
handlers subpackage: the objects installed as process-wide error callbacks.

- ProductionErrorHandler: converts signals, logs to sinks, displays or re-raises
- DebugErrorHandler: renders a developer-facing HTML page
- LoggerErrorHandler: logs to one sink with level resolution (not installed)
"""

from .base import ErrorHandler, RegisteredHandler
from .debug import DebugErrorHandler
from .logger import LoggerErrorHandler
from .production import ProductionErrorHandler

__all__ = [
    "ErrorHandler",
    "RegisteredHandler",
    "DebugErrorHandler",
    "LoggerErrorHandler",
    "ProductionErrorHandler",
]
