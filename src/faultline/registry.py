"""
Explicit installation of process-wide error hooks.

A :class:`HandlerRegistry` owns the three host extension points:

- ``warnings.showwarning``: native error signals (warnings) -> ``handler.handle_error``
- ``sys.excepthook``: uncaught exceptions -> ``handler.handle_exception``
- ``atexit``: interpreter shutdown -> ``handler.handle_shutdown``

It snapshots whatever was active before installation so that uninstalling
restores the previous state exactly. At most one handler is active per registry;
installing another one replaces the first (with a warning).
"""

from __future__ import annotations

import atexit
import logging
import sys
import warnings
from dataclasses import dataclass
from types import TracebackType
from typing import Any, Callable, Optional, Protocol, TextIO

from .severity import ErrorLevel, code_for_warning
from .types import ErrorSignal

logger = logging.getLogger(__name__)

_DEFAULT_SHOWWARNING = warnings.showwarning

ExceptHook = Callable[[type[BaseException], BaseException, Optional[TracebackType]], Any]


class InstallableHandler(Protocol):
    def handle_error(self, code: int, message: str, file: str, line: int) -> bool: ...

    def handle_exception(self, exc: BaseException) -> Any: ...


@dataclass(frozen=True)
class _HookSnapshot:
    excepthook: ExceptHook
    showwarning: Callable[..., Any]
    filters: tuple[Any, ...]
    error_reporting: int

    @classmethod
    def capture(cls, *, error_reporting: int) -> "_HookSnapshot":
        return cls(
            excepthook=sys.excepthook,
            showwarning=warnings.showwarning,
            filters=tuple(warnings.filters),
            error_reporting=error_reporting,
        )

    def restore(self) -> None:
        sys.excepthook = self.excepthook
        warnings.showwarning = self.showwarning
        # resetwarnings() invalidates the per-module "already warned" caches
        warnings.resetwarnings()
        warnings.filters[:] = list(self.filters)


class HandlerRegistry:
    """
    Holds the active handler and the hooks it replaced.

    Usage example
    -------------
        registry = HandlerRegistry()
        handler = ProductionErrorHandler(registry=registry)
        ...
        handler.unregister()
    """

    def __init__(self) -> None:
        self.error_reporting: int = int(ErrorLevel.ALL)
        self._active: Optional[InstallableHandler] = None
        self._previous: Optional[_HookSnapshot] = None
        self._shutdown_registered = False
        self._last_error: Optional[ErrorSignal] = None

    @property
    def active(self) -> Optional[InstallableHandler]:
        return self._active

    def is_active(self, handler: object) -> bool:
        return self._active is handler

    def install(self, handler: InstallableHandler, *, shutdown: bool = True) -> None:
        """
        Make ``handler`` the active error/exception (and optionally shutdown) callback.

        Error reporting is forced to ``ErrorLevel.ALL`` and every warning is turned on,
        while the default warning display is replaced by the handler.
        """
        if self._active is handler:
            return
        if self._active is not None:
            logger.warning(
                "Replacing active error handler %s with %s",
                type(self._active).__name__,
                type(handler).__name__,
            )
            self.uninstall(self._active)

        self._previous = _HookSnapshot.capture(error_reporting=self.error_reporting)
        self.error_reporting = int(ErrorLevel.ALL)
        warnings.simplefilter("always")
        warnings.showwarning = self._showwarning
        sys.excepthook = self._excepthook
        if shutdown and callable(getattr(handler, "handle_shutdown", None)):
            atexit.register(self._shutdown)
            self._shutdown_registered = True
        self._active = handler
        logger.debug("Installed error handler %s", type(handler).__name__)

    def uninstall(self, handler: Optional[InstallableHandler] = None) -> bool:
        """
        Restore the hooks captured when the active handler was installed.

        Returns False (and changes nothing) when ``handler`` is not the active one
        or nothing is installed.
        """
        if self._active is None or (handler is not None and handler is not self._active):
            logger.debug("uninstall() ignored: handler is not active")
            return False

        if self._previous is not None:
            self._previous.restore()
            self.error_reporting = self._previous.error_reporting
        if self._shutdown_registered:
            atexit.unregister(self._shutdown)
            self._shutdown_registered = False
        logger.debug("Uninstalled error handler %s", type(self._active).__name__)
        self._active = None
        self._previous = None
        return True

    def record_last_error(self, signal: ErrorSignal) -> None:
        """Remember a signal that was not handled; shutdown replays it."""
        self._last_error = signal

    def take_last_error(self) -> Optional[ErrorSignal]:
        """Return and forget the last unhandled signal."""
        signal, self._last_error = self._last_error, None
        return signal

    def previous_excepthook(self) -> ExceptHook:
        if self._previous is not None:
            return self._previous.excepthook
        return sys.__excepthook__

    # Hook wrappers -------------------------------------------------------------------------

    def _excepthook(
        self,
        exc_type: type[BaseException],
        exc: BaseException,
        tb: Optional[TracebackType],
    ) -> None:
        handler = self._active
        previous = self.previous_excepthook()
        if handler is None or issubclass(exc_type, KeyboardInterrupt):
            previous(exc_type, exc, tb)
            return
        try:
            handler.handle_exception(exc)
        except BaseException as raised:
            # Re-raised: let the interpreter's default failure output take over.
            previous(type(raised), raised, raised.__traceback__)

    def _showwarning(
        self,
        message: Warning | str,
        category: type[Warning],
        filename: str,
        lineno: int,
        file: Optional[TextIO] = None,
        line: Optional[str] = None,
    ) -> None:
        handler = self._active
        previous = self._previous.showwarning if self._previous is not None else _DEFAULT_SHOWWARNING
        if handler is None:
            previous(message, category, filename, lineno, file, line)
            return
        handled = handler.handle_error(code_for_warning(category), str(message), filename, lineno)
        if handled is False:
            previous(message, category, filename, lineno, file, line)

    def _shutdown(self) -> None:
        handler = self._active
        shutdown = getattr(handler, "handle_shutdown", None)
        if callable(shutdown):
            shutdown()


_default_registry: Optional[HandlerRegistry] = None


def default_registry() -> HandlerRegistry:
    """Return the process-wide registry."""
    global _default_registry
    if _default_registry is None:
        _default_registry = HandlerRegistry()
    return _default_registry
