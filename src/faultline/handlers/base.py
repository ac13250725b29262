from __future__ import annotations

import sys
from typing import Any, Optional, Protocol, TextIO

from ..registry import HandlerRegistry, default_registry
from ..request import RequestContext, current_request


class ErrorHandler(Protocol):
    """Callbacks a handler exposes to the registry."""

    def handle_error(self, code: int, message: str, file: str, line: int) -> bool: ...

    def handle_exception(self, exc: BaseException) -> Any: ...


class RegisteredHandler:
    """
    Shared plumbing: registry membership and the direct output channel.

    A handler is in the web posture while a :class:`RequestContext` is bound,
    and in the command-line posture otherwise.
    """

    install_shutdown: bool = True

    def __init__(
        self,
        *,
        registry: Optional[HandlerRegistry] = None,
        register: bool = True,
        output: Optional[TextIO] = None,
    ) -> None:
        self.registry = registry if registry is not None else default_registry()
        self._output = output
        if register:
            self.register()

    @property
    def output(self) -> TextIO:
        return self._output if self._output is not None else sys.stdout

    @property
    def registered(self) -> bool:
        return self.registry.is_active(self)

    def register(self) -> None:
        self.registry.install(self, shutdown=self.install_shutdown)  # type: ignore[arg-type]

    def unregister(self) -> None:
        """Restore the callbacks active before this handler registered. No-op if not registered."""
        self.registry.uninstall(self)  # type: ignore[arg-type]

    def request(self) -> Optional[RequestContext]:
        return current_request()

    def is_cli(self) -> bool:
        return self.request() is None
