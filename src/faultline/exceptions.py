from __future__ import annotations

from typing import Any, Mapping, Optional

from .severity import ErrorLevel


class ContextErrorException(Exception):
    """
    A native error signal converted into an exception.

    Carries the signal's severity code and location plus a context mapping
    (see :mod:`faultline.context` for the recognized keys).

    Usage example
    -------------
        raise ContextErrorException("bad input", severity=ErrorLevel.USER_WARNING, context={"severity": "warning"})
    """

    def __init__(
        self,
        message: str = "",
        code: int = 0,
        severity: int = ErrorLevel.ERROR,
        filename: Optional[str] = None,
        lineno: Optional[int] = None,
        context: Optional[Mapping[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.severity = int(severity)
        self.filename = filename
        self.lineno = lineno
        self.context: dict[str, Any] = dict(context or {})

    def get_context(self) -> dict[str, Any]:
        return self.context

    def __str__(self) -> str:
        return self.message


class FatalErrorException(ContextErrorException):
    """A fatal error recovered at interpreter shutdown."""
