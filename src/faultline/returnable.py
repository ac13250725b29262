"""Typed "operation failed, here is why" result values."""

from __future__ import annotations

from typing import Any, Protocol, Union, runtime_checkable


@runtime_checkable
class Returnable(Protocol):
    """Anything that can be returned instead of raised to describe a failure."""

    def get_message(self) -> str: ...

    def get_code(self) -> int: ...

    def get_context(self) -> Any: ...

    def __str__(self) -> str: ...


class Error:
    """
    Immutable error value.

    ``code`` may be given as an int or a numeric string; it always reads back as an int.

    Usage example
    -------------
        err = Error("not found", "404", {"reason": "missing"})
        err.get_code()  # -> 404
        str(err)        # -> "404:: not found"
    """

    __slots__ = ("_message", "_code", "_context")

    def __init__(self, message: str = "", code: Union[int, str] = "", context: Any = None) -> None:
        object.__setattr__(self, "_message", message)
        object.__setattr__(self, "_code", code)
        object.__setattr__(self, "_context", {} if context is None else context)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"{type(self).__name__} is immutable")

    def get_message(self) -> str:
        return self._message

    def get_code(self) -> int:
        try:
            return int(self._code)
        except (TypeError, ValueError):
            return 0

    def get_context(self) -> Any:
        return self._context

    def __str__(self) -> str:
        return f"{self._code}:: {self._message}"

    def __repr__(self) -> str:
        return f"Error(message={self._message!r}, code={self._code!r}, context={self._context!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Error):
            return NotImplemented
        return (self._message, self._code, self._context) == (other._message, other._code, other._context)


def is_error(obj: Any) -> bool:
    """Return True if ``obj`` is an :class:`Error` value."""
    return isinstance(obj, Error)
