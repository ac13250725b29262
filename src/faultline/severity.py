"""Native error signal codes and their human-readable labels."""

from __future__ import annotations

from enum import IntFlag


class ErrorLevel(IntFlag):
    """Bit values of native runtime error signals."""
    ERROR = 1
    WARNING = 2
    PARSE = 4
    NOTICE = 8
    CORE_ERROR = 16
    CORE_WARNING = 32
    COMPILE_ERROR = 64
    COMPILE_WARNING = 128
    USER_ERROR = 256
    USER_WARNING = 512
    USER_NOTICE = 1024
    STRICT = 2048
    RECOVERABLE_ERROR = 4096
    DEPRECATED = 8192
    USER_DEPRECATED = 16384
    ALL = 32767


_LABELS: dict[int, str] = {
    ErrorLevel.WARNING: "Warning",
    ErrorLevel.PARSE: "Parse",
    ErrorLevel.NOTICE: "Notice",
    ErrorLevel.CORE_ERROR: "Core-Error",
    ErrorLevel.CORE_WARNING: "Core Warning",
    ErrorLevel.COMPILE_ERROR: "Compile Error",
    ErrorLevel.COMPILE_WARNING: "Compile Warning",
    ErrorLevel.USER_ERROR: "User Error",
    ErrorLevel.USER_WARNING: "User Warning",
    ErrorLevel.USER_NOTICE: "User Notice",
    ErrorLevel.STRICT: "Strict",
    ErrorLevel.RECOVERABLE_ERROR: "Recoverable Error",
    ErrorLevel.DEPRECATED: "Deprecated",
    ErrorLevel.USER_DEPRECATED: "User Deprecated",
}

# Checked along the category's MRO, so subclasses inherit their base's code.
_WARNING_CODES: dict[type[Warning], int] = {
    SyntaxWarning: ErrorLevel.COMPILE_WARNING,
    DeprecationWarning: ErrorLevel.DEPRECATED,
    PendingDeprecationWarning: ErrorLevel.DEPRECATED,
    FutureWarning: ErrorLevel.USER_DEPRECATED,
    RuntimeWarning: ErrorLevel.WARNING,
    ResourceWarning: ErrorLevel.NOTICE,
    ImportWarning: ErrorLevel.NOTICE,
    BytesWarning: ErrorLevel.NOTICE,
    EncodingWarning: ErrorLevel.NOTICE,
    UserWarning: ErrorLevel.USER_WARNING,
}


def classify(code: int) -> str:
    """
    Convert a native error code to its category label.

    Unknown codes (including plain ``ErrorLevel.ERROR``) read as ``"Error"``.

    Usage example
    -------------
        classify(ErrorLevel.USER_DEPRECATED)  # -> "User Deprecated"
    """
    return _LABELS.get(int(code), "Error")


def code_for_warning(category: type[Warning]) -> int:
    """Return the native error code for a Python warning category."""
    for klass in category.__mro__:
        code = _WARNING_CODES.get(klass)
        if code is not None:
            return int(code)
    return int(ErrorLevel.WARNING)


def is_reported(code: int, mask: int) -> bool:
    """Return True when ``code`` is included in the reporting ``mask``."""
    return bool(int(mask) & int(code))
