"""
Log level names and the level resolver.

The resolver picks the structured-log level for an error occurrence from, in order:
an explicit ``severity`` in the context, an exact-type entry of the level map,
the first ancestor-type entry of the level map, and finally a default.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Union

from . import context as ctx


class LogLevel:
    """Recognized structured-log level names."""
    EMERGENCY = "emergency"
    ALERT = "alert"
    CRITICAL = "critical"
    ERROR = "error"
    WARNING = "warning"
    NOTICE = "notice"
    INFO = "info"
    DEBUG = "debug"


KNOWN_LEVELS = frozenset(
    (
        LogLevel.EMERGENCY,
        LogLevel.ALERT,
        LogLevel.CRITICAL,
        LogLevel.ERROR,
        LogLevel.WARNING,
        LogLevel.NOTICE,
        LogLevel.INFO,
        LogLevel.DEBUG,
    )
)

DEFAULT_LOG_LEVEL = LogLevel.ERROR

TypeKey = Union[type, str]


def is_valid_level(level: Any) -> bool:
    """Case-insensitive check against the recognized level names. Non-strings are never valid."""
    return isinstance(level, str) and level.lower() in KNOWN_LEVELS


def type_id(klass: type) -> str:
    """
    Stable identifier of an exception type, usable as a level-map key.

    Builtins are identified by their bare name, everything else by ``module.QualName``.
    """
    if klass.__module__ == "builtins":
        return klass.__qualname__
    return f"{klass.__module__}.{klass.__qualname__}"


def _normalize_key(key: TypeKey) -> str:
    if isinstance(key, type):
        if not issubclass(key, BaseException):
            raise TypeError(f"Level map keys must be exception types, got {key!r}")
        return type_id(key)
    if isinstance(key, str) and key:
        return key
    raise TypeError(f"Level map keys must be exception types or type ids, got {key!r}")


@dataclass(frozen=True)
class LevelMap:
    """
    Ordered mapping from exception-type identifier to level name.

    Notes
    -----
    Entries are checked in order during the ancestor scan, so fallbacks for types
    higher in the hierarchy belong at the end of the map.

    Usage example
    -------------
        levels = LevelMap.merged({KeyError: "warning"}, DEFAULT_LEVEL_MAP)
    """
    entries: tuple[tuple[str, str], ...] = ()
    _index: dict[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_index", dict(self.entries))

    @classmethod
    def of(cls, mapping: Optional[Mapping[TypeKey, str]] = None) -> "LevelMap":
        """Build a map from a plain mapping, keeping its order. Later duplicates replace earlier values."""
        index: dict[str, str] = {}
        for key, level in (mapping or {}).items():
            index[_normalize_key(key)] = level
        return cls(entries=tuple(index.items()))

    @classmethod
    def merged(cls, user: Optional[Mapping[TypeKey, str]], defaults: "LevelMap") -> "LevelMap":
        """
        Merge caller entries with defaults.

        Caller order is kept, default keys the caller did not name are appended,
        and a default never overrides a caller entry.
        """
        own = cls.of(user)
        index = dict(own.entries)
        for key, level in defaults.entries:
            index.setdefault(key, level)
        return cls(entries=tuple(index.items()))

    def get(self, key: TypeKey) -> Optional[str]:
        return self._index.get(_normalize_key(key))

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, (type, str)):
            return False
        return _normalize_key(key) in self._index

    def __iter__(self) -> Iterator[tuple[str, str]]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)


DEFAULT_LEVEL_MAP = LevelMap.of(
    {
        SyntaxError: LogLevel.CRITICAL,
        BaseException: LogLevel.ERROR,
    }
)


@dataclass(frozen=True)
class LevelResolver:
    """
    Decides which log level applies to an error occurrence.

    The resolver never raises and never returns a level that fails validation.

    Usage example
    -------------
        resolver = LevelResolver(level_map=LevelMap.of({KeyError: "warning"}))
        resolver.resolve(KeyError("k"), {})  # -> "warning"
    """
    level_map: LevelMap = DEFAULT_LEVEL_MAP
    ignore_severity: bool = False
    allow_non_psr_levels: bool = False
    default: str = DEFAULT_LOG_LEVEL

    def validate(self, level: Any) -> bool:
        """Accept any string level when non-PSR levels are allowed, otherwise only known names."""
        if not isinstance(level, str):
            return False
        return self.allow_non_psr_levels or is_valid_level(level)

    def resolve(self, exc: BaseException, context: Optional[Mapping[str, Any]] = None) -> str:
        severity = (context or {}).get(ctx.SEVERITY)
        if not self.ignore_severity and isinstance(severity, str) and self.validate(severity):
            return severity

        exact = self.level_map.get(type(exc))
        if exact is not None and self.validate(exact):
            return exact

        lineage = {type_id(klass) for klass in type(exc).__mro__}
        for key, candidate in self.level_map:
            if key in lineage and self.validate(candidate):
                return candidate

        return self.default


def resolve_level(
    exc: BaseException,
    context: Optional[Mapping[str, Any]],
    level_map: LevelMap,
    *,
    ignore_severity: bool = False,
    allow_non_psr_levels: bool = False,
    default: str = DEFAULT_LOG_LEVEL,
) -> str:
    """Functional form of :meth:`LevelResolver.resolve`."""
    resolver = LevelResolver(
        level_map=level_map,
        ignore_severity=ignore_severity,
        allow_non_psr_levels=allow_non_psr_levels,
        default=default,
    )
    return resolver.resolve(exc, context)
