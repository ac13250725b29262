from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, Mapping, Optional
import os
import uuid

import yaml


class ConfigError(ValueError):
    """Raised when error-handling configuration is missing or invalid."""


_TRUE = ("1", "true", "yes", "on")
_FALSE = ("0", "false", "no", "off", "")


def _parse_bool(raw: Any, *, name: str) -> bool:
    if isinstance(raw, bool):
        return raw
    text = str(raw).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ConfigError(f"Invalid boolean for '{name}': {raw!r}")


def load_config(root: Path) -> dict[str, Any]:
    """
    Load the ``errors`` section of the project config from ``root`` if present.

    Search order:
    1) ``faultline.yaml``
    2) ``config.yaml``

    Returns an empty dict when no file exists or the file has no ``errors`` section.
    """

    for filename in ("faultline.yaml", "config.yaml"):
        config_path = root / filename
        if not config_path.exists():
            continue
        try:
            raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except yaml.YAMLError as error:
            raise ConfigError(f"Could not parse {config_path}: {error}") from error
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ConfigError(f"{config_path} must contain a mapping at top level.")
        section = raw.get("errors", {})
        if section is None:
            return {}
        if not isinstance(section, dict):
            raise ConfigError(f"'errors' in {config_path} must be a mapping.")
        return section
    return {}


@dataclass(frozen=True)
class ErrorHandlingConfig:
    """
    Configuration for handler behavior and logging.

    Parameters
    ----------
    mode
        "production" installs the production handler; "debug" installs the debug page handler.
    display_errors
        Print exceptions (CLI) or emit a 500 page with the escaped exception (web)
        instead of re-raising them.
    notify_loggers
        Deliver exceptions to the structured logger sinks.
    notify_native_log
        Always write exceptions to the baseline diagnostic log first.
    title
        Title of the debug page.
    log_dir
        Directory where log files and JSONL event logs are written.
    run_id
        Unique identifier for the process run. If "auto", a UUID4 is generated.
    console_level
        Logging level for console output.
    file_level
        Logging level for file output.
    write_jsonl
        If True, adds a JSONL sink writing to <log_dir>/events_<run_id>.jsonl.
    env_prefix
        Prefix for environment-variable overrides, e.g. "FAULTLINE_".

    Usage example
    -------------
        cfg = ErrorHandlingConfig(display_errors=False, notify_loggers=True, log_dir=Path("logs"))
    """

    mode: Literal["production", "debug"] = "production"
    display_errors: bool = False
    notify_loggers: bool = False
    notify_native_log: bool = True
    title: str = "faultline debug"

    log_dir: Path = Path("logs")
    run_id: str = "auto"

    console_level: int = 20  # logging.INFO
    file_level: int = 10  # logging.DEBUG

    write_jsonl: bool = False

    env_prefix: str = field(default="", repr=False)

    def resolved_run_id(self) -> str:
        """Return a non-auto run id."""
        if self.run_id != "auto":
            return self.run_id
        return uuid.uuid4().hex[:10]

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any], *, default: Optional["ErrorHandlingConfig"] = None) -> "ErrorHandlingConfig":
        """
        Create config from a plain mapping (e.g. the ``errors`` section of ``faultline.yaml``).

        Unknown keys raise :class:`ConfigError`.
        """
        base = default if default is not None else cls()
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown error-handling config keys: {', '.join(unknown)}")

        values: dict[str, Any] = {f.name: getattr(base, f.name) for f in fields(cls)}
        for key, raw in data.items():
            if key in ("display_errors", "notify_loggers", "notify_native_log", "write_jsonl"):
                values[key] = _parse_bool(raw, name=key)
            elif key == "mode":
                mode = str(raw).strip().lower()
                if mode not in ("production", "debug"):
                    raise ConfigError(f"Invalid mode: {raw!r} (expected 'production' or 'debug')")
                values[key] = mode
            elif key == "log_dir":
                values[key] = Path(str(raw))
            elif key in ("console_level", "file_level"):
                try:
                    values[key] = int(raw)
                except (TypeError, ValueError) as error:
                    raise ConfigError(f"Invalid integer for '{key}': {raw!r}") from error
            else:
                values[key] = str(raw)
        return cls(**values)

    @classmethod
    def from_env(cls, *, default: Optional["ErrorHandlingConfig"] = None) -> "ErrorHandlingConfig":
        """
        Create config from environment variables.

        Supported variables (prefix controlled by env_prefix on `default`):
        - <PFX>ERROR_MODE: "production" | "debug"
        - <PFX>DISPLAY_ERRORS, <PFX>NOTIFY_LOGGERS, <PFX>NOTIFY_NATIVE_LOG, <PFX>WRITE_JSONL: "1"/"0"
        - <PFX>LOG_DIR: path

        Invalid values fall back to the value on `default`.

        Usage example
        -------------
            cfg = ErrorHandlingConfig.from_env(default=ErrorHandlingConfig(env_prefix="FAULTLINE_"))
        """
        base = default if default is not None else cls()
        pfx = base.env_prefix

        mode = os.getenv(f"{pfx}ERROR_MODE", base.mode).strip().lower()
        if mode not in ("production", "debug"):
            mode = base.mode

        def _flag(name: str, current: bool) -> bool:
            raw = os.getenv(f"{pfx}{name}")
            if raw is None:
                return current
            try:
                return _parse_bool(raw, name=name)
            except ConfigError:
                return current

        log_dir = Path(os.getenv(f"{pfx}LOG_DIR", str(base.log_dir)))

        return cls(
            mode=mode,  # type: ignore[arg-type]
            display_errors=_flag("DISPLAY_ERRORS", base.display_errors),
            notify_loggers=_flag("NOTIFY_LOGGERS", base.notify_loggers),
            notify_native_log=_flag("NOTIFY_NATIVE_LOG", base.notify_native_log),
            title=base.title,
            log_dir=log_dir,
            run_id=base.run_id,
            console_level=base.console_level,
            file_level=base.file_level,
            write_jsonl=_flag("WRITE_JSONL", base.write_jsonl),
            env_prefix=pfx,
        )
