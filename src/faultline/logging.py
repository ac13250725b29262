from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

from rich.logging import RichHandler

from .config import ErrorHandlingConfig

# Baseline diagnostic log. Written first and unconditionally when native logging is on;
# falls back to stderr through logging.lastResort when nothing is configured.
NATIVE_LOGGER_NAME = "faultline.native"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass
class JsonlSink:
    """
    Sink writing each record as one JSON line.

    Each line is a dict that includes at least:
    - time_utc
    - run_id
    - level
    - message
    - context (optional, non-JSON values rendered with str())
    - exc_type, exc_msg (when the context carries an exception)

    Usage example
    -------------
        sink = JsonlSink(path=Path("logs/events_abc.jsonl"), run_id="abc")
        sink.log("error", "boom", {"exception": exc, "user": {"id": 7}})
    """
    path: Path
    run_id: str
    name: str = "jsonl"

    def log(self, level: str, message: str, context: Mapping[str, Any]) -> None:
        payload: dict[str, Any] = {
            "time_utc": _utc_now_iso(),
            "run_id": self.run_id,
            "level": level,
            "message": message,
        }
        rest = {k: v for k, v in context.items() if not isinstance(v, BaseException)}
        if rest:
            payload["context"] = rest
        exc = next((v for v in context.values() if isinstance(v, BaseException)), None)
        if exc is not None:
            payload["exc_type"] = type(exc).__name__
            payload["exc_msg"] = str(exc)

        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(payload, ensure_ascii=False, default=str) + "\n")


class _RunContextFilter(logging.Filter):
    def __init__(self, *, run_id: str) -> None:
        super().__init__()
        self._run_id = run_id

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        # Ensure `run_id` and `log_level` exist for the formatter
        if not hasattr(record, "run_id"):
            setattr(record, "run_id", self._run_id)
        if not hasattr(record, "log_level"):
            setattr(record, "log_level", record.levelname.lower())
        return True


def configure_logging(*, cfg: ErrorHandlingConfig) -> tuple[logging.Logger, Optional[JsonlSink]]:
    """
    Configure console + file logging, plus optional JSONL sink.

    Returns
    -------
    logger
        A configured logger named "faultline". The baseline diagnostic log
        ("faultline.native") propagates into it.
    jsonl_sink
        JsonlSink if cfg.write_jsonl else None.

    Usage example
    -------------
        logger, jsonl_sink = configure_logging(cfg=cfg)
        logger.info("Hello")
    """
    run_id = cfg.resolved_run_id()
    log_dir = cfg.log_dir
    log_dir.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger("faultline")
    logger.setLevel(logging.DEBUG)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    for old_filter in list(logger.filters):
        logger.removeFilter(old_filter)
    logger.propagate = False

    run_filter = _RunContextFilter(run_id=run_id)

    console_handler = RichHandler(rich_tracebacks=(cfg.mode == "debug"), show_path=False)
    console_handler.setLevel(cfg.console_level)
    console_handler.setFormatter(logging.Formatter("%(message)s"))
    console_handler.addFilter(run_filter)
    logger.addHandler(console_handler)

    # File handler (always plain)
    file_path = log_dir / f"run_{run_id}.log"
    file_handler = logging.FileHandler(file_path, encoding="utf-8")
    file_handler.setLevel(cfg.file_level)
    file_handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)sZ | run=%(run_id)s | level=%(log_level)s | %(levelname)s | %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    file_handler.addFilter(run_filter)
    logger.addHandler(file_handler)

    jsonl_sink = None
    if cfg.write_jsonl:
        jsonl_sink = JsonlSink(path=log_dir / f"events_{run_id}.jsonl", run_id=run_id)

    logger.debug("Logging configured (run_id=%s, mode=%s, log_dir=%s)", run_id, cfg.mode, str(log_dir))
    return logger, jsonl_sink
