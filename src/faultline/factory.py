from __future__ import annotations

import logging
from typing import Mapping, Optional, Union

from .config import ErrorHandlingConfig
from .handlers.debug import DebugErrorHandler
from .handlers.logger import LoggerErrorHandler
from .handlers.production import ProductionErrorHandler
from .levels import TypeKey
from .logging import configure_logging
from .registry import HandlerRegistry
from .sinks import LoggerSink, StdlibLoggerSink


class Factory:
    """Static constructors for the handlers."""

    @staticmethod
    def create_debug_error_handler(
        title: str = "faultline debug",
        *,
        registry: Optional[HandlerRegistry] = None,
    ) -> DebugErrorHandler:
        return DebugErrorHandler(title, registry=registry)

    @staticmethod
    def create_logger_error_handler(
        logger: Union[LoggerSink, logging.Logger],
        level_map: Optional[Mapping[TypeKey, str]] = None,
    ) -> LoggerErrorHandler:
        sink = StdlibLoggerSink(logger) if isinstance(logger, logging.Logger) else logger
        return LoggerErrorHandler(sink, level_map)

    @staticmethod
    def create_production_error_handler(
        display_errors: bool = False,
        notify_loggers: bool = False,
        notify_native_log: bool = True,
        *,
        registry: Optional[HandlerRegistry] = None,
    ) -> ProductionErrorHandler:
        return ProductionErrorHandler(display_errors, notify_loggers, notify_native_log, registry=registry)


def bootstrap(
    cfg: ErrorHandlingConfig,
    *,
    registry: Optional[HandlerRegistry] = None,
) -> Union[ProductionErrorHandler, DebugErrorHandler]:
    """
    Configure logging and install the handler selected by ``cfg.mode``.

    In production mode the JSONL sink (when enabled) becomes a handler sink. The
    configured "faultline" logger is added as a sink only when native logging is
    off: the native log already propagates into it, so each exception is written
    to the run log and console once.

    Usage example
    -------------
        cfg = ErrorHandlingConfig.from_mapping(load_config(Path.cwd()))
        handler = bootstrap(cfg)
    """
    if cfg.mode == "debug":
        return Factory.create_debug_error_handler(cfg.title, registry=registry)

    logger, jsonl_sink = configure_logging(cfg=cfg)
    handler = Factory.create_production_error_handler(
        cfg.display_errors,
        cfg.notify_loggers,
        cfg.notify_native_log,
        registry=registry,
    )
    if not cfg.notify_native_log:
        handler.add_logger(StdlibLoggerSink(logger))
    if jsonl_sink is not None:
        handler.add_logger(jsonl_sink)
    logger.debug("Installed %s (display_errors=%s)", type(handler).__name__, cfg.display_errors)
    return handler
