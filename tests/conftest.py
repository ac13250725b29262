from __future__ import annotations

import logging
import sys
import warnings
from typing import Iterator

import pytest

from faultline.registry import HandlerRegistry


class ListHandler(logging.Handler):
    """Collects formatted messages so tests can inspect them."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.messages: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())


@pytest.fixture
def registry(monkeypatch: pytest.MonkeyPatch) -> Iterator[HandlerRegistry]:
    # monkeypatch is torn down after this fixture, so the real hooks come back
    # even when a test leaves a handler installed.
    monkeypatch.setattr(sys, "excepthook", sys.excepthook)
    monkeypatch.setattr(warnings, "showwarning", warnings.showwarning)
    reg = HandlerRegistry()
    yield reg
    reg.uninstall()


@pytest.fixture
def native_log() -> Iterator[tuple[logging.Logger, ListHandler]]:
    logger = logging.getLogger("faultline.tests.native")
    logger.propagate = False
    logger.setLevel(logging.DEBUG)
    collector = ListHandler()
    logger.addHandler(collector)
    yield logger, collector
    logger.removeHandler(collector)
