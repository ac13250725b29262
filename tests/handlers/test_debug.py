from __future__ import annotations

import io
import sys
import warnings
from typing import Any

import pytest

from faultline.handlers.debug import DebugErrorHandler
from faultline.registry import HandlerRegistry
from faultline.request import RequestContext, bound_request
from faultline.severity import ErrorLevel


class NotFound(Exception):
    status_code = 404
    code = 12


def _make(registry: HandlerRegistry, **kwargs: Any) -> tuple[DebugErrorHandler, io.StringIO]:
    out = io.StringIO()
    handler = DebugErrorHandler(registry=registry, output=out, **kwargs)
    return handler, out


def _raised(exc: BaseException) -> BaseException:
    try:
        raise exc
    except BaseException as caught:
        return caught


def test_debug_handler_does_not_install_shutdown(registry: HandlerRegistry) -> None:
    handler, _ = _make(registry)
    assert registry.active is handler
    assert handler.install_shutdown is False


def test_cli_page_contains_title_and_message(registry: HandlerRegistry) -> None:
    handler, out = _make(registry, title="Orders <debug>")

    assert handler.handle_exception(_raised(ValueError("no such order"))) is True

    page = out.getvalue()
    assert page.startswith("<!DOCTYPE html>")
    assert "<title>Orders &lt;debug&gt;</title>" in page
    assert "no such order" in page


def test_exception_record_fields(registry: HandlerRegistry) -> None:
    handler, _ = _make(registry)

    handler.handle_exception(_raised(ValueError("boom")))

    assert handler.stack["type"] == "Exception"
    assert handler.stack["message"] == "boom"
    assert handler.stack["file"].endswith("test_debug.py")
    assert handler.stack["line"] > 0
    assert handler.stack["http-code"] == 500
    assert handler.stack["mode"] == "Python"
    assert "raise exc" in handler.stack["trace"]


def test_preview_window_surrounds_failing_line(registry: HandlerRegistry) -> None:
    handler, _ = _make(registry)

    handler.handle_exception(_raised(ValueError("boom")))

    numbers = [n for n, _ in handler.stack["preview"]]
    assert handler.stack["line"] in numbers
    assert len(numbers) <= 9


def test_error_signal_is_labelled(registry: HandlerRegistry) -> None:
    handler, out = _make(registry)

    handler.handle_error(ErrorLevel.USER_DEPRECATED, "old call", "legacy.py", 3)

    assert handler.stack["type"] == "User Deprecated"
    assert handler.stack["code"] == ErrorLevel.USER_DEPRECATED
    assert "old call" in out.getvalue()
    assert "USER DEPRECATED" in out.getvalue()


def test_warnings_render_the_page(registry: HandlerRegistry) -> None:
    handler, out = _make(registry)

    warnings.warn("heads up", UserWarning)

    assert handler.stack["type"] == "User Warning"
    assert "heads up" in out.getvalue()


def test_web_posture_responds_with_http_code(registry: HandlerRegistry) -> None:
    handler, out = _make(registry)
    request = RequestContext(method="GET", uri="/orders/9")

    with bound_request(request):
        handler.handle_exception(_raised(NotFound("missing")))

    assert request.status == 404
    assert "missing" in request.body
    assert out.getvalue() == ""
    assert handler.stack["code"] == 12


def test_callbacks_run_once_and_can_suppress_page(registry: HandlerRegistry) -> None:
    handler, out = _make(registry)
    seen: list[dict[str, Any]] = []
    handler.add_callback(seen.append, show_default=False)

    assert handler.handle_exception(_raised(KeyError("k"))) is False
    assert out.getvalue() == ""
    assert seen[0]["type"] == "Exception"
    assert "trace" not in seen[0]

    # Consumed: the next error renders normally
    assert handler.handle_exception(_raised(KeyError("again"))) is True
    assert len(seen) == 1
    assert "again" in out.getvalue()


def test_callback_with_default_page(registry: HandlerRegistry) -> None:
    handler, out = _make(registry)
    seen: list[str] = []
    handler.add_callback(lambda record: seen.append(record["message"]))

    handler.handle_exception(_raised(RuntimeError("shown")))

    assert seen == ["shown"]
    assert "shown" in out.getvalue()


def test_excepthook_routes_to_debug_page(registry: HandlerRegistry) -> None:
    handler, out = _make(registry)
    exc = _raised(RuntimeError("uncaught"))

    sys.excepthook(type(exc), exc, exc.__traceback__)

    assert "uncaught" in out.getvalue()


def test_unregister_restores_hooks(registry: HandlerRegistry) -> None:
    hook = sys.excepthook
    handler, _ = _make(registry)

    handler.unregister()

    assert sys.excepthook is hook
    with pytest.warns(UserWarning):
        warnings.warn("plain", UserWarning)
