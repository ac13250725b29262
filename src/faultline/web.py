"""WSGI integration: binds each request so handlers switch to the web posture."""

from __future__ import annotations

import logging
import sys
from typing import Any, Callable, Iterable

from .request import RequestContext, bind_request, unbind_request

logger = logging.getLogger(__name__)

WSGIApp = Callable[[dict[str, Any], Callable[..., Any]], Iterable[bytes]]


class ErrorHandlerMiddleware:
    """
    Routes exceptions escaping a WSGI app through an installed handler.

    The handler decides the outcome: if it stores a response on the bound
    request (displayed error or debug page) that response is sent; if it
    re-raises, the exception propagates to the WSGI server, which answers with
    its default 500 page.

    Usage example
    -------------
        handler = ProductionErrorHandler(notify_loggers=True)
        app = ErrorHandlerMiddleware(app, handler)
    """

    def __init__(self, app: WSGIApp, handler: Any) -> None:
        self.app = app
        self.handler = handler

    def __call__(self, environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        request = RequestContext.from_environ(environ)
        token = bind_request(request)
        try:
            # Materialize so exceptions raised while iterating the body are caught too.
            result = self.app(environ, start_response)
            try:
                return list(result)
            finally:
                close = getattr(result, "close", None)
                if callable(close):
                    close()
        except Exception as exc:
            self.handler.handle_exception(exc)
            if request.status is None:
                logger.debug("Handler produced no response for %s %s", request.method, request.uri)
                raise
            return self._respond(request, start_response)
        finally:
            unbind_request(token)

    @staticmethod
    def _respond(request: RequestContext, start_response: Callable[..., Any]) -> list[bytes]:
        body = request.body.encode("utf-8")
        headers = [("Content-Type", request.content_type), ("Content-Length", str(len(body)))]
        start_response(request.status_line(), headers, sys.exc_info())
        return [body]
