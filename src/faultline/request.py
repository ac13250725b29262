"""
Per-request state for the web posture.

A handler runs in a web posture while a :class:`RequestContext` is bound
(see :class:`faultline.web.ErrorHandlerMiddleware`); otherwise it runs in a
command-line posture.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Iterator, Mapping, Optional


@dataclass
class RequestContext:
    """
    Inbound request fields plus the response a handler may decide to emit.

    Usage example
    -------------
        req = RequestContext.from_environ(environ)
        with bound_request(req):
            ...
        if req.status is not None:
            body = req.body.encode("utf-8")
            start_response(req.status_line(), [("Content-Type", req.content_type), ("Content-Length", str(len(body)))])
    """
    protocol: str = ""
    method: str = ""
    scheme: str = ""
    host: str = ""
    uri: str = ""
    user_agent: str = ""

    status: Optional[int] = None
    body: str = ""
    content_type: str = "text/html; charset=utf-8"

    @classmethod
    def from_environ(cls, environ: Mapping[str, Any]) -> "RequestContext":
        """Extract request fields from a WSGI environ."""
        uri = str(environ.get("REQUEST_URI") or "")
        if not uri:
            uri = str(environ.get("SCRIPT_NAME", "")) + str(environ.get("PATH_INFO", ""))
            query = environ.get("QUERY_STRING")
            if query:
                uri += f"?{query}"
        return cls(
            protocol=str(environ.get("SERVER_PROTOCOL", "")),
            method=str(environ.get("REQUEST_METHOD", "")),
            scheme=str(environ.get("wsgi.url_scheme") or environ.get("REQUEST_SCHEME", "")),
            host=str(environ.get("HTTP_HOST") or environ.get("SERVER_NAME", "")),
            uri=uri,
            user_agent=str(environ.get("HTTP_USER_AGENT", "")),
        )

    def describe(self) -> str:
        """Request header block prepended to logged messages."""
        return (
            f"Method: {self.protocol}, {self.method}\n"
            f"URL: {self.scheme}://{self.host}{self.uri}\n"
            f"User-Agent: {self.user_agent}\n\n"
        )

    def respond(self, status: int, body: str) -> None:
        self.status = status
        self.body = body

    def status_line(self) -> str:
        code = self.status if self.status is not None else 200
        try:
            phrase = HTTPStatus(code).phrase
        except ValueError:
            phrase = ""
        return f"{code} {phrase}".rstrip()


_current: ContextVar[Optional[RequestContext]] = ContextVar("faultline_request", default=None)


def current_request() -> Optional[RequestContext]:
    """Return the request bound to the current context, if any."""
    return _current.get()


def bind_request(request: Optional[RequestContext]) -> Token:
    return _current.set(request)


def unbind_request(token: Token) -> None:
    _current.reset(token)


@contextmanager
def bound_request(request: RequestContext) -> Iterator[RequestContext]:
    """Bind ``request`` for the duration of the block."""
    token = bind_request(request)
    try:
        yield request
    finally:
        unbind_request(token)
