"""
Debug error handler.

Renders a developer-facing HTML page for every error signal and uncaught
exception, drawn with ``rich`` and exported as HTML. No logging, no level logic.
"""

from __future__ import annotations

import html
import io
import linecache
import traceback
from typing import Any, Callable, Optional, TextIO

from rich.console import Console, Group
from rich.panel import Panel
from rich.syntax import Syntax
from rich.text import Text
from rich.traceback import Traceback

from ..registry import HandlerRegistry
from ..severity import classify
from ..types import exception_location
from .base import RegisteredHandler

Callback = Callable[[dict[str, Any]], Any]

_TITLE_MARKER = "@@FAULTLINE_TITLE@@"

# rich fills {stylesheet}, {foreground}, {background} and {code}.
_PAGE_FORMAT = """\
<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<title>@@FAULTLINE_TITLE@@</title>
<style>
{stylesheet}
body {{
    color: {foreground};
    background-color: {background};
}}
</style>
</head>
<body>
    <pre style="font-family:Menlo,'DejaVu Sans Mono',consolas,'Courier New',monospace"><code>{code}</code></pre>
</body>
</html>
"""


class DebugErrorHandler(RegisteredHandler):
    """
    Registers itself as error and exception callback and renders a debug page.

    The page goes to the output channel on the command line, or becomes the body
    of the bound request's response (with the record's HTTP code) in a web app.

    Usage example
    -------------
        handler = DebugErrorHandler(title="My app - debug")
    """

    install_shutdown = False

    def __init__(
        self,
        title: str = "faultline debug",
        *,
        registry: Optional[HandlerRegistry] = None,
        register: bool = True,
        output: Optional[TextIO] = None,
        width: int = 100,
    ) -> None:
        self.title = title
        self.width = width
        self.stack: dict[str, Any] = {}
        self._callbacks: list[tuple[Callback, bool]] = []
        super().__init__(registry=registry, register=register, output=output)

    def add_callback(self, fn: Callback, *, show_default: bool = True) -> None:
        """
        Run ``fn`` with the error record before the next render.

        Callbacks run once. If any was added with ``show_default=False``, the
        default page is not rendered for that error.
        """
        self._callbacks.append((fn, show_default))

    def handle_exception(self, exc: BaseException) -> bool:
        file, line = exception_location(exc)
        self._set_params(
            type="Exception",
            code=getattr(exc, "code", 0),
            message=str(exc),
            file=file,
            line=line,
            trace="".join(traceback.format_tb(exc.__traceback__)),
            http=getattr(exc, "status_code", 0),
        )
        return self.render(exc)

    def handle_error(self, code: int, message: str, file: str, line: int) -> bool:
        self._set_params(type=classify(code), code=code, message=message, file=file, line=line, trace="", http=0)
        return self.render()

    def _set_params(
        self,
        *,
        type: str,
        code: Any,
        message: str,
        file: str,
        line: int,
        trace: str,
        http: Any,
    ) -> dict[str, Any]:
        self.stack = {
            "type": type,
            "message": message,
            "file": file,
            "line": line,
            "code": code,
            "http-code": http if isinstance(http, int) and http > 0 else 500,
            "trace": trace,
            "preview": [],
        }
        return self.stack

    def preview(self) -> list[tuple[int, str]]:
        """Source lines around the failing line as (line number, text) pairs."""
        file = self.stack.get("file") or ""
        line = int(self.stack.get("line") or 0)
        if not file or line <= 0:
            return []

        start, end = (line - 5, line + 4) if line - 5 >= 0 else (line - 1, line + 8)
        lines: list[tuple[int, str]] = []
        for i in range(start, end):
            text = linecache.getline(file, i + 1)
            if not text:
                continue
            lines.append((i + 1, text.rstrip("\n")))
        return lines

    def _run_callbacks(self) -> bool:
        show_default = True
        record = {k: v for k, v in self.stack.items() if k not in ("trace", "preview")}
        callbacks, self._callbacks = self._callbacks, []
        for fn, default in callbacks:
            if not default:
                show_default = False
            fn(dict(record))
        return show_default

    def render(self, exc: Optional[BaseException] = None) -> bool:
        """Render the current record. Returns False when a callback suppressed the page."""
        self.stack["mode"] = "Python"

        if self._callbacks and not self._run_callbacks():
            return False

        self.stack["preview"] = self.preview()
        page = self.render_html(exc)

        request = self.request()
        if request is None:
            self.output.write(page)
            self.output.flush()
        else:
            request.respond(self.stack["http-code"], page)
        return True

    def render_html(self, exc: Optional[BaseException] = None) -> str:
        console = Console(record=True, file=io.StringIO(), width=self.width, force_terminal=True, color_system="truecolor")

        header = Text(f"{self.stack['code']} {str(self.stack['type']).upper()}", style="bold")
        parts: list[Any] = [Text(self.stack["message"])]
        if self.stack["file"]:
            parts.append(Text(f"\n{self.stack['file']}", style="dim"))
        preview = self.stack.get("preview") or []
        if preview:
            parts.append(
                Syntax(
                    "\n".join(text for _, text in preview),
                    "python",
                    line_numbers=True,
                    start_line=preview[0][0],
                    highlight_lines={int(self.stack["line"])},
                    word_wrap=True,
                )
            )
        console.print(Panel(Group(*parts), title=header, subtitle=self.stack["mode"], border_style="red"))

        if exc is not None and exc.__traceback__ is not None:
            console.print(Traceback.from_exception(type(exc), exc, exc.__traceback__, width=self.width))
        elif self.stack["trace"]:
            console.print(Text("BACKTRACE:\n" + self.stack["trace"]))

        safe_title = html.escape(self.title).replace("{", "{{").replace("}", "}}")
        return console.export_html(code_format=_PAGE_FORMAT.replace(_TITLE_MARKER, safe_title))

