import sys
from typing import Optional, TextIO

from rich.console import Console
from rich.markup import escape

# Width of right-justified status labels, e.g. "    Scanning"
LABEL_WIDTH = 12


class StatusPrinter:
    """Prints bold, colored, labelled status lines to one output stream."""

    def __init__(self, stream: Optional[TextIO] = None, color: str = "auto") -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.console = Console(
            file=self.stream,
            highlight=False,
            soft_wrap=True,
            emoji=False,
            force_terminal=True if color == "always" else None,
            no_color=color == "never",
        )

    def attr(self, color: str, label: str, content: str = "") -> None:
        self.console.print(f"[bold {color}]{escape(label)}[/] {escape(str(content))}")

    def ok(self, label: str, message: str) -> None:
        self.attr("green", label.rjust(LABEL_WIDTH), message)

    def error(self, message: str) -> None:
        self.attr("red", "error:", message)

    def warn(self, message: str) -> None:
        self.attr("yellow", "warning:", message)

    def blank(self) -> None:
        self.console.print()
