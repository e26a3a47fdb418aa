"""
Result Reporting

Renders check results as grouped, labelled text for people or as a JSON
array for scripts.
"""

import io
import json
from enum import Enum
from typing import Iterable, List, Sequence

from rich.console import Console
from rich.text import Text

from .models import CheckResult, CheckStatus, DiagnosticReport

STATUS_STYLES = {
    CheckStatus.FAIL: "bold red",
    CheckStatus.WARN: "yellow",
    CheckStatus.PASS: "green",
}

GROUP_HEADINGS = {
    CheckStatus.FAIL: "Errors",
    CheckStatus.WARN: "Warnings",
    CheckStatus.PASS: "OK",
}

# Failures first so they are not scrolled away
GROUP_ORDER = (CheckStatus.FAIL, CheckStatus.WARN, CheckStatus.PASS)


class OutputFormat(str, Enum):
    """Report output formats."""
    TEXT = "text"
    JSON = "json"


class Reporter:
    """Formats CheckResults."""

    def __init__(self, color: bool = False, show_hints: bool = False, width: int = 100):
        """
        Args:
            color: Emit ANSI colour codes in text output
            show_hints: Include follow-up hints under each result
            width: Wrap width for text output
        """
        self.color = color
        self.show_hints = show_hints
        self.width = width

    def render(self, results: Sequence[CheckResult], fmt: OutputFormat = OutputFormat.TEXT) -> str:
        """
        Render results in the given format.

        Args:
            results: Check results, in run order
            fmt: ``text`` or ``json``

        Returns:
            Rendered report
        """
        fmt = OutputFormat(fmt)
        if fmt == OutputFormat.JSON:
            return self.render_json(results)
        return self.render_text(results)

    def render_json(self, results: Iterable[CheckResult]) -> str:
        return json.dumps([r.to_dict() for r in results], indent=2)

    def render_text(self, results: Sequence[CheckResult]) -> str:
        buffer = io.StringIO()
        console = Console(
            file=buffer,
            force_terminal=self.color,
            no_color=not self.color,
            width=self.width,
            highlight=False,
            soft_wrap=True,
        )

        for status in GROUP_ORDER:
            group = [r for r in results if r.status == status]
            if not group:
                continue

            console.print(Text(f"{GROUP_HEADINGS[status]} ({len(group)})", style="bold"))
            for result in group:
                console.print(self._line(result))
                if self.show_hints:
                    for hint in result.hints:
                        console.print(Text(f"       {hint}", style="dim"))
            console.print()

        console.print(DiagnosticReport(list(results)).summary())
        return buffer.getvalue()

    def _line(self, result: CheckResult) -> Text:
        return Text.assemble(
            (f"[{result.status.label}]", STATUS_STYLES[result.status]),
            " ",
            (result.name, "bold"),
            f": {result.detail}",
        )


def render(results: List[CheckResult], fmt: OutputFormat = OutputFormat.TEXT) -> str:
    """Render with default settings."""
    return Reporter().render(results, fmt)
