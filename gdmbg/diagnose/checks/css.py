"""
CSS Background Analysis

Finds ``file://`` background references in GNOME Shell stylesheets and checks
that the referenced images exist.
"""

import re
from dataclasses import dataclass
from typing import List, Optional, Tuple
from urllib.parse import unquote

from ...config.models import PathSpec, PathType
from ...models import CheckResult
from .paths import PathInspector

# Up to the first closing quote or parenthesis; never past the end of the line
FILE_URL_PATTERN = re.compile(r"file://[^\"')\n]*")
RULE_BLOCK_PATTERN = re.compile(r"([^{}]*)\{([^{}]*)\}")
COMMENT_PATTERN = re.compile(r"/\*.*?\*/", re.DOTALL)


@dataclass(frozen=True)
class CssRule:
    """A background URL and the selectors of the rule it appears in."""
    selectors: Tuple[str, ...]
    background_url: Optional[str]

    @property
    def path(self) -> Optional[str]:
        """Filesystem path named by the URL."""
        if not self.background_url:
            return None
        return file_uri_path(self.background_url)


def file_uri_path(url: str) -> str:
    """Percent-decoded filesystem path of a ``file://`` URL."""
    rest = url.strip()[len("file://"):]
    # file://host/path is not used by GNOME; keep only the path part
    if not rest.startswith("/"):
        rest = "/" + rest.split("/", 1)[-1]
    return unquote(rest)


class CssAnalyzer:
    """Extracts background-image URLs from CSS text."""

    def analyze(self, css_text: str) -> List[CssRule]:
        """
        Extract every ``file://`` URL in order of appearance.

        Returns:
            One CssRule per URL; empty when the text has none
        """
        blocks = self._block_spans(css_text)
        rules = []

        for match in FILE_URL_PATTERN.finditer(css_text):
            selectors: Tuple[str, ...] = ()
            for start, end, block_selectors in blocks:
                if start <= match.start() < end:
                    selectors = block_selectors
                    break
            rules.append(CssRule(selectors=selectors, background_url=match.group(0).rstrip()))

        return rules

    def _block_spans(self, css_text: str) -> List[Tuple[int, int, Tuple[str, ...]]]:
        """Body spans of innermost rule blocks with their selector lists."""
        # Blank comments without shifting offsets
        masked = COMMENT_PATTERN.sub(lambda m: " " * len(m.group(0)), css_text)

        spans = []
        for match in RULE_BLOCK_PATTERN.finditer(masked):
            prelude = match.group(1).rsplit(";", 1)[-1]
            selectors = tuple(s.strip() for s in prelude.split(",") if s.strip())
            spans.append((match.start(2), match.end(2), selectors))
        return spans


def check_css_references(
    css_text: str,
    source: str,
    analyzer: Optional[CssAnalyzer] = None,
    inspector: Optional[PathInspector] = None,
) -> List[CheckResult]:
    """
    Analyze a stylesheet and verify each referenced image exists.

    Args:
        css_text: Stylesheet contents
        source: Where the CSS came from, used in check names

    Returns:
        Warn if no file:// URL is present, else one result per URL
    """
    analyzer = analyzer or CssAnalyzer()
    inspector = inspector or PathInspector()

    rules = analyzer.analyze(css_text)
    if not rules:
        return [CheckResult.warn(
            f"CSS background ({source})",
            "No file:// background image referenced",
            "Run 'gdm-bg-tool apply --image <path>' to add one",
        )]

    results = []
    for rule in rules:
        selectors = ", ".join(rule.selectors) or "(no selector)"
        image = inspector.inspect_one(PathSpec(
            path=rule.path or "/",
            expected_type=PathType.FILE,
            required=True,
            label=f"CSS image {selectors} ({source})",
        ))
        results.append(image)
    return results
