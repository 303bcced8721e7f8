"""Value types produced by the CSS block scanner and section locator."""

from dataclasses import dataclass
from typing import Any, Dict

# Sub-position marker for an anchor that was never found
MISSING_LINE = -1


@dataclass(frozen=True)
class CssBlock:
    """A brace-delimited block found by the scanner.

    Lines are 1-based and inclusive, relative to the document the block was
    scanned from.
    """

    label: str
    start_line: int
    end_line: int
    content: str

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.label,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "content": self.content,
        }


@dataclass(frozen=True)
class TokenSectionAnchors:
    """Line positions of the anchors inside a token section.

    ``root`` and ``dark_theme`` hold MISSING_LINE when the anchor was not
    seen before the section closed.
    """

    theme: int
    root: int
    dark_theme: int
    dark_theme_end: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "theme": self.theme,
            "root": self.root,
            "dark_theme": self.dark_theme,
            "dark_theme_end": self.dark_theme_end,
        }


@dataclass(frozen=True)
class DesignTokenSection:
    """The contiguous span from ``@theme`` through the close of ``.dark-theme``.

    ``content`` is the exact text of lines ``start_line..end_line`` of the
    source document, including any unrelated rules that sit between the
    anchors. The bounds are meaningless against any other document.
    """

    start_line: int
    end_line: int
    content: str
    anchors: TokenSectionAnchors

    @property
    def line_count(self) -> int:
        return self.end_line - self.start_line + 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_line": self.start_line,
            "end_line": self.end_line,
            "content": self.content,
            "blocks": self.anchors.to_dict(),
        }
