"""CssDocument class for line-addressed access to a stylesheet."""

from typing import Iterator, Tuple

LF = "\n"
CRLF = "\r\n"


def detect_newline(text: str) -> str:
    """Return the line separator a stylesheet uses.

    A document counts as CRLF only when every ``\\n`` is preceded by ``\\r``.
    Mixed documents are split on ``\\n`` and keep any stray ``\\r`` as part
    of the line, so their bytes still round-trip unchanged.

    Args:
        text: Full document text

    Returns:
        ``"\\r\\n"`` or ``"\\n"``
    """
    lf_count = text.count(LF)
    if lf_count and text.count(CRLF) == lf_count:
        return CRLF
    return LF


def split_replacement(text: str, newline: str = LF) -> list[str]:
    """Split replacement text into lines for a document using ``newline``.

    For a CRLF document both separators are accepted. Otherwise the text is
    split on ``\\n`` only, so a stray ``\\r`` stays part of its line.
    """
    if newline == CRLF:
        text = text.replace(CRLF, LF)
    return text.split(LF)


class CssDocument:
    """An immutable, 1-indexed sequence of stylesheet lines.

    Line ``i`` is the ``i``-th element of the split text, so a document that
    ends with a newline has a final empty line. Joining ``lines`` with
    ``newline`` reproduces the original text exactly.

    Attributes:
        text: The original document text
        newline: Line separator used to split and rejoin the document
        lines: Tuple of lines without separators
    """

    def __init__(self, text: str):
        """Split a document into lines.

        Args:
            text: Full stylesheet text
        """
        self.text = text
        self.newline = detect_newline(text)
        self.lines: Tuple[str, ...] = tuple(text.split(self.newline))

    def __len__(self) -> int:
        return len(self.lines)

    def __iter__(self) -> Iterator[str]:
        return iter(self.lines)

    def numbered(self) -> Iterator[Tuple[int, str]]:
        """Yield ``(line_number, line)`` pairs with 1-based numbering."""
        return enumerate(self.lines, start=1)

    def line(self, line_number: int) -> str:
        """Return a single line by its 1-based number."""
        if not 1 <= line_number <= len(self.lines):
            raise IndexError(
                f"Line {line_number} out of range (total lines: {len(self.lines)})"
            )
        return self.lines[line_number - 1]

    def join(self, lines) -> str:
        """Join lines with this document's separator."""
        return self.newline.join(lines)

    def __repr__(self) -> str:
        newline = "CRLF" if self.newline == CRLF else "LF"
        return f"CssDocument(lines={len(self.lines)}, newline={newline})"
