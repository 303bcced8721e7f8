"""CSS token section extraction and line-range replacement utilities.

Blocks are located with line-oriented brace counting rather than a CSS
parser. Braces inside strings or comments are counted like any other brace,
so a stylesheet with a lone ``{`` in a comment inside a tracked block will
shift that block's end.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence

from src.domain.css_document import CssDocument, split_replacement
from src.domain.token_section import (
    MISSING_LINE,
    CssBlock,
    DesignTokenSection,
    TokenSectionAnchors,
)
from src.utils.error_handling import (
    InvalidLineRangeError,
    MalformedCSSError,
    SectionNotFoundError,
)


@dataclass(frozen=True)
class AnchorRule:
    """Recognizes the first line of a block.

    ``matches`` receives the stripped line text.
    """

    label: str
    matches: Callable[[str], bool]


THEME_INLINE_RULE = AnchorRule(
    "theme inline", lambda line: line.startswith("@theme") and "inline" in line
)
THEME_RULE = AnchorRule("theme", lambda line: line.startswith("@theme"))
MAIN_THEME_RULE = AnchorRule(
    "theme", lambda line: line.startswith("@theme") and "inline" not in line
)
ROOT_RULE = AnchorRule("root", lambda line: line.startswith(":root"))
DARK_THEME_RULE = AnchorRule("dark-theme", lambda line: line.startswith(".dark-theme"))

# Order matters: the inline rule must win over the plain @theme rule
THEME_ANCHORS: tuple[AnchorRule, ...] = (THEME_INLINE_RULE, THEME_RULE)


# -----------------------------------------------------------------------------
# Block scanner
# -----------------------------------------------------------------------------


class _Idle:
    """Scanner is between blocks."""

    __slots__ = ()


@dataclass
class _InBlock:
    """Scanner is inside a block opened on ``start_line``."""

    label: str
    start_line: int
    depth: int = 0
    opened: bool = False


_IDLE = _Idle()


def brace_delta(line: str) -> int:
    """Return the number of ``{`` minus the number of ``}`` on a line."""
    return line.count("{") - line.count("}")


def _scan(
    document: CssDocument,
    select: Callable[[int, str], Optional[str]],
) -> Iterator[CssBlock]:
    """Yield blocks in document order.

    ``select`` is consulted only while idle, with the line number and the
    stripped line, and returns the label of the block that line opens (or
    None). A block closes on the first line where its depth returns to zero
    after at least one ``{``; a block that never closes is never yielded.

    Raises:
        MalformedCSSError: If a tracked block's depth goes negative
    """
    state: _Idle | _InBlock = _IDLE

    for line_number, line in document.numbered():
        if isinstance(state, _Idle):
            label = select(line_number, line.strip())
            if label is None:
                continue
            state = _InBlock(label=label, start_line=line_number)

        state.depth += brace_delta(line)
        if state.depth < 0:
            raise MalformedCSSError(line_number, state.label)
        state.opened = state.opened or "{" in line

        if state.opened and state.depth == 0:
            yield CssBlock(
                label=state.label,
                start_line=state.start_line,
                end_line=line_number,
                content=document.join(document.lines[state.start_line - 1 : line_number]),
            )
            state = _IDLE


def scan_blocks(
    css_text: str,
    anchors: Sequence[AnchorRule] = THEME_ANCHORS,
) -> Iterator[CssBlock]:
    """Scan a stylesheet for top-level blocks opened by any of ``anchors``.

    Anchors are tried in order and the first match labels the block. Blocks
    never overlap: a line inside an open block is not tested against the
    anchors.

    Args:
        css_text: Full CSS document
        anchors: Ordered anchor rules

    Returns:
        Iterator of CssBlock in document order

    Example:
        >>> [b.label for b in scan_blocks("@theme {\\n}\\n@theme inline { }")]
        ['theme', 'theme inline']
    """

    def select(_line_number: int, trimmed: str) -> Optional[str]:
        for rule in anchors:
            if rule.matches(trimmed):
                return rule.label
        return None

    return _scan(CssDocument(css_text), select)


def extract_theme_blocks(css_text: str) -> list[CssBlock]:
    """Extract every ``@theme`` and ``@theme inline`` block with line numbers."""
    return list(scan_blocks(css_text, THEME_ANCHORS))


def extract_main_theme_block(css_text: str) -> Optional[CssBlock]:
    """Return the first non-inline ``@theme`` block (primitive tokens), if any."""
    for block in scan_blocks(css_text, THEME_ANCHORS):
        if block.label == THEME_RULE.label:
            return block
    return None


# -----------------------------------------------------------------------------
# Section locator
# -----------------------------------------------------------------------------


def locate_token_section(
    css_text: str,
    theme_rule: AnchorRule = MAIN_THEME_RULE,
    root_rule: AnchorRule = ROOT_RULE,
    dark_theme_rule: AnchorRule = DARK_THEME_RULE,
) -> Optional[DesignTokenSection]:
    """Find the design token section: ``@theme`` through the end of ``.dark-theme``.

    The theme and root anchors are recognized on their first occurrence
    only. Scanning stops at the line that closes the dark theme block, so
    nothing after it is read. Everything between the theme start and the
    dark theme close is part of the section, including unrelated rules.

    Args:
        css_text: Full CSS document
        theme_rule: Rule for the opening anchor
        root_rule: Rule for the optional middle anchor
        dark_theme_rule: Rule for the closing anchor

    Returns:
        DesignTokenSection, or None if the theme anchor is missing or the
        dark theme block is missing or never closes

    Raises:
        MalformedCSSError: If a tracked block closes more braces than it opened
    """
    document = CssDocument(css_text)
    starts: dict[str, int] = {}
    candidates = ((theme_rule, True), (root_rule, True), (dark_theme_rule, False))

    def select(line_number: int, trimmed: str) -> Optional[str]:
        for rule, first_only in candidates:
            if first_only and rule.label in starts:
                continue
            if rule.matches(trimmed):
                starts[rule.label] = line_number
                return rule.label
        return None

    dark_theme_end = MISSING_LINE
    for block in _scan(document, select):
        if block.label == dark_theme_rule.label:
            dark_theme_end = block.end_line
            break

    theme_start = starts.get(theme_rule.label, MISSING_LINE)
    if theme_start == MISSING_LINE or dark_theme_end == MISSING_LINE:
        return None

    return DesignTokenSection(
        start_line=theme_start,
        end_line=dark_theme_end,
        content=document.join(document.lines[theme_start - 1 : dark_theme_end]),
        anchors=TokenSectionAnchors(
            theme=theme_start,
            root=starts.get(root_rule.label, MISSING_LINE),
            dark_theme=starts.get(dark_theme_rule.label, MISSING_LINE),
            dark_theme_end=dark_theme_end,
        ),
    )


def require_token_section(css_text: str, document_label: str) -> DesignTokenSection:
    """Locate the token section or raise.

    Args:
        css_text: Full CSS document
        document_label: Name used in the error, e.g. "old" or "new"

    Raises:
        SectionNotFoundError: If the document has no complete section
    """
    section = locate_token_section(css_text)
    if section is None:
        raise SectionNotFoundError(document_label)
    return section


# -----------------------------------------------------------------------------
# Line-range splicer
# -----------------------------------------------------------------------------


def _check_range(document: CssDocument, start_line: int, end_line: int) -> None:
    if start_line < 1 or end_line > len(document) or start_line > end_line:
        raise InvalidLineRangeError(start_line, end_line, len(document))


def slice_lines(css_text: str, start_line: int, end_line: int) -> str:
    """Return the text of lines ``start_line..end_line`` (1-indexed, inclusive).

    Raises:
        InvalidLineRangeError: If the range is outside the document or inverted
    """
    document = CssDocument(css_text)
    _check_range(document, start_line, end_line)
    return document.join(document.lines[start_line - 1 : end_line])


def replace_lines(
    original_content: str,
    start_line: int,
    end_line: int,
    new_content: str,
) -> str:
    """Replace lines ``start_line..end_line`` (1-indexed, inclusive) with new text.

    Lines outside the range come back byte-identical and in order. The
    replacement may have any number of lines, so the line count of the
    result can differ from the original. Bounds are only meaningful against
    the document they were computed from; re-locate before splicing a
    document that has changed.

    Args:
        original_content: Full CSS document
        start_line: First line to replace
        end_line: Last line to replace
        new_content: Replacement text; ``\\r\\n`` is also accepted when the
                document is CRLF

    Returns:
        Updated document joined with the original's line separator

    Raises:
        InvalidLineRangeError: If the range is outside the document or inverted

    Example:
        >>> replace_lines("a\\nb\\nc", 2, 2, "x\\ny")
        'a\\nx\\ny\\nc'
    """
    document = CssDocument(original_content)
    _check_range(document, start_line, end_line)

    before = document.lines[: start_line - 1]
    after = document.lines[end_line:]
    return document.join([*before, *split_replacement(new_content, document.newline), *after])
