"""
Balanced-expression navigation over C-family buffer text.

Comment and string literal extents come from the tree-sitter parse; bracket
matching is done on the raw text so that half-typed code still navigates.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass

from eldoc_lsp.constants import CLOSE_DELIMITERS, OPEN_DELIMITERS

from . import ts_parser
from .ts_utils import COMMENT_TYPES, iter_literals

# Characters ending an unterminated group at its own nesting level
_STATEMENT_END = frozenset({";", "}"})
# Last character of a complete string, character or header-name literal
_LITERAL_CLOSERS = frozenset({'"', "'", ">"})


class UnbalancedSyntaxError(ValueError):
    """Raised when a delimiter has no matching partner."""


@dataclass(frozen=True)
class LiteralSpan:
    """Extent of a comment or string literal.

    A cursor at the end of an ``unterminated`` literal is still inside it.
    """

    start: int
    end: int
    kind: str
    line_comment: bool = False
    unterminated: bool = False


def is_identifier_char(char: str) -> bool:
    return char.isalnum() or char == "_"


def _opens_char_literal(text: str, pos: int) -> bool:
    # 1'000 uses the quote as a digit separator
    return text[pos] == "'" and not (pos > 0 and is_identifier_char(text[pos - 1]))


def merge_unparsed_literals(text: str, parsed: list[LiteralSpan]) -> list[LiteralSpan]:
    """Add the literals the parser left out between ``parsed`` spans.

    The parse tree has no node for a ``/*`` without ``*/`` or for a quote left
    open, both of which are common while typing. An unmatched ``/*`` runs to
    the end of the buffer and an open quote to the end of its line.

    Args:
        text: Buffer text
        parsed: Literal spans taken from the parse tree

    Returns:
        All literal spans sorted by start. Parsed spans swallowed by a
        recovered literal are dropped.
    """
    remaining = iter(sorted(parsed, key=lambda span: span.start))
    upcoming = next(remaining, None)
    spans = []
    length = len(text)
    pos = 0
    while pos < length:
        if upcoming is not None and pos >= upcoming.start:
            if upcoming.start == pos:
                spans.append(upcoming)
                pos = upcoming.end
            upcoming = next(remaining, None)
            continue
        if text.startswith("/*", pos):
            close = text.find("*/", pos + 2)
            end = length if close < 0 else close + 2
            span = LiteralSpan(pos, end, "comment", unterminated=close < 0)
        elif text.startswith("//", pos):
            end = text.find("\n", pos)
            span = LiteralSpan(pos, length if end < 0 else end, "comment", line_comment=True)
        elif text[pos] == '"' or _opens_char_literal(text, pos):
            quote = text[pos]
            end = pos + 1
            while end < length and text[end] not in (quote, "\n"):
                end += 2 if text[end] == "\\" else 1
            end = min(end, length)
            closed = end < length and text[end] == quote
            span = LiteralSpan(pos, end + 1 if closed else end, "string", unterminated=not closed)
        else:
            pos += 1
            continue
        spans.append(span)
        pos = span.end
    return spans


class BufferSyntax:
    """Syntactic view of one version of a buffer's text."""

    def __init__(self, text: str, spans: list[LiteralSpan] | None = None):
        self.text = text
        if spans is None:
            spans = self._scan_literals(text)
        self.spans = sorted(spans, key=lambda span: span.start)
        self._starts = [span.start for span in self.spans]

    @staticmethod
    def _scan_literals(text: str) -> list[LiteralSpan]:
        tree = ts_parser.parse(text)
        offsets = ts_parser.OffsetMap(text)
        spans = []
        for node in iter_literals(tree.root_node):
            start = offsets.to_char(node.start_byte)
            end = offsets.to_char(node.end_byte)
            if node.type in COMMENT_TYPES:
                line_comment = text.startswith("//", start)
                spans.append(LiteralSpan(start, end, "comment", line_comment))
            else:
                unterminated = end - start < 2 or text[end - 1] not in _LITERAL_CLOSERS
                spans.append(LiteralSpan(start, end, "string", unterminated=unterminated))
        return merge_unparsed_literals(text, spans)

    # Literal state

    def literal_at(self, pos: int) -> LiteralSpan | None:
        """Get the literal containing the character at ``pos``."""
        index = bisect.bisect_right(self._starts, pos) - 1
        if index >= 0 and pos < self.spans[index].end:
            return self.spans[index]
        return None

    def _span_before(self, offset: int) -> LiteralSpan | None:
        index = bisect.bisect_left(self._starts, offset) - 1
        return self.spans[index] if index >= 0 else None

    def in_comment(self, offset: int) -> bool:
        """Check if a cursor offset lies inside a comment."""
        span = self._span_before(offset)
        if span is None or span.kind != "comment":
            return False
        at_open_end = offset == span.end and (span.line_comment or span.unterminated)
        return offset < span.end or at_open_end

    def in_string(self, offset: int) -> bool:
        """Check if a cursor offset lies between the quotes of a literal."""
        span = self._span_before(offset)
        if span is None or span.kind != "string":
            return False
        return offset < span.end or (span.unterminated and offset == span.end)

    # Tokens

    def identifier_bounds(self, offset: int) -> tuple[int, int]:
        """Get the bounds of the identifier run surrounding ``offset``."""
        text = self.text
        start = offset
        while start > 0 and is_identifier_char(text[start - 1]):
            start -= 1
        end = offset
        while end < len(text) and is_identifier_char(text[end]):
            end += 1
        return start, end

    def skip_blank_backward(self, pos: int) -> int:
        """Move ``pos`` back over whitespace and comments."""
        while pos > 0:
            span = self.literal_at(pos - 1)
            if span is not None and span.kind == "comment":
                pos = span.start
            elif self.text[pos - 1].isspace():
                pos -= 1
            else:
                break
        return pos

    # Groups

    def enclosing_open(self, offset: int) -> int | None:
        """Find the opening delimiter of the innermost group around ``offset``."""
        text = self.text
        pos = offset - 1
        while pos >= 0:
            span = self.literal_at(pos)
            if span is not None:
                pos = span.start - 1
                continue
            char = text[pos]
            if char in CLOSE_DELIMITERS:
                pos = self.match_backward(pos) - 1
                continue
            if char in OPEN_DELIMITERS:
                return pos
            pos -= 1
        return None

    def match_backward(self, close_pos: int) -> int:
        """Find the opener matching the closer at ``close_pos``."""
        text = self.text
        expected = [CLOSE_DELIMITERS[text[close_pos]]]
        pos = close_pos - 1
        while pos >= 0:
            span = self.literal_at(pos)
            if span is not None:
                pos = span.start - 1
                continue
            char = text[pos]
            if char in CLOSE_DELIMITERS:
                expected.append(CLOSE_DELIMITERS[char])
            elif char in OPEN_DELIMITERS:
                if char != expected.pop():
                    msg = f"{char!r} at {pos} does not match {text[close_pos]!r} at {close_pos}"
                    raise UnbalancedSyntaxError(msg)
                if not expected:
                    return pos
            pos -= 1
        msg = f"No opener for {text[close_pos]!r} at {close_pos}"
        raise UnbalancedSyntaxError(msg)

    def match_forward(self, open_pos: int) -> int:
        """Find the closer matching the opener at ``open_pos``.

        A group still being typed ends at the first ``;`` or unmatched ``}``
        on its own level, or at the end of the buffer.
        """
        text = self.text
        expected = [OPEN_DELIMITERS[text[open_pos]]]
        pos = open_pos + 1
        while pos < len(text):
            span = self.literal_at(pos)
            if span is not None:
                pos = span.end
                continue
            char = text[pos]
            if char in OPEN_DELIMITERS:
                expected.append(OPEN_DELIMITERS[char])
            elif char in CLOSE_DELIMITERS:
                if char == expected[-1]:
                    expected.pop()
                    if not expected:
                        return pos
                elif len(expected) == 1 and char == "}":
                    return pos
                else:
                    msg = f"{char!r} at {pos} does not close {text[open_pos]!r} at {open_pos}"
                    raise UnbalancedSyntaxError(msg)
            elif char in _STATEMENT_END and len(expected) == 1:
                return pos
            pos += 1
        return len(text)

    def enclosing_group(self, offset: int) -> tuple[int, int] | None:
        """Get ``(open, close)`` of the innermost group containing ``offset``."""
        open_pos = self.enclosing_open(offset)
        if open_pos is None:
            return None
        close_pos = self.match_forward(open_pos)
        if close_pos < offset:
            return None
        return open_pos, close_pos

    # Template argument lists

    def match_angle_backward(self, close_pos: int) -> int | None:
        """Find the ``<`` opening the template argument list closed at ``close_pos``."""
        text = self.text
        depth = 1
        pos = close_pos - 1
        while pos >= 0:
            span = self.literal_at(pos)
            if span is not None:
                pos = span.start - 1
                continue
            char = text[pos]
            if char == ">":
                if pos > 0 and text[pos - 1] == "-":
                    pos -= 2
                    continue
                depth += 1
            elif char == "<":
                depth -= 1
                if depth == 0:
                    return pos
            elif char in CLOSE_DELIMITERS:
                pos = self.match_backward(pos)
            elif char in OPEN_DELIMITERS or char in _STATEMENT_END:
                return None
            pos -= 1
        return None

    def match_angle_forward(self, open_pos: int, limit: int) -> int | None:
        """Find the ``>`` closing the template argument list opened at ``open_pos``."""
        text = self.text
        depth = 1
        pos = open_pos + 1
        while pos < limit:
            span = self.literal_at(pos)
            if span is not None:
                pos = span.end
                continue
            char = text[pos]
            if char == "<":
                depth += 1
            elif char == ">" and text[pos - 1] != "-":
                depth -= 1
                if depth == 0:
                    return pos
            elif char in OPEN_DELIMITERS:
                pos = self.match_forward(pos)
            elif char in CLOSE_DELIMITERS or char in _STATEMENT_END:
                return None
            pos += 1
        return None
