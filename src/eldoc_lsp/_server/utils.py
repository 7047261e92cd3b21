"""Utility mixin for shared functionality across LSP features."""

from __future__ import annotations

import re

from lsprotocol.types import Position, Range

from .base import LSPServerBase

# Markdown metacharacters escaped in hover text
MARKDOWN_SPECIAL_PATTERN = re.compile(r"([\\`*_{}\[\]<>()#+!|~])")


def _utf16_length(text: str) -> int:
    return len(text.encode("utf-16-le")) // 2


def _utf16_to_index(line: str, units: int) -> int:
    """Convert a count of UTF-16 code units into a string index within ``line``.

    A count ending inside a surrogate pair rounds down to the character start.
    """
    if line.isascii():
        return min(units, len(line))
    encoded = line.encode("utf-16-le")[: units * 2]
    return len(encoded.decode("utf-16-le", errors="ignore"))


def position_to_offset(text: str, line: int, character: int, utf16: bool = True) -> int | None:
    """Convert a zero-based line/character position into a string offset.

    LSP counts ``character`` in UTF-16 code units; pass ``utf16=False`` for a
    count of characters. Characters past the end of the line clamp to the
    line end.

    Returns:
        The offset, or None when ``line`` is past the end of the text
    """
    lines = text.split("\n")
    if line < 0 or line >= len(lines):
        return None
    offset = sum(len(previous) + 1 for previous in lines[:line])
    content = lines[line].rstrip("\r")
    character = max(0, character)
    if utf16:
        return offset + _utf16_to_index(content, character)
    return offset + min(character, len(content))


def offset_to_position(text: str, offset: int, utf16: bool = True) -> tuple[int, int]:
    """Convert a string offset into a zero-based ``(line, character)`` pair."""
    prefix = text[:offset]
    line = prefix.count("\n")
    line_prefix = prefix[prefix.rfind("\n") + 1 :]
    character = _utf16_length(line_prefix) if utf16 else len(line_prefix)
    return line, character


def escape_markdown(text: str) -> str:
    return MARKDOWN_SPECIAL_PATTERN.sub(r"\\\1", text)


class EldocUtilsMixin(LSPServerBase):
    """Provides position conversion shared by LSP features."""

    def _offset_at(self, text: str, position: Position) -> int | None:
        return position_to_offset(text, position.line, position.character)

    def _position_at(self, text: str, offset: int) -> Position:
        line, character = offset_to_position(text, offset)
        return Position(line=line, character=character)

    def _region_range(self, text: str, start: int, end: int) -> Range:
        """Build an LSP range for ``[start, end)``."""
        return Range(start=self._position_at(text, start), end=self._position_at(text, end))
