"""
Argument position resolution inside a call's argument list.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from eldoc_lsp.constants import OPEN_DELIMITERS

from .syntax import is_identifier_char

if TYPE_CHECKING:
    from .syntax import BufferSyntax


def _scan_commas(
    syntax: BufferSyntax, offset: int, open_pos: int, close_pos: int, angles: bool
) -> tuple[int, int]:
    """Count top level commas between two delimiters.

    Returns:
        Tuple of (commas before ``offset`` , argument count)
    """
    text = syntax.text
    index = 0
    count = 1
    pos = open_pos + 1
    while pos < close_pos:
        char = text[pos]
        if is_identifier_char(char):
            pos += 1
            continue
        span = syntax.literal_at(pos)
        if span is not None:
            pos = span.end
            continue
        if char in OPEN_DELIMITERS:
            pos = syntax.match_forward(pos) + 1
            continue
        if angles and char == "<":
            inner_close = syntax.match_angle_forward(pos, close_pos)
            if inner_close is not None:
                pos = inner_close + 1
                continue
        if char == ",":
            count += 1
            if pos < offset:
                index += 1
        pos += 1
    return index, count


def resolve_arg_position(
    syntax: BufferSyntax, offset: int, open_pos: int, close_pos: int
) -> tuple[int, int]:
    """Compute the zero-based argument index of ``offset`` and the argument count.

    Nested groups are skipped whole. An explicit template argument list right
    before ``open_pos`` contributes its arguments as a leading block, so in
    ``f<A, B>(x, y)`` the ``x`` is argument 2 of 4.

    Args:
        syntax: Syntactic view of the buffer
        offset: Cursor offset, inside the group
        open_pos: Offset of the opening delimiter
        close_pos: Offset of the closing delimiter (or where the group stops)

    Returns:
        Tuple of (index, count) with ``0 <= index < count``
    """
    text = syntax.text
    angles = text[open_pos] == "<"
    index, count = _scan_commas(syntax, offset, open_pos, close_pos, angles)

    template_close = syntax.skip_blank_backward(open_pos) - 1
    if not angles and template_close >= 0 and text[template_close] == ">":
        template_open = syntax.match_angle_backward(template_close)
        if template_open is not None:
            template_index, template_count = resolve_arg_position(
                syntax, offset, template_open, template_close
            )
            count += template_count
            index += template_count if offset > template_close else template_index

    return index, count
