"""
Cursor context classification.

Decides whether the cursor rests on a bare symbol or inside the argument list
of a call, and extracts the text to look up.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from eldoc_lsp.constants import is_ignored_symbol
from eldoc_lsp.models import CallTarget, SymbolTarget

from .arguments import resolve_arg_position
from .syntax import UnbalancedSyntaxError, is_identifier_char

if TYPE_CHECKING:
    from eldoc_lsp.models import Target

    from .syntax import BufferSyntax

logger = logging.getLogger(__name__)


def classify(
    syntax: BufferSyntax,
    offset: int,
    force_call: bool = False,
    language: str | None = None,
) -> Target | None:
    """Classify the cursor position.

    Args:
        syntax: Syntactic view of the buffer
        offset: Cursor offset
        force_call: Skip the symbol check and look for an enclosing call
        language: Source language selecting the ignored keywords

    Returns:
        A SymbolTarget, a CallTarget, or None when there is nothing to describe
    """
    if syntax.in_comment(offset):
        return None

    if not force_call and not syntax.in_string(offset):
        text = syntax.text
        if offset < len(text) and is_identifier_char(text[offset]):
            return _symbol_target(syntax, offset, language)

    try:
        return _call_target(syntax, offset, language)
    except UnbalancedSyntaxError as e:
        logger.debug(f"No call context at {offset}: {e}")
        return None


def _symbol_target(syntax: BufferSyntax, offset: int, language: str | None) -> Target | None:
    start, end = syntax.identifier_bounds(offset)
    token = syntax.text[start:end]
    if is_ignored_symbol(token, language):
        return None
    return SymbolTarget(text=token, start=start, end=end)


def _call_target(syntax: BufferSyntax, offset: int, language: str | None) -> Target | None:
    group = syntax.enclosing_group(offset)
    if group is None:
        return None
    open_pos, close_pos = group
    text = syntax.text
    if text[open_pos] != "(":
        return None

    head_end = syntax.skip_blank_backward(open_pos)
    if head_end > 0 and text[head_end - 1] == ">":
        template_open = syntax.match_angle_backward(head_end - 1)
        if template_open is None:
            return None
        head_end = syntax.skip_blank_backward(template_open)

    head_start, _ = syntax.identifier_bounds(head_end)
    head = text[head_start:head_end]
    if not head or head[0].isdigit() or is_ignored_symbol(head, language):
        return None

    arg_index, arg_count = resolve_arg_position(syntax, offset, open_pos, close_pos)
    return CallTarget(
        arg_index=arg_index,
        arg_count=arg_count,
        text=head,
        start=head_start,
        end=head_end,
    )
