"""Rendering of candidate declarations into one-line documentation."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from eldoc_lsp.constants import (
    BRIEF_SEPARATOR,
    HIGHLIGHT_SENTINELS,
    MARKDOWN_HIGHLIGHT,
    RESULT_ARROW,
    UNICODE_SUBSTITUTIONS,
)
from eldoc_lsp.models import CallTarget

if TYPE_CHECKING:
    from collections.abc import Iterable

    from eldoc_lsp.models import Candidate, Target

logger = logging.getLogger(__name__)

# Underscores opening an identifier, e.g. "__x" in "std::__x"
LEADING_UNDERSCORES_PATTERN = re.compile(r"(?<!\w)_+(?=[^\W_])")


def beautify(
    text: str | None, strip_underscores: bool = True, use_unicode: bool = False
) -> str | None:
    """Strip leading underscores from identifiers and substitute unicode glyphs."""
    if not text:
        return text
    if strip_underscores:
        text = LEADING_UNDERSCORES_PATTERN.sub("", text)
    if use_unicode:
        for old, new in UNICODE_SUBSTITUTIONS:
            text = text.replace(old, new)
    return text


def swap_highlight(text: str, markers: tuple[str, str]) -> str:
    """Replace the highlight sentinels in rendered ``text`` with ``markers``."""
    for sentinel, marker in zip(HIGHLIGHT_SENTINELS, markers):
        text = text.replace(sentinel, marker)
    return text


def _with_brief(text: str, brief: str) -> str:
    return f"{text}{BRIEF_SEPARATOR}{brief}" if brief else text


def format_symbol(
    candidate: Candidate, strip_underscores: bool = True, use_unicode: bool = False
) -> str | None:
    """Render a candidate describing a bare symbol.

    Returns:
        ``name => type; brief``, ``name args; brief`` for declarations without a
        result type such as macros, or None when there is nothing to show
    """
    if candidate.result_type:
        text = f"{candidate.name} {RESULT_ARROW} {candidate.result_type}"
    elif candidate.argument_list or candidate.brief:
        text = " ".join(part for part in (candidate.name, candidate.argument_list) if part)
    else:
        return None
    return beautify(_with_brief(text, candidate.brief), strip_underscores, use_unicode)


def highlight_argument(
    candidate: Candidate,
    arg_index: int,
    arg_count: int,
    markers: tuple[str, str] = MARKDOWN_HIGHLIGHT,
) -> str:
    """Wrap the active parameter of the argument list in ``markers``.

    Candidates whose placeholder encoding does not describe exactly
    ``arg_count`` parameters are returned unmarked.
    """
    argument_list = candidate.argument_list
    if candidate.encoded_length != 2 * arg_count + 1 or not 0 <= arg_index < arg_count:
        logger.debug(
            f"No highlight for {candidate.name!r}: {candidate.encoded_length} placeholder "
            f"slots for {arg_count} arguments"
        )
        return argument_list

    start, end = candidate.placeholder_spans[arg_index]
    if not 0 <= start <= end <= len(argument_list):
        return argument_list
    opener, closer = markers
    active = argument_list[start:end]
    return f"{argument_list[:start]}{opener}{active}{closer}{argument_list[end:]}"


def format_call(
    arg_index: int,
    arg_count: int,
    candidate: Candidate,
    strip_underscores: bool = True,
    use_unicode: bool = False,
    markers: tuple[str, str] = MARKDOWN_HIGHLIGHT,
) -> str:
    """Render a candidate describing the call enclosing the cursor.

    Returns:
        ``name args => type; brief`` with the active argument marked
    """
    argument_list = highlight_argument(candidate, arg_index, arg_count, markers)
    text = " ".join(part for part in (candidate.name, argument_list) if part)
    if candidate.result_type:
        text = f"{text} {RESULT_ARROW} {candidate.result_type}"
    return beautify(_with_brief(text, candidate.brief), strip_underscores, use_unicode)


def format_candidates(
    target: Target,
    candidates: Iterable[Candidate],
    strip_underscores: bool = True,
    use_unicode: bool = False,
    markers: tuple[str, str] = MARKDOWN_HIGHLIGHT,
) -> list[str]:
    """Render every candidate for a target, dropping empty and duplicate lines."""
    lines: list[str] = []
    for candidate in candidates:
        if isinstance(target, CallTarget):
            line = format_call(
                target.arg_index,
                target.arg_count,
                candidate,
                strip_underscores,
                use_unicode,
                markers,
            )
        else:
            line = format_symbol(candidate, strip_underscores, use_unicode)
        if line and line not in lines:
            lines.append(line)
    return lines
