"""Shared fixtures and helpers for eldoc-lsp tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from eldoc_lsp._analyzer.syntax import BufferSyntax
from eldoc_lsp.eldoc import DocumentEldoc
from eldoc_lsp.models import Candidate
from eldoc_lsp.settings import EldocSettings

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

CURSOR = "$"


def split_cursor(source: str) -> tuple[str, int]:
    """Remove the ``$`` cursor marker and return the text and its offset."""
    offset = source.index(CURSOR)
    return source[:offset] + source[offset + 1 :], offset


def syntax_at(source: str) -> tuple[BufferSyntax, int]:
    """Build a BufferSyntax for a snippet containing a ``$`` cursor marker."""
    text, offset = split_cursor(source)
    return BufferSyntax(text), offset


class FakeBackend:
    """Recording backend answering from a fixed table of candidates.

    With ``hold=True`` replies are queued until ``release`` is called, the way
    an asynchronous completion engine answers on a later turn.
    """

    def __init__(self, candidates: Sequence[Candidate] = (), hold: bool = False):
        self.candidates = list(candidates)
        self.hold = hold
        self.positions: list[int] = []
        self.held: list[Callable[[Sequence[Candidate]], None]] = []

    @property
    def requests(self) -> int:
        return len(self.positions)

    def request_candidates(self, position, on_reply):
        self.positions.append(position)
        if self.hold:
            self.held.append(on_reply)
        else:
            on_reply(self.candidates)

    def release(self) -> None:
        """Deliver every held reply."""
        held, self.held = self.held, []
        for on_reply in held:
            on_reply(self.candidates)


ADD_CANDIDATE = Candidate(
    name="add",
    result_type="int",
    argument_list="(int x, int y)",
    brief="Add two numbers.",
    placeholders=(1, 6, 8, 13),
)

ADD_DOUBLE_CANDIDATE = Candidate(
    name="add",
    result_type="double",
    argument_list="(double x, double y)",
    placeholders=(1, 9, 11, 19),
)


@pytest.fixture
def settings():
    """Default formatting settings."""
    return EldocSettings()


@pytest.fixture
def fake_backend():
    """Synchronous recording backend knowing two overloads of ``add``."""
    return FakeBackend([ADD_CANDIDATE, ADD_DOUBLE_CANDIDATE])


@pytest.fixture
def make_document(settings):
    """Factory building a DocumentEldoc over a snippet with a ``$`` cursor.

    Returns the document and the cursor offset.
    """

    def factory(source: str, backend=None, refresh=None, language=None):
        text, offset = split_cursor(source)
        document = DocumentEldoc(
            text, language=language, settings=settings, backend=backend, refresh=refresh
        )
        return document, offset

    return factory
