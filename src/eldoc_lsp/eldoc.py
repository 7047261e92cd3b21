"""Per-document documentation engine.

Every tick classifies the cursor, presents cached candidates when the cache
holds a trusted entry for the target, and otherwise asks the backend. A
synchronous answer is presented in the same tick; an asynchronous one is
cached and announced through the refresh callback.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from eldoc_lsp._analyzer.classifier import classify
from eldoc_lsp._analyzer.syntax import BufferSyntax
from eldoc_lsp.backend import TreeSitterBackend
from eldoc_lsp.cache import ResultCache
from eldoc_lsp.constants import CANDIDATE_SEPARATOR, DEFAULT_LANGUAGE, MARKDOWN_HIGHLIGHT
from eldoc_lsp.dispatcher import QueryDispatcher
from eldoc_lsp.formatting import format_candidates
from eldoc_lsp.models import Documentation, Pending, Ready, SymbolTarget
from eldoc_lsp.settings import EldocSettings

if TYPE_CHECKING:
    from collections.abc import Callable

    from eldoc_lsp.backend import CompletionBackend
    from eldoc_lsp.models import Candidate, Target

logger = logging.getLogger(__name__)


class DocumentEldoc:
    """Documentation state for one open document."""

    def __init__(
        self,
        text: str = "",
        language: str | None = None,
        settings: EldocSettings | None = None,
        backend: CompletionBackend | None = None,
        refresh: Callable[[], None] | None = None,
    ):
        self._text = text
        self._syntax: BufferSyntax | None = None
        self.language = language or DEFAULT_LANGUAGE
        self.settings = settings if settings is not None else EldocSettings()
        self.refresh = refresh
        self.cache = ResultCache()
        self._pending: dict[tuple[int, int, str], Pending] = {}
        if backend is None:
            backend = TreeSitterBackend(self.get_text)
        self.dispatcher = QueryDispatcher(
            backend, self.cache, self.get_text, self._request_refresh
        )

    @property
    def text(self) -> str:
        return self._text

    def get_text(self) -> str:
        return self._text

    @property
    def syntax(self) -> BufferSyntax:
        if self._syntax is None:
            self._syntax = BufferSyntax(self._text)
        return self._syntax

    # Buffer changes

    def apply_edit(self, start: int, end: int, new_text: str) -> None:
        """Replace ``[start, end)`` with ``new_text``."""
        self.cache.apply_edit(start, end, len(new_text))
        self._pending.clear()
        self._text = self._text[:start] + new_text + self._text[end:]
        self._syntax = None

    def replace_text(self, text: str) -> None:
        """Replace the whole buffer."""
        if text == self._text:
            return
        self._pending.clear()
        self.cache.reset_all()
        self._text = text
        self._syntax = None

    def reset(self) -> int:
        """Forget every cached answer for this document."""
        self._pending.clear()
        return self.cache.reset_all()

    def _request_refresh(self) -> None:
        if self.refresh is not None:
            self.refresh()

    # Documentation

    def target_at(self, offset: int, force_call: bool = False) -> Target | None:
        offset = max(0, min(offset, len(self._text)))
        return classify(self.syntax, offset, force_call, self.language)

    def _candidates(self, target: Target) -> tuple[Candidate, ...] | None:
        entry = self.cache.lookup(target.start, target.end)
        if entry is not None:
            if entry.source_text == self._text[target.start : target.end]:
                return entry.candidates
            logger.debug(f"Dropping cache entry for {entry.source_text!r}: text changed")
            self.cache.invalidate(entry.start, entry.end, inserts=False)

        key = (target.start, target.end, target.text)
        if key in self._pending:
            logger.debug(f"Request for {target.text!r} still waiting for its reply")
            return None

        outcome = self.dispatcher.dispatch(target)
        if isinstance(outcome, Ready):
            return outcome.candidates
        self._pending[key] = outcome

        def forget(_candidates) -> None:
            if self._pending.get(key) is outcome:
                del self._pending[key]

        outcome.subscribe(forget)
        return None

    def describe(
        self,
        offset: int,
        force_call: bool = False,
        markers: tuple[str, str] = MARKDOWN_HIGHLIGHT,
    ) -> Documentation | None:
        """Get documentation for the cursor at ``offset``.

        Returns:
            Documentation, or None when there is nothing to show or the backend
            has not answered yet
        """
        target = self.target_at(offset, force_call)
        if target is None:
            return None

        candidates = self._candidates(target)
        if candidates is None:
            return None

        lines = format_candidates(
            target,
            candidates,
            strip_underscores=self.settings.strip_underscores,
            use_unicode=self.settings.use_unicode,
            markers=markers,
        )
        if not lines:
            if isinstance(target, SymbolTarget):
                # Nothing known about the symbol, describe the enclosing call instead
                return self.describe(offset, force_call=True, markers=markers)
            return None
        return Documentation(target, tuple(lines), CANDIDATE_SEPARATOR)

    def documentation(self, offset: int, force_call: bool = False) -> str | None:
        """Get the documentation string for the cursor at ``offset``."""
        result = self.describe(offset, force_call)
        return result.text if result is not None else None
