"""Backend query dispatch with uniform handling of sync and async replies."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from eldoc_lsp.models import Pending, Ready

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from eldoc_lsp.backend import CompletionBackend
    from eldoc_lsp.cache import ResultCache
    from eldoc_lsp.models import Candidate, Target

logger = logging.getLogger(__name__)


class QueryDispatcher:
    """Requests candidates for a target and records the answer in the cache.

    A reply arriving before ``dispatch`` returns is handed back as ``Ready``.
    A later reply is cached and followed by a call to ``refresh`` so the host
    asks for documentation again.
    """

    def __init__(
        self,
        backend: CompletionBackend,
        cache: ResultCache,
        get_text: Callable[[], str],
        refresh: Callable[[], None] | None = None,
    ):
        self.backend = backend
        self.cache = cache
        self._get_text = get_text
        self._refresh = refresh
        self.requests = 0

    def dispatch(self, target: Target) -> Ready | Pending:
        """Issue one backend request for ``target``."""
        returned = False
        accepted: list[tuple[Candidate, ...]] = []
        pending = Pending(target)

        def on_reply(candidates: Sequence[Candidate]) -> None:
            live = self._get_text()[target.start : target.end]
            if live != target.text:
                logger.debug(f"Discarding stale reply for {target.text!r}: region now {live!r}")
                return

            matching = tuple(c for c in candidates if c.name == target.text)
            self.cache.store(target.start, target.end, target.text, matching)
            if not returned:
                accepted.append(matching)
                return

            pending.resolve(matching)
            if self._refresh is not None:
                self._refresh()

        self.requests += 1
        self.backend.request_candidates(target.end, on_reply)
        returned = True

        if accepted:
            return Ready(accepted[0])
        return pending
