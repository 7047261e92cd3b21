"""Completion backends supplying candidate declarations for a buffer position."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from eldoc_lsp._analyzer.declarations import extract_declarations
from eldoc_lsp._analyzer.syntax import is_identifier_char

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Callable, Sequence

    from eldoc_lsp.models import Candidate

    ReplyHandler = Callable[[Sequence[Candidate]], None]

logger = logging.getLogger(__name__)


class CompletionBackend(Protocol):
    """Interface of a symbol completion engine.

    ``on_reply`` is called once, either before ``request_candidates`` returns
    or on a later event loop turn.
    """

    def request_candidates(self, position: int, on_reply: ReplyHandler) -> None: ...


class TreeSitterBackend:
    """Completion backend answering from the declarations in the live buffer.

    Without a loop the reply is delivered synchronously. With a loop it is
    scheduled with ``loop.call_soon`` and computed from the buffer text at
    that later time.
    """

    def __init__(self, get_text: Callable[[], str], loop: asyncio.AbstractEventLoop | None = None):
        self._get_text = get_text
        self._loop = loop

    @property
    def asynchronous(self) -> bool:
        return self._loop is not None

    def complete(self, text: str, position: int) -> list[Candidate]:
        """Get the declarations whose name completes the identifier ending at ``position``."""
        start = position
        while start > 0 and is_identifier_char(text[start - 1]):
            start -= 1
        prefix = text[start:position]
        return [c for c in extract_declarations(text) if c.name.startswith(prefix)]

    def request_candidates(self, position: int, on_reply: ReplyHandler) -> None:
        if self._loop is None:
            self._reply(position, on_reply)
        else:
            self._loop.call_soon(self._reply, position, on_reply)

    def _reply(self, position: int, on_reply: ReplyHandler) -> None:
        text = self._get_text()
        position = min(position, len(text))
        candidates = self.complete(text, position)
        logger.debug(f"Backend found {len(candidates)} candidates at {position}")
        on_reply(candidates)
