"""Data models for eldoc-lsp."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence


@dataclass(frozen=True)
class SymbolTarget:
    """A bare identifier under the cursor."""

    text: str
    start: int
    end: int


@dataclass(frozen=True)
class CallTarget:
    """The head of the call enclosing the cursor and the active argument.

    ``arg_index`` and ``arg_count`` count template arguments of an explicit
    ``<...>`` list in front of the parenthesis as leading arguments.
    """

    arg_index: int
    arg_count: int
    text: str
    start: int
    end: int


Target = SymbolTarget | CallTarget


@dataclass(frozen=True)
class Candidate:
    """One declaration proposed by a completion backend.

    ``placeholders`` holds the flat ``(start, end, start, end, ...)`` offsets
    into ``argument_list``, one pair per formal parameter.
    """

    name: str
    result_type: str = ""
    argument_list: str = ""
    brief: str = ""
    placeholders: tuple[int, ...] = ()

    @property
    def placeholder_spans(self) -> list[tuple[int, int]]:
        """Placeholder offsets paired as ``(start, end)``."""
        flat = self.placeholders
        return [(flat[i], flat[i + 1]) for i in range(0, len(flat) - 1, 2)]

    @property
    def encoded_length(self) -> int:
        """Length of the backend encoding: the template plus every offset."""
        return 1 + len(self.placeholders)


@dataclass(frozen=True)
class CacheEntry:
    """Candidates captured for the text of ``[start, end)``."""

    start: int
    end: int
    source_text: str
    candidates: tuple[Candidate, ...] = ()

    def shifted(self, delta: int) -> CacheEntry:
        """Return the entry moved by ``delta`` characters."""
        return CacheEntry(self.start + delta, self.end + delta, self.source_text, self.candidates)


@dataclass(frozen=True)
class Ready:
    """Dispatch outcome when the backend answered before returning."""

    candidates: tuple[Candidate, ...]


@dataclass
class Pending:
    """Dispatch outcome when the backend will answer on a later turn."""

    target: Target
    _callbacks: list[Callable[[Sequence[Candidate]], None]] = field(default_factory=list)
    _result: tuple[Candidate, ...] | None = None

    @property
    def done(self) -> bool:
        return self._result is not None

    def subscribe(self, callback: Callable[[Sequence[Candidate]], None]) -> None:
        """Call ``callback`` with the accepted candidates once they arrive."""
        if self._result is not None:
            callback(self._result)
        else:
            self._callbacks.append(callback)

    def resolve(self, candidates: Sequence[Candidate]) -> None:
        self._result = tuple(candidates)
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback(self._result)


@dataclass(frozen=True)
class Documentation:
    """Rendered documentation for one target."""

    target: Target
    lines: tuple[str, ...]
    separator: str = " | "

    @property
    def text(self) -> str:
        return self.separator.join(self.lines)

    @property
    def active_argument(self) -> int | None:
        if isinstance(self.target, CallTarget):
            return self.target.arg_index
        return None
