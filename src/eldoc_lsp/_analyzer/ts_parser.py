"""Tree-sitter C++ parser singleton with parse tree caching.

The C++ grammar is used for every C-family buffer: it accepts plain C and
recovers from Objective-C syntax well enough to locate comments, literals
and declarations.
"""

from __future__ import annotations

import hashlib
import os
from collections import OrderedDict
from typing import TYPE_CHECKING

from tree_sitter import Language, Parser
from tree_sitter_cpp import language

if TYPE_CHECKING:
    from tree_sitter import Tree

_parser: Parser | None = None

# Parse tree cache: hash(source_code) -> (Tree, source_bytes)
_parse_cache: OrderedDict[str, tuple[Tree, bytes]] = OrderedDict()

_CACHE_ENABLED = os.environ.get("ELDOC_LSP_DISABLE_CACHE") != "1"
_MAX_CACHE_SIZE = int(os.environ.get("ELDOC_LSP_CACHE_SIZE", "32"))


def _get_parser() -> Parser:
    """Get or create the tree-sitter C++ parser singleton."""
    global _parser  # noqa: PLW0603
    if _parser is None:
        _parser = Parser(Language(language()))
    return _parser


def _compute_hash(source_bytes: bytes) -> str:
    """Compute SHA-256 hash of source code for cache key.

    Args:
        source_bytes: Source code as bytes

    Returns:
        Hex digest of SHA-256 hash
    """
    return hashlib.sha256(source_bytes).hexdigest()


def _cache_get(cache_key: str) -> tuple[Tree, bytes] | None:
    """Get cached parse tree if available.

    Args:
        cache_key: Cache key (hash of source code)

    Returns:
        Tuple of (Tree, source_bytes) if cached, None otherwise
    """
    if not _CACHE_ENABLED:
        return None

    if cache_key in _parse_cache:
        _parse_cache.move_to_end(cache_key)
        return _parse_cache[cache_key]

    return None


def _cache_put(cache_key: str, tree: Tree, source_bytes: bytes) -> None:
    """Store parse tree in cache with LRU eviction.

    Args:
        cache_key: Cache key (hash of source code)
        tree: Parsed tree
        source_bytes: Source code as bytes
    """
    if not _CACHE_ENABLED:
        return

    _parse_cache[cache_key] = (tree, source_bytes)

    # LRU eviction
    while len(_parse_cache) > _MAX_CACHE_SIZE:
        _parse_cache.popitem(last=False)


def clear_cache() -> None:
    """Clear the parse tree cache.

    Run when the client asks for cached answers to be dropped.
    """
    _parse_cache.clear()


def get_cache_stats() -> dict[str, int]:
    """Get cache statistics.

    Returns:
        Dictionary with cache size, capacity and whether caching is enabled
    """
    return {
        "size": len(_parse_cache),
        "capacity": _MAX_CACHE_SIZE,
        "enabled": _CACHE_ENABLED,
    }


def parse(source_code: str | bytes) -> Tree:
    """Parse C-family source code using tree-sitter with caching.

    Args:
        source_code: Source code to parse

    Returns:
        Tree-sitter Tree object
    """
    parser = _get_parser()
    source_bytes = source_code.encode("utf-8") if isinstance(source_code, str) else source_code

    cache_key = _compute_hash(source_bytes)
    cached = _cache_get(cache_key)
    if cached is not None:
        cached_tree, cached_bytes = cached
        # Hash collision protection
        if cached_bytes == source_bytes:
            return cached_tree

    tree = parser.parse(source_bytes)
    _cache_put(cache_key, tree, source_bytes)

    return tree


class OffsetMap:
    """Convert tree-sitter byte offsets into string indices."""

    def __init__(self, text: str):
        self._identity = text.isascii()
        self._chars: list[int] = []
        if not self._identity:
            for index, char in enumerate(text):
                self._chars.extend([index] * len(char.encode("utf-8")))
            self._chars.append(len(text))

    def to_char(self, byte_offset: int) -> int:
        if self._identity:
            return byte_offset
        return self._chars[byte_offset]
