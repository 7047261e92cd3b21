"""
Utilities for working with tree-sitter C++ nodes.
Provides helper functions for common node operations.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

    from tree_sitter import Node

COMMENT_TYPES = frozenset({"comment"})
STRING_TYPES = frozenset(
    {"string_literal", "char_literal", "raw_string_literal", "system_lib_string"}
)

# Declarators wrapping a single inner declarator
_WRAPPER_DECLARATORS = frozenset(
    {
        "init_declarator",
        "pointer_declarator",
        "array_declarator",
        "attributed_declarator",
        "parenthesized_declarator",
    }
)
NAME_TYPES = frozenset(
    {
        "identifier",
        "field_identifier",
        "type_identifier",
        "qualified_identifier",
        "destructor_name",
        "operator_name",
    }
)


def walk_tree(node: Node) -> Generator[Node, None, None]:
    """Walk a tree-sitter tree depth first, yielding all nodes."""
    yield node
    for child in node.children:
        yield from walk_tree(child)


def node_text(node: Node, source: bytes) -> str:
    """Get the source text covered by a node."""
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def iter_literals(node: Node) -> Generator[Node, None, None]:
    """Yield comment and string literal nodes without descending into them."""
    if node.type in COMMENT_TYPES or node.type in STRING_TYPES:
        yield node
        return
    for child in node.children:
        yield from iter_literals(child)


def unwrap_declarator(node: Node | None) -> tuple[Node | None, Node | None, str]:
    """Find the name and function declarator inside a declarator chain.

    Returns:
        Tuple of (name node, function_declarator node or None, type suffix such
        as ``*`` or ``&`` collected from pointer and reference declarators)
    """
    function_node = None
    suffix = ""
    while node is not None:
        if node.type in NAME_TYPES:
            return node, function_node, suffix
        if node.type == "function_declarator":
            if function_node is None:
                function_node = node
            node = node.child_by_field_name("declarator")
        elif node.type == "pointer_declarator":
            if function_node is None:
                suffix += "*"
            node = node.child_by_field_name("declarator")
        elif node.type == "reference_declarator":
            if function_node is None:
                suffix += "&&" if any(c.type == "&&" for c in node.children) else "&"
            named = node.named_children
            node = named[-1] if named else None
        elif node.type in _WRAPPER_DECLARATORS:
            inner = node.child_by_field_name("declarator")
            if inner is None:
                named = node.named_children
                inner = named[-1] if named else None
            node = inner
        else:
            break
    return None, function_node, suffix


def short_name(node: Node, source: bytes) -> str:
    """Get the unqualified name of a (possibly qualified) identifier node."""
    while node.type == "qualified_identifier":
        inner = node.child_by_field_name("name")
        if inner is None:
            break
        node = inner
    return node_text(node, source)
