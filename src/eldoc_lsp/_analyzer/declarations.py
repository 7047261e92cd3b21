"""
Declaration extraction from C-family sources.

Builds Candidate records (name, result type, argument list with placeholder
offsets, brief doc comment) for functions, variables, fields, typedefs,
macros and tagged types found anywhere in a buffer.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import TYPE_CHECKING

from eldoc_lsp.models import Candidate

from . import ts_parser
from .ts_utils import node_text, short_name, unwrap_declarator, walk_tree

if TYPE_CHECKING:
    from collections.abc import Iterator

    from tree_sitter import Node

_DOC_COMMENT_PATTERN = re.compile(r"^(/\*\*|/\*!|///|//!)(?!/)")
_COMMENT_DECORATION_PATTERN = re.compile(
    r"^[ \t]*(/\*\*|/\*!|///<?|//!<?|\*/|\*)?", re.MULTILINE
)
_PARAGRAPH_BREAK_PATTERN = re.compile(r"\n[ \t]*\n")

_TAG_SPECIFIERS = frozenset(
    {"struct_specifier", "class_specifier", "union_specifier", "enum_specifier"}
)


def brief_from_comment(comment: str) -> str:
    """Reduce a doc comment to its first paragraph on one line."""
    if not _DOC_COMMENT_PATTERN.match(comment):
        return ""
    body = comment[:-2] if comment.endswith("*/") else comment
    body = _COMMENT_DECORATION_PATTERN.sub("", body)
    paragraph = _PARAGRAPH_BREAK_PATTERN.split(body.strip(), maxsplit=1)[0]
    return " ".join(paragraph.split())


def _doc_comment_before(node: Node, source: bytes) -> str:
    anchor = node
    if node.parent is not None and node.parent.type == "template_declaration":
        anchor = node.parent
    previous = anchor.prev_sibling
    if previous is None or previous.type != "comment":
        return ""
    if previous.end_point[0] < anchor.start_point[0] - 1:
        return ""
    return brief_from_comment(node_text(previous, source))


def _joined_children(node: Node, source: bytes) -> str:
    """Source text of a node with comments dropped and whitespace collapsed."""
    parts = [node_text(child, source) for child in node.children if child.type != "comment"]
    if not parts:
        parts = [node_text(node, source)]
    return " ".join(" ".join(parts).split())


def _render_list(items: list[str], opener: str, closer: str) -> tuple[str, list[int]]:
    """Render ``items`` as a delimited list and record each item's offsets."""
    rendered = opener
    offsets: list[int] = []
    for i, item in enumerate(items):
        if i:
            rendered += ", "
        offsets.extend([len(rendered), len(rendered) + len(item)])
        rendered += item
    return rendered + closer, offsets


def _list_items(list_node: Node | None, source: bytes) -> list[str] | None:
    if list_node is None:
        return None
    return [
        _joined_children(child, source)
        for child in list_node.named_children
        if child.type != "comment"
    ]


def _argument_list(
    function_node: Node, template_node: Node | None, source: bytes
) -> tuple[str, tuple[int, ...]]:
    argument_list = ""
    placeholders: list[int] = []

    template_items = _list_items(template_node, source)
    if template_items is not None:
        argument_list, placeholders = _render_list(template_items, "<", ">")

    items = _list_items(function_node.child_by_field_name("parameters"), source) or []
    rendered, offsets = _render_list(items, "(", ")")
    placeholders.extend(offset + len(argument_list) for offset in offsets)
    return argument_list + rendered, tuple(placeholders)


def _result_type(node: Node, source: bytes, suffix: str) -> str:
    type_node = node.child_by_field_name("type")
    if type_node is None:
        return ""
    qualifiers = [
        node_text(child, source)
        for child in node.children
        if child.type == "type_qualifier" and child.start_byte < type_node.start_byte
    ]
    if type_node.type in _TAG_SPECIFIERS:
        # "struct point { ... } origin;" -> "struct point"
        parts = [node_text(type_node.children[0], source)]
        tag_name = type_node.child_by_field_name("name")
        if tag_name is not None:
            parts.append(node_text(tag_name, source))
        type_text = " ".join(parts)
    else:
        type_text = " ".join(node_text(type_node, source).split())
    result = " ".join([*qualifiers, type_text])
    return f"{result} {suffix}" if suffix else result


def _template_parameters(node: Node) -> Node | None:
    parent = node.parent
    if parent is not None and parent.type == "template_declaration":
        return parent.child_by_field_name("parameters")
    return None


def _declared(node: Node, source: bytes, brief: str) -> Iterator[Candidate]:
    """Candidates for declaration-like nodes with ``type`` and ``declarator`` fields."""
    for declarator in node.children_by_field_name("declarator"):
        name_node, function_node, suffix = unwrap_declarator(declarator)
        if name_node is None:
            continue
        name = short_name(name_node, source)
        result_type = _result_type(node, source, suffix)
        if function_node is not None:
            argument_list, placeholders = _argument_list(
                function_node, _template_parameters(node), source
            )
            yield Candidate(name, result_type, argument_list, brief, placeholders)
        else:
            yield Candidate(name, result_type, "", brief)


def _in_function_definition(node: Node) -> bool:
    parent = node.parent
    for _ in range(4):
        if parent is None:
            return False
        if parent.type == "function_definition":
            return True
        if parent.type in ("compound_statement", "declaration", "field_declaration"):
            return False
        parent = parent.parent
    return False


def _parameter(node: Node, source: bytes) -> Iterator[Candidate]:
    if not _in_function_definition(node):
        return
    brief = ""
    for child in node.children:
        if child.type == "comment":
            brief = brief_from_comment(node_text(child, source))
    declarator = node.child_by_field_name("declarator")
    name_node, _, suffix = unwrap_declarator(declarator)
    if name_node is not None:
        result_type = _result_type(node, source, suffix)
        yield Candidate(short_name(name_node, source), result_type, "", brief)


def _macro(node: Node, source: bytes, brief: str) -> Iterator[Candidate]:
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return
    argument_list = ""
    placeholders: tuple[int, ...] = ()
    params = node.child_by_field_name("parameters")
    if params is not None:
        items = [node_text(child, source) for child in params.named_children]
        argument_list, offsets = _render_list(items, "(", ")")
        placeholders = tuple(offsets)
    yield Candidate(node_text(name_node, source), "", argument_list, brief, placeholders)


def _tagged_type(node: Node, source: bytes, brief: str) -> Iterator[Candidate]:
    name_node = node.child_by_field_name("name")
    if name_node is None or node.child_by_field_name("body") is None:
        return
    yield Candidate(short_name(name_node, source), "", "", brief)


def _node_candidates(node: Node, source: bytes) -> Iterator[Candidate]:
    kind = node.type
    if kind in ("declaration", "field_declaration", "function_definition", "type_definition"):
        yield from _declared(node, source, _doc_comment_before(node, source))
    elif kind in ("parameter_declaration", "optional_parameter_declaration"):
        yield from _parameter(node, source)
    elif kind in ("preproc_function_def", "preproc_def"):
        yield from _macro(node, source, _doc_comment_before(node, source))
    elif kind in _TAG_SPECIFIERS:
        brief = _doc_comment_before(node, source)
        if not brief and node.parent is not None:
            brief = _doc_comment_before(node.parent, source)
        yield from _tagged_type(node, source, brief)


@lru_cache(maxsize=16)
def extract_declarations(source: str) -> tuple[Candidate, ...]:
    """Extract every declaration in ``source`` as a Candidate."""
    tree = ts_parser.parse(source)
    source_bytes = source.encode("utf-8")
    candidates: list[Candidate] = []
    for node in walk_tree(tree.root_node):
        candidates.extend(_node_candidates(node, source_bytes))
    return tuple(candidates)
