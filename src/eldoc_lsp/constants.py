"""Constants for eldoc-lsp."""

from __future__ import annotations

import re

# Identifiers that never have a declaration worth showing, per source language.
COMMON_IGNORED_SYMBOLS = frozenset(
    {
        # primitive types
        "void", "char", "short", "int", "long", "float", "double",
        "signed", "unsigned", "_Bool", "_Complex",
        # storage classes and qualifiers
        "auto", "register", "static", "extern", "const", "volatile",
        "inline", "restrict", "typedef",
        # control flow
        "if", "else", "for", "while", "do", "switch", "case", "default",
        "break", "continue", "goto", "return", "sizeof",
        # aggregates
        "struct", "union", "enum",
        # literals
        "NULL",
    }
)  # fmt: skip

LANGUAGE_IGNORED_SYMBOLS: dict[str, frozenset[str]] = {
    "c": frozenset({"true", "false", "bool"}),
    "c++": frozenset(
        {
            "bool", "wchar_t", "char8_t", "char16_t", "char32_t",
            "true", "false", "nullptr",
            "class", "namespace", "template", "typename", "using",
            "public", "private", "protected", "virtual", "friend",
            "explicit", "mutable", "constexpr", "consteval", "constinit",
            "noexcept", "decltype", "this", "operator", "new", "delete",
            "try", "catch", "throw",
        }
    ),
    "objective-c": frozenset(
        {
            "BOOL", "YES", "NO", "nil", "Nil", "id", "self", "super",
            "true", "false", "bool",
        }
    ),
}  # fmt: skip
LANGUAGE_IGNORED_SYMBOLS["objective-c++"] = (
    LANGUAGE_IGNORED_SYMBOLS["c++"] | LANGUAGE_IGNORED_SYMBOLS["objective-c"]
)

DEFAULT_LANGUAGE = "c++"

# LSP languageId -> key of LANGUAGE_IGNORED_SYMBOLS
LANGUAGE_IDS = {
    "c": "c",
    "cpp": "c++",
    "cuda-cpp": "c++",
    "objective-c": "objective-c",
    "objective-cpp": "objective-c++",
}

NUMERIC_LITERAL_PATTERN = re.compile(
    r"(?:0[xX][0-9a-fA-F]+|[0-9]+(?:[eE][-+]?[0-9]+)?)[uUlLfF]*"
)

OPEN_DELIMITERS = {"(": ")", "[": "]", "{": "}"}
CLOSE_DELIMITERS = {close: open_ for open_, close in OPEN_DELIMITERS.items()}

# Separators in rendered documentation
RESULT_ARROW = "=>"
BRIEF_SEPARATOR = "; "
CANDIDATE_SEPARATOR = " | "

UNICODE_SUBSTITUTIONS = (("::", "∷"), ("=>", "⇒"))

# Markers around the active argument
MARKDOWN_HIGHLIGHT = ("**", "**")
NO_HIGHLIGHT = ("", "")
# Control characters standing in for the markers until the text is final
HIGHLIGHT_SENTINELS = ("\x02", "\x03")


def ignored_symbols(language: str | None = None) -> frozenset[str]:
    """Get the identifiers that are never looked up for a source language."""
    language = language or DEFAULT_LANGUAGE
    return COMMON_IGNORED_SYMBOLS | LANGUAGE_IGNORED_SYMBOLS.get(
        language, LANGUAGE_IGNORED_SYMBOLS[DEFAULT_LANGUAGE]
    )


def is_ignored_symbol(token: str, language: str | None = None) -> bool:
    """Check if a token is a keyword, literal keyword or bare number."""
    return token in ignored_symbols(language) or bool(NUMERIC_LITERAL_PATTERN.fullmatch(token))
