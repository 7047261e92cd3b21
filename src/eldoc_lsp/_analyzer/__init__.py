"""
Analyzer package - cursor context analysis for C-family buffers.

Contains the lexical classifier, argument position resolver, balanced
expression navigation and declaration extraction.
"""

from __future__ import annotations

from .arguments import resolve_arg_position
from .classifier import classify
from .declarations import extract_declarations
from .syntax import BufferSyntax, UnbalancedSyntaxError

__all__ = [
    "BufferSyntax",
    "UnbalancedSyntaxError",
    "classify",
    "extract_declarations",
    "resolve_arg_position",
]
