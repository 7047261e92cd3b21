"""Language server for eldoc-lsp."""

from __future__ import annotations

from .hover import DocumentationMixin
from .server import RESET_CACHE_COMMAND, EldocLanguageServer, create_server
from .utils import EldocUtilsMixin

__all__ = [
    "RESET_CACHE_COMMAND",
    "DocumentationMixin",
    "EldocLanguageServer",
    "EldocUtilsMixin",
    "create_server",
]
