"""Base class for LSP server with interface for mixins."""

from __future__ import annotations

import logging

from pygls.server import LanguageServer

from eldoc_lsp.backend import TreeSitterBackend
from eldoc_lsp.constants import DEFAULT_LANGUAGE, LANGUAGE_IDS
from eldoc_lsp.eldoc import DocumentEldoc
from eldoc_lsp.settings import EldocSettings

logger = logging.getLogger(__name__)


class LSPServerBase(LanguageServer):
    """Base class defining the interface needed by mixins.

    Owns one DocumentEldoc per open document and remembers the last position
    queried in each, so an asynchronous backend answer can be pushed to the
    client for that position.
    """

    def __init__(self, *args, settings: EldocSettings | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.settings = settings if settings is not None else EldocSettings.from_environment()
        self.document_cache: dict[str, DocumentEldoc] = {}
        self.last_queries: dict[str, tuple[int, bool]] = {}
        self.last_uri: str | None = None

    def _open_document(
        self, uri: str, text: str, language_id: str | None = None
    ) -> DocumentEldoc:
        """Create the documentation engine for a newly opened document."""
        language = LANGUAGE_IDS.get(language_id or "", DEFAULT_LANGUAGE)
        document = DocumentEldoc(
            text,
            language=language,
            settings=self.settings,
            refresh=lambda: self._push_documentation(uri),
        )
        if self.settings.asynchronous:
            document.dispatcher.backend = TreeSitterBackend(document.get_text, loop=self.loop)
        self.document_cache[uri] = document
        logger.info(f"Opened {uri} as {language}")
        return document

    def _close_document(self, uri: str) -> None:
        self.document_cache.pop(uri, None)
        self.last_queries.pop(uri, None)
        if self.last_uri == uri:
            self.last_uri = None

    def _remember_query(self, uri: str, offset: int, force_call: bool) -> None:
        self.last_queries[uri] = (offset, force_call)
        self.last_uri = uri
