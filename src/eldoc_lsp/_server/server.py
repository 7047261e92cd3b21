from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from lsprotocol.types import (
    INITIALIZE,
    TEXT_DOCUMENT_DID_CHANGE,
    TEXT_DOCUMENT_DID_CLOSE,
    TEXT_DOCUMENT_DID_OPEN,
    TEXT_DOCUMENT_HOVER,
    TEXT_DOCUMENT_SIGNATURE_HELP,
    WORKSPACE_DID_CHANGE_CONFIGURATION,
    DidChangeConfigurationParams,
    DidChangeTextDocumentParams,
    DidCloseTextDocumentParams,
    DidOpenTextDocumentParams,
    Hover,
    HoverParams,
    InitializeParams,
    SignatureHelp,
    SignatureHelpOptions,
    SignatureHelpParams,
)

from eldoc_lsp import __version__
from eldoc_lsp._analyzer import ts_parser
from eldoc_lsp.settings import EldocSettings

from .hover import DocumentationMixin

if TYPE_CHECKING:
    from collections.abc import Sequence

    from lsprotocol.types import TextDocumentContentChangeEvent

logger = logging.getLogger(__name__)

RESET_CACHE_COMMAND = "eldoc.resetCache"


class EldocLanguageServer(DocumentationMixin):
    """Language server showing declaration docs for the symbol or call at the cursor."""

    def _apply_content_changes(
        self, uri: str, changes: Sequence[TextDocumentContentChangeEvent]
    ) -> None:
        """Apply LSP content changes in order, invalidating touched cache entries."""
        document = self.document_cache.get(uri)
        if document is None:
            return

        for change in changes:
            change_range = getattr(change, "range", None)
            if change_range is None:
                # Full document change
                document.replace_text(change.text)
                continue

            text = document.text
            start = self._offset_at(text, change_range.start)
            end = self._offset_at(text, change_range.end)
            if start is None:
                start = len(text)
            if end is None:
                end = len(text)
            document.apply_edit(start, max(start, end), change.text)

    def _reset_cache(self, uri: str | None = None) -> int:
        """Clear cached answers of a document, by default the last queried one."""
        uri = uri or self.last_uri
        document = self.document_cache.get(uri) if uri else None
        if document is None:
            return 0
        removed = document.reset()
        trees = ts_parser.get_cache_stats()["size"]
        ts_parser.clear_cache()
        logger.info(
            f"Reset documentation cache for {uri} ({removed} entries, {trees} parse trees)"
        )
        return removed


def create_server(settings: EldocSettings | None = None) -> EldocLanguageServer:
    """Create the language server and register its features."""
    server = EldocLanguageServer("eldoc-lsp", __version__, settings=settings)

    @server.feature(INITIALIZE)
    def initialize(ls: EldocLanguageServer, params: InitializeParams) -> None:
        """Read settings from the client's initialization options."""
        options = params.initialization_options
        if isinstance(options, dict):
            ls.settings.update_from_options(options)
        logger.info(f"Initialized eldoc-lsp {__version__}")

    @server.feature(WORKSPACE_DID_CHANGE_CONFIGURATION)
    def did_change_configuration(
        ls: EldocLanguageServer, params: DidChangeConfigurationParams
    ) -> None:
        """Update settings from the "eldoc" configuration section."""
        settings = params.settings
        if isinstance(settings, dict):
            ls.settings.update_from_options(settings.get("eldoc", {}))

    @server.feature(TEXT_DOCUMENT_DID_OPEN)
    def did_open(ls: EldocLanguageServer, params: DidOpenTextDocumentParams) -> None:
        """Handle document open event."""
        document = params.text_document
        ls._open_document(document.uri, document.text, document.language_id)

    @server.feature(TEXT_DOCUMENT_DID_CHANGE)
    def did_change(ls: EldocLanguageServer, params: DidChangeTextDocumentParams) -> None:
        """Handle document change event."""
        ls._apply_content_changes(params.text_document.uri, params.content_changes)

    @server.feature(TEXT_DOCUMENT_DID_CLOSE)
    def did_close(ls: EldocLanguageServer, params: DidCloseTextDocumentParams) -> None:
        """Handle document close event."""
        ls._close_document(params.text_document.uri)

    @server.feature(TEXT_DOCUMENT_HOVER)
    def hover(ls: EldocLanguageServer, params: HoverParams) -> Hover | None:
        """Provide documentation for the symbol or call at the cursor."""
        return ls._get_hover(params.text_document.uri, params.position)

    @server.feature(
        TEXT_DOCUMENT_SIGNATURE_HELP,
        SignatureHelpOptions(trigger_characters=["(", ","], retrigger_characters=[","]),
    )
    def signature_help(
        ls: EldocLanguageServer, params: SignatureHelpParams
    ) -> SignatureHelp | None:
        """Provide the declarations of the enclosing call."""
        return ls._get_signature_help(params.text_document.uri, params.position)

    @server.command(RESET_CACHE_COMMAND)
    def reset_cache(ls: EldocLanguageServer, args: list[Any] | None) -> int:
        """Clear cached documentation of a document."""
        uri = args[0] if args else None
        return ls._reset_cache(uri if isinstance(uri, str) else None)

    return server
