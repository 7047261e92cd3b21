"""Documentation mixin for hover, signature help and pushed documentation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from lsprotocol.types import (
    Hover,
    MarkupContent,
    MarkupKind,
    SignatureHelp,
    SignatureInformation,
)

from eldoc_lsp.constants import HIGHLIGHT_SENTINELS, MARKDOWN_HIGHLIGHT, NO_HIGHLIGHT
from eldoc_lsp.formatting import swap_highlight

from .utils import EldocUtilsMixin, escape_markdown

if TYPE_CHECKING:
    from lsprotocol.types import Position

logger = logging.getLogger(__name__)

DOCUMENTATION_NOTIFICATION = "eldoc/documentation"


def to_markdown(text: str) -> str:
    """Escape documentation text and render the active argument in bold."""
    return swap_highlight(escape_markdown(text), MARKDOWN_HIGHLIGHT)


class DocumentationMixin(EldocUtilsMixin):
    """Provides documentation for the symbol or call under the cursor."""

    def _get_hover(self, uri: str, position: Position) -> Hover | None:
        """Get hover documentation for a position."""
        document = self.document_cache.get(uri)
        if document is None:
            return None

        offset = self._offset_at(document.text, position)
        if offset is None:
            return None

        self._remember_query(uri, offset, False)
        result = document.describe(offset, markers=HIGHLIGHT_SENTINELS)
        if result is None:
            return None

        return Hover(
            contents=MarkupContent(kind=MarkupKind.Markdown, value=to_markdown(result.text)),
            range=self._region_range(document.text, result.target.start, result.target.end),
        )

    def _get_signature_help(self, uri: str, position: Position) -> SignatureHelp | None:
        """Get the enclosing call's declarations with the active argument."""
        document = self.document_cache.get(uri)
        if document is None:
            return None

        offset = self._offset_at(document.text, position)
        if offset is None:
            return None

        self._remember_query(uri, offset, True)
        result = document.describe(offset, force_call=True, markers=NO_HIGHLIGHT)
        if result is None or result.active_argument is None:
            return None

        return SignatureHelp(
            signatures=[SignatureInformation(label=line) for line in result.lines],
            active_signature=0,
            active_parameter=result.active_argument,
        )

    def _push_documentation(self, uri: str) -> None:
        """Send documentation for the last queried position of a document."""
        document = self.document_cache.get(uri)
        query = self.last_queries.get(uri)
        if document is None or query is None:
            return

        offset, force_call = query
        offset = min(offset, len(document.text))
        result = document.describe(offset, force_call=force_call, markers=HIGHLIGHT_SENTINELS)
        value = to_markdown(result.text) if result is not None else None
        position = self._position_at(document.text, offset)
        logger.debug(f"Pushing documentation for {uri} at {position.line}:{position.character}")
        self.send_notification(
            DOCUMENTATION_NOTIFICATION,
            {
                "uri": uri,
                "position": {"line": position.line, "character": position.character},
                "value": value,
            },
        )
