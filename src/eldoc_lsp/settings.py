"""User-facing configuration for eldoc-lsp."""

from __future__ import annotations

import logging
import os
from typing import Any

import param

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes")

# parameter name -> environment variable
ENVIRONMENT_VARIABLES = {
    "strip_underscores": "ELDOC_LSP_STRIP_UNDERSCORES",
    "use_unicode": "ELDOC_LSP_USE_UNICODE",
    "asynchronous": "ELDOC_LSP_ASYNC",
}


def _snake_case(key: str) -> str:
    return "".join(f"_{c.lower()}" if c.isupper() else c for c in key)


class EldocSettings(param.Parameterized):
    """Formatting toggles and backend behaviour."""

    strip_underscores = param.Boolean(
        default=True, doc="Strip leading underscores from identifiers in documentation."
    )

    use_unicode = param.Boolean(
        default=False, doc="Render '::' as '∷' and '=>' as '⇒' in documentation."
    )

    asynchronous = param.Boolean(
        default=False,
        doc="Deliver completion backend replies on a later event loop turn.",
    )

    @classmethod
    def from_environment(cls, environ: dict[str, str] | None = None) -> EldocSettings:
        """Create settings from ELDOC_LSP_* environment variables."""
        environ = os.environ if environ is None else environ
        values = {
            name: environ[variable].lower() in _TRUE_VALUES
            for name, variable in ENVIRONMENT_VARIABLES.items()
            if variable in environ
        }
        return cls(**values)

    @classmethod
    def from_options(
        cls, options: dict[str, Any] | None, environ: dict[str, str] | None = None
    ) -> EldocSettings:
        """Create settings from LSP initialization options over the environment."""
        settings = cls.from_environment(environ)
        settings.update_from_options(options)
        return settings

    def update_from_options(self, options: dict[str, Any] | None) -> None:
        """Apply camelCase or snake_case options, ignoring unknown keys."""
        for key, value in (options or {}).items():
            name = _snake_case(key)
            if name == "name" or name not in self.param.values():
                logger.warning(f"Ignoring unknown option {key!r}")
                continue
            try:
                setattr(self, name, value)
            except ValueError as e:
                logger.warning(f"Ignoring invalid value for {key!r}: {e}")
