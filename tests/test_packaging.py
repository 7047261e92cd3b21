"""Tests for the package metadata."""

from __future__ import annotations

from pathlib import Path

ROOT = Path(__file__).parent.parent


class TestMetadata:
    """Test the project description shipped with the package."""

    def test_readme_is_long_description(self):
        """Test that the user-facing readme is published, not the design notes."""
        pyproject = (ROOT / "pyproject.toml").read_text()
        assert 'readme = "README.md"' in pyproject
        assert (ROOT / "README.md").read_text().startswith("# eldoc-lsp")
