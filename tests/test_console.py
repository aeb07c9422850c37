"""Tests for terminal-safe output."""
from destructlint.utils.console import ICON_MAP, sanitize_for_terminal


class TestSanitizeForTerminal:

    def test_utf8_terminal_keeps_glyphs(self):
        assert sanitize_for_terminal("✓ No problems found", utf8=True) == "✓ No problems found"

    def test_ascii_terminal_replaces_glyphs(self):
        assert sanitize_for_terminal("✗ 2 problem(s) → fix", utf8=False) == "x 2 problem(s) -> fix"

    def test_every_glyph_has_ascii_fallback(self):
        for glyph in ICON_MAP:
            assert sanitize_for_terminal(glyph, utf8=False).isascii()
