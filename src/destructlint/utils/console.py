"""Terminal output for the destructlint CLI.

Wraps Rich's Console so the status glyphs used in lint reports degrade to
ASCII on terminals that can't print UTF-8 (legacy Windows consoles, some CI
log collectors).
"""
import locale
import sys
from typing import Any
from rich.console import Console


# Glyphs the reports use, with their ASCII stand-ins
ICON_MAP = {
    '✓': '[OK]',
    '✗': 'x',
    '⚠': '[WARN]',
    '⚡': '[!]',
    '→': '->',
    '•': '*',
    '…': '...',
    '─': '-',
    '│': '|',
}


def detect_terminal_encoding() -> str:
    """Detect the terminal's encoding.

    Returns:
        str: Lower-cased encoding name, 'ascii' when nothing can be detected
    """
    if getattr(sys.stdout, 'encoding', None):
        return sys.stdout.encoding.lower()
    try:
        return locale.getpreferredencoding().lower()
    except (LookupError, ValueError):
        return 'ascii'


def is_utf8_capable() -> bool:
    return detect_terminal_encoding().replace('-', '').replace('_', '') == 'utf8'


def sanitize_for_terminal(text: str, utf8: bool | None = None) -> str:
    """Replace report glyphs with ASCII equivalents on non-UTF-8 terminals.

    Args:
        text: Text potentially containing glyphs from ICON_MAP
        utf8: Override terminal detection (used by tests)

    Returns:
        str: Text safe for the current terminal
    """
    if utf8 is None:
        utf8 = is_utf8_capable()
    if utf8:
        return text
    for glyph, ascii_replacement in ICON_MAP.items():
        text = text.replace(glyph, ascii_replacement)
    return text


class SafeConsole(Console):
    """Console that sanitizes string output for non-UTF-8 terminals."""

    def __init__(self, *args, **kwargs):
        self._needs_sanitization = not is_utf8_capable()
        if self._needs_sanitization:
            kwargs['legacy_windows'] = True
        super().__init__(*args, **kwargs)

    def print(self, *objects: Any, **kwargs) -> None:
        if self._needs_sanitization:
            objects = tuple(
                sanitize_for_terminal(obj, utf8=False) if isinstance(obj, str) else obj
                for obj in objects
            )
        super().print(*objects, **kwargs)


def make_console(stderr: bool = False, no_color: bool = False) -> SafeConsole:
    """Build the console used for reports (stdout) or diagnostics (stderr)."""
    return SafeConsole(stderr=stderr, no_color=no_color, highlight=False)
