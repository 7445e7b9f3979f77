"""
hostcheck Console Manager

Provides the shared Rich Console used by the report renderer.

Usage:
    from hostcheck.utils.console import get_console
    console = get_console()
    console.print("[pass]OK[/pass]")
"""

from typing import Optional

from rich.console import Console
from rich.theme import Theme

_console: Optional[Console] = None

HOSTCHECK_THEME = Theme({
    "pass": "green",
    "fail": "red",
    "warn": "yellow",
    "skip": "dim",
    "info": "cyan",
    "fix": "cyan",
    "critical": "bold red",
    "high": "bold yellow",
    "heading": "bold blue",
    "banner": "bold magenta",
    "dim": "dim",
})

# Status symbols; the ASCII set is used for --ascii or dumb terminals
SYMBOLS = {
    "pass": "✓",
    "fail": "✗",
    "warn": "⚠",
    "skip": "ℹ",
    "fix": "🔧",
}

ASCII_SYMBOLS = {
    "pass": "[OK]",
    "fail": "[FAIL]",
    "warn": "[WARN]",
    "skip": "[INFO]",
    "fix": "[FIX]",
}


def get_console(no_color: Optional[bool] = None,
                width: Optional[int] = None,
                file=None,
                force_terminal: Optional[bool] = None) -> Console:
    """
    Get the shared Console instance.

    Passing any argument builds a fresh console with those settings and
    makes it the shared one.
    """
    global _console

    if _console is None or any(arg is not None for arg in (no_color, width, file, force_terminal)):
        _console = Console(
            theme=HOSTCHECK_THEME,
            no_color=no_color,
            width=width,
            file=file,
            force_terminal=force_terminal,
            highlight=False,
        )

    return _console


def symbols_for(console: Console, ascii_only: bool = False) -> dict:
    """Pick the symbol set the terminal can show."""
    if ascii_only or console.is_dumb_terminal or not console.encoding.lower().startswith('utf'):
        return dict(ASCII_SYMBOLS)
    return dict(SYMBOLS)
