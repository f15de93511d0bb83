"""Coloured terminal output for the floplab command line.

Prints ANSI-coloured, module-prefixed lines.  Falls back to plain text
when stdout is not a terminal, or when ``NO_COLOR`` / ``FLOPLAB_NO_COLOR=1``
is set.  Library modules use :mod:`logging` instead; this is only for
user-facing console output.
"""

from __future__ import annotations

import os
import sys
from typing import TextIO


# ---------------------------------------------------------------------------
# ANSI colour codes
# ---------------------------------------------------------------------------

_RESET = "\033[0m"
_BOLD = "\033[1m"
_DIM = "\033[2m"

_FG_RED = "\033[31m"
_FG_GREEN = "\033[32m"
_FG_YELLOW = "\033[33m"
_FG_BLUE = "\033[34m"
_FG_MAGENTA = "\033[35m"
_FG_CYAN = "\033[36m"
_FG_WHITE = "\033[37m"
_FG_BRIGHT_GREEN = "\033[92m"


def _supports_color(stream: TextIO) -> bool:
    """Heuristic check for ANSI colour support."""
    if os.getenv("FLOPLAB_NO_COLOR", "").strip().lower() in {"1", "true", "yes"}:
        return False
    if os.getenv("NO_COLOR"):
        return False
    return hasattr(stream, "isatty") and stream.isatty()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

class FlopLogger:
    """Simple coloured printer with a module prefix."""

    _MODULE_COLORS: dict[str, str] = {
        "Equity": _FG_YELLOW,
        "Hand": _FG_MAGENTA,
        "Deck": _FG_BLUE,
        "Config": _FG_CYAN,
    }

    def __init__(self, module: str, stream: TextIO | None = None) -> None:
        self.module = module
        self._stream = stream
        self._prefix_color = self._MODULE_COLORS.get(module, _FG_WHITE)

    @property
    def stream(self) -> TextIO:
        # Resolved per call so pytest's capsys swap is honoured.
        return self._stream or sys.stdout

    def _emit(self, text: str) -> None:
        print(text, file=self.stream)

    def _format(self, level_color: str, level: str, message: str) -> str:
        if _supports_color(self.stream):
            return (
                f"{self._prefix_color}{_BOLD}[{self.module}]{_RESET} "
                f"{level_color}{level}{_RESET} {message}"
            )
        return f"[{self.module}] {level} {message}"

    def info(self, message: str) -> None:
        self._emit(self._format(_FG_GREEN, ">", message))

    def success(self, message: str) -> None:
        self._emit(self._format(_FG_BRIGHT_GREEN, "+", message))

    def warn(self, message: str) -> None:
        self._emit(self._format(_FG_YELLOW, "!", message))

    def error(self, message: str) -> None:
        self._emit(self._format(_FG_RED, "X", message))

    def status(self, message: str) -> None:
        """Dimmed status line for secondary details."""
        if _supports_color(self.stream):
            self._emit(f"{self._prefix_color}{_BOLD}[{self.module}]{_RESET} {_DIM}{message}{_RESET}")
        else:
            self._emit(f"[{self.module}] {message}")
