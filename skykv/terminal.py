"""Coloured terminal output."""

from __future__ import annotations

import sys
from enum import Enum
from typing import Any, TextIO

_RESET = "\x1b[0m"


class Color(Enum):
    """Foreground colours, valued by their ANSI SGR code."""

    BLACK = 30
    RED = 31
    GREEN = 32
    YELLOW = 33
    BLUE = 34
    MAGENTA = 35
    CYAN = 36
    WHITE = 37


def write_with_col(item: Any, color: Color | None = None, stream: TextIO | None = None) -> None:
    """Write ``item`` in ``color`` (or the default colour) and reset the style afterwards."""
    out = sys.stdout if stream is None else stream
    prefix = _RESET if color is None else f"{_RESET}\x1b[{color.value}m"
    out.write(f"{prefix}{item}{_RESET}")


def write_info(item: Any, stream: TextIO | None = None) -> None:
    """Write ``item`` in cyan."""
    write_with_col(item, Color.CYAN, stream)


def write_warning(item: Any, stream: TextIO | None = None) -> None:
    """Write ``item`` in yellow."""
    write_with_col(item, Color.YELLOW, stream)


def write_error(item: Any, stream: TextIO | None = None) -> None:
    """Write ``item`` in red."""
    write_with_col(item, Color.RED, stream)


def write_success(item: Any, stream: TextIO | None = None) -> None:
    """Write ``item`` in green."""
    write_with_col(item, Color.GREEN, stream)