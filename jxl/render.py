"""
Version table rendering.

Columns are aligned by terminal display width, ignoring ANSI colors and
OSC 8 hyperlinks so colored cells line up.
"""

from __future__ import annotations

import os
import re
import sys
from typing import TextIO

from wcwidth import wcswidth


USE_COLOR = os.environ.get("JXL_COLOR", "1") == "1"

# ANSI color codes
GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
RESET = "\033[0m"

CSI_RE = re.compile(r'\x1b\[[0-?]*[ -/]*[@-~]')
OSC8_OPEN_RE = re.compile(r'\x1b\]8;[^\\]*\\')
OSC8_CLOSE_RE = re.compile(r'\x1b\]8;;\\')


def colorize(text: str, color: str) -> str:
    """Apply color to text.

    Args:
        text: Text to colorize
        color: ANSI color code

    Returns:
        Colored text or plain text if colors disabled
    """
    if not USE_COLOR or not text:
        return text
    return f"{color}{text}{RESET}"


def color_info(text: str) -> str:
    """Highlight a name or version in messages and table cells."""
    return colorize(text, GREEN)


def strip_control_for_width(s: str) -> str:
    s = OSC8_OPEN_RE.sub('', s)
    s = OSC8_CLOSE_RE.sub('', s)
    return CSI_RE.sub('', s)


def display_width(s: str) -> int:
    """Terminal columns needed to show s."""
    visible = strip_control_for_width(s)
    width = wcswidth(visible)
    if width < 0:
        # Non-printable characters left in the cell
        width = len(visible)
    return width


class VersionTable:
    """
    Two-column NAME/VERSION table.

    Rows are addressed by their first cell so the collector's ordering can
    change without breaking later updates.
    """

    def __init__(self, headers: tuple[str, ...] = ("NAME", "VERSION"), pad: int = 2):
        self.headers = headers
        self.pad = pad
        self.rows: list[list[str]] = []

    def add_row(self, *cells: str) -> None:
        self.rows.append(list(cells))

    def index_of(self, name: str) -> int:
        """Index of the row keyed by name, or -1."""
        for i, row in enumerate(self.rows):
            if row and row[0] == name:
                return i
        return -1

    def get_row(self, name: str) -> list[str] | None:
        idx = self.index_of(name)
        return self.rows[idx] if idx >= 0 else None

    def replace_row(self, old_name: str, *cells: str) -> None:
        """Replace the row keyed old_name in place, appending if absent."""
        idx = self.index_of(old_name)
        if idx >= 0:
            self.rows[idx] = list(cells)
        else:
            self.add_row(*cells)

    def names(self) -> list[str]:
        return [row[0] for row in self.rows if row]

    def format_lines(self) -> list[str]:
        """Format header and rows as aligned lines."""
        all_rows = [list(self.headers)] + self.rows
        ncol = max(len(r) for r in all_rows)
        widths = [0] * ncol
        for row in all_rows:
            for i, cell in enumerate(row):
                widths[i] = max(widths[i], display_width(cell))

        lines = []
        for row in all_rows:
            cells = []
            for i in range(ncol):
                cell = row[i] if i < len(row) else ""
                if i == ncol - 1:
                    cells.append(cell)
                else:
                    cells.append(cell + " " * (widths[i] - display_width(cell)))
            lines.append((" " * self.pad).join(cells).rstrip())
        return lines

    def render(self, out: TextIO | None = None) -> None:
        """Write the table to out (stdout by default)."""
        out = out or sys.stdout
        for line in self.format_lines():
            print(line, file=out)
