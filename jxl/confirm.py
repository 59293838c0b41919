"""
Yes/no confirmation for interactive and batch runs.

Both confirmers expose ``interactive`` so callers can tell a declined prompt
from a run where nobody could be asked.
"""

from __future__ import annotations

import sys
from typing import Protocol, TextIO

from .errors import PromptError


class Confirmer(Protocol):
    interactive: bool

    def confirm(self, message: str, default: bool = True, help_text: str = "") -> bool:
        ...


class BatchConfirmer:
    """Never prompts; every question is answered no."""

    interactive = False

    def confirm(self, message: str, default: bool = True, help_text: str = "") -> bool:
        return False


class PromptConfirmer:
    """
    Asks the user on a terminal.

    Args:
        stdin: Input stream (sys.stdin by default)
        stdout: Output stream for the question (sys.stdout by default)
    """

    interactive = True

    def __init__(self, stdin: TextIO | None = None, stdout: TextIO | None = None):
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout

    def confirm(self, message: str, default: bool = True, help_text: str = "") -> bool:
        """
        Ask a yes/no question.

        Args:
            message: Question to show
            default: Answer used when the user just presses enter
            help_text: Shown when the user answers '?'

        Returns:
            True for yes, False for no

        Raises:
            PromptError: If no answer can be read
        """
        hint = "[Y/n]" if default else "[y/N]"
        while True:
            self.stdout.write(f"{message} {hint}: ")
            self.stdout.flush()
            try:
                line = self.stdin.readline()
            except (OSError, ValueError) as e:
                raise PromptError(f"failed to read answer: {e}") from e
            if not line:
                raise PromptError("failed to read answer: end of input")

            answer = line.strip().lower()
            if not answer:
                return default
            if answer in ("y", "yes"):
                return True
            if answer in ("n", "no"):
                return False
            if answer == "?" and help_text:
                self.stdout.write(f"{help_text}\n")
