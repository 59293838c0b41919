"""
Error taxonomy for the version command.

Every fatal error raised by the orchestrator derives from JxlError so the
CLI entry point can report it and exit non-zero.
"""

from __future__ import annotations

from typing import Sequence


class JxlError(Exception):
    """
    Base exception for jxl errors.

    Attributes:
        message: Human-readable error message
        remediation: Suggested fix for the error
    """
    def __init__(self, message: str, remediation: str | None = None):
        super().__init__(message)
        self.message = message
        self.remediation = remediation

    def __str__(self) -> str:
        if self.remediation:
            return f"{self.message}\n  Suggestion: {self.remediation}"
        return self.message


class ResolutionError(JxlError):
    """Version stream or namespace cannot be determined or reached."""


class ParseError(JxlError):
    """A version string is not a valid semantic version."""


class PromptError(JxlError):
    """Interactive confirmation could not be obtained."""


class UpgradeExecutionError(JxlError):
    """
    The self-upgrade mechanism failed.

    Attributes:
        output: Combined output of the failed installer command
    """
    def __init__(self, message: str, output: str = "", remediation: str | None = None):
        super().__init__(message, remediation)
        self.output = output


class VerificationError(JxlError):
    """
    One or more packages do not match the version stream.

    Attributes:
        mismatches: One message per mismatching package
    """
    def __init__(self, mismatches: Sequence[str]):
        self.mismatches = tuple(mismatches)
        lines = "\n".join(f"  - {m}" for m in self.mismatches)
        super().__init__(
            f"{len(self.mismatches)} package(s) do not match the version stream:\n{lines}"
        )
