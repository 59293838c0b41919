"""
Best-effort operating system description.

Failures never abort the caller: the probe returns a DegradedResult whose
value is None and whose warning explains what went wrong.
"""

from __future__ import annotations

import os
import platform
import subprocess
import sys
from dataclasses import dataclass
from typing import Generic, TypeVar

from .common import vlog

T = TypeVar("T")

OS_RELEASE_FILE = "/etc/os-release"
TIMEOUT_SECONDS = 2


@dataclass(frozen=True)
class DegradedResult(Generic[T]):
    """
    Value of a best-effort operation.

    Attributes:
        value: Result, or None when the operation failed
        warning: Why the value is missing or partial
    """
    value: T | None = None
    warning: str | None = None

    @property
    def ok(self) -> bool:
        return self.value is not None


def _run(args: list[str]) -> str:
    proc = subprocess.run(
        args,
        capture_output=True,
        stdin=subprocess.DEVNULL,
        text=True,
        timeout=TIMEOUT_SECONDS,
        check=False,
        env={**os.environ, "TERM": "dumb"},
    )
    if proc.returncode != 0:
        raise OSError(f"{args[0]} exited with {proc.returncode}: {proc.stderr.strip()}")
    return proc.stdout


def _read_os_release(path: str = OS_RELEASE_FILE) -> str:
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            key, _, value = line.strip().partition("=")
            if key == "PRETTY_NAME" and value:
                return value.strip().strip('"')
    return ""


def _linux_version() -> str:
    try:
        name = _read_os_release()
        if name:
            return name
    except OSError as e:
        vlog(f"Could not read {OS_RELEASE_FILE}: {e}")

    # Description:	Ubuntu 22.04.4 LTS
    output = _run(["lsb_release", "-d"])
    _, _, description = output.partition(":")
    return description.strip()


def _darwin_version() -> str:
    name = _run(["sw_vers", "-productName"]).strip()
    version = _run(["sw_vers", "-productVersion"]).strip()
    build = _run(["sw_vers", "-buildVersion"]).strip()
    return f"{name} {version} build {build}".strip()


def get_os_version() -> DegradedResult[str]:
    """
    Describe the current operating system.

    Returns:
        DegradedResult with a human friendly OS string, or a warning
    """
    try:
        if sys.platform.startswith("linux"):
            text = _linux_version()
        elif sys.platform == "darwin":
            text = _darwin_version()
        else:
            text = platform.platform(terse=True)
    except (OSError, subprocess.SubprocessError) as e:
        return DegradedResult(warning=str(e))

    if not text:
        return DegradedResult(warning=f"no OS description found for platform {sys.platform}")
    return DegradedResult(value=text)
