"""
Self-upgrade of the jxl CLI.

jxl is upgraded with pip into the running interpreter. When Homebrew manages
the installation it is used instead, unless the caller disables it.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys
from dataclasses import dataclass

from packaging.requirements import Requirement
from packaging.version import InvalidVersion, Version

from .errors import ParseError, UpgradeExecutionError
from .logging_config import get_logger
from .render import color_info
from .version import SemanticVersion, get_version


PACKAGE_NAME = "jxl"
BREW_FORMULA = "jxl"


@dataclass(frozen=True)
class UpgradeStep:
    """
    One installer command.

    Attributes:
        installer: Installer name ("pip" or "brew")
        command: Command line to run
    """
    installer: str
    command: tuple[str, ...]

    def __str__(self) -> str:
        return " ".join(self.command)


def _brew_manages_jxl() -> bool:
    if not shutil.which("brew"):
        return False
    try:
        proc = subprocess.run(
            ["brew", "list", "--versions", BREW_FORMULA],
            capture_output=True,
            stdin=subprocess.DEVNULL,
            text=True,
            timeout=10,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired):
        return False
    return proc.returncode == 0 and bool(proc.stdout.strip())


def pip_requirement(version: str) -> str:
    """
    Pip requirement pinning jxl to version.

    pip only understands PEP 440 versions, so semantic pre-releases are
    normalized (``1.3.0-rc.1`` becomes ``1.3.0rc1``).

    Raises:
        UpgradeExecutionError: If pip cannot express the version
    """
    try:
        pinned = Version(version)
    except InvalidVersion as e:
        raise UpgradeExecutionError(
            f"pip cannot install {PACKAGE_NAME} version {version}: {e}",
            remediation=f"install {PACKAGE_NAME} {version} manually",
        ) from e
    return str(Requirement(f"{PACKAGE_NAME}=={pinned}"))


def plan_upgrade(version: str, no_brew: bool = False) -> UpgradeStep:
    """
    Choose the installer command for upgrading to version.

    Args:
        version: Target version
        no_brew: Never use Homebrew

    Returns:
        UpgradeStep to execute

    Raises:
        UpgradeExecutionError: If pip is chosen and cannot express the version
    """
    if not no_brew and _brew_manages_jxl():
        # Homebrew only installs the formula's current version
        return UpgradeStep("brew", ("brew", "upgrade", BREW_FORMULA))
    return UpgradeStep(
        "pip",
        (sys.executable, "-m", "pip", "install", "--upgrade", pip_requirement(version)),
    )


def upgrade_cli(
    version: str,
    no_brew: bool = False,
    logger: logging.Logger | None = None,
) -> None:
    """
    Upgrade the running jxl to version.

    Args:
        version: Target version
        no_brew: Force the pip upgrade even if Homebrew installed jxl
        logger: Logger for progress output

    Raises:
        ParseError: If version is not a semantic version
        UpgradeExecutionError: If the installer fails
    """
    logger = logger or get_logger()
    target = SemanticVersion.parse(version)

    current_text = get_version()
    try:
        if SemanticVersion.parse(current_text) == target:
            logger.info(f"You are already on the {color_info(str(target))} version of {PACKAGE_NAME}")
            return
    except ParseError:
        # Development builds carry non-semver versions; always upgrade them
        pass

    step = plan_upgrade(str(target), no_brew=no_brew)
    logger.info(f"Upgrading {PACKAGE_NAME} from {current_text} to {color_info(str(target))} using {step.installer}")

    try:
        proc = subprocess.run(
            list(step.command),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
        )
    except OSError as e:
        raise UpgradeExecutionError(
            f"failed to run {step}: {e}",
            remediation=f"install {PACKAGE_NAME} {target} manually",
        ) from e

    if proc.returncode != 0:
        raise UpgradeExecutionError(
            f"{step} exited with code {proc.returncode}",
            output=proc.stdout or "",
            remediation=f"install {PACKAGE_NAME} {target} manually",
        )
    logger.info(f"{PACKAGE_NAME} upgraded to {color_info(str(target))}")
