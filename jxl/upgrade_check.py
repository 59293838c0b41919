"""
Decide whether the running jxl should warn about, or perform, a self-upgrade.

The decision itself is a pure function of (current, latest, batch mode);
``upgrade_cli_if_needed`` carries it out against the injected collaborators.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Protocol

from .confirm import Confirmer
from .logging_config import get_logger
from .render import color_info
from .version import SemanticVersion, get_semver_version


UPGRADE_COMMAND = "jxl upgrade cli"


class UpgradeDecision(Enum):
    NO_ACTION = "no-action"
    WARN_ONLY = "warn-only"
    PROMPT_AND_MAYBE_UPGRADE = "prompt"


class UpgradeOutcome(Enum):
    """Terminal state of a version check."""
    VERSION_CHECK_SKIPPED = "skipped"
    UP_TO_DATE = "up-to-date"
    WARNED_BATCH = "warned-batch"
    PROMPTED_DECLINED = "declined"
    PROMPTED_ACCEPTED = "accepted"


class LatestVersionSource(Protocol):
    def latest_tool_version(self) -> SemanticVersion:
        ...


# (target_version, no_brew) -> None, raising on failure
Upgrader = Callable[[str, bool], None]


def decide(current: SemanticVersion, latest: SemanticVersion, batch_mode: bool) -> UpgradeDecision:
    """
    Pick what to do about the running version.

    Args:
        current: Running version
        latest: Version published in the version stream
        batch_mode: Whether nobody can be prompted

    Returns:
        UpgradeDecision
    """
    if current >= latest:
        return UpgradeDecision.NO_ACTION
    if batch_mode:
        return UpgradeDecision.WARN_ONLY
    return UpgradeDecision.PROMPT_AND_MAYBE_UPGRADE


def upgrade_cli_if_needed(
    resolver: LatestVersionSource,
    confirmer: Confirmer,
    upgrader: Upgrader,
    logger: logging.Logger | None = None,
    current_version: Callable[[], SemanticVersion] | None = None,
    skip: bool = False,
) -> UpgradeOutcome:
    """
    Compare the running jxl with the version stream and act on the result.

    Batch mode is the confirmer not being interactive.

    Args:
        resolver: Source of the latest published jxl version
        confirmer: Asks whether to upgrade
        upgrader: Performs the upgrade
        logger: Where warnings and banners go
        current_version: Returns the running version (the installed jxl by default)
        skip: Skip the check entirely

    Returns:
        UpgradeOutcome

    Raises:
        ParseError: If the running version is malformed
        ResolutionError: If the latest version cannot be resolved
        PromptError: If the confirmer cannot get an answer
        UpgradeExecutionError: If the accepted upgrade fails
    """
    if skip:
        return UpgradeOutcome.VERSION_CHECK_SKIPPED

    logger = logger or get_logger()
    current = (current_version or get_semver_version)()
    latest = resolver.latest_tool_version()

    decision = decide(current, latest, batch_mode=not confirmer.interactive)
    if decision is UpgradeDecision.NO_ACTION:
        return UpgradeOutcome.UP_TO_DATE

    app = color_info("jxl")
    available = (
        f"{app} version {color_info(str(latest))} is available in the version stream. "
        f"You are using {color_info(str(current))}. We highly recommend you upgrade to it."
    )

    if decision is UpgradeDecision.WARN_ONLY:
        logger.warning(f"{available}\nTo upgrade to this new version use: {color_info(UPGRADE_COMMAND)}")
        return UpgradeOutcome.WARNED_BATCH

    logger.info(f"\n{available}\n")
    answer = confirmer.confirm(
        f"Would you like to upgrade to the {app} version?",
        default=True,
        help_text="Please indicate if you would like to upgrade the binary version.",
    )
    if not answer:
        return UpgradeOutcome.PROMPTED_DECLINED

    upgrader(str(latest), True)
    return UpgradeOutcome.PROMPTED_ACCEPTED
