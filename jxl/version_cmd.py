"""
The ``jxl version`` command.

Collects the versions of jxl and the packages it drives, shows them, checks
whether jxl itself should be upgraded and verifies the packages against the
version stream of the namespace.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, MutableMapping, TextIO

from .collector import CLUSTER_PACKAGE, ECOSYSTEM_TOOL_NAME, get_package_versions
from .config import Config
from .confirm import BatchConfirmer, Confirmer, PromptConfirmer
from .logging_config import get_logger
from .osinfo import DegradedResult, get_os_version
from .render import VersionTable, color_info
from .upgrade import upgrade_cli
from .upgrade_check import UpgradeOutcome, Upgrader, upgrade_cli_if_needed
from .version import get_version
from .versionstream import TOOL_NAME, VersionResolver, get_version_resolver, resolve_namespace


OS_ROW = "Operating System"


@dataclass(frozen=True)
class RunContext:
    """
    Options of one ``jxl version`` invocation.

    Attributes:
        namespace: Namespace whose version stream is used (inferred if None)
        no_version_check: Skip the self-upgrade check
        no_verify: Skip package verification
        batch_mode: Never prompt
        helm_tls: Use --tls when asking helm for its version
    """
    namespace: str | None = None
    no_version_check: bool = False
    no_verify: bool = False
    batch_mode: bool = False
    helm_tls: bool = False


def normalize_versions(
    packages: MutableMapping[str, str],
    table: VersionTable,
    version: str | None = None,
) -> None:
    """
    Report jxl under its own name instead of the jx entry.

    Args:
        packages: Package map, updated in place
        table: Version table, the jx row is replaced in place
        version: jxl version (the running version by default)
    """
    version = version or get_version()
    packages.pop(ECOSYSTEM_TOOL_NAME, None)
    packages[TOOL_NAME] = version
    table.replace_row(ECOSYSTEM_TOOL_NAME, TOOL_NAME, color_info(version))


def packages_to_verify(
    packages: MutableMapping[str, str],
    pseudo_packages: tuple[str, ...] = (CLUSTER_PACKAGE,),
) -> MutableMapping[str, str]:
    """
    Drop entries the version stream does not verify.

    jxl itself was handled by the upgrade check and the pseudo packages
    describe the environment rather than an installed package.
    """
    for name in (TOOL_NAME, ECOSYSTEM_TOOL_NAME, *pseudo_packages):
        packages.pop(name, None)
    return packages


def run_version(
    context: RunContext,
    config: Config | None = None,
    collector: Callable[[str | None, bool], tuple[MutableMapping[str, str], VersionTable]] | None = None,
    os_reporter: Callable[[], DegradedResult[str]] = get_os_version,
    resolver_factory: Callable[[str], VersionResolver] | None = None,
    confirmer: Confirmer | None = None,
    upgrader: Upgrader | None = None,
    logger: logging.Logger | None = None,
    out: TextIO | None = None,
) -> UpgradeOutcome | None:
    """
    Run the version command.

    Args:
        context: Invocation options
        config: Loaded configuration (defaults if None)
        collector: Returns the package map and table for (namespace, helm_tls);
            the default probes with the configured timeout
        os_reporter: Describes the operating system
        resolver_factory: Returns the version stream resolver for a namespace
        confirmer: Asks whether to upgrade; ignored in batch mode
        upgrader: Upgrades jxl given (version, no_brew)
        logger: Destination of warnings and info
        out: Where the table is written (stdout by default)

    Returns:
        Outcome of the upgrade check, or None if verification was disabled

    Raises:
        ResolutionError: If the version stream cannot be resolved
        ParseError: If the running version is malformed
        PromptError: If the upgrade prompt fails
        UpgradeExecutionError: If the accepted upgrade fails
        VerificationError: If packages do not match the version stream
    """
    config = config or Config()
    logger = logger or get_logger()

    if collector is None:
        def collector(ns: str | None, helm_tls: bool) -> tuple[MutableMapping[str, str], VersionTable]:
            return get_package_versions(ns, helm_tls, timeout=config.timeout_seconds)

    packages, table = collector(context.namespace, context.helm_tls)
    normalize_versions(packages, table)

    os_version = os_reporter()
    if os_version.ok:
        table.add_row(OS_ROW, color_info(os_version.value))
    else:
        logger.warning(f"Failed to get OS version: {os_version.warning}")

    table.render(out)
    if context.no_verify:
        return None

    logger.info("\n\nverifying packages")
    if resolver_factory is None:
        def resolver_factory(ns: str) -> VersionResolver:
            return get_version_resolver(ns, config, logger=logger)
    namespace = resolve_namespace(context.namespace, config)
    resolver = resolver_factory(namespace)

    if context.batch_mode:
        confirmer = BatchConfirmer()
    elif confirmer is None:
        confirmer = PromptConfirmer()
    if upgrader is None:
        def upgrader(version: str, no_brew: bool) -> None:
            upgrade_cli(version, no_brew=no_brew, logger=logger)

    outcome = upgrade_cli_if_needed(
        resolver,
        confirmer,
        upgrader,
        logger=logger,
        skip=context.no_version_check,
    )
    if outcome is UpgradeOutcome.PROMPTED_ACCEPTED:
        # The upgraded binary replaces this one; its packages are verified next run
        return outcome

    resolver.verify_packages(packages_to_verify(packages, config.pseudo_packages))
    return outcome
