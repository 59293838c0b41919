"""
jxl - Jenkins X command line, version compatibility and self-upgrade.

Core Modules:
- Version: Semantic version parsing and ordering
- Collection: Installed package versions and table rendering
- Version Stream: Stable versions and package verification
- Upgrade: Self-upgrade decision and execution
- Command: The ``jxl version`` orchestration
"""

__version__ = "0.1.0"
__author__ = "Jenkins X Contributors"

VERSION = __version__

from .errors import (
    JxlError,
    ResolutionError,
    ParseError,
    PromptError,
    UpgradeExecutionError,
    VerificationError,
)
from .version import SemanticVersion, compare_versions, get_version, get_semver_version
from .render import VersionTable, colorize, color_info
from .osinfo import DegradedResult, get_os_version
from .collector import PackageProbe, get_package_versions
from .config import Config, VersionStreamConfig, load_config, load_config_file
from .versionstream import (
    StableVersion,
    VersionResolver,
    get_version_resolver,
    resolve_namespace,
)
from .confirm import Confirmer, BatchConfirmer, PromptConfirmer
from .upgrade import UpgradeStep, pip_requirement, plan_upgrade, upgrade_cli
from .upgrade_check import UpgradeDecision, UpgradeOutcome, decide, upgrade_cli_if_needed
from .version_cmd import RunContext, normalize_versions, packages_to_verify, run_version
from .logging_config import setup_logging, get_logger

__all__ = [
    # Version
    "__version__",
    "VERSION",
    # Errors
    "JxlError",
    "ResolutionError",
    "ParseError",
    "PromptError",
    "UpgradeExecutionError",
    "VerificationError",
    # Versions
    "SemanticVersion",
    "compare_versions",
    "get_version",
    "get_semver_version",
    # Collection and rendering
    "VersionTable",
    "colorize",
    "color_info",
    "DegradedResult",
    "get_os_version",
    "PackageProbe",
    "get_package_versions",
    # Configuration
    "Config",
    "VersionStreamConfig",
    "load_config",
    "load_config_file",
    # Version stream
    "StableVersion",
    "VersionResolver",
    "get_version_resolver",
    "resolve_namespace",
    # Upgrade
    "Confirmer",
    "BatchConfirmer",
    "PromptConfirmer",
    "UpgradeStep",
    "pip_requirement",
    "plan_upgrade",
    "upgrade_cli",
    "UpgradeDecision",
    "UpgradeOutcome",
    "decide",
    "upgrade_cli_if_needed",
    # Command
    "RunContext",
    "normalize_versions",
    "packages_to_verify",
    "run_version",
    # Logging
    "setup_logging",
    "get_logger",
]
