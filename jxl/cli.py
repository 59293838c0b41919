"""
Command line entry point.

Usage:
    jxl version                 # Show versions and verify them against the version stream
    jxl version --no-verify     # Only show versions
    jxl upgrade cli             # Upgrade jxl to the version stream's version
"""

from __future__ import annotations

import argparse
import logging
import sys

from . import __version__
from .common import is_ci_environment, is_interactive_terminal
from .config import Config, load_config
from .errors import JxlError
from .logging_config import setup_logging
from .upgrade import upgrade_cli
from .version_cmd import RunContext, run_version
from .versionstream import get_version_resolver, resolve_namespace


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jxl",
        description="Jenkins X command line, version and upgrade management",
    )
    parser.add_argument("-b", "--batch-mode", action="store_true",
                        help="Run without prompting; warn instead of offering upgrades")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument("--config", help="Path to a jxl config file")

    sub = parser.add_subparsers(dest="command", required=True)

    version = sub.add_parser("version", help="Print the version information")
    version.add_argument("-n", "--no-version-check", action="store_true",
                         help="Disable checking of version upgrade checks")
    version.add_argument("--no-verify", action="store_true",
                         help="Disable verification of package versions")
    version.add_argument("--namespace", default="",
                         help="The namespace to use to look for currently installed platform version")
    version.add_argument("--helm-tls", action="store_true",
                         help="Whether to use TLS with helm")

    upgrade = sub.add_parser("upgrade", help="Upgrade jxl components")
    upgrade_sub = upgrade.add_subparsers(dest="upgrade_command", required=True)
    upgrade_cli_parser = upgrade_sub.add_parser("cli", help="Upgrade the jxl command line")
    upgrade_cli_parser.add_argument("--version", default="",
                                    help="The version to upgrade to (default: the version stream's)")
    upgrade_cli_parser.add_argument("--no-brew", action="store_true",
                                    help="Do not use Homebrew even if it installed jxl")
    upgrade_cli_parser.add_argument("--namespace", default="",
                                    help="The namespace whose version stream is used")

    return parser


def is_batch_mode(args: argparse.Namespace, config: Config) -> bool:
    """Batch mode when asked for, or when nobody can answer a prompt."""
    return bool(args.batch_mode or config.batch_mode or is_ci_environment() or not is_interactive_terminal())


def cmd_version(args: argparse.Namespace, config: Config, logger: logging.Logger) -> int:
    context = RunContext(
        namespace=args.namespace or None,
        no_version_check=args.no_version_check,
        no_verify=args.no_verify,
        batch_mode=is_batch_mode(args, config),
        helm_tls=bool(args.helm_tls or config.helm_tls),
    )
    run_version(context, config, logger=logger)
    return 0


def cmd_upgrade_cli(args: argparse.Namespace, config: Config, logger: logging.Logger) -> int:
    version = args.version
    if not version:
        namespace = resolve_namespace(args.namespace or None, config)
        resolver = get_version_resolver(namespace, config, logger=logger)
        version = str(resolver.latest_tool_version())
    upgrade_cli(version, no_brew=args.no_brew, logger=logger)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logger = setup_logging(verbose=args.verbose, log_file=args.log_file)
    logger.debug(f"jxl {__version__}")

    try:
        config = load_config(args.config, verbose=args.verbose)
    except ValueError as e:
        logger.error(str(e))
        return 1

    try:
        if args.command == "version":
            return cmd_version(args, config, logger)
        return cmd_upgrade_cli(args, config, logger)
    except JxlError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        print("", file=sys.stderr)
        return 130


if __name__ == "__main__":
    sys.exit(main())
