"""
Common utilities shared across jxl modules.
"""

from __future__ import annotations

import os
import sys


def is_ci_environment() -> bool:
    """
    Check if running in a CI/CD environment.

    Returns:
        True if CI indicators are present, False otherwise.
    """
    ci_indicators = [
        "CI",
        "CONTINUOUS_INTEGRATION",
        "GITHUB_ACTIONS",
        "GITLAB_CI",
        "CIRCLECI",
        "TRAVIS",
        "JENKINS_HOME",
        "JENKINS_URL",
        "BUILDKITE",
        "DRONE",
        "TEKTON_PIPELINE",
        "CODEBUILD_BUILD_ID",
        "TF_BUILD",  # Azure Pipelines
    ]
    return any(os.environ.get(var) for var in ci_indicators)


def is_interactive_terminal() -> bool:
    """
    Check whether stdin is attached to a terminal.

    Returns:
        True if a human can answer prompts, False otherwise.
    """
    try:
        return sys.stdin is not None and sys.stdin.isatty()
    except (AttributeError, ValueError):
        # Closed or replaced stdin
        return False


def vlog(msg: str, verbose: bool = False) -> None:
    """
    Log a debug message when verbose output is requested.

    Args:
        msg: Message to log
        verbose: Whether verbose mode is enabled
    """
    if verbose or os.environ.get("JXL_DEBUG", "0") == "1":
        from .logging_config import get_logger
        get_logger().info(msg)
