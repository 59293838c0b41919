"""
Package version collection.

Runs each package's version command and builds both the package map used for
verification and the table shown to the user.
"""

from __future__ import annotations

import os
import re
import shutil
import subprocess
from dataclasses import dataclass
from typing import Sequence

from .common import vlog
from .render import VersionTable, color_info


ECOSYSTEM_TOOL_NAME = "jx"
CLUSTER_PACKAGE = "kubernetesCluster"

TIMEOUT_SECONDS = int(os.environ.get("JXL_TIMEOUT_SECONDS", "5"))

VERSION_RE = re.compile(r"v?(\d+\.\d+(?:\.\d+)?(?:-[0-9A-Za-z.-]+)?)")
ANSI_ESCAPE_RE = re.compile(r'\x1b\[[0-9;]*m')


@dataclass(frozen=True)
class PackageProbe:
    """
    How to find the installed version of one package.

    Attributes:
        name: Package name in the version stream
        command: Command printing the version
        pattern: Regex whose first group is the version (searched in output)
    """
    name: str
    command: tuple[str, ...]
    pattern: re.Pattern = VERSION_RE


DEFAULT_PROBES: tuple[PackageProbe, ...] = (
    PackageProbe(ECOSYSTEM_TOOL_NAME, ("jx", "version", "--short")),
    PackageProbe(
        CLUSTER_PACKAGE,
        ("kubectl", "version"),
        re.compile(r"Server Version:.*?v?(\d+\.\d+\.\d+[0-9A-Za-z.+-]*)"),
    ),
    PackageProbe(
        "kubectl",
        ("kubectl", "version", "--client"),
        re.compile(r"Client Version:.*?v?(\d+\.\d+\.\d+[0-9A-Za-z.+-]*)"),
    ),
    PackageProbe("helm", ("helm", "version", "--short")),
    PackageProbe("git", ("git", "--version")),
)


def run_with_timeout(args: Sequence[str], timeout: float | None = None) -> str:
    """Run a command and return its combined output, or "" on failure.

    Args:
        args: Command and arguments
        timeout: Timeout in seconds (default: TIMEOUT_SECONDS)

    Returns:
        Output with ANSI escapes removed
    """
    try:
        proc = subprocess.run(
            list(args),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            text=True,
            timeout=timeout or TIMEOUT_SECONDS,
            check=False,
            env={**os.environ, "TERM": "dumb"},
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        vlog(f"Running {' '.join(args)} failed: {e}")
        return ""
    if proc.returncode != 0:
        vlog(f"{' '.join(args)} exited with {proc.returncode}")
        return ""
    return ANSI_ESCAPE_RE.sub("", proc.stdout or "")


def extract_version(output: str, pattern: re.Pattern = VERSION_RE) -> str:
    """Extract the first version matched by pattern, or ""."""
    match = pattern.search(output)
    return match.group(1) if match else ""


def probe_command(probe: PackageProbe, namespace: str | None, helm_tls: bool) -> list[str]:
    """Build the command line for a probe."""
    args = list(probe.command)
    if probe.name == "helm" and helm_tls:
        args.append("--tls")
    if args[0] == "kubectl" and namespace:
        args.extend(["--namespace", namespace])
    return args


def get_package_versions(
    namespace: str | None,
    helm_tls: bool = False,
    probes: Sequence[PackageProbe] = DEFAULT_PROBES,
    timeout: float | None = None,
    verbose: bool = False,
) -> tuple[dict[str, str], VersionTable]:
    """
    Collect installed versions of the known packages.

    Packages whose binary is missing or whose version cannot be read are left
    out of both the map and the table.

    Args:
        namespace: Namespace passed to cluster queries
        helm_tls: Use --tls for helm
        probes: Packages to probe, in table order
        timeout: Per-command timeout in seconds
        verbose: Enable verbose logging

    Returns:
        (package name -> version, table of the same rows)
    """
    packages: dict[str, str] = {}
    table = VersionTable()

    for probe in probes:
        if not shutil.which(probe.command[0]):
            vlog(f"{probe.command[0]} not found on PATH, skipping {probe.name}", verbose)
            continue
        output = run_with_timeout(probe_command(probe, namespace, helm_tls), timeout)
        version = extract_version(output, probe.pattern)
        if not version:
            vlog(f"No version found for {probe.name}", verbose)
            continue
        packages[probe.name] = version
        table.add_row(probe.name, color_info(version))

    return packages, table
