"""
Version stream access and package verification.

A version stream is a directory (usually a git clone) holding one YAML file
per package under ``packages/``::

    # packages/helm.yml
    version: 3.12.0
    upperLimit: 4.0.0
    gitUrl: https://github.com/helm/helm

``version`` is the minimum supported version; ``upperLimit`` is exclusive.
"""

from __future__ import annotations

import hashlib
import logging
import os
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from .common import vlog
from .config import Config
from .errors import ParseError, ResolutionError, VerificationError
from .logging_config import get_logger
from .render import color_info
from .version import SemanticVersion


TOOL_NAME = "jxl"

KIND_PACKAGE = "packages"

VERSION_STREAM_DOCS = "https://jenkins-x.io/about/concepts/version-stream/"


@dataclass(frozen=True)
class StableVersion:
    """
    Version stream entry for one package.

    Attributes:
        version: Minimum (and recommended) version
        upper_limit: Exclusive upper bound, if any
        git_url: Source repository of the package
        url: Download or documentation URL
    """
    version: str = ""
    upper_limit: str = ""
    git_url: str = ""
    url: str = ""

    @staticmethod
    def from_dict(data: Mapping[str, Any]) -> StableVersion:
        return StableVersion(
            version=str(data.get("version", "") or ""),
            upper_limit=str(data.get("upperLimit", "") or ""),
            git_url=str(data.get("gitUrl", "") or ""),
            url=str(data.get("url", "") or ""),
        )


class VersionResolver:
    """Reads stable versions from a version stream directory."""

    def __init__(self, versions_dir: str | Path, logger: logging.Logger | None = None):
        self.versions_dir = Path(versions_dir)
        self.logger = logger or get_logger()

    def stable_version(self, kind: str, name: str) -> StableVersion:
        """
        Load the stream entry for a package.

        Returns:
            StableVersion, empty if the stream has no entry for name

        Raises:
            ResolutionError: If the entry exists but cannot be read
        """
        path = self.versions_dir / kind / f"{name}.yml"
        if not path.exists():
            return StableVersion()
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ResolutionError(f"failed to load version stream file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ResolutionError(f"version stream file {path} is not a mapping")
        return StableVersion.from_dict(data)

    def latest_tool_version(self) -> SemanticVersion:
        """
        Version of jxl published in the stream.

        Raises:
            ResolutionError: If the stream has no usable jxl entry
        """
        stable = self.stable_version(KIND_PACKAGE, TOOL_NAME)
        if not stable.version:
            raise ResolutionError(
                f"no {TOOL_NAME} version found in the version stream at {self.versions_dir}"
            )
        try:
            return SemanticVersion.parse(stable.version)
        except ParseError as e:
            raise ResolutionError(
                f"version stream has an invalid {TOOL_NAME} version: {e.message}"
            ) from e

    def verify_package(self, name: str, current_version: str) -> str | None:
        """
        Check one package against the stream.

        Returns:
            Mismatch description, or None if the package is acceptable
        """
        try:
            current = SemanticVersion.parse(current_version)
        except ParseError:
            self.logger.warning(
                f"package {name} was not verified: {current_version!r} is not a semantic version"
            )
            return None

        stable = self.stable_version(KIND_PACKAGE, name)
        if not stable.version:
            self.logger.warning(
                f"could not find a stable package version for {name} from {self.versions_dir}\n"
                f"For background see: {VERSION_STREAM_DOCS}"
            )
            self.logger.info(
                f"Please lock this version down via the command: "
                f"{color_info('jxl step create version pr -k package -n ' + name)}"
            )
            return None

        try:
            required = SemanticVersion.parse(stable.version)
        except ParseError as e:
            return f"{name}: version stream has an invalid version: {e.message}"

        if current < required:
            return (
                f"package {name} is on version {current_version} "
                f"but the version stream requires at least {stable.version}"
            )

        if stable.upper_limit:
            try:
                upper = SemanticVersion.parse(stable.upper_limit)
            except ParseError as e:
                return f"{name}: version stream has an invalid upper limit: {e.message}"
            if current >= upper:
                return (
                    f"package {name} is on version {current_version} which is too new; "
                    f"the version stream supports versions below {stable.upper_limit}"
                )

        if current > required:
            self.logger.warning(
                f"package {color_info(name)} is on version {color_info(current_version)} "
                f"which is newer than the version stream version {color_info(stable.version)}"
            )
        return None

    def verify_packages(self, packages: Mapping[str, str]) -> None:
        """
        Verify every package against the stream.

        Raises:
            VerificationError: Listing every mismatching package
        """
        mismatches = []
        for name in sorted(packages):
            mismatch = self.verify_package(name, packages[name])
            if mismatch:
                mismatches.append(mismatch)
        if mismatches:
            raise VerificationError(mismatches)


def _current_kube_namespace(kubeconfig: str | None = None) -> str | None:
    """Namespace of the current kube context, if one is set."""
    path = kubeconfig or os.environ.get("KUBECONFIG", "").split(os.pathsep)[0]
    path = path or os.path.expanduser("~/.kube/config")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        vlog(f"Could not read kube config {path}: {e}")
        return None
    if not isinstance(data, dict):
        return None

    current = data.get("current-context")
    for ctx in data.get("contexts") or []:
        if isinstance(ctx, dict) and ctx.get("name") == current:
            return (ctx.get("context") or {}).get("namespace") or None
    return None


def resolve_namespace(explicit: str | None, config: Config) -> str:
    """
    Namespace whose version stream is used.

    Precedence: explicit value, JXL_NAMESPACE, current kube context, config.

    Raises:
        ResolutionError: If no namespace can be determined
    """
    namespace = (
        explicit
        or os.environ.get("JXL_NAMESPACE")
        or _current_kube_namespace()
        or config.namespace
    )
    if not namespace:
        raise ResolutionError(
            "could not determine the current namespace",
            remediation="pass --namespace or set a namespace in your kube context",
        )
    return namespace


def _is_git_url(location: str) -> bool:
    return location.startswith(("https://", "http://", "git@", "ssh://", "file://"))


def _run_git(args: list[str], cwd: str | None = None) -> subprocess.CompletedProcess:
    return subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        stdin=subprocess.DEVNULL,
        text=True,
        check=False,
    )


def clone_version_stream(url: str, ref: str, cache_dir: str, logger: logging.Logger) -> Path:
    """
    Shallow clone the stream into the cache, or refresh an existing clone.

    Raises:
        ResolutionError: If the clone fails
    """
    digest = hashlib.sha256(f"{url}#{ref}".encode()).hexdigest()[:12]
    target = Path(cache_dir) / "versions" / digest

    if (target / ".git").is_dir():
        try:
            proc = _run_git(["pull", "--ff-only", "origin", ref], cwd=str(target))
        except OSError as e:
            logger.warning(f"Could not update version stream {url}, using cached copy: {e}")
            return target
        if proc.returncode != 0:
            logger.warning(f"Could not update version stream {url}, using cached copy: {proc.stderr.strip()}")
        return target

    target.parent.mkdir(parents=True, exist_ok=True)
    try:
        proc = _run_git(["clone", "--depth", "1", "--branch", ref, url, str(target)])
    except OSError as e:
        raise ResolutionError(f"failed to clone version stream {url}: {e}") from e
    if proc.returncode != 0:
        raise ResolutionError(f"failed to clone version stream {url}: {proc.stderr.strip()}")
    return target


def get_version_resolver(
    namespace: str,
    config: Config,
    logger: logging.Logger | None = None,
) -> VersionResolver:
    """
    Resolver bound to the version stream of a namespace.

    Raises:
        ResolutionError: If the stream is missing or cannot be fetched
    """
    logger = logger or get_logger()
    location = config.version_stream.location_for(namespace)
    vlog(f"Using version stream {location} for namespace {namespace}")

    if _is_git_url(location):
        versions_dir = clone_version_stream(location, config.version_stream.ref, config.cache_dir, logger)
    else:
        versions_dir = Path(os.path.expanduser(location))
        if not versions_dir.is_dir():
            raise ResolutionError(
                f"version stream directory {versions_dir} does not exist",
                remediation="check version_stream.dir in your jxl config or JXL_VERSIONS_DIR",
            )
    return VersionResolver(versions_dir, logger=logger)
