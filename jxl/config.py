"""
Configuration file parsing and management.

Reads YAML configuration files and merges them from multiple sources
(explicit path -> project -> user -> system -> defaults).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

import yaml

from .common import vlog


# Configuration file locations (in priority order)
CONFIG_LOCATIONS = [
    ".jxl.yml",                                    # Project root (highest priority)
    ".jxl.yaml",
    os.path.expanduser("~/.config/jxl/config.yml"),  # User global
    os.path.expanduser("~/.config/jxl/config.yaml"),
    "/etc/jxl/config.yml",                         # System global
    "/etc/jxl/config.yaml",
]

DEFAULT_VERSION_STREAM_URL = "https://github.com/jenkins-x/jenkins-x-versions.git"
DEFAULT_CACHE_DIR = os.path.expanduser("~/.jxl")

# Entries reported by the collector that describe the environment, not a package
DEFAULT_PSEUDO_PACKAGES = ("kubernetesCluster",)


@dataclass(frozen=True)
class VersionStreamConfig:
    """
    Where to find the version stream.

    Attributes:
        url: Git URL of the version stream repository
        ref: Git ref to check out
        dir: Local directory holding the stream (takes precedence over url)
        namespaces: Per-namespace overrides (namespace -> url or directory)
    """
    url: str = DEFAULT_VERSION_STREAM_URL
    ref: str = "master"
    dir: str | None = None
    namespaces: dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if not self.url and not self.dir:
            raise ValueError("version_stream needs either a url or a dir")

    @staticmethod
    def from_dict(data: dict[str, Any]) -> VersionStreamConfig:
        """Create VersionStreamConfig from dictionary."""
        return VersionStreamConfig(
            url=data.get("url", DEFAULT_VERSION_STREAM_URL),
            ref=data.get("ref", "master"),
            dir=data.get("dir"),
            namespaces=dict(data.get("namespaces", {}) or {}),
        )

    def location_for(self, namespace: str) -> str:
        """
        Version stream location for a namespace.

        Environment variable JXL_VERSIONS_DIR wins over any configuration.
        """
        env_dir = os.environ.get("JXL_VERSIONS_DIR")
        if env_dir:
            return env_dir
        if namespace in self.namespaces:
            return self.namespaces[namespace]
        return self.dir or self.url


@dataclass(frozen=True)
class Config:
    """
    Complete configuration for jxl.

    Attributes:
        version: Config schema version
        namespace: Namespace used when none is given and none can be inferred
        batch_mode: Never prompt, as if --batch-mode was passed (None if unset)
        helm_tls: Talk to helm with --tls when collecting versions (None if unset)
        timeout_seconds: Timeout for version probe commands
        cache_dir: Where cloned version streams are kept
        pseudo_packages: Collector entries that are not versioned packages
        version_stream: Version stream location
        source: Path to the configuration file that was loaded
    """
    version: int = 1
    namespace: str | None = None
    batch_mode: bool | None = None
    helm_tls: bool | None = None
    timeout_seconds: int = 5
    cache_dir: str = DEFAULT_CACHE_DIR
    pseudo_packages: tuple[str, ...] = DEFAULT_PSEUDO_PACKAGES
    version_stream: VersionStreamConfig = field(default_factory=VersionStreamConfig)
    source: str = ""

    def __post_init__(self):
        """Validate config after initialization."""
        if self.version != 1:
            raise ValueError(f"Unsupported config version: {self.version}. Expected version 1")

        if self.timeout_seconds < 1 or self.timeout_seconds > 60:
            raise ValueError(
                f"Invalid timeout_seconds: {self.timeout_seconds}. "
                "Must be between 1 and 60"
            )

    @staticmethod
    def from_dict(data: dict[str, Any], source: str = "") -> Config:
        """Create Config from dictionary."""
        stream_data = data.get("version_stream", {}) or {}
        pseudo = data.get("pseudo_packages")

        return Config(
            version=data.get("version", 1),
            namespace=data.get("namespace"),
            batch_mode=_optional_bool(data.get("batch_mode")),
            helm_tls=_optional_bool(data.get("helm_tls")),
            timeout_seconds=data.get("timeout_seconds", 5),
            cache_dir=os.path.expanduser(data.get("cache_dir", DEFAULT_CACHE_DIR)),
            pseudo_packages=tuple(pseudo) if pseudo is not None else DEFAULT_PSEUDO_PACKAGES,
            version_stream=VersionStreamConfig.from_dict(stream_data),
            source=source,
        )

    def merge_with(self, other: Config) -> Config:
        """
        Merge this config with another, preferring values from this config.

        Flags left unset (None) fall back to the other config, so a higher
        priority file can switch off a flag that a lower priority file sets.

        Args:
            other: Other config to merge (lower priority)

        Returns:
            New merged Config object
        """
        default_stream = VersionStreamConfig()
        mine, theirs = self.version_stream, other.version_stream

        merged_namespaces = dict(theirs.namespaces)
        merged_namespaces.update(mine.namespaces)

        merged_stream = VersionStreamConfig(
            url=mine.url if mine.url != default_stream.url else theirs.url,
            ref=mine.ref if mine.ref != default_stream.ref else theirs.ref,
            dir=mine.dir or theirs.dir,
            namespaces=merged_namespaces,
        )

        return Config(
            version=self.version,
            namespace=self.namespace or other.namespace,
            batch_mode=self.batch_mode if self.batch_mode is not None else other.batch_mode,
            helm_tls=self.helm_tls if self.helm_tls is not None else other.helm_tls,
            timeout_seconds=self.timeout_seconds if self.timeout_seconds != 5 else other.timeout_seconds,
            cache_dir=self.cache_dir if self.cache_dir != DEFAULT_CACHE_DIR else other.cache_dir,
            pseudo_packages=tuple(dict.fromkeys(self.pseudo_packages + other.pseudo_packages)),
            version_stream=merged_stream,
            source=self.source or other.source,
        )


def _optional_bool(value: Any) -> bool | None:
    return None if value is None else bool(value)


def _load_yaml(file_path: str) -> dict[str, Any] | None:
    """
    Load YAML configuration file.

    Args:
        file_path: Path to YAML file

    Returns:
        Parsed configuration dictionary, or None if the file is unreadable or invalid
    """
    try:
        with open(file_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError):
        return None


def load_config_file(file_path: str, verbose: bool = False) -> Config | None:
    """
    Load configuration from a single file.

    Args:
        file_path: Path to configuration file
        verbose: Enable verbose logging

    Returns:
        Config object, or None if file cannot be loaded
    """
    if not os.path.exists(file_path):
        return None

    vlog(f"Loading config from: {file_path}", verbose)

    data = _load_yaml(file_path)
    if data is None:
        vlog(f"Invalid config file: {file_path}", verbose)
        return None

    try:
        config = Config.from_dict(data, source=file_path)
        vlog(f"Loaded config successfully: {file_path}", verbose)
        return config
    except (ValueError, TypeError) as e:
        vlog(f"Config validation failed for {file_path}: {e}", verbose)
        return None


def load_config(
    custom_path: str | None = None,
    verbose: bool = False,
) -> Config:
    """
    Load and merge configuration from all sources.

    Args:
        custom_path: Optional path to custom configuration file
        verbose: Enable verbose logging

    Returns:
        Merged Config object (defaults if no config found)

    Raises:
        ValueError: If custom_path is provided but file cannot be loaded
    """
    configs: list[Config] = []

    if custom_path:
        config = load_config_file(custom_path, verbose)
        if config is None:
            raise ValueError(f"Could not load config from specified path: {custom_path}")
        configs.append(config)

    for location in CONFIG_LOCATIONS:
        config = load_config_file(location, verbose)
        if config is not None:
            configs.append(config)

    if not configs:
        vlog("No config files found, using defaults", verbose)
        return Config()

    # First config has highest priority
    merged = configs[0]
    for config in configs[1:]:
        merged = merged.merge_with(config)

    vlog(f"Merged {len(configs)} config files", verbose)
    return merged
