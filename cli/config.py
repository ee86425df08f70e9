#!/usr/bin/env python3
"""
streamctl CLI configuration

Layout under the home directory ($STREAMCTL_DIR, default ~/.streamctl):
- config.yaml   profiles and the clusters they point at
- extensions/   out-of-tree `streamctl-*` executables
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger(__name__)

HOME_ENV = "STREAMCTL_DIR"
CONFIG_FILE = "config.yaml"
EXTENSIONS_DIR = "extensions"


class CliError(Exception):
    """Error raised by a built-in command handler."""


def streamctl_home() -> Optional[Path]:
    """Return the streamctl home directory, or None when it cannot be resolved."""
    override = os.environ.get(HOME_ENV)
    if override:
        return Path(override).expanduser()
    try:
        return Path.home() / ".streamctl"
    except RuntimeError as e:
        logger.debug("home directory not resolvable: %s", e)
        return None


def extensions_dir() -> Optional[Path]:
    home = streamctl_home()
    return home / EXTENSIONS_DIR if home is not None else None


def config_path() -> Optional[Path]:
    home = streamctl_home()
    return home / CONFIG_FILE if home is not None else None


@dataclass
class Profile:
    """A named pointer at one cluster"""
    name: str
    cluster: str


@dataclass
class ProfileConfig:
    """Profiles file contents with defaults"""
    current_profile: Optional[str] = None
    profiles: Dict[str, Profile] = field(default_factory=dict)
    clusters: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProfileConfig":
        profiles = {}
        for name, entry in (data.get("profile") or {}).items():
            cluster = entry.get("cluster", name) if isinstance(entry, dict) else name
            profiles[str(name)] = Profile(name=str(name), cluster=str(cluster))
        clusters = {
            str(name): dict(entry) for name, entry in (data.get("cluster") or {}).items()
            if isinstance(entry, dict)
        }
        return cls(current_profile=data.get("current_profile"), profiles=profiles, clusters=clusters)

    @classmethod
    def from_file(cls, path: Optional[Path]) -> "ProfileConfig":
        """Load profiles from YAML, falling back to an empty config"""
        if path is None or not path.exists():
            logger.debug(f"Profile config not found: {path}, using defaults")
            return cls()

        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Failed to load profile config from {path}: {e}, using defaults")
            return cls()

        if not isinstance(data, dict):
            logger.warning(f"Profile config {path} is not a mapping, using defaults")
            return cls()
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_profile": self.current_profile,
            "profile": {p.name: {"cluster": p.cluster} for p in self.profiles.values()},
            "cluster": self.clusters,
        }

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False)
        logger.debug(f"Saved profile config to {path}")

    def current(self) -> Optional[Profile]:
        if self.current_profile is None:
            return None
        return self.profiles.get(self.current_profile)

    def endpoint_for(self, profile: Profile) -> Optional[str]:
        cluster = self.clusters.get(profile.cluster) or {}
        return cluster.get("endpoint")
