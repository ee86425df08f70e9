#!/usr/bin/env python3
"""
streamctl plugin lookup

Search order (first match wins):
- the system PATH
- the directory holding the running streamctl executable
- the per-user extensions directory (~/.streamctl/extensions)

Each stage yields zero or one search location; stages whose location
cannot be resolved are skipped. Lookup never executes anything.
"""

import logging
import os
import shutil
import sys
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from .config import extensions_dir

logger = logging.getLogger(__name__)

PLUGIN_PREFIX = "streamctl-"

# A stage returns an os.pathsep-separated search location, or None to be skipped
SearchStage = Callable[[], Optional[str]]


def system_path() -> Optional[str]:
    return os.environ.get("PATH") or None


def running_executable_dir() -> Optional[str]:
    argv0 = sys.argv[0] if sys.argv else ""
    if not argv0:
        return None
    exe = Path(argv0)
    if not exe.is_file():
        return None
    return str(exe.resolve().parent)


def user_extensions_dir() -> Optional[str]:
    ext_dir = extensions_dir()
    return str(ext_dir) if ext_dir is not None else None


DEFAULT_STAGES: Tuple[SearchStage, ...] = (system_path, running_executable_dir, user_extensions_dir)


class PluginLocator:
    """Resolve plugin names to executables over an ordered set of stages."""

    def __init__(self, stages: Sequence[SearchStage] = DEFAULT_STAGES):
        self.stages = tuple(stages)

    def search_locations(self) -> Iterator[str]:
        """Yield each resolvable stage location, in order, evaluated lazily."""
        for stage in self.stages:
            location = stage()
            if not location:
                logger.debug("plugin search stage %s unresolvable, skipping", getattr(stage, "__name__", stage))
                continue
            yield location

    def locate(self, name: str) -> Optional[Path]:
        """Return the first executable named `name`, or None when nothing matches."""
        if not name or os.sep in name or (os.altsep and os.altsep in name):
            logger.debug("refusing plugin lookup for non-bare name %r", name)
            return None

        for location in self.search_locations():
            found = shutil.which(name, path=location)
            if found:
                logger.debug("found plugin %s at %s", name, found)
                return Path(found)
        return None

    def installed(self, prefix: str = PLUGIN_PREFIX) -> List[Tuple[str, Path]]:
        """List (command name, path) for every prefixed executable, first occurrence wins."""
        seen = {}
        for location in self.search_locations():
            for directory in location.split(os.pathsep):
                if not directory or not os.path.isdir(directory):
                    continue
                try:
                    entries = sorted(os.listdir(directory))
                except OSError as e:
                    logger.debug("cannot list %s: %s", directory, e)
                    continue
                for entry in entries:
                    if not entry.startswith(prefix):
                        continue
                    path = Path(directory) / entry
                    if not path.is_file() or not os.access(path, os.X_OK):
                        continue
                    command = Path(entry[len(prefix):]).stem if os.name == "nt" else entry[len(prefix):]
                    if command and command not in seen:
                        seen[command] = path
        return sorted(seen.items())
