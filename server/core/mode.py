#!/usr/bin/env python3
"""
Server run mode

Exactly one of:
- LOCAL      metadata kept in a local directory
- READ_ONLY  metadata loaded from a directory and never written
- CLUSTER    metadata stored in the cluster (Kubernetes)
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional


class RunModeKind(str, Enum):
    LOCAL = "local"
    READ_ONLY = "read_only"
    CLUSTER = "cluster"


@dataclass(frozen=True)
class RunMode:
    kind: RunModeKind
    metadata_path: Optional[Path] = None

    @classmethod
    def local(cls, path: Path) -> "RunMode":
        return cls(RunModeKind.LOCAL, Path(path))

    @classmethod
    def read_only(cls, path: Path) -> "RunMode":
        return cls(RunModeKind.READ_ONLY, Path(path))

    @classmethod
    def cluster(cls) -> "RunMode":
        return cls(RunModeKind.CLUSTER)


def select_mode(local: Optional[Path], read_only: Optional[Path], cluster: bool = False) -> RunMode:
    """Pick the run mode: local wins over read-only, anything else runs in the cluster.

    The inputs are expected to be mutually exclusive already (the options
    parser enforces it); `cluster` does not change the outcome.
    """
    if local is not None:
        return RunMode.local(local)
    if read_only is not None:
        return RunMode.read_only(read_only)
    return RunMode.cluster()
