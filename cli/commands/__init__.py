"""Compiled-in streamctl subcommands."""

import argparse
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from ..output import Terminal
from ..plugins import PluginLocator


@dataclass(frozen=True)
class RootOptions:
    """Options given before the subcommand; they select which cluster to talk to."""
    cluster: Optional[str] = None
    profile: Optional[str] = None
    log_level: str = "WARNING"


@dataclass
class CommandContext:
    out: Terminal
    target: RootOptions
    locator: PluginLocator


Handler = Callable[[CommandContext, argparse.Namespace], None]


@dataclass(frozen=True)
class BuiltinCommand:
    name: str
    help: str
    configure: Callable[[argparse.ArgumentParser], None]
    handler: Handler


def _registry() -> Dict[str, BuiltinCommand]:
    from . import help, profile, version

    commands = [version.COMMAND, profile.COMMAND, help.COMMAND]
    return {c.name: c for c in commands}


BUILTINS: Dict[str, BuiltinCommand] = _registry()
