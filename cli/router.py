#!/usr/bin/env python3
"""
streamctl command routing

`streamctl [root options] <command> [args...]`:
- <command> names a built-in -> parsed by that built-in and handled in-process
- anything else            -> External, run as the `streamctl-<command>` plugin
"""

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from .commands import BUILTINS, BuiltinCommand, CommandContext, RootOptions
from .config import CliError, extensions_dir
from .dispatch import PluginDispatcher, Termination
from .output import Terminal
from .plugins import PLUGIN_PREFIX, PluginLocator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Builtin:
    name: str
    args: argparse.Namespace


@dataclass(frozen=True)
class External:
    """Unrecognized command; tokens[0] is the name the user typed."""
    tokens: Tuple[str, ...]


Command = Union[Builtin, External]

# Root options that take a value; long forms may be abbreviated as argparse allows
VALUE_OPTIONS = ("--cluster", "--profile", "--log-level")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="streamctl", description="streamctl command line interface")
    parser.add_argument("--cluster", help="cluster endpoint to target, overrides the active profile")
    parser.add_argument("-P", "--profile", help="profile to use instead of the active one")
    parser.add_argument("--log-level", dest="log_level", default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="logging level")
    parser.add_argument("command", nargs="?", help="built-in command or installed extension")
    parser.add_argument("args", nargs=argparse.REMAINDER, help="arguments for the command")
    return parser


def _option_width(token: str) -> Optional[int]:
    """Number of argv tokens taken by the root option `token`, None if it is not one."""
    if token.startswith("--"):
        name = token.split("=", 1)[0]
        matches = [option for option in VALUE_OPTIONS if option.startswith(name)]
        if len(matches) != 1:
            return None
        return 1 if "=" in token else 2
    if token.startswith("-P"):
        return 2 if token == "-P" else 1
    return None


def _command_index(argv: Sequence[str]) -> Optional[int]:
    """Position of the command token, None when argparse has to decide."""
    i = 0
    while i < len(argv):
        token = argv[i]
        if not token.startswith("-"):
            return i
        width = _option_width(token)
        if width is None:
            return None
        i += width
    return None


def parse_command(
    argv: Sequence[str],
    builtins: Optional[Dict[str, BuiltinCommand]] = None,
) -> Tuple[RootOptions, Command]:
    builtins = BUILTINS if builtins is None else builtins
    argv = list(argv)

    # external tokens are taken from argv verbatim; argparse would eat a literal "--"
    index = _command_index(argv)
    if index is not None and argv[index] not in builtins:
        ns = build_parser().parse_args(argv[:index])
        return _root_options(ns), External(tuple(argv[index:]))

    parser = build_parser()
    ns = parser.parse_args(argv)
    root = _root_options(ns)

    if ns.command is None:
        if "help" not in builtins:
            parser.error("a command is required")
        return root, Builtin("help", argparse.Namespace())

    builtin = builtins.get(ns.command)
    if builtin is None:
        return root, External((ns.command, *ns.args))

    sub = argparse.ArgumentParser(prog=f"streamctl {builtin.name}", description=builtin.help)
    builtin.configure(sub)
    return root, Builtin(builtin.name, sub.parse_args(ns.args))


def _root_options(ns: argparse.Namespace) -> RootOptions:
    return RootOptions(cluster=ns.cluster, profile=ns.profile, log_level=ns.log_level)


class CommandRouter:
    """Run built-ins in-process, hand everything else to a plugin."""

    def __init__(
        self,
        out: Optional[Terminal] = None,
        locator: Optional[PluginLocator] = None,
        dispatcher: Optional[PluginDispatcher] = None,
        builtins: Optional[Dict[str, BuiltinCommand]] = None,
        install_dir: Callable[[], Optional[Path]] = extensions_dir,
    ):
        self.out = out or Terminal()
        self.locator = locator or PluginLocator()
        self.dispatcher = dispatcher or PluginDispatcher()
        self.builtins = BUILTINS if builtins is None else builtins
        self.install_dir = install_dir

    def route(self, root: RootOptions, command: Command) -> Optional[Termination]:
        """Handle `command`; a returned Termination must be applied by the caller."""
        if isinstance(command, Builtin):
            builtin = self.builtins.get(command.name)
            if builtin is None:
                raise CliError(f"unknown command {command.name}")
            ctx = CommandContext(out=self.out, target=root, locator=self.locator)
            builtin.handler(ctx, command.args)
            return None
        return self.run_external(list(command.tokens))

    def run_external(self, tokens: List[str]) -> Termination:
        name, args = tokens[0], tokens[1:]
        plugin = f"{PLUGIN_PREFIX}{name}"

        path = self.locator.locate(plugin)
        if path is None:
            install_dir = self.install_dir()
            if install_dir is not None:
                self.out.println(f"Unable to find plugin '{plugin}'. Make sure it is installed in \"{install_dir}\".")
            else:
                self.out.println(f"Unable to find plugin '{plugin}'. Make sure it is in your PATH.")
            return Termination(code=1)

        return self.dispatcher.dispatch(path, args)
