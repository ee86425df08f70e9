"""`streamctl help`: list built-in commands and installed extensions."""

import argparse

from . import BuiltinCommand, CommandContext


def configure(parser: argparse.ArgumentParser) -> None:
    pass


def handle(ctx: CommandContext, args: argparse.Namespace) -> None:
    from . import BUILTINS

    ctx.out.println("usage: streamctl [--cluster ADDR] [-P PROFILE] [--log-level LEVEL] <command> [args...]")
    ctx.out.println()
    ctx.out.println("Commands:")
    for name, command in sorted(BUILTINS.items()):
        ctx.out.println(f"  {name:<14} {command.help}")

    extensions = ctx.locator.installed()
    if extensions:
        ctx.out.println()
        ctx.out.println("Extensions:")
        for name, path in extensions:
            ctx.out.println(f"  {name:<14} {path}")


COMMAND = BuiltinCommand(name="help", help="Print this message", configure=configure, handler=handle)
