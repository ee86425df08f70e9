"""`streamctl profile`: inspect and switch the active profile."""

import argparse

from ..config import CliError, ProfileConfig, config_path
from . import BuiltinCommand, CommandContext


def configure(parser: argparse.ArgumentParser) -> None:
    sub = parser.add_subparsers(dest="action", required=True)
    sub.add_parser("current", help="print the active profile")
    sub.add_parser("list", help="list all profiles")
    switch = sub.add_parser("switch", help="make another profile active")
    switch.add_argument("name")


def handle(ctx: CommandContext, args: argparse.Namespace) -> None:
    path = config_path()
    config = ProfileConfig.from_file(path)

    if args.action == "current":
        name = ctx.target.profile or config.current_profile
        if not name:
            raise CliError("no active profile set")
        if name not in config.profiles:
            raise CliError(f"profile {name} not found")
        ctx.out.println(name)

    elif args.action == "list":
        if not config.profiles:
            ctx.out.println("no profiles found")
            return
        ctx.out.println(f"    {'PROFILE':<16} {'CLUSTER':<16} ENDPOINT")
        for profile in config.profiles.values():
            marker = "*" if profile.name == config.current_profile else " "
            endpoint = config.endpoint_for(profile) or "-"
            ctx.out.println(f"{marker:>3} {profile.name:<16} {profile.cluster:<16} {endpoint}")

    elif args.action == "switch":
        if args.name not in config.profiles:
            raise CliError(f"profile {args.name} not found")
        if path is None:
            raise CliError("cannot resolve streamctl home directory")
        config.current_profile = args.name
        config.save(path)
        ctx.out.println(f"switched to profile {args.name}")


COMMAND = BuiltinCommand(name="profile", help="Manage profiles, which describe linked clusters",
                         configure=configure, handler=handle)
