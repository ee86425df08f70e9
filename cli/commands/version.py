"""`streamctl version`: print version information."""

import argparse
import json
import platform

from .. import __version__
from ..config import ProfileConfig, config_path
from . import BuiltinCommand, CommandContext


def configure(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--json", action="store_true", help="print as a JSON object")


def target_endpoint(ctx: CommandContext):
    """Cluster endpoint the invocation targets, if one can be determined."""
    if ctx.target.cluster:
        return ctx.target.cluster
    config = ProfileConfig.from_file(config_path())
    name = ctx.target.profile or config.current_profile
    profile = config.profiles.get(name) if name else None
    return config.endpoint_for(profile) if profile else None


def handle(ctx: CommandContext, args: argparse.Namespace) -> None:
    info = {
        "streamctl": __version__,
        "python": platform.python_version(),
        "platform": platform.platform(),
        "cluster": target_endpoint(ctx),
    }
    if args.json:
        ctx.out.println(json.dumps(info, indent=2))
        return

    ctx.out.println(f"streamctl CLI     : {info['streamctl']}")
    ctx.out.println(f"Python            : {info['python']}")
    ctx.out.println(f"Platform          : {info['platform']}")
    if info["cluster"]:
        ctx.out.println(f"Cluster endpoint  : {info['cluster']}")


COMMAND = BuiltinCommand(name="version", help="Print streamctl version information",
                         configure=configure, handler=handle)
