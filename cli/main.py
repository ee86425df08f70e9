#!/usr/bin/env python3
"""
streamctl entry point

Flow:
- parse root options and the command
- built-in commands run in-process; errors go to stderr with exit status 1
- unknown commands run the matching `streamctl-<name>` plugin, and this
  process then exits exactly as the plugin did (code or signal number)
"""

import logging
import sys
from typing import List, Optional

from .config import CliError
from .dispatch import PluginLaunchError, Termination, exit_with
from .router import CommandRouter, parse_command

logger = logging.getLogger(__name__)


def run(argv: List[str], router: Optional[CommandRouter] = None) -> Optional[Termination]:
    root, command = parse_command(argv)
    logging.basicConfig(level=getattr(logging, root.log_level))
    logger.debug("routing %s", command)

    router = router or CommandRouter()
    try:
        return router.route(root, command)
    except (CliError, PluginLaunchError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return Termination(code=1)


def main(argv: Optional[List[str]] = None) -> None:
    try:
        termination = run(sys.argv[1:] if argv is None else argv)
    except KeyboardInterrupt:
        print("\nInterrupted. Bye!")
        termination = Termination(code=130)

    if termination is not None:
        exit_with(termination)


if __name__ == "__main__":
    main()
