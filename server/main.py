#!/usr/bin/env python3
"""
streamctl-sc streaming controller

Resolves the run mode and server configuration from the command line,
the environment (.env supported) and an optional YAML file, then serves
the public and private endpoints, plus the TLS proxy when --tls is set.
"""

import asyncio
import logging
import sys
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from .certificates.tls_acceptor import build_tls_acceptor
from .core.config import BuiltConfig, build_cluster_config, build_config
from .core.errors import ConfigurationError
from .core.mode import RunMode, RunModeKind
from .core.server import serve
from .options import ServerOptions, parse_args

logger = logging.getLogger("streamctl.server")


def resolve(options: ServerOptions) -> Tuple[RunMode, BuiltConfig]:
    """Run mode and configuration for `options`; raises ConfigurationError."""
    mode = options.mode()
    logger.info("run mode: %s", mode.kind.value)

    if mode.kind == RunModeKind.CLUSTER:
        built, cluster = build_cluster_config(options)
        logger.info("cluster namespace %s (from %s)", built.config.namespace, cluster.source)
    else:
        built = build_config(options)
    return mode, built


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for streamctl-sc."""
    load_dotenv()
    options = parse_args(argv)

    logging.basicConfig(level=getattr(logging, options.log_level))

    try:
        mode, built = resolve(options)
        acceptor = build_tls_acceptor(built.proxy.material) if built.proxy else None
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        asyncio.run(serve(mode, built, acceptor))
    except ConfigurationError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted. Bye!")


if __name__ == "__main__":
    main()
