#!/usr/bin/env python3
"""
streamctl-sc application assembly and serving

- public app  on config.public_endpoint  (plaintext; behind the proxy with TLS)
- private app on config.private_endpoint
- TLS proxy   on proxy.proxy_address, when TLS is enabled
"""

import asyncio
import logging
import ssl
from typing import Optional

import uvicorn
from fastapi import FastAPI

from .. import __version__
from ..api.dependencies import AccessDependencies
from ..api.routes.status_routes import create_health_routes, create_status_routes
from ..proxy import start_tls_proxy
from .config import BuiltConfig, parse_endpoint
from .errors import ConfigurationError
from .mode import RunMode

logger = logging.getLogger("streamctl.server")


def create_app(mode: RunMode, built: BuiltConfig) -> FastAPI:
    """Public application."""
    app = FastAPI(title="streamctl-sc", version=__version__)
    app.include_router(create_health_routes())
    app.include_router(create_status_routes(mode, built, AccessDependencies(built.config.white_list)))
    return app


def create_private_app() -> FastAPI:
    app = FastAPI(title="streamctl-sc private", version=__version__)
    app.include_router(create_health_routes())
    return app


def _uvicorn_server(app: FastAPI, endpoint: str) -> uvicorn.Server:
    host, port = parse_endpoint(endpoint)
    config = uvicorn.Config(app, host=host, port=port, access_log=False, log_config=None)
    return uvicorn.Server(config)


async def serve(mode: RunMode, built: BuiltConfig, acceptor: Optional[ssl.SSLContext] = None) -> None:
    config = built.config
    public = _uvicorn_server(create_app(mode, built), config.public_endpoint)
    private = _uvicorn_server(create_private_app(), config.private_endpoint)
    tasks = [public.serve(), private.serve()]

    logger.info("serving public on %s, private on %s", config.public_endpoint, config.private_endpoint)

    proxy_server = None
    if built.proxy is not None:
        if acceptor is None:
            raise ConfigurationError("tls proxy configured without a tls acceptor")
        proxy_server = await start_tls_proxy(built.proxy.proxy_address, config.public_endpoint, acceptor)
        tasks.append(proxy_server.serve_forever())

    try:
        await asyncio.gather(*tasks)
    finally:
        if proxy_server is not None:
            proxy_server.close()
            await proxy_server.wait_closed()
