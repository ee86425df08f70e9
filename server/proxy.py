#!/usr/bin/env python3
"""
TLS terminating proxy

Accepts TLS connections on the advertised public address and forwards
the plaintext bytes to the server's internal public endpoint.
"""

import asyncio
import logging
import ssl

from .core.config import parse_endpoint

logger = logging.getLogger("streamctl.server")

WILDCARD_HOSTS = {"0.0.0.0", "::", ""}
CHUNK_SIZE = 64 * 1024


def upstream_target(endpoint: str):
    """Address to dial for `endpoint`; wildcard binds are reached over loopback."""
    host, port = parse_endpoint(endpoint)
    if host in WILDCARD_HOSTS:
        host = "::1" if host == "::" else "127.0.0.1"
    return host, port


async def _pipe(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    try:
        while True:
            data = await reader.read(CHUNK_SIZE)
            if not data:
                break
            writer.write(data)
            await writer.drain()
    except (ConnectionError, ssl.SSLError) as e:
        logger.debug("proxy stream closed: %s", e)
    finally:
        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug("proxy stream teardown: %s", e)


async def start_tls_proxy(proxy_address: str, target_endpoint: str, acceptor: ssl.SSLContext) -> asyncio.AbstractServer:
    """Start listening on `proxy_address`; caller owns the returned server."""
    listen_host, listen_port = parse_endpoint(proxy_address)
    target_host, target_port = upstream_target(target_endpoint)

    async def handle(client_reader: asyncio.StreamReader, client_writer: asyncio.StreamWriter) -> None:
        peer = client_writer.get_extra_info("peername")
        try:
            upstream_reader, upstream_writer = await asyncio.open_connection(target_host, target_port)
        except OSError as e:
            logger.error("proxy cannot reach %s:%s for %s: %s", target_host, target_port, peer, e)
            client_writer.close()
            return

        logger.debug("proxying %s -> %s:%s", peer, target_host, target_port)
        await asyncio.gather(
            _pipe(client_reader, upstream_writer),
            _pipe(upstream_reader, client_writer),
        )

    server = await asyncio.start_server(handle, listen_host, listen_port, ssl=acceptor)
    logger.info("tls proxy listening on %s, forwarding to %s:%s", proxy_address, target_host, target_port)
    return server
