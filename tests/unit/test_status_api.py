"""Unit tests for the public/private status API and the TLS proxy"""
import asyncio
import logging
import ssl
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from server.certificates.tls_acceptor import TlsMaterial, build_tls_acceptor
from server.core.config import BuiltConfig, ServerConfig, build_config
from server.core.mode import RunMode
from server.core.server import create_app, create_private_app
from server.options import ServerOptions, TlsOptions
from server.proxy import _pipe, start_tls_proxy, upstream_target


def client_for(built, mode=None):
    return TestClient(create_app(mode or RunMode.local(Path("/var/lib/sc")), built))


class TestStatusRoutes:
    def test_health(self):
        response = client_for(BuiltConfig(config=ServerConfig())).get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_private_health(self):
        response = TestClient(create_private_app()).get("/health")

        assert response.status_code == 200

    def test_status_reports_resolved_config(self):
        built = build_config(ServerOptions(
            bind_public="0.0.0.0:9003",
            namespace="team",
            tls=TlsOptions(tls=True, bind_non_tls_public="0.0.0.0:9004"),
        ))

        body = client_for(built).get("/api/status").json()

        assert body["mode"] == "local"
        assert body["metadata_path"] == "/var/lib/sc"
        assert body["public_endpoint"] == "0.0.0.0:9004"
        assert body["proxy_address"] == "0.0.0.0:9003"
        assert body["namespace"] == "team"
        assert body["authorization_policy"] is False
        assert body["read_only"] is False

    def test_cluster_mode_status(self):
        body = client_for(BuiltConfig(config=ServerConfig()), RunMode.cluster()).get("/api/status").json()

        assert body["mode"] == "cluster"
        assert body["metadata_path"] is None
        assert body["proxy_address"] is None


class TestAllowList:
    """Only allow-listed controllers may query status"""

    @pytest.fixture
    def client(self):
        return client_for(BuiltConfig(config=ServerConfig(white_list=frozenset({"ctrl-1"}))))

    def test_allowed_controller(self, client):
        response = client.get("/api/status", headers={"X-Controller-Id": "ctrl-1"})

        assert response.status_code == 200
        assert response.json()["white_list"] == ["ctrl-1"]

    def test_unknown_controller_rejected(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="streamctl.audit"):
            response = client.get("/api/status", headers={"X-Controller-Id": "ctrl-9"})

        assert response.status_code == 403
        assert "controller_access" in caplog.text

    def test_missing_header_rejected(self, client):
        assert client.get("/api/status").status_code == 403

    def test_health_not_filtered(self, client):
        assert client.get("/health").status_code == 200

    def test_empty_allow_list_admits_everyone(self):
        assert client_for(BuiltConfig(config=ServerConfig())).get("/api/status").status_code == 200


class TestTlsProxy:
    def test_upstream_target_dials_loopback_for_wildcard(self):
        assert upstream_target("0.0.0.0:9004") == ("127.0.0.1", 9004)
        assert upstream_target("10.0.0.5:9004") == ("10.0.0.5", 9004)

    def test_pipe_waits_for_writer_teardown(self):
        """The writer is closed and awaited even when teardown fails"""
        writer = MagicMock()
        writer.drain = AsyncMock()
        writer.wait_closed = AsyncMock(side_effect=ConnectionResetError("reset"))

        async def scenario():
            reader = asyncio.StreamReader()
            reader.feed_data(b"payload")
            reader.feed_eof()
            await _pipe(reader, writer)

        asyncio.run(scenario())

        writer.write.assert_called_once_with(b"payload")
        writer.close.assert_called_once_with()
        writer.wait_closed.assert_awaited_once()

    def test_round_trip_through_proxy(self, self_signed_cert):
        """Bytes sent over TLS to the proxy reach the plaintext upstream and back"""
        cert, key = self_signed_cert
        acceptor = build_tls_acceptor(TlsMaterial(server_cert=str(cert), server_key=str(key)))

        client_context = ssl.SSLContext(ssl.PROTOCOL_TLS_CLIENT)
        client_context.check_hostname = False
        client_context.verify_mode = ssl.CERT_NONE

        async def scenario():
            async def echo(reader, writer):
                data = await reader.read(1024)
                writer.write(data.upper())
                await writer.drain()
                writer.close()

            upstream = await asyncio.start_server(echo, "127.0.0.1", 0)
            upstream_port = upstream.sockets[0].getsockname()[1]

            proxy = await start_tls_proxy("127.0.0.1:0", f"127.0.0.1:{upstream_port}", acceptor)
            proxy_port = proxy.sockets[0].getsockname()[1]

            try:
                reader, writer = await asyncio.open_connection(
                    "127.0.0.1", proxy_port, ssl=client_context, server_hostname="localhost")
                writer.write(b"ping")
                await writer.drain()
                reply = await asyncio.wait_for(reader.read(1024), timeout=5)
                writer.close()
                return reply
            finally:
                proxy.close()
                upstream.close()

        assert asyncio.run(scenario()) == b"PING"
