#!/usr/bin/env python3
"""
TLS acceptor for the streamctl-sc proxy

Validates the certificate material and assembles an ssl.SSLContext from
it. Handshakes are left to the ssl module.
"""

import logging
import ssl
from datetime import datetime, timezone
from typing import Callable, Optional

from cryptography import x509
from pydantic import BaseModel, ConfigDict

from ..core.errors import TlsMaterialError

logger = logging.getLogger("streamctl.server")


class TlsMaterial(BaseModel):
    model_config = ConfigDict(frozen=True)

    server_cert: Optional[str] = None
    server_key: Optional[str] = None
    enable_client_cert: bool = False
    ca_cert: Optional[str] = None
    # Kubernetes secret the material is provisioned from; not read here
    secret_name: Optional[str] = None


def inspect_certificate(path: str) -> x509.Certificate:
    """Parse the server certificate and log who it is for and when it expires."""
    try:
        with open(path, "rb") as f:
            cert = x509.load_pem_x509_certificate(f.read())
    except OSError as e:
        raise TlsMaterialError(f"cannot read server cert {path}: {e}") from e
    except ValueError as e:
        raise TlsMaterialError(f"invalid server cert {path}: {e}") from e

    expires = cert.not_valid_after_utc
    if expires < datetime.now(timezone.utc):
        logger.warning("server certificate %s expired at %s", path, expires.isoformat())
    logger.info("server certificate subject=%s expires=%s", cert.subject.rfc4514_string(), expires.isoformat())
    return cert


class SslAcceptorBuilder:
    """Default provider: a server-side ssl.SSLContext."""

    def __init__(self):
        self.context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        self.context.verify_mode = ssl.CERT_NONE

    def with_peer_verification(self, ca_path: str) -> "SslAcceptorBuilder":
        self.context.verify_mode = ssl.CERT_REQUIRED
        self.context.load_verify_locations(cafile=ca_path)
        return self

    def with_certificate_and_key(self, cert_path: str, key_path: str) -> "SslAcceptorBuilder":
        inspect_certificate(cert_path)
        self.context.load_cert_chain(cert_path, key_path)
        return self

    def build(self) -> ssl.SSLContext:
        return self.context


def build_tls_acceptor(material: TlsMaterial, builder_factory: Callable[[], SslAcceptorBuilder] = SslAcceptorBuilder):
    """Create the TLS acceptor for `material`, or raise TlsMaterialError."""
    if not material.server_cert:
        raise TlsMaterialError("missing server cert")
    logger.info("using server crt: %s", material.server_cert)
    if not material.server_key:
        raise TlsMaterialError("missing server key")
    logger.info("using server key: %s", material.server_key)
    if material.enable_client_cert and not material.ca_cert:
        raise TlsMaterialError("missing ca cert")

    try:
        builder = builder_factory()
        if material.enable_client_cert:
            logger.info("using client cert CA path: %s", material.ca_cert)
            builder = builder.with_peer_verification(material.ca_cert)
        else:
            logger.info("using tls anonymous access")
        builder = builder.with_certificate_and_key(material.server_cert, material.server_key)
        return builder.build()
    except OSError as e:
        # ssl.SSLError is an OSError
        raise TlsMaterialError(f"cannot load tls material: {e}") from e
