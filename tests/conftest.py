"""Pytest configuration and shared fixtures"""
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID

# Make `cli` and `server` importable without installing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))


@pytest.fixture
def make_executable():
    """Factory writing a shell script with the executable bit set"""
    def _make(directory: Path, name: str, body: str = "#!/bin/sh\nexit 0\n", mode: int = 0o755) -> Path:
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_text(body)
        path.chmod(mode)
        return path
    return _make


@pytest.fixture
def streamctl_home(tmp_path, monkeypatch):
    """Isolated $STREAMCTL_DIR"""
    home = tmp_path / "streamctl-home"
    home.mkdir()
    monkeypatch.setenv("STREAMCTL_DIR", str(home))
    return home


@pytest.fixture
def self_signed_cert(tmp_path):
    """Throwaway self-signed certificate usable as server cert and as CA"""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, "localhost")])
    now = datetime.now(timezone.utc)
    cert = (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=30))
        .add_extension(x509.SubjectAlternativeName([x509.DNSName("localhost")]), critical=False)
        .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
        .sign(key, hashes.SHA256())
    )

    cert_path = tmp_path / "server.crt"
    key_path = tmp_path / "server.key"
    cert_path.write_bytes(cert.public_bytes(serialization.Encoding.PEM))
    key_path.write_bytes(key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    ))
    return cert_path, key_path
