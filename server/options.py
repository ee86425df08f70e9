#!/usr/bin/env python3
"""
streamctl-sc command line options

Mode flags --local, --k8s and --read-only are mutually exclusive, and
--read-only cannot be combined with an authorization policy. The two
authorization paths fall back to the X509_AUTH_SCOPES and AUTH_POLICY
environment variables.
"""

import argparse
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .core.mode import RunMode, select_mode

SCOPES_ENV = "X509_AUTH_SCOPES"
POLICY_ENV = "AUTH_POLICY"


@dataclass(frozen=True)
class TlsOptions:
    tls: bool = False
    server_cert: Optional[str] = None
    server_key: Optional[str] = None
    enable_client_cert: bool = False
    ca_cert: Optional[str] = None
    bind_non_tls_public: Optional[str] = None
    secret_name: Optional[str] = None


@dataclass(frozen=True)
class ServerOptions:
    local: Optional[Path] = None
    k8s: bool = False
    read_only: Optional[Path] = None
    bind_public: Optional[str] = None
    bind_private: Optional[str] = None
    namespace: Optional[str] = None
    tls: TlsOptions = field(default_factory=TlsOptions)
    x509_auth_scopes: Optional[Path] = None
    auth_policy: Optional[Path] = None
    white_list: Tuple[str, ...] = ()
    config_file: Optional[Path] = None
    log_level: str = "INFO"

    def mode(self) -> RunMode:
        return select_mode(self.local, self.read_only, self.k8s)

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "ServerOptions":
        tls = TlsOptions(
            tls=args.tls,
            server_cert=args.server_cert,
            server_key=args.server_key,
            enable_client_cert=args.enable_client_cert,
            ca_cert=args.ca_cert,
            bind_non_tls_public=args.bind_non_tls_public,
            secret_name=args.secret_name,
        )
        return cls(
            local=args.local,
            k8s=args.k8s,
            read_only=args.read_only,
            bind_public=args.bind_public,
            bind_private=args.bind_private,
            namespace=args.namespace,
            tls=tls,
            x509_auth_scopes=args.x509_auth_scopes,
            auth_policy=args.auth_policy,
            white_list=tuple(args.white_list),
            config_file=args.config,
            log_level=args.log_level,
        )


def _env_path(name: str) -> Optional[Path]:
    value = os.environ.get(name)
    return Path(value) if value else None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="streamctl-sc", description="Streaming controller")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--local", type=Path, metavar="METADATA_PATH", help="run in local mode")
    mode.add_argument("--k8s", action="store_true", help="run on Kubernetes")
    mode.add_argument("--read-only", dest="read_only", type=Path, metavar="METADATA_PATH",
                      help=argparse.SUPPRESS)

    parser.add_argument("--bind-public", dest="bind_public", help="address for external service")
    parser.add_argument("--bind-private", dest="bind_private", help="address for internal service")
    parser.add_argument("-n", "--namespace", help="Kubernetes namespace")

    tls = parser.add_argument_group("TLS")
    tls.add_argument("--tls", action="store_true", help="enable tls")
    tls.add_argument("--server-cert", dest="server_cert", help="path to server certificate")
    tls.add_argument("--server-key", dest="server_key", help="path to server private key")
    tls.add_argument("--enable-client-cert", dest="enable_client_cert", action="store_true",
                     help="require client certificates")
    tls.add_argument("--ca-cert", dest="ca_cert", help="path to ca cert, required when client cert is enabled")
    tls.add_argument("--bind-non-tls-public", dest="bind_non_tls_public",
                     help="address of non tls public service, required with --tls")
    tls.add_argument("--secret-name", dest="secret_name", help="secret name used while adding to kubernetes")

    parser.add_argument("--authorization-scopes", dest="x509_auth_scopes", type=Path,
                        default=_env_path(SCOPES_ENV), metavar="PATH",
                        help=f"authorization scopes path (env: {SCOPES_ENV})")
    parser.add_argument("--authorization-policy", dest="auth_policy", type=Path,
                        default=_env_path(POLICY_ENV), metavar="PATH",
                        help=f"authorization policy path (env: {POLICY_ENV})")
    parser.add_argument("--white-list", dest="white_list", action="append", default=[],
                        metavar="CONTROLLER", help="only allow these controllers (repeatable)")

    parser.add_argument("-c", "--config", type=Path, help="YAML config file with endpoint defaults")
    parser.add_argument("--log-level", dest="log_level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="logging level")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> ServerOptions:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.read_only is not None and args.auth_policy is not None:
        parser.error("argument --read-only: not allowed with argument --authorization-policy")
    return ServerOptions.from_args(args)
