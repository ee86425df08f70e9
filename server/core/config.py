#!/usr/bin/env python3
"""
streamctl-sc Server Configuration

Values are applied in this order, each step returning a new immutable
ServerConfig:
    1) defaults
    2) YAML config file (--config), known keys only
    3) endpoint overrides from the command line
    4) namespace, authorization scopes, allow-list, read-only flag
Then the authorization policy is loaded, and with --tls the public
endpoint is split: the advertised address goes to the TLS proxy and the
server itself binds the non-TLS address.
"""

import dataclasses
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, FrozenSet, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from ..certificates.tls_acceptor import TlsMaterial
from ..options import ServerOptions, TlsOptions
from .cluster import ClusterConfig, load_cluster_config
from .errors import ConfigurationError
from .policy import BasicRbacPolicy

logger = logging.getLogger("streamctl.server")

DEFAULT_PUBLIC_ENDPOINT = "0.0.0.0:9003"
DEFAULT_PRIVATE_ENDPOINT = "0.0.0.0:9004"
TLS_SERVER_SECRET_NAME = "streamctl-tls"


class ServerConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    public_endpoint: str = DEFAULT_PUBLIC_ENDPOINT
    private_endpoint: str = DEFAULT_PRIVATE_ENDPOINT
    namespace: Optional[str] = None
    x509_auth_scopes: Optional[Path] = None
    read_only_metadata: bool = False
    white_list: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class ProxySettings:
    """Where the TLS proxy listens, and the material it terminates TLS with."""
    proxy_address: str
    material: TlsMaterial


@dataclass(frozen=True)
class BuiltConfig:
    config: ServerConfig
    policy: Optional[BasicRbacPolicy] = None
    proxy: Optional[ProxySettings] = None


def parse_endpoint(endpoint: str) -> Tuple[str, int]:
    """Split "host:port" (IPv6 hosts in brackets) into its parts."""
    host, sep, port = endpoint.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ConfigurationError(f"invalid endpoint {endpoint!r}, expected host:port")
    return host.strip("[]"), int(port)


def load_config_from(path: Path) -> dict:
    """Load server configuration values from a YAML file."""
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"cannot read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"malformed config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {path} must be a mapping")
    logger.info(f"Loading configuration from: {path}")
    return data


def with_config_file(config: ServerConfig, path: Path) -> ServerConfig:
    data = load_config_from(path)
    try:
        return ServerConfig.model_validate({**config.model_dump(), **data})
    except ValidationError as e:
        raise ConfigurationError(f"invalid config file {path}: {e}") from e


def with_endpoints(config: ServerConfig, options: ServerOptions) -> ServerConfig:
    update = {}
    if options.bind_public is not None:
        update["public_endpoint"] = options.bind_public
    if options.bind_private is not None:
        update["private_endpoint"] = options.bind_private
    return config.model_copy(update=update)


def with_access_options(config: ServerConfig, options: ServerOptions) -> ServerConfig:
    update = {"read_only_metadata": options.read_only is not None}
    if options.namespace is not None:
        update["namespace"] = options.namespace
    if options.x509_auth_scopes is not None:
        update["x509_auth_scopes"] = options.x509_auth_scopes
    if options.white_list:
        update["white_list"] = frozenset(options.white_list)
    return config.model_copy(update=update)


def load_policy(path: Optional[Path]) -> Optional[BasicRbacPolicy]:
    if path is None:
        return None
    return BasicRbacPolicy.from_file(path)


def split_tls(config: ServerConfig, tls: TlsOptions) -> Tuple[ServerConfig, Optional[ProxySettings]]:
    """With TLS on, the advertised public address is served by the proxy
    and the server binds the non-TLS public address behind it."""
    if not tls.tls:
        return config, None

    proxy_addr = config.public_endpoint
    logger.debug("tls proxy addr: %s", proxy_addr)
    if not tls.bind_non_tls_public:
        raise ConfigurationError("non tls addr for public must be specified")

    material = TlsMaterial(
        server_cert=tls.server_cert,
        server_key=tls.server_key,
        enable_client_cert=tls.enable_client_cert,
        ca_cert=tls.ca_cert,
        secret_name=tls.secret_name or TLS_SERVER_SECRET_NAME,
    )
    logger.info("tls enabled: proxy %s -> %s, %s", proxy_addr, tls.bind_non_tls_public, material)
    config = config.model_copy(update={"public_endpoint": tls.bind_non_tls_public})
    return config, ProxySettings(proxy_address=proxy_addr, material=material)


def build_config(options: ServerOptions) -> BuiltConfig:
    config = ServerConfig()
    if options.config_file is not None:
        config = with_config_file(config, options.config_file)
    config = with_endpoints(config, options)
    config = with_access_options(config, options)

    policy = load_policy(options.auth_policy)
    config, proxy = split_tls(config, options.tls)
    return BuiltConfig(config=config, policy=policy, proxy=proxy)


def build_cluster_config(
    options: ServerOptions,
    loader: Callable[[], ClusterConfig] = load_cluster_config,
) -> Tuple[BuiltConfig, ClusterConfig]:
    """build_config for cluster mode: the namespace defaults to the cluster's."""
    cluster = loader()
    logger.info("cluster config: %s", cluster)

    if options.namespace is None:
        logger.info("using %s as namespace from cluster config", cluster.namespace)
        options = dataclasses.replace(options, namespace=cluster.namespace)

    return build_config(options), cluster
