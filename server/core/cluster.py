#!/usr/bin/env python3
"""
Cluster (Kubernetes) configuration lookup

Only what the server needs at startup: the namespace to run in, and
where it came from. Sources, in order:
- in-cluster: KUBERNETES_SERVICE_HOST set, namespace from the service account
- kubeconfig: first existing file in $KUBECONFIG, else ~/.kube/config;
  namespace of the current context ("default" when the context has none)
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from .errors import ConfigurationError

logger = logging.getLogger("streamctl.server")

SERVICE_ACCOUNT_DIR = Path("/var/run/secrets/kubernetes.io/serviceaccount")
DEFAULT_NAMESPACE = "default"


@dataclass(frozen=True)
class ClusterConfig:
    namespace: str
    source: str
    context: Optional[str] = None
    server: Optional[str] = None


def load_cluster_config(
    environ: Optional[Mapping[str, str]] = None,
    service_account_dir: Path = SERVICE_ACCOUNT_DIR,
) -> ClusterConfig:
    env = os.environ if environ is None else environ
    if env.get("KUBERNETES_SERVICE_HOST"):
        return _load_in_cluster(env, service_account_dir)
    return _load_kubeconfig(_kubeconfig_path(env))


def _load_in_cluster(env: Mapping[str, str], service_account_dir: Path) -> ClusterConfig:
    namespace_file = service_account_dir / "namespace"
    try:
        namespace = namespace_file.read_text().strip()
    except OSError as e:
        raise ConfigurationError(f"running in cluster but cannot read {namespace_file}: {e}") from e

    host = env.get("KUBERNETES_SERVICE_HOST")
    port = env.get("KUBERNETES_SERVICE_PORT", "443")
    return ClusterConfig(
        namespace=namespace or DEFAULT_NAMESPACE,
        source="in-cluster",
        server=f"https://{host}:{port}",
    )


def _kubeconfig_path(env: Mapping[str, str]) -> Path:
    configured = env.get("KUBECONFIG")
    if configured:
        candidates = [Path(p).expanduser() for p in configured.split(os.pathsep) if p]
        for candidate in candidates:
            if candidate.exists():
                return candidate
        if candidates:
            return candidates[0]
    return Path(env.get("HOME") or Path.home()) / ".kube" / "config"


def _named(entries: Any, name: Optional[str]) -> Dict[str, Any]:
    for entry in entries or []:
        if isinstance(entry, dict) and entry.get("name") == name:
            return entry
    return {}


def _load_kubeconfig(path: Path) -> ClusterConfig:
    try:
        with open(path, "r") as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise ConfigurationError(f"no cluster configuration found at {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"malformed kubeconfig {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"malformed kubeconfig {path}")

    current = data.get("current-context")
    if not current:
        raise ConfigurationError(f"kubeconfig {path} has no current-context")

    context = _named(data.get("contexts"), current).get("context") or {}
    cluster = _named(data.get("clusters"), context.get("cluster")).get("cluster") or {}

    config = ClusterConfig(
        namespace=context.get("namespace") or DEFAULT_NAMESPACE,
        source=str(path),
        context=current,
        server=cluster.get("server"),
    )
    logger.debug("loaded cluster config %s", config)
    return config
