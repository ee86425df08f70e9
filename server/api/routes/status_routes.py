#!/usr/bin/env python3
"""
Status Routes - Health and Resolved Configuration
"""

from fastapi import APIRouter, Depends

from ...core.config import BuiltConfig
from ...core.mode import RunMode
from ..dependencies import AccessDependencies
from ..schemas import HealthResponse, StatusResponse


def create_health_routes() -> APIRouter:
    router = APIRouter()

    @router.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse()

    return router


def create_status_routes(mode: RunMode, built: BuiltConfig, access_deps: AccessDependencies) -> APIRouter:
    """Create routes reporting how this server was configured."""
    router = APIRouter()
    config = built.config

    @router.get("/api/status", response_model=StatusResponse,
                dependencies=[Depends(access_deps.require_allowed_controller)])
    def get_status():
        return StatusResponse(
            mode=mode.kind.value,
            metadata_path=str(mode.metadata_path) if mode.metadata_path else None,
            public_endpoint=config.public_endpoint,
            private_endpoint=config.private_endpoint,
            proxy_address=built.proxy.proxy_address if built.proxy else None,
            namespace=config.namespace,
            read_only=config.read_only_metadata,
            x509_auth_scopes=str(config.x509_auth_scopes) if config.x509_auth_scopes else None,
            authorization_policy=built.policy is not None,
            white_list=sorted(config.white_list),
        )

    return router
