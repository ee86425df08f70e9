#!/usr/bin/env python3
"""
streamctl-sc API Schemas
"""

from typing import List, Optional
from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str = "ok"


class StatusResponse(BaseModel):
    mode: str
    metadata_path: Optional[str] = None
    public_endpoint: str
    private_endpoint: str
    proxy_address: Optional[str] = None
    namespace: Optional[str] = None
    read_only: bool
    x509_auth_scopes: Optional[str] = None
    authorization_policy: bool
    white_list: List[str]
