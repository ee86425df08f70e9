#!/usr/bin/env python3
"""
streamctl-sc API Dependencies - Controller Allow-List
"""

import logging
from typing import FrozenSet

from fastapi import HTTPException, Request, status

from ..core.audit import audit_logger

logger = logging.getLogger("streamctl.server")

CONTROLLER_HEADER = "x-controller-id"


class AccessDependencies:
    """Coarse access filter: only allow-listed controllers may connect."""

    def __init__(self, white_list: FrozenSet[str]):
        self.white_list = frozenset(white_list)

    def require_allowed_controller(self, request: Request) -> None:
        """
        An empty allow-list admits everyone. Otherwise the request must name
        an allowed controller in the X-Controller-Id header.
        """
        if not self.white_list:
            return

        controller_id = request.headers.get(CONTROLLER_HEADER)
        allowed = controller_id in self.white_list
        audit_logger.controller_access(allowed=allowed, controller_id=controller_id, request=request)
        if not allowed:
            logger.warning(f"Rejected controller {controller_id!r}: not in allow-list")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="controller not allowed")
