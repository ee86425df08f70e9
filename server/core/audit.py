#!/usr/bin/env python3
"""
streamctl-sc Audit Logger

Structured JSON log lines for access-filter decisions.
"""

import json
import logging
import time
from typing import Dict, Any, Optional
from fastapi import Request


class AuditLogger:
    """Centralized audit logging for access decisions."""

    def __init__(self):
        self.logger = logging.getLogger("streamctl.audit")

    def _log_event(self, event_type: str, details: Dict[str, Any], request: Optional[Request] = None):
        """Log a structured audit event."""
        audit_record = {
            "timestamp": int(time.time()),
            "event_type": event_type,
            "details": details
        }

        if request:
            audit_record.update({
                "client_ip": request.client.host if request.client else "unknown",
                "method": request.method,
                "path": request.url.path,
            })

        self.logger.info(json.dumps(audit_record))

    def controller_access(self, allowed: bool, controller_id: Optional[str], request: Optional[Request] = None):
        """Log an allow-list decision for a connecting controller."""
        self._log_event(
            event_type="controller_access",
            details={"allowed": allowed, "controller_id": controller_id},
            request=request
        )


# Global audit logger instance
audit_logger = AuditLogger()
