"""
Audit trail: one JSON line per authentication attempt or state change.

Written to the "audit" logger so it can be routed separately from the
application log. Passwords and tokens are never passed in here.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

audit_logger = logging.getLogger("audit")


def _emit(event_type: str, fields: Dict[str, Any], level: int = logging.INFO) -> None:
    entry = {"timestamp": datetime.now(timezone.utc).isoformat(), "event_type": event_type}
    entry.update({key: value for key, value in fields.items() if value is not None})
    audit_logger.log(level, json.dumps(entry, default=str))


class AuditLog:
    """Static entry points, one per kind of audited event."""

    @staticmethod
    def log_authentication(
        action: str,  # "register", "login", "failed_register", "failed_login"
        email: str,
        ip_address: str,
        success: bool,
        reason: str = "",
        user_id: Optional[int] = None,
    ):
        """
        Usage:
            AuditLog.log_authentication("login", "user@example.com", "10.0.0.5", True, user_id=3)
            AuditLog.log_authentication("failed_login", "user@example.com", "10.0.0.5", False, reason="invalid credentials")
        """
        _emit(
            f"auth.{action}",
            {
                "email": email,
                "ip_address": ip_address,
                "success": success,
                "user_id": user_id,
                "reason": reason if reason and not success else None,
            },
            level=logging.INFO if success else logging.WARNING,
        )

    @staticmethod
    def log_action(
        action: str,  # "create", "update", "delete", "status_change"
        resource_type: str,  # "invoice", "client", "bill_from_address", "payment_detail"
        resource_id: int,
        user_id: int,
        changes: Optional[Dict[str, Any]] = None,
    ):
        """
        Who changed which row, and optionally how.

        Usage:
            AuditLog.log_action("create", "invoice", 12, user_id, changes={"invoice_number": "INV-2025-01-0001"})
        """
        _emit(
            f"{resource_type}.{action}",
            {"user_id": user_id, "resource_id": resource_id, "changes": changes or None},
        )

    @staticmethod
    def log_security_bypass(method: str, path: str):
        """Every request served while API_SECURE is off."""
        _emit(
            "auth.bypassed",
            {"event_severity": "WARNING", "method": method, "path": path},
            level=logging.WARNING,
        )
