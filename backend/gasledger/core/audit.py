"""
Audit logging for stock-affecting business events.

Each entry is one JSON line on the "audit" logger so it can be shipped to
centralized logging and joined against report mismatches later.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Separate logger for audit events
audit_logger = logging.getLogger("audit")


class AuditLog:
    """Central audit logging for sales and stock movements."""

    @staticmethod
    def log_action(
        action: str,  # "create", "reject", "receive", "initialize"
        resource_type: str,  # "sale", "stock_assignment", "invoice_counter"
        resource_id: int | str,
        user_id: Optional[int] = None,
        changes: Optional[Dict[str, Any]] = None,
    ):
        """
        Log business-critical actions.

        Usage:
            AuditLog.log_action("create", "sale", 12, changes={"invoice": "10001"})
            AuditLog.log_action("reject", "stock_assignment", 7, user_id=3)
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": f"{resource_type}.{action}",
            "resource_id": resource_id,
        }
        if user_id is not None:
            log_entry["user_id"] = user_id
        if changes:
            log_entry["changes"] = changes

        audit_logger.info(json.dumps(log_entry, default=str))

    @staticmethod
    def log_side_effect_failure(
        step: str,  # "inventory", "daily_sales", "linkage"
        sale_id: int,
        product_id: Optional[int],
        error: Exception,
    ):
        """
        Record a post-commit bookkeeping failure.

        The sale stays committed; this entry is what makes the resulting
        inventory/report drift discoverable.
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_severity": "WARNING",
            "event_type": f"sale.side_effect_failed.{step}",
            "sale_id": sale_id,
            "product_id": product_id,
            "error": f"{type(error).__name__}: {error}",
        }
        audit_logger.warning(json.dumps(log_entry))
