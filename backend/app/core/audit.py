"""
Audit logging for inventory-affecting operations.

The Transaction table is the durable audit trail; this logger mirrors each
event as one JSON line so it can be shipped to centralized logging.

LOGGING SENSITIVE DATA: patient references are pseudonymous codes and are
never expanded here.
"""
import logging
import json
from datetime import datetime, timezone
from typing import Optional

# Separate logger for audit events (can be shipped to centralized logging)
audit_logger = logging.getLogger("audit")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditLog:
    """Central audit logging for stock events."""

    @staticmethod
    def log_check_in(daana_id: str, quantity: int, user_id: str, lot_id: int):
        log_entry = {
            "timestamp": _now(),
            "event_type": "unit.check_in",
            "daana_id": daana_id,
            "quantity": quantity,
            "user_id": user_id,
            "lot_id": lot_id,
        }
        audit_logger.info(json.dumps(log_entry))

    @staticmethod
    def log_dispense(
        daana_id: str,
        quantity: int,
        remaining: int,
        user_id: str,
        transaction_id: int,
        patient_ref: Optional[str] = None,
    ):
        """
        Log a committed check-out.

        Usage:
            AuditLog.log_dispense("UNIT-42", 4, 6, "user-1", 17)
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": "unit.check_out",
            "daana_id": daana_id,
            "quantity": quantity,
            "remaining": remaining,
            "unit_removed": remaining == 0,
            "user_id": user_id,
            "transaction_id": transaction_id,
        }

        if patient_ref:
            log_entry["patient_ref"] = patient_ref

        audit_logger.info(json.dumps(log_entry))

    @staticmethod
    def log_fefo_advisory(daana_id: str, older_daana_id: str, user_id: str, confirmed: bool):
        """
        Log an out-of-order dispense attempt. `confirmed` is False when the
        dispense was held back for operator confirmation.
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": "unit.fefo_advisory",
            "daana_id": daana_id,
            "older_daana_id": older_daana_id,
            "user_id": user_id,
            "confirmed": confirmed,
        }
        audit_logger.info(json.dumps(log_entry))

    @staticmethod
    def log_commit_failed(daana_id: str, quantity: int, user_id: str, reason: str):
        log_entry = {
            "timestamp": _now(),
            "event_severity": "ERROR",
            "event_type": "unit.check_out_failed",
            "daana_id": daana_id,
            "quantity": quantity,
            "user_id": user_id,
            "reason": reason,
        }
        audit_logger.error(json.dumps(log_entry))
