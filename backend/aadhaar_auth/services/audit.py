"""
Structured audit logging service for verification events
"""
import logging
import json
from typing import Optional
from datetime import datetime

logger = logging.getLogger(__name__)


class AuditService:
    """
    Structured audit logging service for verification events.

    Never logs codes, passwords, full phone numbers or full Aadhaar numbers.
    """

    @staticmethod
    def _log_audit_event(
        event_type: str,
        outcome: str,
        account_last4: Optional[str] = None,
        phone_last4: Optional[str] = None,
        simulated: Optional[bool] = None,
        error: Optional[str] = None,
        **kwargs
    ):
        audit_data = {
            "event_type": event_type,
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "outcome": outcome,
        }

        if account_last4:
            audit_data["account_last4"] = account_last4
        if phone_last4:
            audit_data["phone_last4"] = phone_last4
        if simulated is not None:
            audit_data["simulated"] = simulated
        if error:
            audit_data["error"] = error

        audit_data.update(kwargs)

        # Log as JSON for structured logging
        logger.info(f"[Auth][Audit] {json.dumps(audit_data)}")

    @staticmethod
    def log_flow_started(flow: str, account_id: str, phone_last4: Optional[str] = None, simulated: bool = False):
        """Log signup or OTP login start"""
        AuditService._log_audit_event(
            f"{flow}_started",
            outcome="success",
            account_last4=account_id[-4:],
            phone_last4=phone_last4,
            simulated=simulated,
        )

    @staticmethod
    def log_verify_success(flow: str, account_id: str, simulated: bool = False, user_id: Optional[str] = None):
        AuditService._log_audit_event(
            f"{flow}_verify_success",
            outcome="success",
            account_last4=account_id[-4:],
            simulated=simulated,
            user_id=user_id,
        )

    @staticmethod
    def log_verify_fail(flow: str, account_id: str, error: str, simulated: bool = False):
        AuditService._log_audit_event(
            f"{flow}_verify_fail",
            outcome="fail",
            account_last4=account_id[-4:],
            simulated=simulated,
            error=error,
        )

    @staticmethod
    def log_rate_limited(flow: str, account_id: str, reason: Optional[str] = None):
        AuditService._log_audit_event(
            f"{flow}_rate_limited",
            outcome="rate_limited",
            account_last4=account_id[-4:],
            error=reason,
        )

    @staticmethod
    def log_reconciliation_needed(account_id: str, provider_id: str, username: str, error: str):
        """
        Identity confirmed at the provider but the account could not be stored.
        Operators reconcile from this entry.
        """
        logger.error(
            "[Auth][Reconcile] "
            + json.dumps({
                "event_type": "signup_persist_failed",
                "timestamp": datetime.utcnow().isoformat() + "Z",
                "account_id": account_id,
                "provider_id": provider_id,
                "username": username,
                "error": error,
            })
        )
