"""
Audit Service
Durable audit trail and dead-letter records for callback processing
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from flask import has_request_context, request

from stkbilling.extensions import db
from stkbilling.models import AuditLog
from stkbilling.utils.logger import get_logger

logger = get_logger(__name__)

# Event types
CALLBACK_UNMATCHED = 'callback.unmatched'
CALLBACK_MALFORMED = 'callback.malformed'
CALLBACK_RECONCILED = 'callback.reconciled'


class AuditService:
    """Service for creating and reading audit log entries"""

    @staticmethod
    def log_event(
            event_type: str,
            event_data: Dict[str, Any],
            checkout_request_id: Optional[str] = None,
            ip_address: Optional[str] = None,
            user_agent: Optional[str] = None
    ) -> AuditLog:
        """
        Create an audit log entry

        Args:
            event_type: Type of event (e.g., 'callback.unmatched')
            event_data: Additional event data
            checkout_request_id: Gateway checkout request ID, if known
            ip_address: IP address of the request
            user_agent: User agent string

        Returns:
            Created AuditLog object
        """
        # Try to extract request context if not provided
        if has_request_context():
            if not ip_address:
                ip_address = AuditService._get_client_ip()
            if not user_agent:
                user_agent = request.headers.get('User-Agent')

        audit_log = AuditLog(
            checkout_request_id=checkout_request_id,
            event_type=event_type,
            event_data=event_data,
            ip_address=ip_address,
            user_agent=user_agent
        )

        db.session.add(audit_log)

        try:
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            logger.error(f'Failed to create audit log: {str(e)}')
            raise

        return audit_log

    @staticmethod
    def get_unresolved(event_type: str = CALLBACK_UNMATCHED) -> List[AuditLog]:
        """
        Get dead-letter entries still waiting for reconciliation

        Returns:
            Unresolved entries, oldest first
        """
        return AuditLog.query.filter_by(
            event_type=event_type,
            resolved=False
        ).order_by(AuditLog.timestamp.asc()).all()

    @staticmethod
    def mark_resolved(audit_log: AuditLog) -> None:
        audit_log.resolved = True
        audit_log.resolved_at = datetime.utcnow()
        db.session.commit()

    @staticmethod
    def _get_client_ip() -> Optional[str]:
        """
        Get client IP address from request
        Handles proxy headers (X-Forwarded-For, X-Real-IP)
        """
        if request.headers.get('X-Forwarded-For'):
            # X-Forwarded-For can contain multiple IPs, get the first one
            return request.headers.get('X-Forwarded-For').split(',')[0].strip()
        if request.headers.get('X-Real-IP'):
            return request.headers.get('X-Real-IP')
        return request.remote_addr
