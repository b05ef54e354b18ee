import uuid
from datetime import datetime

from sqlalchemy import Uuid

from stkbilling.extensions import db


class AuditLog(db.Model):
    __tablename__ = 'audit_logs'

    id = db.Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    checkout_request_id = db.Column(db.String(255), index=True)

    # Event details
    event_type = db.Column(db.String(100), nullable=False, index=True)
    event_data = db.Column(db.JSON)

    # Dead-letter rows stay unresolved until reconciled
    resolved = db.Column(db.Boolean, nullable=False, default=False, index=True)
    resolved_at = db.Column(db.DateTime)

    # Request context
    ip_address = db.Column(db.String(45))
    user_agent = db.Column(db.String(500))

    # Timestamp
    timestamp = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)

    def to_dict(self):
        return {
            'id': str(self.id),
            'checkout_request_id': self.checkout_request_id,
            'event_type': self.event_type,
            'event_data': self.event_data,
            'resolved': self.resolved,
            'resolved_at': self.resolved_at.isoformat() if self.resolved_at else None,
            'ip_address': self.ip_address,
            'timestamp': self.timestamp.isoformat()
        }

    def __repr__(self):
        return f'<AuditLog {self.id} - {self.event_type}>'
