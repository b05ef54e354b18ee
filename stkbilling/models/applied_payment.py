import uuid
from datetime import datetime

from sqlalchemy import Uuid

from stkbilling.extensions import db


class AppliedPayment(db.Model):
    """One row per subscription extension; the unique key blocks replays."""
    __tablename__ = 'applied_payments'

    id = db.Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # Receipt number, or the checkout request id when no receipt was reported
    idempotency_key = db.Column(db.String(255), unique=True, nullable=False)
    subscriber_id = db.Column(Uuid(as_uuid=True), db.ForeignKey('subscribers.id'), nullable=False, index=True)
    checkout_request_id = db.Column(db.String(255))

    applied_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    def __repr__(self):
        return f'<AppliedPayment {self.idempotency_key}>'
