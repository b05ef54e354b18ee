import uuid
from datetime import datetime

from sqlalchemy import Uuid

from stkbilling.extensions import db


class Subscriber(db.Model):
    __tablename__ = 'subscribers'

    id = db.Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Canonical 2547XXXXXXXX form
    phone = db.Column(db.String(20), unique=True, nullable=False, index=True)
    name = db.Column(db.String(255))

    # Subscription state
    subscription_active = db.Column(db.Boolean, nullable=False, default=False)
    subscription_expiry = db.Column(db.DateTime)

    # Last successful payment
    last_payment_amount = db.Column(db.Numeric(15, 2))
    last_payment_receipt = db.Column(db.String(64))
    last_payment_at = db.Column(db.DateTime)

    # Timestamps
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': str(self.id),
            'phone': self.phone,
            'name': self.name,
            'subscriptionActive': self.subscription_active,
            'subscriptionExpiry': self.subscription_expiry.isoformat() if self.subscription_expiry else None,
            'lastPayment': {
                'amount': float(self.last_payment_amount) if self.last_payment_amount is not None else None,
                'receipt': self.last_payment_receipt,
                'paidAt': self.last_payment_at.isoformat() if self.last_payment_at else None
            }
        }

    def __repr__(self):
        return f'<Subscriber {self.phone} - active={self.subscription_active}>'
