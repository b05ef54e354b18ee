import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Uuid

from stkbilling.extensions import db


class TransactionStatus(str, Enum):
    INITIATED = 'initiated'
    SUCCESS = 'success'
    FAILED = 'failed'


class PaymentTransaction(db.Model):
    __tablename__ = 'payment_transactions'

    id = db.Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)

    # Gateway-assigned identifiers
    checkout_request_id = db.Column(db.String(255), unique=True, nullable=False, index=True)
    merchant_request_id = db.Column(db.String(255))

    # Request details
    phone = db.Column(db.String(20), nullable=False, index=True)
    amount = db.Column(db.String(32))
    account_reference = db.Column(db.String(64))
    status = db.Column(db.String(20), nullable=False, default=TransactionStatus.INITIATED.value)

    # Callback outcome
    result_code = db.Column(db.Integer)
    result_desc = db.Column(db.String(255))
    receipt_number = db.Column(db.String(64))

    # Timestamps
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    settled_at = db.Column(db.DateTime)

    def to_dict(self):
        return {
            'id': str(self.id),
            'checkout_request_id': self.checkout_request_id,
            'merchant_request_id': self.merchant_request_id,
            'phone': self.phone,
            'amount': self.amount,
            'account_reference': self.account_reference,
            'status': self.status,
            'result_code': self.result_code,
            'result_desc': self.result_desc,
            'receipt_number': self.receipt_number,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'settled_at': self.settled_at.isoformat() if self.settled_at else None
        }

    def __repr__(self):
        return f'<PaymentTransaction {self.checkout_request_id} - {self.status}>'
