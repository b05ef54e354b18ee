from stkbilling.models.subscriber import Subscriber
from stkbilling.models.payment_transaction import PaymentTransaction, TransactionStatus
from stkbilling.models.applied_payment import AppliedPayment
from stkbilling.models.audit_log import AuditLog

__all__ = ['Subscriber', 'PaymentTransaction', 'TransactionStatus', 'AppliedPayment', 'AuditLog']
