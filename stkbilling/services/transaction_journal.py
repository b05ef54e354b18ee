"""
Transaction Journal
Correlates STK pushes with their callbacks by the gateway's CheckoutRequestID
"""

from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from stkbilling.extensions import db
from stkbilling.models import PaymentTransaction, TransactionStatus
from stkbilling.providers.stk_push import PushRequest
from stkbilling.schemas.callback_schema import CallbackEvent
from stkbilling.utils.logger import get_logger

logger = get_logger(__name__)

# settle() outcomes
SETTLED = 'settled'
ALREADY_SETTLED = 'already_settled'
UNKNOWN = 'unknown'


class TransactionJournal:
    """One record per accepted push, moved out of INITIATED exactly once."""

    @staticmethod
    def get(checkout_request_id: str) -> Optional[PaymentTransaction]:
        return PaymentTransaction.query.filter_by(
            checkout_request_id=checkout_request_id
        ).first()

    @staticmethod
    def record_initiated(push_request: PushRequest, response: Dict[str, Any]) -> Optional[PaymentTransaction]:
        """
        Journal an accepted push. The push is already with the customer, so a
        failed write is logged and rolled back rather than raised.
        """
        checkout_request_id = response.get('CheckoutRequestID') if isinstance(response, dict) else None
        if not checkout_request_id:
            return None

        transaction = PaymentTransaction(
            checkout_request_id=checkout_request_id,
            merchant_request_id=response.get('MerchantRequestID'),
            phone=push_request.normalized_phone,
            amount=str(push_request.amount),
            account_reference=push_request.account_reference,
            status=TransactionStatus.INITIATED.value
        )
        db.session.add(transaction)

        try:
            db.session.commit()
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception(f'Failed to journal transaction {checkout_request_id}')
            return None

        return transaction

    @staticmethod
    def settle(event: CallbackEvent) -> str:
        """
        Conditionally move the matching record from INITIATED to SUCCESS or
        FAILED. Not committed here; the callback processor owns the
        transaction.

        Returns:
            SETTLED, ALREADY_SETTLED (a redelivery) or UNKNOWN (no record)
        """
        if not event.checkout_request_id:
            return UNKNOWN

        facts = event.payment_facts() if event.succeeded else None
        new_status = TransactionStatus.SUCCESS if event.succeeded else TransactionStatus.FAILED

        result = db.session.execute(
            update(PaymentTransaction)
            .where(
                PaymentTransaction.checkout_request_id == event.checkout_request_id,
                PaymentTransaction.status == TransactionStatus.INITIATED.value
            )
            .values(
                status=new_status.value,
                result_code=event.result_code,
                result_desc=event.result_desc,
                receipt_number=str(facts.receipt_number) if facts and facts.receipt_number is not None else None,
                settled_at=datetime.utcnow()
            )
        )

        if result.rowcount:
            return SETTLED

        if TransactionJournal.get(event.checkout_request_id):
            return ALREADY_SETTLED
        return UNKNOWN
