"""
Subscriber Store
Lookup and subscription updates for subscriber billing records
"""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError

from stkbilling.extensions import db
from stkbilling.models import AppliedPayment, Subscriber
from stkbilling.schemas.callback_schema import PaymentFacts
from stkbilling.utils.dates import add_months
from stkbilling.utils.logger import get_logger

logger = get_logger(__name__)

SUBSCRIPTION_MONTHS = 1


def _to_decimal(value) -> Optional[Decimal]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return None


class SubscriberStore:
    """Subscriber records are looked up and updated here, never created."""

    def __init__(self, clock: Callable[[], datetime] = datetime.utcnow):
        self._clock = clock

    def find_by_phone(self, phone: str) -> Optional[Subscriber]:
        """Exact match on the canonical phone."""
        if not phone:
            return None
        return Subscriber.query.filter_by(phone=phone).first()

    def apply_payment(
            self,
            subscriber: Subscriber,
            facts: PaymentFacts,
            checkout_request_id: Optional[str] = None
    ) -> bool:
        """
        Extend a subscription by one calendar month from now and record the
        payment. Changes are flushed, not committed; the caller owns the
        transaction.

        The extension is keyed by the receipt number (falling back to the
        checkout request ID), so a payment that has already been applied is
        not applied again.

        Returns:
            True if the subscription was extended, False for a replay
        """
        key = facts.receipt_number or checkout_request_id
        if key:
            if AppliedPayment.query.filter_by(idempotency_key=str(key)).first():
                logger.info(f'Payment {key} already applied to {subscriber.phone}; skipping')
                return False

            db.session.add(AppliedPayment(
                idempotency_key=str(key),
                subscriber_id=subscriber.id,
                checkout_request_id=checkout_request_id
            ))
            try:
                db.session.flush()
            except IntegrityError:
                # A concurrent delivery of the same payment got there first
                db.session.rollback()
                logger.info(f'Payment {key} applied concurrently; skipping')
                return False
        else:
            logger.warning(f'Payment for {subscriber.phone} has no receipt or checkout ID; applying without replay guard')

        now = self._clock()
        subscriber.subscription_active = True
        subscriber.subscription_expiry = add_months(now, SUBSCRIPTION_MONTHS)
        subscriber.last_payment_amount = _to_decimal(facts.amount)
        subscriber.last_payment_receipt = str(facts.receipt_number) if facts.receipt_number is not None else None
        subscriber.last_payment_at = now
        db.session.flush()

        return True
