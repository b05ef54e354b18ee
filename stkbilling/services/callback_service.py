"""
Callback Service
Applies STK Push results to subscriber billing records

The gateway redelivers any callback that is not acknowledged with
resultCode 0, so every expected outcome (no STK data, declined payment,
unknown payer, redelivery) is acknowledged as success. Only an unexpected
fault is answered with resultCode 1.
"""

import json
from typing import Any, Dict, Optional

from stkbilling.errors import CallbackStructureError, LookupMiss
from stkbilling.extensions import db
from stkbilling.schemas.callback_schema import CallbackEvent, PaymentFacts, parse_callback
from stkbilling.services.audit_service import (
    AuditService,
    CALLBACK_MALFORMED,
    CALLBACK_RECONCILED,
    CALLBACK_UNMATCHED
)
from stkbilling.services.subscriber_store import SubscriberStore
from stkbilling.services.transaction_journal import TransactionJournal, ALREADY_SETTLED
from stkbilling.utils.logger import get_logger
from stkbilling.utils.phone import normalize_phone

logger = get_logger(__name__)

ACCEPTED = {'resultCode': 0, 'resultDesc': 'Accepted'}
NO_STK_DATA = {'resultCode': 0, 'resultDesc': 'No STK data'}
ERROR = {'resultCode': 1, 'resultDesc': 'Error'}


class CallbackProcessor:
    """Interprets gateway result notifications"""

    def __init__(
            self,
            store: Optional[SubscriberStore] = None,
            journal: Optional[TransactionJournal] = None
    ):
        self.store = store or SubscriberStore()
        self.journal = journal or TransactionJournal()

    def handle_callback(self, envelope: Any) -> Dict[str, Any]:
        """
        Process one callback delivery

        Args:
            envelope: Parsed JSON body as delivered by the gateway

        Returns:
            Acknowledgment {'resultCode': 0|1, 'resultDesc': str}
        """
        try:
            logger.info(f'M-Pesa callback received: {json.dumps(envelope, indent=2, default=str)}')

            try:
                event = parse_callback(envelope)
            except CallbackStructureError as e:
                logger.warning(f'Callback ignored: {e.message}')
                if isinstance(envelope, dict) and envelope.get('Body'):
                    # Something arrived but could not be read; keep it for inspection
                    AuditService.log_event(
                        event_type=CALLBACK_MALFORMED,
                        event_data={'error': e.message, 'payload': envelope}
                    )
                return dict(NO_STK_DATA)

            self._process(event)
            db.session.commit()
            return dict(ACCEPTED)

        except Exception:
            db.session.rollback()
            logger.exception('Callback processing error')
            return dict(ERROR)

    def _process(self, event: CallbackEvent) -> None:
        settlement = self.journal.settle(event)
        if settlement == ALREADY_SETTLED:
            logger.info(f'Callback for {event.checkout_request_id} already settled; ignoring redelivery')
            return

        if not event.succeeded:
            logger.info(
                f'Payment failed or cancelled, ResultCode: {event.result_code} {event.result_desc}'
            )
            return

        facts = event.payment_facts()
        logger.info(
            f'Payment success for phone: {facts.phone} amount: {facts.amount} '
            f'receipt: {facts.receipt_number}'
        )

        phone = normalize_phone(facts.phone or self._journalled_phone(event) or '')

        try:
            self._apply(phone, facts, event.checkout_request_id)
        except LookupMiss as miss:
            logger.warning(miss.message)
            AuditService.log_event(
                event_type=CALLBACK_UNMATCHED,
                event_data={
                    'phone': phone,
                    'amount': facts.amount,
                    'receipt_number': facts.receipt_number,
                    'merchant_request_id': event.merchant_request_id,
                    'result_desc': event.result_desc
                },
                checkout_request_id=event.checkout_request_id
            )

    def _apply(self, phone: str, facts: PaymentFacts, checkout_request_id: Optional[str]) -> bool:
        subscriber = self.store.find_by_phone(phone)
        if not subscriber:
            raise LookupMiss(phone)

        applied = self.store.apply_payment(subscriber, facts, checkout_request_id=checkout_request_id)
        if applied:
            logger.info(f'Updated subscription for {phone}')
        return applied

    def _journalled_phone(self, event: CallbackEvent) -> Optional[str]:
        if not event.checkout_request_id:
            return None
        transaction = self.journal.get(event.checkout_request_id)
        return transaction.phone if transaction else None

    def reconcile_unmatched(self) -> int:
        """
        Retry dead-lettered successful payments whose payer had no
        subscriber record at callback time.

        Returns:
            Number of entries resolved
        """
        resolved = 0

        for entry in AuditService.get_unresolved(CALLBACK_UNMATCHED):
            entry_id = entry.id
            data = entry.event_data or {}
            facts = PaymentFacts(
                phone=data.get('phone'),
                amount=data.get('amount'),
                receipt_number=data.get('receipt_number')
            )
            phone = normalize_phone(facts.phone or '')

            try:
                applied = self._apply(phone, facts, entry.checkout_request_id)

                AuditService.mark_resolved(entry)
                AuditService.log_event(
                    event_type=CALLBACK_RECONCILED,
                    event_data={
                        'phone': phone,
                        'receipt_number': facts.receipt_number,
                        'dead_letter_id': str(entry_id),
                        'applied': applied
                    },
                    checkout_request_id=entry.checkout_request_id
                )
            except LookupMiss:
                continue
            except Exception:
                # Left unresolved for the next run
                db.session.rollback()
                logger.exception(f'Reconciliation failed for dead letter {entry_id}')
                continue

            resolved += 1

        if resolved:
            logger.info(f'Reconciled {resolved} unmatched callback(s)')
        return resolved
