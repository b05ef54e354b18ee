from typing import Any, Dict, Optional

from stkbilling.errors import ValidationError
from stkbilling.providers.mpesa_provider import MPesaGateway
from stkbilling.providers.stk_push import PushRequestBuilder
from stkbilling.services.transaction_journal import TransactionJournal
from stkbilling.utils.logger import get_logger

logger = get_logger(__name__)


class TransactionInitiator:
    """Starts STK Push payments"""

    def __init__(
            self,
            gateway: MPesaGateway,
            builder: PushRequestBuilder,
            journal: Optional[TransactionJournal] = None
    ):
        self.gateway = gateway
        self.builder = builder
        self.journal = journal or TransactionJournal()

    def initiate(
            self,
            phone: Optional[str],
            amount: Optional[Any] = None,
            account_reference: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Prompt the payer's handset to authorise a charge

        Args:
            phone: Payer phone in any supported format
            amount: Charge amount; the configured default when omitted
            account_reference: Reference shown to the payer

        Returns:
            The gateway's response, unmodified

        Raises:
            ValidationError: phone missing (no outbound call is made)
            UpstreamError: token or push request failed
        """
        if phone is None or not str(phone).strip():
            raise ValidationError('phone required')

        # One token request, then one push request
        token = self.gateway.get_access_token()
        push_request = self.builder.build(phone, amount=amount, account_reference=account_reference)
        response = self.gateway.submit_stk_push(push_request, token=token)

        logger.info(
            f'STK Push sent to {push_request.normalized_phone} for {push_request.amount} '
            f'(checkout {response.get("CheckoutRequestID") if isinstance(response, dict) else None})'
        )

        self.journal.record_initiated(push_request, response)

        return response
