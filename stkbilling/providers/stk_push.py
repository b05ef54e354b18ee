import base64
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from stkbilling.config import MpesaSettings
from stkbilling.utils.phone import normalize_phone


def generate_timestamp(now: datetime) -> str:
    """Timestamp = YYYYMMDDHHmmss, local wall-clock time."""
    return now.strftime("%Y%m%d%H%M%S")


def make_password(shortcode: str, passkey: str, timestamp: str) -> str:
    """Password = Base64(BusinessShortCode + Passkey + Timestamp)"""
    raw = f"{shortcode}{passkey}{timestamp}"
    return base64.b64encode(raw.encode("utf-8")).decode("utf-8")


@dataclass
class PushRequest:
    phone: str
    normalized_phone: str
    amount: Any
    account_reference: str
    timestamp: str
    password: str
    payload: Dict[str, Any] = field(default_factory=dict)


class PushRequestBuilder:
    """Assembles Lipa na M-Pesa Online (STK Push) request payloads."""

    def __init__(self, settings: MpesaSettings, clock: Callable[[], datetime] = datetime.now):
        self.settings = settings
        self._clock = clock

    def build(
        self,
        phone: str,
        amount: Optional[Any] = None,
        account_reference: Optional[str] = None,
    ) -> PushRequest:
        if amount is None or amount == "":
            amount = self.settings.default_amount
        if not account_reference:
            account_reference = self.settings.account_reference

        normalized = normalize_phone(phone)

        # The password embeds the timestamp, so both come from one clock read
        timestamp = generate_timestamp(self._clock())
        password = make_password(self.settings.shortcode, self.settings.passkey, timestamp)

        payload = {
            "BusinessShortCode": self.settings.shortcode,
            "Password":          password,
            "Timestamp":         timestamp,
            "TransactionType":   self.settings.transaction_type,
            "Amount":            amount,
            "PartyA":            normalized,
            "PartyB":            self.settings.shortcode,
            "PhoneNumber":       normalized,
            "CallBackURL":       self.settings.callback_url,
            "AccountReference":  account_reference,
            "TransactionDesc":   self.settings.transaction_desc,
        }

        return PushRequest(
            phone=phone,
            normalized_phone=normalized,
            amount=amount,
            account_reference=account_reference,
            timestamp=timestamp,
            password=password,
            payload=payload,
        )
