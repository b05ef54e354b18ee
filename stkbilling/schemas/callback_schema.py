"""
STK Push callback schemas

Safaricom delivers results as:

    {"Body": {"stkCallback": {
        "MerchantRequestID": "...",
        "CheckoutRequestID": "...",
        "ResultCode": 0,
        "ResultDesc": "...",
        "CallbackMetadata": {"Item": [{"Name": "Amount", "Value": 1}, ...]}
    }}}

CallbackMetadata is only present on successful payments.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from marshmallow import Schema, fields, post_load, EXCLUDE
from marshmallow import ValidationError as SchemaValidationError

from stkbilling.errors import CallbackStructureError

# Metadata item names; the payer's number arrives under either phone name
PHONE_ITEM_NAMES = ('PhoneNumber', 'MSISDN')
AMOUNT_ITEM_NAME = 'Amount'
RECEIPT_ITEM_NAME = 'MpesaReceiptNumber'


@dataclass
class PaymentFacts:
    phone: Optional[str]
    amount: Any
    receipt_number: Optional[str]


@dataclass
class CallbackEvent:
    result_code: int
    result_desc: str
    merchant_request_id: Optional[str]
    checkout_request_id: Optional[str]
    items: List[Tuple[str, Any]] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.result_code == 0

    def find_item(self, name: str) -> Any:
        """Value of the first item with this name, or None."""
        for item_name, value in self.items:
            if item_name == name:
                return value
        return None

    def has_item(self, name: str) -> bool:
        return any(item_name == name for item_name, _ in self.items)

    def payment_facts(self) -> PaymentFacts:
        phone = None
        for name in PHONE_ITEM_NAMES:
            if self.has_item(name):
                value = self.find_item(name)
                phone = str(value) if value is not None else None
                break

        return PaymentFacts(
            phone=phone,
            amount=self.find_item(AMOUNT_ITEM_NAME),
            receipt_number=self.find_item(RECEIPT_ITEM_NAME),
        )


class CallbackItemSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    name = fields.Raw(data_key='Name', allow_none=True, load_default=None)
    value = fields.Raw(data_key='Value', allow_none=True, load_default=None)


class CallbackMetadataSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    items = fields.List(fields.Nested(CallbackItemSchema), data_key='Item', load_default=list)


class StkCallbackSchema(Schema):
    """Body.stkCallback validation schema"""

    class Meta:
        unknown = EXCLUDE

    merchant_request_id = fields.Raw(data_key='MerchantRequestID', allow_none=True, load_default=None)
    checkout_request_id = fields.Raw(data_key='CheckoutRequestID', allow_none=True, load_default=None)
    result_code = fields.Int(data_key='ResultCode', required=True, strict=False)
    result_desc = fields.Str(data_key='ResultDesc', allow_none=True, load_default='')
    metadata = fields.Nested(CallbackMetadataSchema, data_key='CallbackMetadata', allow_none=True, load_default=None)

    @post_load
    def make_event(self, data, **kwargs):
        metadata = data.get('metadata') or {}
        return CallbackEvent(
            result_code=data['result_code'],
            result_desc=data.get('result_desc') or '',
            merchant_request_id=_as_id(data.get('merchant_request_id')),
            checkout_request_id=_as_id(data.get('checkout_request_id')),
            # Items without a usable name are ignored
            items=[
                (item['name'], item.get('value'))
                for item in metadata.get('items', [])
                if isinstance(item.get('name'), str) and item['name']
            ],
        )


def _as_id(value: Any) -> Optional[str]:
    if value is None or value == '':
        return None
    return str(value)


stk_callback_schema = StkCallbackSchema()


def parse_callback(envelope: Any) -> CallbackEvent:
    """
    Pull the STK callback out of a delivery envelope.

    Raises:
        CallbackStructureError: the envelope has no Body.stkCallback, or the
            callback inside it cannot be read
    """
    body = envelope.get('Body') if isinstance(envelope, dict) else None
    stk = body.get('stkCallback') if isinstance(body, dict) else None
    if not isinstance(stk, dict) or not stk:
        raise CallbackStructureError('Missing stkCallback in Body')

    try:
        return stk_callback_schema.load(stk)
    except SchemaValidationError as exc:
        raise CallbackStructureError(f'Malformed stkCallback: {exc.messages}') from exc
