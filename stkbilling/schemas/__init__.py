"""
Schemas Package
Marshmallow schemas for request/callback validation
"""

from stkbilling.schemas.stk_push_schema import InitiatePushSchema
from stkbilling.schemas.callback_schema import (
    CallbackEvent,
    PaymentFacts,
    StkCallbackSchema,
    parse_callback
)

__all__ = [
    'InitiatePushSchema',
    'CallbackEvent',
    'PaymentFacts',
    'StkCallbackSchema',
    'parse_callback'
]
