"""
Services Package
Wires the gateway client, initiator and callback processor from one
MpesaSettings value
"""

from dataclasses import dataclass
from typing import Optional

from stkbilling.config import MpesaSettings
from stkbilling.providers import (
    CredentialProvider,
    MPesaGateway,
    PushRequestBuilder,
    TokenCache,
    shared_token_cache
)
from stkbilling.services.callback_service import CallbackProcessor
from stkbilling.services.subscriber_store import SubscriberStore
from stkbilling.services.transaction_journal import TransactionJournal
from stkbilling.services.transaction_service import TransactionInitiator

EXTENSION_KEY = 'stkbilling'


@dataclass(frozen=True)
class BillingServices:
    settings: MpesaSettings
    gateway: MPesaGateway
    initiator: TransactionInitiator
    callbacks: CallbackProcessor


def build_services(settings: MpesaSettings, token_cache: Optional[TokenCache] = None) -> BillingServices:
    journal = TransactionJournal()
    gateway = MPesaGateway(
        settings,
        token_cache or shared_token_cache,
        credentials=CredentialProvider(settings)
    )

    return BillingServices(
        settings=settings,
        gateway=gateway,
        initiator=TransactionInitiator(gateway, PushRequestBuilder(settings), journal=journal),
        callbacks=CallbackProcessor(store=SubscriberStore(), journal=journal)
    )


def get_services(app=None) -> BillingServices:
    """Services registered on the app (the current app by default)."""
    if app is None:
        from flask import current_app
        app = current_app
    return app.extensions[EXTENSION_KEY]


__all__ = [
    'BillingServices',
    'build_services',
    'get_services',
    'TransactionInitiator',
    'CallbackProcessor',
    'SubscriberStore',
    'TransactionJournal',
    'EXTENSION_KEY'
]
