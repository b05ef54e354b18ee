from stkbilling.providers.credentials import CredentialProvider, TokenCache, shared_token_cache
from stkbilling.providers.mpesa_provider import MPesaGateway
from stkbilling.providers.stk_push import (
    PushRequest,
    PushRequestBuilder,
    generate_timestamp,
    make_password,
)

__all__ = [
    'CredentialProvider',
    'TokenCache',
    'shared_token_cache',
    'MPesaGateway',
    'PushRequest',
    'PushRequestBuilder',
    'generate_timestamp',
    'make_password',
]
