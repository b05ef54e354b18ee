"""
M-Pesa gateway client
Based on the Safaricom Daraja API.

Supported flows
---------------
Authentication
    GET  /oauth/v1/generate?grant_type=client_credentials  (Basic auth)
    Tokens are held by a shared TokenCache and refreshed on expiry.

STK Push (Lipa na M-Pesa Online)
    POST /mpesa/stkpush/v1/processrequest

Callback
    Safaricom POSTs the result to {CALLBACK_BASE_URL}/callback; see
    stkbilling.services.callback_service.
"""

from typing import Any, Dict, Optional

import requests

from stkbilling.config import MpesaSettings
from stkbilling.errors import UpstreamError
from stkbilling.providers.credentials import CredentialProvider, TokenCache
from stkbilling.providers.stk_push import PushRequest
from stkbilling.utils.logger import get_logger

logger = get_logger(__name__)


class MPesaGateway:
    """Daraja STK Push client."""

    def __init__(
        self,
        settings: MpesaSettings,
        token_cache: TokenCache,
        credentials: Optional[CredentialProvider] = None,
    ):
        self.settings = settings
        self.token_cache = token_cache
        self.credentials = credentials or CredentialProvider(settings)

        self._session = requests.Session()
        self._session.headers.update({"Content-Type": "application/json"})

    def get_access_token(self) -> str:
        return self.token_cache.get_token(self.credentials)

    def submit_stk_push(self, push_request: PushRequest, token: Optional[str] = None) -> Dict[str, Any]:
        """
        Send an STK Push request and return the gateway response verbatim.

        Args:
            push_request: Built request; its payload is sent as-is
            token: Bearer token already acquired by the caller, if any

        Raises:
            UpstreamError: token acquisition failed, the request could not be
                sent, or the gateway answered with a non-2xx status
        """
        token = token or self.get_access_token()
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type":  "application/json",
        }

        try:
            resp = self._session.post(
                self.settings.stk_push_url,
                json=push_request.payload,
                headers=headers,
                timeout=self.settings.http_timeout,
            )
        except requests.RequestException as exc:
            raise UpstreamError(f"STK Push network error: {exc}") from exc

        try:
            return self._handle_response(resp, context="stk_push")
        except UpstreamError as exc:
            if exc.upstream_status == 401:
                # Rejected token; the next request fetches a fresh one
                self.token_cache.invalidate(*self.credentials.cache_key)
            raise

    def _handle_response(self, resp: requests.Response, context: str) -> Dict[str, Any]:
        """Parse a Daraja response, raising on non-2xx status."""
        try:
            data = resp.json()
        except ValueError:
            data = {"raw": resp.text}

        logger.debug("MPesa [%s] HTTP %s: %s", context, resp.status_code, data)

        if not resp.ok:
            error_msg = None
            if isinstance(data, dict):
                error_msg = data.get("errorMessage") or data.get("ResponseDescription")
            raise UpstreamError(
                f"Request failed with status code {resp.status_code}"
                + (f": {error_msg}" if error_msg else ""),
                payload=data,
                upstream_status=resp.status_code,
            )

        return data
