"""
Daraja OAuth credentials.

CredentialProvider swaps the consumer key / secret for a bearer token on
every call. TokenCache sits in front of it and keeps one token per
credential pair until shortly before it expires; concurrent callers for the
same pair share a single fetch.
"""

import threading
import time
from typing import Callable, Dict, Optional, Tuple

import requests

from stkbilling.config import MpesaSettings
from stkbilling.errors import UpstreamError
from stkbilling.utils.logger import get_logger

logger = get_logger(__name__)

# Safaricom tokens live for 3600s
DEFAULT_EXPIRES_IN = 3599
EXPIRY_MARGIN = 60


class CredentialProvider:
    """Fetches OAuth access tokens from the Daraja token endpoint."""

    def __init__(self, settings: MpesaSettings):
        self.settings = settings

    @property
    def cache_key(self) -> Tuple[str, str]:
        return (self.settings.consumer_key, self.settings.consumer_secret)

    def fetch_token(self) -> Tuple[str, int]:
        """
        Perform one token round-trip.

        Returns:
            (access_token, expires_in seconds)

        Raises:
            UpstreamError: on transport failure, a non-2xx response, or a
                body without an access_token
        """
        try:
            resp = requests.get(
                self.settings.oauth_url,
                auth=(self.settings.consumer_key, self.settings.consumer_secret),
                timeout=self.settings.http_timeout,
            )
        except requests.RequestException as exc:
            raise UpstreamError(f"Failed to obtain access token: {exc}") from exc

        try:
            data = resp.json()
        except ValueError:
            data = None

        if not resp.ok:
            raise UpstreamError(
                f"Token request failed with HTTP {resp.status_code}",
                payload=data,
                upstream_status=resp.status_code,
            )

        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise UpstreamError("Token response did not include an access_token", payload=data)

        try:
            expires_in = int(data.get("expires_in", DEFAULT_EXPIRES_IN))
        except (TypeError, ValueError):
            expires_in = DEFAULT_EXPIRES_IN

        logger.debug("Access token obtained (expires in %ds)", expires_in)
        return token, expires_in


class TokenCache:
    """
    Shared bearer-token cache keyed by (consumer_key, consumer_secret).

    A per-key lock makes acquisition single-flight: while one caller is
    fetching, others for the same credential pair wait and then reuse the
    fresh token.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._entries: Dict[Tuple[str, str], Tuple[str, float]] = {}
        self._locks: Dict[Tuple[str, str], threading.Lock] = {}
        self._global_lock = threading.Lock()

    def _get_lock(self, key: Tuple[str, str]) -> threading.Lock:
        with self._global_lock:
            if key not in self._locks:
                self._locks[key] = threading.Lock()
            return self._locks[key]

    def _cached(self, key: Tuple[str, str]) -> Optional[str]:
        entry = self._entries.get(key)
        if entry and self._clock() < entry[1]:
            return entry[0]
        return None

    def get_token(self, provider: CredentialProvider) -> str:
        """Return a valid token for the provider's credentials, fetching if needed."""
        key = provider.cache_key

        token = self._cached(key)
        if token:
            return token

        with self._get_lock(key):
            # Another caller may have refreshed while we waited
            token = self._cached(key)
            if token:
                return token

            token, expires_in = provider.fetch_token()
            ttl = max(expires_in - EXPIRY_MARGIN, 0)
            self._entries[key] = (token, self._clock() + ttl)
            return token

    def invalidate(self, consumer_key: str, consumer_secret: str) -> None:
        self._entries.pop((consumer_key, consumer_secret), None)

    def clear(self) -> None:
        self._entries.clear()


# Process-wide cache shared by every gateway client
shared_token_cache = TokenCache()
