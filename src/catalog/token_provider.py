"""Client-credentials bearer tokens for the music catalog."""

import logging
import threading
import time
from dataclasses import dataclass

import requests

from src.core.config import Settings
from src.core.errors import UpstreamError

logger = logging.getLogger(__name__)

# A cached token is refreshed this many seconds before it actually expires.
EXPIRY_MARGIN_SECONDS = 60.0


@dataclass(frozen=True)
class CatalogToken:
    access_token: str
    expires_at: float  # time.monotonic() deadline

    def is_fresh(self, now: float | None = None) -> bool:
        now = time.monotonic() if now is None else now
        return now < self.expires_at - EXPIRY_MARGIN_SECONDS


class CatalogTokenProvider:
    """
    Exchanges the configured client id/secret for a bearer token.

    When cache_catalog_token is enabled the last token is shared across requests
    until shortly before it expires; otherwise every call performs a fresh exchange.
    """

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self._token_url = settings.catalog_token_url
        self._client_id = settings.catalog_client_id
        self._client_secret = settings.catalog_client_secret
        self._timeout = settings.request_timeout_seconds
        self._use_cache = settings.cache_catalog_token
        self._session = session or requests.Session()
        self._lock = threading.Lock()
        self._cached: CatalogToken | None = None

    def get_token(self) -> CatalogToken:
        """Return a usable token. Raises UpstreamError on missing credentials or any exchange failure."""
        if not self._use_cache:
            return self._exchange()
        with self._lock:
            if self._cached is not None and self._cached.is_fresh():
                return self._cached
            self._cached = self._exchange()
            return self._cached

    def _exchange(self) -> CatalogToken:
        if not self._client_id or not self._client_secret:
            raise UpstreamError("Catalog credentials are not configured")
        try:
            resp = self._session.post(
                self._token_url,
                data={"grant_type": "client_credentials"},
                auth=(self._client_id, self._client_secret),
                timeout=self._timeout,
            )
        except requests.RequestException as e:
            raise UpstreamError("Catalog token endpoint is unreachable", details=str(e)) from e
        if not resp.ok:
            raise UpstreamError(
                f"Catalog token endpoint returned HTTP {resp.status_code}",
                details=resp.text[:500] or None,
            )
        try:
            body = resp.json()
            access_token = body["access_token"]
            expires_in = float(body.get("expires_in", 3600))
        except (ValueError, KeyError, TypeError) as e:
            raise UpstreamError("Catalog token response was malformed", details=str(e)) from e
        if not isinstance(access_token, str) or not access_token:
            raise UpstreamError("Catalog token response had an empty access_token")
        logger.debug("Obtained catalog token valid for %.0fs", expires_in)
        return CatalogToken(access_token=access_token, expires_at=time.monotonic() + expires_in)
