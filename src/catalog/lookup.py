"""Track search against the music catalog, reduced to a single preview clip URL."""

import logging

import requests

from src.catalog.token_provider import CatalogToken
from src.core.config import Settings

logger = logging.getLogger(__name__)


def build_query(title: str, artist: str) -> str:
    """Structured search query; URL escaping is left to the HTTP layer."""
    return f"track:{title} artist:{artist}"


class CatalogLookup:
    """Finds a preview clip for (title, artist). Never raises: every failure is None."""

    def __init__(self, settings: Settings, session: requests.Session | None = None) -> None:
        self._api_url = settings.catalog_api_url.rstrip("/")
        self._timeout = settings.request_timeout_seconds
        self._session = session or requests.Session()

    def find_preview(self, title: str, artist: str, token: CatalogToken | None) -> str | None:
        """Return the top search result's preview URL, or None."""
        if token is None:
            return None
        try:
            resp = self._session.get(
                f"{self._api_url}/search",
                params={"q": build_query(title, artist), "type": "track", "limit": 1},
                headers={"Authorization": f"Bearer {token.access_token}"},
                timeout=self._timeout,
            )
            resp.raise_for_status()
            items = resp.json().get("tracks", {}).get("items") or []
        except (requests.RequestException, ValueError, AttributeError) as e:
            logger.warning("Catalog search failed for %r by %r: %s", title, artist, e)
            return None
        if not isinstance(items, list):
            logger.warning("Catalog search for %r by %r returned malformed items", title, artist)
            return None
        if not items:
            logger.info("Catalog has no match for %r by %r", title, artist)
            return None
        top = items[0] if isinstance(items[0], dict) else {}
        preview = top.get("preview_url")
        if isinstance(preview, str) and preview.strip():
            return preview.strip()
        logger.info("Top catalog match for %r by %r has no preview clip", title, artist)
        return None
