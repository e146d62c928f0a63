"""Audio resolution policy: always turns a recommendation into a playable clip URL."""

import logging
from enum import Enum
from typing import NamedTuple
from urllib.parse import urlencode

from src.ai.schema import SongRecommendation
from src.catalog.lookup import CatalogLookup
from src.catalog.token_provider import CatalogTokenProvider
from src.core.config import Settings
from src.core.errors import UpstreamError

logger = logging.getLogger(__name__)


class AudioSource(str, Enum):
    custom = "custom"
    catalog = "catalog"
    fallback = "fallback"


class ResolvedAudio(NamedTuple):
    url: str
    source: AudioSource


class AudioResolver:
    """
    Priority chain, first hit wins:

    1. use_custom_audio -> custom audio endpoint (the catalog is never contacted on this path)
    2. catalog preview for (title, artist)
    3. fixed fallback clip

    resolve() never raises and never returns an empty URL.
    """

    def __init__(
        self,
        settings: Settings,
        token_provider: CatalogTokenProvider,
        lookup: CatalogLookup,
    ) -> None:
        self._custom_audio_url = settings.custom_audio_url
        self._fallback_url = settings.fallback_audio_url
        self._token_provider = token_provider
        self._lookup = lookup

    def _custom_url(self, recommendation: SongRecommendation) -> str | None:
        if not self._custom_audio_url:
            return None
        sep = "&" if "?" in self._custom_audio_url else "?"
        query = urlencode({"title": recommendation.title, "artist": recommendation.artist})
        return f"{self._custom_audio_url}{sep}{query}"

    def _catalog_url(self, recommendation: SongRecommendation) -> str | None:
        try:
            token = self._token_provider.get_token()
        except UpstreamError as e:
            logger.warning("No catalog token, skipping preview lookup: %s", e.message)
            token = None
        return self._lookup.find_preview(recommendation.title, recommendation.artist, token)

    def resolve_with_source(self, recommendation: SongRecommendation) -> ResolvedAudio:
        if recommendation.use_custom_audio:
            url = self._custom_url(recommendation)
            if url:
                return ResolvedAudio(url, AudioSource.custom)
        else:
            try:
                url = self._catalog_url(recommendation)
            except Exception:
                # Lookup is documented never to raise; keep the chain total even if it does.
                logger.exception("Catalog lookup raised unexpectedly")
                url = None
            if url:
                return ResolvedAudio(url, AudioSource.catalog)
        return ResolvedAudio(self._fallback_url, AudioSource.fallback)

    def resolve(self, recommendation: SongRecommendation) -> str:
        return self.resolve_with_source(recommendation).url
