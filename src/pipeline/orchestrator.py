"""Request pipeline: validate upload -> analyze -> resolve audio -> assemble response.

One RecommendationOrchestrator is built per process from an explicit Settings
object; each call to handle() is independent and keeps its state in a PipelineRun.
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from pydantic import BaseModel

from src.ai.analyzer_base import BaseSongAnalyzer
from src.ai.factory import get_song_analyzer
from src.ai.schema import AnalysisRequest, PostMode, RegenerateTarget
from src.audio.resolver import AudioResolver, AudioSource
from src.catalog.lookup import CatalogLookup
from src.catalog.token_provider import CatalogTokenProvider
from src.core.config import Settings
from src.core.errors import SnapSongError, ValidationError
from src.core.image_upload import prepare_upload

logger = logging.getLogger(__name__)


class RequestState(str, Enum):
    received = "received"
    validated = "validated"
    analyzed = "analyzed"
    resolved = "resolved"
    responded = "responded"
    errored = "errored"


_NEXT_STATE = {
    RequestState.received: RequestState.validated,
    RequestState.validated: RequestState.analyzed,
    RequestState.analyzed: RequestState.resolved,
    RequestState.resolved: RequestState.responded,
}


@dataclass
class PipelineRun:
    """Per-request state. Transitions only move forward, or to errored from any non-terminal state."""

    request_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    state: RequestState = RequestState.received
    audio_source: AudioSource | None = None

    def advance(self, new_state: RequestState) -> None:
        if _NEXT_STATE.get(self.state) is not new_state:
            raise RuntimeError(f"Illegal transition {self.state.value} -> {new_state.value}")
        logger.debug("[%s] %s -> %s", self.request_id, self.state.value, new_state.value)
        self.state = new_state

    def fail(self, error: SnapSongError) -> None:
        logger.debug("[%s] %s -> errored (%s)", self.request_id, self.state.value, error.code)
        self.state = RequestState.errored


class RecommendedSongOut(BaseModel):
    title: str
    artist: str
    chorusUrl: str


class AnalyzeResponse(BaseModel):
    recommendedSong: RecommendedSongOut
    caption: str | None = None
    postType: PostMode

    def to_payload(self) -> dict[str, Any]:
        """JSON body. Story responses carry no caption key at all."""
        payload: dict[str, Any] = {
            "recommendedSong": self.recommendedSong.model_dump(),
            "postType": self.postType.value,
        }
        if self.postType is PostMode.post:
            payload["caption"] = self.caption or ""
        return payload


def parse_post_type(value: str | None) -> PostMode:
    if value is None or not value.strip():
        return PostMode.post
    try:
        return PostMode(value.strip().lower())
    except ValueError:
        raise ValidationError(f"postType must be 'post' or 'story', got {value!r}") from None


def parse_regenerate(value: str | None) -> RegenerateTarget:
    if value is None or not value.strip():
        return RegenerateTarget.none
    try:
        target = RegenerateTarget(value.strip().lower())
    except ValueError:
        target = None
    if target is None or target is RegenerateTarget.none:
        raise ValidationError(f"regenerate must be 'song' or 'caption', got {value!r}")
    return target


class RecommendationOrchestrator:
    """
    Runs one recommendation request end to end.

    Regeneration is not a partial update: the whole outcome is recomputed and the
    caller applies whichever field it asked to refresh.
    """

    def __init__(self, settings: Settings, analyzer: BaseSongAnalyzer, resolver: AudioResolver) -> None:
        self._max_upload_bytes = settings.max_upload_bytes
        self._analyzer = analyzer
        self._resolver = resolver

    @property
    def analyzer(self) -> BaseSongAnalyzer:
        return self._analyzer

    @property
    def max_upload_bytes(self) -> int:
        return self._max_upload_bytes

    def handle(
        self,
        photo: bytes | None,
        post_type: str | None = None,
        regenerate: str | None = None,
        run: PipelineRun | None = None,
    ) -> AnalyzeResponse:
        """Raises ValidationError, UpstreamError or ContractViolation; run.state ends as responded or errored."""
        run = run or PipelineRun()
        try:
            return self._handle(run, photo, post_type, regenerate)
        except SnapSongError as e:
            run.fail(e)
            raise

    def _handle(
        self,
        run: PipelineRun,
        photo: bytes | None,
        post_type: str | None,
        regenerate: str | None,
    ) -> AnalyzeResponse:
        image_bytes, mime_type = prepare_upload(photo, max_bytes=self._max_upload_bytes)
        request = AnalysisRequest(
            image_bytes=image_bytes,
            mime_type=mime_type,
            mode=parse_post_type(post_type),
            regenerate=parse_regenerate(regenerate),
        )
        run.advance(RequestState.validated)

        try:
            outcome = self._analyzer.analyze(request)
        except SnapSongError as e:
            logger.warning("[%s] Analysis failed (%s): %s", run.request_id, e.code, e.message)
            raise
        run.advance(RequestState.analyzed)

        recommendation = outcome.recommendation
        resolved = self._resolver.resolve_with_source(recommendation)
        recommendation = recommendation.model_copy(update={"preview_url": resolved.url})
        run.audio_source = resolved.source
        run.advance(RequestState.resolved)
        logger.info(
            "[%s] %r by %r, audio from %s (mode=%s, regenerate=%s)",
            run.request_id,
            recommendation.title,
            recommendation.artist,
            resolved.source.value,
            request.mode.value,
            request.regenerate.value,
        )

        response = AnalyzeResponse(
            recommendedSong=RecommendedSongOut(
                title=recommendation.title,
                artist=recommendation.artist,
                chorusUrl=recommendation.preview_url,
            ),
            caption=outcome.caption if request.mode is PostMode.post else None,
            postType=request.mode,
        )
        run.advance(RequestState.responded)
        return response


def build_orchestrator(settings: Settings) -> RecommendationOrchestrator:
    """Wire the analyzer, catalog clients and resolver from one Settings object."""
    analyzer = get_song_analyzer(settings.analyzer, settings)
    resolver = AudioResolver(
        settings,
        token_provider=CatalogTokenProvider(settings),
        lookup=CatalogLookup(settings),
    )
    return RecommendationOrchestrator(settings, analyzer, resolver)
