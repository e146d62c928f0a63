"""Abstract base and deterministic mock implementation for song analyzers."""

import hashlib
from abc import ABC, abstractmethod

from src.ai.schema import AnalysisOutcome, AnalysisRequest, ModelCard, PostMode, RegenerateTarget, SongRecommendation


class BaseSongAnalyzer(ABC):
    """Abstract base for photo -> (song, custom flag, caption) analysis."""

    @abstractmethod
    def get_model_card(self) -> ModelCard:
        """Return model identity (name, version)."""
        ...

    @abstractmethod
    def analyze(self, request: AnalysisRequest) -> AnalysisOutcome:
        """Analyze the uploaded photo.

        Raises UpstreamError when the service cannot be used and ContractViolation
        when it answers without a usable title/artist pair.
        """
        ...


_MOCK_SONGS: tuple[tuple[str, str, bool], ...] = (
    ("Here Comes the Sun", "The Beatles", False),
    ("Golden Hour", "JVKE", False),
    ("Dreams", "Fleetwood Mac", False),
    ("Sunflower", "Post Malone", False),
    ("Weightless", "Marconi Union", True),
)

_MOCK_CAPTIONS: tuple[str, ...] = (
    "Chasing light and good vibes.",
    "A little moment worth keeping.",
    "Soundtrack included.",
)


class MockSongAnalyzer(BaseSongAnalyzer):
    """Deterministic analyzer for tests and local development.

    The same image bytes and regenerate target always produce the same outcome.
    """

    def get_model_card(self) -> ModelCard:
        return ModelCard(name="mock-analyzer", version="1.0")

    def analyze(self, request: AnalysisRequest) -> AnalysisOutcome:
        digest = hashlib.sha256(request.image_bytes).digest()
        # Regenerating shifts the pick by one so the refreshed field actually changes.
        song_shift = 1 if request.regenerate is RegenerateTarget.song else 0
        caption_shift = 1 if request.regenerate is RegenerateTarget.caption else 0
        song_idx = (digest[0] + song_shift) % len(_MOCK_SONGS)
        caption_idx = (digest[1] + caption_shift) % len(_MOCK_CAPTIONS)
        title, artist, custom = _MOCK_SONGS[song_idx]
        caption = _MOCK_CAPTIONS[caption_idx] if request.mode is PostMode.post else None
        return AnalysisOutcome(
            recommendation=SongRecommendation(title=title, artist=artist, use_custom_audio=custom),
            caption=caption,
        )
