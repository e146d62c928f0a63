"""AI module: data contracts and song analyzer abstraction."""

from src.ai.schema import (
    AnalysisOutcome,
    AnalysisRequest,
    ModelCard,
    PostMode,
    RegenerateTarget,
    SongRecommendation,
)
from src.ai.analyzer_base import BaseSongAnalyzer, MockSongAnalyzer
from src.ai.factory import get_song_analyzer

__all__ = [
    "AnalysisOutcome",
    "AnalysisRequest",
    "BaseSongAnalyzer",
    "MockSongAnalyzer",
    "ModelCard",
    "PostMode",
    "RegenerateTarget",
    "SongRecommendation",
    "get_song_analyzer",
]
