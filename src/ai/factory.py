"""Factory for song analyzers, selected by Settings.analyzer."""

from src.ai.analyzer_base import BaseSongAnalyzer
from src.core.config import Settings


def get_song_analyzer(analyzer_name: str, settings: Settings | None = None) -> BaseSongAnalyzer:
    """Return a song analyzer by name. The remote analyzer needs settings for its endpoint and key."""
    if analyzer_name == "mock":
        from src.ai.analyzer_base import MockSongAnalyzer

        return MockSongAnalyzer()
    if analyzer_name == "gemini":
        from src.ai.analyzer_gemini import GeminiSongAnalyzer

        return GeminiSongAnalyzer(settings or Settings())
    raise ValueError(f"Unknown song analyzer: {analyzer_name}")
