"""Pytest fixtures. Every outbound HTTP call is replaced by a mock; no network needed."""

from io import BytesIO
from unittest.mock import MagicMock

import pytest
from PIL import Image

from src.ai.schema import AnalysisOutcome, ModelCard, SongRecommendation
from src.core import config as config_module
from src.core.config import Settings

FALLBACK_URL = "https://static.example/fallback.mp3"
CUSTOM_AUDIO_URL = "https://custom.example/render"


def make_image_bytes(fmt: str = "PNG", size: tuple[int, int] = (8, 8), color: str = "orange") -> bytes:
    buffered = BytesIO()
    Image.new("RGB", size, color=color).save(buffered, format=fmt)
    return buffered.getvalue()


def make_http_response(status_code: int = 200, json_body=None, text: str = "") -> MagicMock:
    """A requests.Response stand-in with ok/status_code/json()/text/raise_for_status()."""
    import requests

    resp = MagicMock()
    resp.status_code = status_code
    resp.ok = status_code < 400
    resp.text = text
    if json_body is None:
        resp.json.side_effect = ValueError("no json")
    else:
        resp.json.return_value = json_body
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    else:
        resp.raise_for_status.return_value = None
    return resp


def stub_analyzer(title="Song A", artist="Artist A", custom=False, caption="Nice.") -> MagicMock:
    """Analyzer mock whose analyze() returns a fixed outcome."""
    analyzer = MagicMock()
    analyzer.get_model_card.return_value = ModelCard(name="stub", version="test")
    analyzer.analyze.return_value = AnalysisOutcome(
        recommendation=SongRecommendation(title=title, artist=artist, use_custom_audio=custom),
        caption=caption,
    )
    return analyzer


@pytest.fixture(autouse=True)
def _reset_config_cache():
    config_module._config = None  # type: ignore[attr-defined]
    yield
    config_module._config = None  # type: ignore[attr-defined]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        analyzer="mock",
        analysis_key="test-key",
        catalog_client_id="client-id",
        catalog_client_secret="client-secret",
        custom_audio_url=CUSTOM_AUDIO_URL,
        fallback_audio_url=FALLBACK_URL,
        request_timeout_seconds=2.0,
    )


@pytest.fixture
def png_bytes() -> bytes:
    return make_image_bytes("PNG")
