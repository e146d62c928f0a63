"""Tests for the request pipeline: states, error mapping and response assembly."""

from unittest.mock import MagicMock

import pytest

from src.ai.analyzer_base import MockSongAnalyzer
from src.ai.schema import PostMode, RegenerateTarget
from src.audio.resolver import AudioResolver, AudioSource, ResolvedAudio
from src.catalog.lookup import CatalogLookup
from src.catalog.token_provider import CatalogTokenProvider
from src.core.errors import ContractViolation, UpstreamError, ValidationError
from src.pipeline.orchestrator import (
    PipelineRun,
    RecommendationOrchestrator,
    RequestState,
    build_orchestrator,
    parse_post_type,
    parse_regenerate,
)
from tests.conftest import FALLBACK_URL, stub_analyzer

pytestmark = [pytest.mark.fast]


@pytest.fixture
def resolver():
    resolver = MagicMock(spec=AudioResolver)
    resolver.resolve_with_source.return_value = ResolvedAudio("https://cdn/x.mp3", AudioSource.catalog)
    return resolver


def _orchestrator(settings, analyzer, resolver) -> RecommendationOrchestrator:
    return RecommendationOrchestrator(settings, analyzer, resolver)


def test_post_request_end_to_end(settings, resolver, png_bytes):
    analyzer = stub_analyzer()
    run = PipelineRun()
    response = _orchestrator(settings, analyzer, resolver).handle(png_bytes, "post", run=run)

    assert response.to_payload() == {
        "recommendedSong": {"title": "Song A", "artist": "Artist A", "chorusUrl": "https://cdn/x.mp3"},
        "caption": "Nice.",
        "postType": "post",
    }
    assert run.state is RequestState.responded
    assert run.audio_source is AudioSource.catalog
    request = analyzer.analyze.call_args.args[0]
    assert request.mode is PostMode.post
    assert request.regenerate is RegenerateTarget.none
    assert request.mime_type == "image/png"


def test_story_response_has_no_caption_key(settings, resolver, png_bytes):
    analyzer = stub_analyzer(caption="should not leak")
    payload = _orchestrator(settings, analyzer, resolver).handle(png_bytes, "story").to_payload()
    assert "caption" not in payload
    assert payload["postType"] == "story"


def test_post_caption_is_always_a_string(settings, resolver, png_bytes):
    analyzer = stub_analyzer(caption=None)
    payload = _orchestrator(settings, analyzer, resolver).handle(png_bytes, "post").to_payload()
    assert isinstance(payload["caption"], str)


def test_regenerate_hint_forwarded_and_full_outcome_returned(settings, resolver, png_bytes):
    analyzer = stub_analyzer()
    response = _orchestrator(settings, analyzer, resolver).handle(png_bytes, "post", regenerate="caption")
    assert analyzer.analyze.call_args.args[0].regenerate is RegenerateTarget.caption
    assert response.recommendedSong.title == "Song A"
    assert response.caption == "Nice."


@pytest.mark.parametrize("photo", [None, b""])
def test_missing_photo_is_validation_error_without_analysis(settings, resolver, photo):
    analyzer = stub_analyzer()
    run = PipelineRun()
    with pytest.raises(ValidationError):
        _orchestrator(settings, analyzer, resolver).handle(photo, "post", run=run)
    assert run.state is RequestState.errored
    analyzer.analyze.assert_not_called()
    resolver.resolve_with_source.assert_not_called()


@pytest.mark.parametrize("error_cls", [UpstreamError, ContractViolation])
def test_analysis_errors_propagate_and_skip_resolution(settings, resolver, png_bytes, error_cls):
    analyzer = stub_analyzer()
    analyzer.analyze.side_effect = error_cls("boom", details="raw")
    run = PipelineRun()
    with pytest.raises(error_cls):
        _orchestrator(settings, analyzer, resolver).handle(png_bytes, "post", run=run)
    assert run.state is RequestState.errored
    resolver.resolve_with_source.assert_not_called()


def test_run_rejects_skipped_transitions():
    run = PipelineRun()
    with pytest.raises(RuntimeError, match="Illegal transition"):
        run.advance(RequestState.analyzed)


@pytest.mark.parametrize(
    "value,expected",
    [(None, PostMode.post), ("", PostMode.post), ("post", PostMode.post), ("STORY", PostMode.story)],
)
def test_parse_post_type(value, expected):
    assert parse_post_type(value) is expected


def test_parse_post_type_rejects_unknown():
    with pytest.raises(ValidationError, match="postType"):
        parse_post_type("reel")


@pytest.mark.parametrize(
    "value,expected",
    [(None, RegenerateTarget.none), ("", RegenerateTarget.none), ("song", RegenerateTarget.song)],
)
def test_parse_regenerate(value, expected):
    assert parse_regenerate(value) is expected


@pytest.mark.parametrize("value", ["none", "everything"])
def test_parse_regenerate_rejects_unknown(value):
    with pytest.raises(ValidationError, match="regenerate"):
        parse_regenerate(value)


def test_build_orchestrator_wires_components(settings):
    orchestrator = build_orchestrator(settings)
    assert isinstance(orchestrator.analyzer, MockSongAnalyzer)
    assert isinstance(orchestrator._resolver, AudioResolver)
    assert isinstance(orchestrator._resolver._token_provider, CatalogTokenProvider)
    assert isinstance(orchestrator._resolver._lookup, CatalogLookup)
    assert orchestrator.max_upload_bytes == settings.max_upload_bytes


def test_catalog_outage_still_yields_fallback_chorus(settings, png_bytes):
    """Real resolver with a token provider that cannot reach the catalog."""
    token_provider = MagicMock(spec=CatalogTokenProvider)
    token_provider.get_token.side_effect = UpstreamError("down")
    lookup = MagicMock(spec=CatalogLookup)
    lookup.find_preview.return_value = None
    resolver = AudioResolver(settings, token_provider, lookup)

    payload = _orchestrator(settings, stub_analyzer(), resolver).handle(png_bytes, "post").to_payload()
    assert payload["recommendedSong"]["chorusUrl"] == FALLBACK_URL
