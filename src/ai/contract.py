"""Validation of analysis payloads against the minimal song contract."""

import json
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from src.ai.schema import AnalysisOutcome, PostMode, SongRecommendation
from src.core.errors import ContractViolation

DEFAULT_CAPTION = "A beautiful moment captured."


def extract_json_object(text: str) -> dict[str, Any]:
    """Parse the outermost {...} block of a model reply (tolerates code fences and chatter)."""
    start = text.find("{")
    end = text.rfind("}") + 1
    if start == -1 or end <= start:
        raise ContractViolation("Analysis response contained no JSON object", details=text[:500])
    try:
        data = json.loads(text[start:end])
    except json.JSONDecodeError as e:
        raise ContractViolation("Analysis response was not valid JSON", details=str(e)) from e
    if not isinstance(data, dict):
        raise ContractViolation("Analysis response JSON was not an object")
    return data


def _split_song_string(value: str) -> tuple[str, str]:
    """'Title - Artist' -> (title, artist). Missing artist yields ''."""
    title, sep, artist = value.partition(" - ")
    return title.strip(), artist.strip() if sep else ""


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "yes", "1")
    return False


def outcome_from_payload(data: dict[str, Any], mode: PostMode) -> AnalysisOutcome:
    """
    Build an AnalysisOutcome from a decoded analysis payload.

    Raises ContractViolation unless recommendedSong yields a non-empty title and artist.
    Posts always get a caption (DEFAULT_CAPTION when the service sent none); stories never do.
    """
    song = data.get("recommendedSong")
    if isinstance(song, str):
        title, artist = _split_song_string(song)
    elif isinstance(song, dict):
        title = song.get("title")
        artist = song.get("artist")
    else:
        raise ContractViolation("Analysis response is missing recommendedSong")

    if not isinstance(title, str) or not isinstance(artist, str):
        raise ContractViolation(
            "Analysis response is missing the song title or artist",
            details=json.dumps(song)[:500],
        )
    try:
        recommendation = SongRecommendation(
            title=title,
            artist=artist,
            use_custom_audio=_as_bool(data.get("customSong", False)),
        )
    except PydanticValidationError as e:
        raise ContractViolation(
            "Analysis response has an empty song title or artist",
            details=json.dumps(song)[:500],
        ) from e

    caption = None
    if mode is PostMode.post:
        raw = data.get("caption")
        caption = raw.strip() if isinstance(raw, str) and raw.strip() else DEFAULT_CAPTION
    return AnalysisOutcome(recommendation=recommendation, caption=caption)
