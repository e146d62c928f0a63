"""Pydantic data contracts for song analysis requests and outcomes."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class ModelCard(BaseModel):
    """Metadata identifying the analyzer backing a deployment."""

    name: str
    version: str


class PostMode(str, Enum):
    """Where the photo will be published. Only posts get a caption."""

    post = "post"
    story = "story"


class RegenerateTarget(str, Enum):
    """Which part of a previous result the caller wants refreshed."""

    none = "none"
    song = "song"
    caption = "caption"


class AnalysisRequest(BaseModel):
    """One validated upload, ready to send to an analyzer."""

    image_bytes: bytes = Field(repr=False)
    mime_type: str = "image/jpeg"
    mode: PostMode = PostMode.post
    regenerate: RegenerateTarget = RegenerateTarget.none


class SongRecommendation(BaseModel):
    """Song picked for a photo. preview_url is filled in by the audio resolver."""

    title: str
    artist: str
    use_custom_audio: bool = False
    preview_url: str | None = None

    @field_validator("title", "artist")
    @classmethod
    def non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must be non-empty")
        return v


class AnalysisOutcome(BaseModel):
    """Analyzer output: the recommendation (pre-resolution) and the caption for posts."""

    recommendation: SongRecommendation
    caption: str | None = None
