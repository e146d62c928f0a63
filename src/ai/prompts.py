"""Instructions sent to the analysis service, conditioned on post mode and regenerate hint."""

from src.ai.schema import PostMode, RegenerateTarget

_BASE = (
    "Analyze the mood, colors, setting and subject of this photo and recommend one real, "
    "released song that fits it. Set customSong to true only if no existing song fits and "
    "a custom generated snippet would suit the photo better."
)

_POST_FORMAT = """Respond with JSON only, in this exact format:
{
  "recommendedSong": {"title": "Song Title", "artist": "Artist Name"},
  "customSong": false,
  "caption": "An engaging, Instagram-ready caption for the photo"
}"""

_STORY_FORMAT = """Respond with JSON only, in this exact format:
{
  "recommendedSong": {"title": "Song Title", "artist": "Artist Name"},
  "customSong": false
}"""

_REGENERATE_HINTS = {
    RegenerateTarget.song: "The user asked for a different song than before; suggest a fresh pick.",
    RegenerateTarget.caption: "The user asked for a new caption; write a different one than before.",
}


def build_instruction(mode: PostMode, regenerate: RegenerateTarget = RegenerateTarget.none) -> str:
    """Return the instruction text for one analysis call.

    Posts ask for {recommendedSong, customSong, caption}; stories ask for
    {recommendedSong, customSong} and never mention a caption.
    """
    parts = [_BASE]
    if mode is PostMode.post:
        parts.append("The photo will be shared as an Instagram post.")
        parts.append(_POST_FORMAT)
    else:
        parts.append("The photo will be shared as an Instagram story. Do not write a caption.")
        parts.append(_STORY_FORMAT)
    hint = _REGENERATE_HINTS.get(regenerate)
    if regenerate is RegenerateTarget.caption and mode is PostMode.story:
        hint = None
    if hint:
        parts.append(hint)
    return "\n\n".join(parts)
