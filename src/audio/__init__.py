from src.audio.resolver import AudioResolver, AudioSource, ResolvedAudio

__all__ = ["AudioResolver", "AudioSource", "ResolvedAudio"]
