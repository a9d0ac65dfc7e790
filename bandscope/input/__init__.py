"""Input layer - Audio loading and file metadata."""

from .loader import AudioLoader, AudioInfo

__all__ = [
    "AudioLoader",
    "AudioInfo",
]
