"""Audio loading and file metadata."""

from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import librosa
import numpy as np
import soundfile as sf

from ..core.constants import DEFAULT_SR


@dataclass
class AudioInfo:
    """Basic metadata about an audio file."""

    path: str
    duration: float
    sample_rate: int
    channels: int
    format: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class AudioLoader:
    """Handles audio file loading and preprocessing."""

    SUPPORTED_FORMATS = {".wav", ".mp3", ".flac", ".ogg", ".m4a", ".aiff"}

    def __init__(
        self,
        target_sr: Optional[int] = DEFAULT_SR,
        mono: bool = True,
        normalize: bool = False,
    ):
        """
        Initialize AudioLoader.

        Args:
            target_sr: Target sample rate for resampling (None keeps the native rate)
            mono: Convert to mono if True
            normalize: Peak-normalize audio amplitude if True
        """
        self.target_sr = target_sr
        self.mono = mono
        self.normalize = normalize

    def _check_path(self, path: Union[str, Path]) -> Path:
        path = Path(path)

        if not path.exists():
            raise FileNotFoundError(f"Audio file not found: {path}")

        if path.suffix.lower() not in self.SUPPORTED_FORMATS:
            raise ValueError(
                f"Unsupported format: {path.suffix}. "
                f"Supported: {sorted(self.SUPPORTED_FORMATS)}"
            )
        return path

    def load(self, path: Union[str, Path]) -> Tuple[np.ndarray, int]:
        """
        Load audio file and preprocess.

        Args:
            path: Path to audio file

        Returns:
            Tuple of (audio array, sample rate)

        Raises:
            ValueError: If file format not supported
            FileNotFoundError: If file doesn't exist
        """
        path = self._check_path(path)

        audio, sr = librosa.load(
            str(path),
            sr=self.target_sr,
            mono=self.mono,
        )

        if self.normalize:
            audio = self._normalize(audio)

        return audio, sr

    def info(self, path: Union[str, Path]) -> AudioInfo:
        """
        Read file metadata without decoding the audio.

        Falls back to decoding with librosa for formats libsndfile
        cannot read (e.g. m4a).
        """
        path = self._check_path(path)

        try:
            meta = sf.info(str(path))
            return AudioInfo(
                path=str(path),
                duration=float(meta.duration),
                sample_rate=int(meta.samplerate),
                channels=int(meta.channels),
                format=meta.format,
            )
        except RuntimeError:
            audio, sr = librosa.load(str(path), sr=None, mono=False)
            channels = 1 if audio.ndim == 1 else audio.shape[0]
            return AudioInfo(
                path=str(path),
                duration=float(librosa.get_duration(y=audio, sr=sr)),
                sample_rate=int(sr),
                channels=channels,
                format=path.suffix.lstrip(".").upper(),
            )

    def _normalize(self, audio: np.ndarray) -> np.ndarray:
        """Normalize audio to [-1, 1] range using peak normalization."""
        peak = np.abs(audio).max()
        if peak > 0:
            audio = audio / peak
        return audio
