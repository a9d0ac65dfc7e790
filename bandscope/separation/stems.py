"""Stem separation with Demucs, falling back to band filtering.

Demucs models:
- htdemucs: 4 stems (drums, bass, vocals, other)
- htdemucs_6s: 6 stems (drums, bass, vocals, guitar, piano, other)

Reference: https://github.com/facebookresearch/demucs
"""

import time
import warnings
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np
from scipy import signal

from ..core import SeparationError


@dataclass
class StemAudio:
    """Audio data for a single separated stem."""

    name: str
    audio: np.ndarray  # Mono audio array
    sample_rate: int

    @property
    def duration(self) -> float:
        return len(self.audio) / self.sample_rate

    @property
    def rms_energy(self) -> float:
        if len(self.audio) == 0:
            return 0.0
        return float(np.sqrt(np.mean(np.asarray(self.audio, dtype=np.float64) ** 2)))

    def is_silent(self, threshold: float = 0.001) -> bool:
        return self.rms_energy < threshold


@dataclass
class SeparationOutcome:
    """Result or failure of a separation attempt."""

    stems: Optional[Dict[str, StemAudio]] = None
    method: str = "none"
    error: Optional[str] = None
    separation_time: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.stems is not None and self.error is None

    @classmethod
    def failure(cls, error: str, method: str = "none") -> "SeparationOutcome":
        return cls(stems=None, method=method, error=error)

    def stem_energies(self) -> Dict[str, float]:
        """RMS energy per stem (empty when separation failed)."""
        if not self.succeeded:
            return {}
        return {name: stem.rms_energy for name, stem in self.stems.items()}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "succeeded": self.succeeded,
            "error": self.error,
            "separation_time": self.separation_time,
            "stems": {
                name: {"rms_energy": energy, "duration": self.stems[name].duration}
                for name, energy in self.stem_energies().items()
            },
        }


class StemSeparator:
    """
    Best-effort source separator.

    Usage:
        separator = StemSeparator()
        outcome = separator.separate(audio, sr)
        if outcome.succeeded:
            vocals = outcome.stems["vocals"].audio
    """

    MODELS = {
        "htdemucs": "4-stem: drums, bass, vocals, other (recommended)",
        "htdemucs_ft": "4-stem fine-tuned (highest quality, slower)",
        "htdemucs_6s": "6-stem: drums, bass, vocals, guitar, piano, other",
    }

    DEFAULT_MODEL = "htdemucs"

    # Fallback stems: (filter type, cutoff Hz). Mirrors simple analog-style
    # splits of the mix; the results are rough approximations.
    FALLBACK_FILTERS = {
        "vocals": ("low", 2000.0),
        "drums": ("low", 600.0),
        "bass": ("low", 250.0),
        "other": ("high", 2000.0),
    }

    def __init__(
        self,
        model_name: str = DEFAULT_MODEL,
        device: str = "auto",
        allow_fallback: bool = True,
    ):
        """
        Initialize StemSeparator.

        Args:
            model_name: Demucs model to use
            device: Device for inference ('auto', 'cpu', 'cuda', 'mps')
            allow_fallback: Use band filtering when Demucs is unavailable
        """
        if model_name not in self.MODELS:
            raise ValueError(
                f"Unknown model '{model_name}'. Available: {', '.join(self.MODELS)}"
            )
        self.model_name = model_name
        self.device = device
        self.allow_fallback = allow_fallback

        self._model = None
        self._device = "cpu"
        self._demucs_available = self._check_demucs_available()

    def _check_demucs_available(self) -> bool:
        """Check if Demucs is available."""
        try:
            import torch  # noqa: F401
            import demucs  # noqa: F401
            return True
        except ImportError:
            return False

    @property
    def is_available(self) -> bool:
        """Check if Demucs separation is available."""
        return self._demucs_available

    @property
    def can_separate(self) -> bool:
        return self._demucs_available or self.allow_fallback

    def separate(self, audio: np.ndarray, sample_rate: int) -> SeparationOutcome:
        """
        Separate audio into stems.

        Never raises for separation problems; inspect ``outcome.succeeded``.

        Args:
            audio: Audio array (mono, or channels-first stereo)
            sample_rate: Sample rate of the audio

        Returns:
            SeparationOutcome with stems or an error message
        """
        start_time = time.time()
        method = self.model_name if self._demucs_available else "fallback_bandpass"

        try:
            if self._demucs_available:
                stems = self._separate_demucs(audio, sample_rate)
            elif self.allow_fallback:
                warnings.warn(
                    "Demucs not available, using frequency-band separation fallback. "
                    "Install demucs for better results."
                )
                stems = self._separate_fallback(audio, sample_rate)
            else:
                raise SeparationError("Demucs not available and fallback disabled")
        except Exception as e:
            warnings.warn(f"Stem separation failed: {e}")
            return SeparationOutcome.failure(str(e), method=method)

        return SeparationOutcome(
            stems=stems,
            method=method,
            separation_time=time.time() - start_time,
        )

    def _get_device(self) -> str:
        if self.device != "auto":
            return self.device

        import torch

        if torch.cuda.is_available():
            return "cuda"
        if hasattr(torch.backends, "mps") and torch.backends.mps.is_available():
            return "mps"
        return "cpu"

    def _load_model(self):
        """Load Demucs model lazily."""
        if self._model is not None:
            return

        from demucs.pretrained import get_model

        self._device = self._get_device()
        self._model = get_model(self.model_name)
        if self._device != "cpu":
            self._model.to(self._device)
        self._model.eval()

    def _separate_demucs(self, audio: np.ndarray, sample_rate: int) -> Dict[str, StemAudio]:
        self._load_model()

        import torch
        import torchaudio
        from demucs.apply import apply_model

        audio = np.asarray(audio, dtype=np.float32)
        if audio.ndim == 1:
            audio = np.stack([audio, audio])
        elif audio.shape[0] != 2 and audio.shape[-1] == 2:
            audio = audio.T
        tensor = torch.tensor(audio[:2], dtype=torch.float32)

        model_sr = self._model.samplerate
        if sample_rate != model_sr:
            tensor = torchaudio.functional.resample(tensor, sample_rate, model_sr)

        ref = tensor.mean(0)
        scale = ref.std() + 1e-8
        tensor = (tensor - ref.mean()) / scale

        with torch.no_grad():
            sources = apply_model(
                self._model,
                tensor.unsqueeze(0).to(self._device),
                split=True,
                device=self._device,
            )
        sources = (sources * scale + ref.mean()).cpu()

        stems = {}
        for i, name in enumerate(self._model.sources):
            stem = sources[0, i]
            if sample_rate != model_sr:
                stem = torchaudio.functional.resample(stem, model_sr, sample_rate)
            stems[name] = StemAudio(
                name=name,
                audio=stem.numpy().mean(axis=0),
                sample_rate=sample_rate,
            )
        return stems

    def _separate_fallback(self, audio: np.ndarray, sample_rate: int) -> Dict[str, StemAudio]:
        """Approximate stems with low/high-pass filters."""
        audio = np.asarray(audio, dtype=np.float64)
        if audio.ndim > 1:
            audio = np.mean(audio, axis=0)

        nyquist = sample_rate / 2.0
        stems = {}
        for name, (btype, cutoff) in self.FALLBACK_FILTERS.items():
            cutoff = min(cutoff, nyquist * 0.99)
            sos = signal.butter(4, cutoff, btype=btype, fs=sample_rate, output="sos")
            stems[name] = StemAudio(
                name=name,
                audio=signal.sosfilt(sos, audio).astype(np.float32),
                sample_rate=sample_rate,
            )
        return stems
