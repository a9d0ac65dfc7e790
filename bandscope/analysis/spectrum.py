"""Spectral frame source for driving real-time detection from a file.

Produces frames shaped like a browser analyser node's byte frequency data:
magnitudes scaled by 1/n_fft, smoothed across frames, converted to dB and
mapped linearly from [min_decibels, max_decibels] onto [0, 255].
"""

from typing import Iterator, Optional

import librosa
import numpy as np

from ..core import SpectralFrame
from ..core.constants import (
    DEFAULT_MAX_DECIBELS,
    DEFAULT_MIN_DECIBELS,
    DEFAULT_N_FFT,
    DEFAULT_SMOOTHING,
    MAX_BYTE_MAGNITUDE,
)


class SpectralFrameSource:
    """Turns audio into a sequence of byte-scaled SpectralFrames."""

    def __init__(
        self,
        n_fft: int = DEFAULT_N_FFT,
        hop_length: Optional[int] = None,
        smoothing: float = DEFAULT_SMOOTHING,
        min_decibels: float = DEFAULT_MIN_DECIBELS,
        max_decibels: float = DEFAULT_MAX_DECIBELS,
    ):
        """
        Initialize SpectralFrameSource.

        Args:
            n_fft: FFT window size; frames carry n_fft // 2 bins
            hop_length: Samples between frames (default: n_fft // 2)
            smoothing: Weight of the previous frame in [0, 1)
            min_decibels: Level mapped to 0
            max_decibels: Level mapped to 255
        """
        if not 0.0 <= smoothing < 1.0:
            raise ValueError(f"Smoothing must be in [0, 1), got {smoothing}")
        if max_decibels <= min_decibels:
            raise ValueError("max_decibels must be greater than min_decibels")

        self.n_fft = n_fft
        self.hop_length = hop_length or n_fft // 2
        self.smoothing = smoothing
        self.min_decibels = min_decibels
        self.max_decibels = max_decibels

    @property
    def buffer_length(self) -> int:
        return self.n_fft // 2

    def frame_rate(self, sr: int) -> float:
        """Frames per second at a sample rate."""
        return sr / self.hop_length

    def magnitudes(self, audio: np.ndarray) -> np.ndarray:
        """
        Compute byte-scaled magnitudes.

        Returns:
            Array [buffer_length, time_frames] with values in [0, 255]
        """
        if audio.ndim > 1:
            audio = np.mean(audio, axis=0)

        stft = np.abs(librosa.stft(
            audio,
            n_fft=self.n_fft,
            hop_length=self.hop_length,
        ))[: self.buffer_length] / self.n_fft

        smoothed = np.empty_like(stft)
        previous = np.zeros(self.buffer_length, dtype=stft.dtype)
        for t in range(stft.shape[1]):
            previous = self.smoothing * previous + (1.0 - self.smoothing) * stft[:, t]
            smoothed[:, t] = previous

        db = librosa.amplitude_to_db(smoothed, ref=1.0, amin=1e-10, top_db=None)
        scaled = (db - self.min_decibels) / (self.max_decibels - self.min_decibels)
        return np.clip(scaled, 0.0, 1.0) * MAX_BYTE_MAGNITUDE

    def frames(self, audio: np.ndarray, sr: int) -> Iterator[SpectralFrame]:
        """Yield one SpectralFrame per STFT column."""
        mags = self.magnitudes(audio)
        for t in range(mags.shape[1]):
            yield SpectralFrame(
                magnitudes=mags[:, t],
                sample_rate=sr,
                buffer_length=self.buffer_length,
                max_magnitude=MAX_BYTE_MAGNITUDE,
            )
