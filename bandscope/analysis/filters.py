"""Band-pass filter bank for file-level band analysis."""

import warnings
from typing import Optional

import numpy as np
from scipy import signal

from ..core import BandProfile, EmptyFrequencyRange
from ..core.constants import FILTER_ORDER


class BandFilterBank:
    """Butterworth filters isolating each band of a signal.

    The upper edge is kept just below Nyquist; a band starting at 0 Hz
    becomes a low-pass. Bands lying entirely above Nyquist produce silence.
    """

    NYQUIST_MARGIN = 0.99

    def __init__(self, order: int = FILTER_ORDER):
        self.order = order

    def design(self, profile: BandProfile, sample_rate: int) -> Optional[np.ndarray]:
        """Second-order sections for a band, or None if the band is unreachable."""
        nyquist = sample_rate / 2.0
        high = min(profile.high_hz, nyquist * self.NYQUIST_MARGIN)
        low = profile.low_hz

        if low >= high:
            warnings.warn(
                f"Band '{profile.name}' ({profile.low_hz:g}-{profile.high_hz:g} Hz) lies above "
                f"the Nyquist frequency at {sample_rate} Hz; its energy will always be 0",
                EmptyFrequencyRange,
                stacklevel=3,
            )
            return None

        if low <= 0:
            return signal.butter(self.order, high, btype="low", fs=sample_rate, output="sos")
        return signal.butter(self.order, [low, high], btype="band", fs=sample_rate, output="sos")

    def apply(self, audio: np.ndarray, profile: BandProfile, sample_rate: int) -> np.ndarray:
        """
        Filter a mono signal down to one band.

        Args:
            audio: Mono audio array
            profile: Band to isolate
            sample_rate: Sample rate of the audio

        Returns:
            Band-limited signal, same length as the input
        """
        sos = self.design(profile, sample_rate)
        if sos is None:
            return np.zeros_like(audio, dtype=np.float64)
        return signal.sosfilt(sos, audio)
