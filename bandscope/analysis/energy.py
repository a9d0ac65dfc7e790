"""Band energy extraction.

Turns either a spectral frame or a band-limited waveform into a single
normalized energy value in [0, 1] for one band. Both input modes land on
the same scale so band thresholds mean the same thing in either mode.
"""

import warnings
from typing import Dict, Iterable, Optional, Set, Tuple

import numpy as np

from ..core import BandProfile, EmptyFrequencyRange, InvalidFrame, SpectralFrame


class BandEnergyExtractor:
    """Normalized per-band energy from spectral frames or filtered signals.

    Spectral mode maps a band's edges to frame bins with the Nyquist
    relation ``index = floor(hz / (sr / 2) * buffer_length)`` and averages
    the magnitudes in ``[low_index, high_index)``, each divided by the
    frame's ``max_magnitude``.

    RMS mode takes a band-pass filtered waveform and divides its RMS by
    the peak amplitude of the unfiltered source.
    """

    def __init__(self):
        # (band, sample_rate, buffer_length) combinations already reported
        self._warned: Set[Tuple[str, int, int]] = set()

    def index_range(self, frame: SpectralFrame, profile: BandProfile) -> Tuple[int, int]:
        """Map a band's frequency range to frame bin indices.

        Both indices are clamped to ``[0, buffer_length]`` and the high
        index is never below the low one, so the range may be empty.
        """
        n = frame.buffer_length
        nyquist = frame.nyquist
        low = int(np.floor(profile.low_hz / nyquist * n))
        high = int(np.floor(profile.high_hz / nyquist * n))
        low = min(max(low, 0), n)
        high = min(max(high, low), n)
        return low, high

    def spectral_energy(
        self,
        frame: SpectralFrame,
        profile: BandProfile,
        validate: bool = True,
    ) -> float:
        """
        Average normalized magnitude of a band in one frame.

        Args:
            frame: Spectral frame
            profile: Band to measure
            validate: Check the frame first (skip when already validated)

        Returns:
            Energy in [0, 1]; 0 when the band maps to no bins

        Raises:
            InvalidFrame: If the frame is malformed
        """
        if validate:
            frame.validate()

        low, high = self.index_range(frame, profile)
        if high <= low:
            self._warn_empty(profile, frame.sample_rate, frame.buffer_length)
            return 0.0

        band = frame.magnitudes[low:high] / frame.max_magnitude
        return float(np.clip(np.mean(band), 0.0, 1.0))

    def extract_frame(
        self,
        frame: SpectralFrame,
        profiles: Iterable[BandProfile],
        expected_sample_rate: Optional[int] = None,
    ) -> Dict[str, float]:
        """Validate a frame once and measure every band in it."""
        frame.validate(expected_sample_rate)
        return {
            profile.name: self.spectral_energy(frame, profile, validate=False)
            for profile in profiles
        }

    def rms_energy(
        self,
        signal: np.ndarray,
        reference_peak: float,
        band: Optional[str] = None,
    ) -> float:
        """
        Normalized RMS energy of a band-limited signal.

        Args:
            signal: Band-pass filtered waveform (mono)
            reference_peak: Peak absolute amplitude of the unfiltered source
            band: Band name, used in error messages

        Returns:
            RMS / reference_peak, clipped to [0, 1]

        Raises:
            InvalidFrame: If the signal contains non-finite samples
        """
        signal = np.asarray(signal, dtype=np.float64)
        if signal.size == 0 or reference_peak <= 0:
            return 0.0
        if not np.all(np.isfinite(signal)):
            raise InvalidFrame(f"Non-finite samples in band signal '{band}'", band=band)

        rms = float(np.sqrt(np.mean(signal ** 2)))
        return float(np.clip(rms / reference_peak, 0.0, 1.0))

    def _warn_empty(self, profile: BandProfile, sample_rate: int, buffer_length: int) -> None:
        key = (profile.name, int(sample_rate), int(buffer_length))
        if key in self._warned:
            return
        self._warned.add(key)
        warnings.warn(
            f"Band '{profile.name}' ({profile.low_hz:g}-{profile.high_hz:g} Hz) maps to no "
            f"frequency bins at {sample_rate} Hz with {buffer_length} bins; "
            f"its energy will always be 0",
            EmptyFrequencyRange,
            stacklevel=3,
        )
