"""Band profiles, spectral frames and detection results."""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import numpy as np

from .constants import MAX_BYTE_MAGNITUDE
from .errors import InvalidFrame


class BandKind(Enum):
    """How a band's activity shows up over time."""
    PERCUSSIVE = "percussive"  # Short energy spikes (kick, snare, hihat)
    SUSTAINED = "sustained"    # Held, stable energy (vocals, bass, pads)


@dataclass(frozen=True)
class BandProfile:
    """Static configuration of one named frequency band.

    Attributes:
        name: Band name, unique within a configuration
        low_hz: Lower edge of the band in Hz
        high_hz: Upper edge of the band in Hz
        threshold: Energy above which the band counts as active (0-1)
        kind: Percussive or sustained, selects the confidence rule
        parent_group: Optional composite this band belongs to (e.g. "drums")
    """

    name: str
    low_hz: float
    high_hz: float
    threshold: float
    kind: BandKind = BandKind.SUSTAINED
    parent_group: Optional[str] = None

    def __post_init__(self):
        if not self.name:
            raise ValueError("Band name must not be empty")
        if (
            not math.isfinite(self.low_hz)
            or not math.isfinite(self.high_hz)
            or self.low_hz < 0
            or self.high_hz < self.low_hz
        ):
            raise ValueError(
                f"Invalid frequency range for band '{self.name}': "
                f"{self.low_hz}-{self.high_hz} Hz"
            )
        if not 0.0 <= self.threshold <= 1.0:
            raise ValueError(
                f"Threshold for band '{self.name}' must be in [0, 1], got {self.threshold}"
            )
        if not isinstance(self.kind, BandKind):
            object.__setattr__(self, "kind", BandKind(self.kind))

    @property
    def frequency_range(self) -> Tuple[float, float]:
        return (self.low_hz, self.high_hz)

    @property
    def is_percussive(self) -> bool:
        return self.kind == BandKind.PERCUSSIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "range": [self.low_hz, self.high_hz],
            "threshold": self.threshold,
            "kind": self.kind.value,
            "group": self.parent_group,
        }


@dataclass
class SpectralFrame:
    """One snapshot of frequency-magnitude data.

    Bin ``i`` covers frequencies around ``i * nyquist / buffer_length``.
    Magnitudes are non-negative and scaled so that ``max_magnitude`` is
    the loudest representable value (255 for byte analyser data).
    """

    magnitudes: np.ndarray
    sample_rate: int
    buffer_length: Optional[int] = None
    max_magnitude: float = MAX_BYTE_MAGNITUDE

    def __post_init__(self):
        self.magnitudes = np.asarray(self.magnitudes, dtype=np.float64)
        if self.buffer_length is None:
            self.buffer_length = len(self.magnitudes)

    @property
    def nyquist(self) -> float:
        return self.sample_rate / 2.0

    def validate(self, expected_sample_rate: Optional[int] = None) -> None:
        """Check the frame is usable.

        Raises:
            InvalidFrame: On length, sample-rate or magnitude problems
        """
        if self.sample_rate <= 0:
            raise InvalidFrame(f"Invalid sample rate: {self.sample_rate}")
        if expected_sample_rate is not None and self.sample_rate != expected_sample_rate:
            raise InvalidFrame(
                f"Sample rate mismatch: frame has {self.sample_rate} Hz, "
                f"expected {expected_sample_rate} Hz"
            )
        if self.buffer_length <= 0:
            raise InvalidFrame(f"Invalid buffer length: {self.buffer_length}")
        if self.magnitudes.ndim != 1 or len(self.magnitudes) != self.buffer_length:
            raise InvalidFrame(
                f"Frame length mismatch: got {self.magnitudes.size} values, "
                f"declared buffer length {self.buffer_length}"
            )
        if self.max_magnitude <= 0:
            raise InvalidFrame(f"Invalid max magnitude: {self.max_magnitude}")
        if not np.all(np.isfinite(self.magnitudes)):
            raise InvalidFrame("Frame contains non-finite magnitudes")
        if np.any(self.magnitudes < 0):
            raise InvalidFrame("Frame contains negative magnitudes")


@dataclass(frozen=True)
class DetectionResult:
    """Per-band detection output for one tick."""

    energy: float
    active: bool
    confidence: float
    components: Optional[Dict[str, "DetectionResult"]] = field(default=None, compare=False)

    @property
    def is_composite(self) -> bool:
        return self.components is not None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "energy": self.energy,
            "active": self.active,
            "confidence": self.confidence,
        }
        if self.is_composite:
            data["components"] = {
                name: result.to_dict() for name, result in self.components.items()
            }
        return data
