"""Analysis layer - Band energy measurement.

This layer turns raw signal data into per-band energies:
- Spectral frames from audio (analyser-style byte magnitudes)
- Band-pass filtering for file-level analysis
- Normalized band energy extraction (spectral and RMS modes)
"""

from .energy import BandEnergyExtractor
from .filters import BandFilterBank
from .spectrum import SpectralFrameSource

__all__ = [
    "BandEnergyExtractor",
    "BandFilterBank",
    "SpectralFrameSource",
]
