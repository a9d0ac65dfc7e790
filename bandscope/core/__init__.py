"""Core types, constants and errors for bandscope."""

from .types import BandKind, BandProfile, SpectralFrame, DetectionResult
from .errors import (
    BandscopeError,
    InvalidFrame,
    AnalysisTimeout,
    SeparationError,
    ConfigurationWarning,
    EmptyFrequencyRange,
)
from .constants import (
    DEFAULT_SR,
    DEFAULT_N_FFT,
    HISTORY_CAPACITY,
    MIN_HISTORY,
    NEUTRAL_CONFIDENCE,
    MAX_BYTE_MAGNITUDE,
)

__all__ = [
    "BandKind",
    "BandProfile",
    "SpectralFrame",
    "DetectionResult",
    "BandscopeError",
    "InvalidFrame",
    "AnalysisTimeout",
    "SeparationError",
    "ConfigurationWarning",
    "EmptyFrequencyRange",
    "DEFAULT_SR",
    "DEFAULT_N_FFT",
    "HISTORY_CAPACITY",
    "MIN_HISTORY",
    "NEUTRAL_CONFIDENCE",
    "MAX_BYTE_MAGNITUDE",
]
