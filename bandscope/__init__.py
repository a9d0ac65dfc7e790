"""bandscope - Multi-band spectral instrument-activity detection.

Architecture Layers:
    1. core/       - Band profiles, frames, results, errors
    2. config      - Immutable detector configuration (defaults + YAML)
    3. input/      - Audio loading and file metadata
    4. analysis/   - Spectral frames, band filters, band energy extraction
    5. detection/  - History, confidence, overlap resolution, orchestration
    6. separation/ - Optional stem separation (Demucs or band-filter fallback)
"""

__version__ = "0.1.0"

# Core types
from .core import (
    BandKind,
    BandProfile,
    SpectralFrame,
    DetectionResult,
    InvalidFrame,
    AnalysisTimeout,
    EmptyFrequencyRange,
)

# Configuration
from .config import (
    AmbiguousPair,
    DetectorConfig,
    default_realtime_config,
    default_batch_config,
    load_config,
)

# Input layer
from .input import AudioLoader, AudioInfo

# Analysis layer
from .analysis import BandEnergyExtractor, BandFilterBank, SpectralFrameSource

# Detection layer
from .detection import (
    TemporalHistory,
    ConfidenceEstimator,
    OverlapResolver,
    DetectionOrchestrator,
    TickReport,
    BatchAnalyzer,
    BatchReport,
    classify_instruments,
)

# Separation layer
from .separation import StemSeparator, SeparationOutcome

__all__ = [
    # Core
    "BandKind",
    "BandProfile",
    "SpectralFrame",
    "DetectionResult",
    "InvalidFrame",
    "AnalysisTimeout",
    "EmptyFrequencyRange",
    # Configuration
    "AmbiguousPair",
    "DetectorConfig",
    "default_realtime_config",
    "default_batch_config",
    "load_config",
    # Input
    "AudioLoader",
    "AudioInfo",
    # Analysis
    "BandEnergyExtractor",
    "BandFilterBank",
    "SpectralFrameSource",
    # Detection
    "TemporalHistory",
    "ConfidenceEstimator",
    "OverlapResolver",
    "DetectionOrchestrator",
    "TickReport",
    "BatchAnalyzer",
    "BatchReport",
    "classify_instruments",
    # Separation
    "StemSeparator",
    "SeparationOutcome",
]
