"""Detection layer - Band activity and confidence over time.

This layer turns band energies into activity estimates:
- Per-band temporal history (fixed-capacity FIFO)
- Confidence scoring (transients for percussive bands, stability for sustained)
- Overlap resolution (pair suppression, group composites)
- Per-tick orchestration for real-time streams
- File-level batch analysis with instrument rules

Pipeline: Energies → History → Confidence → Overlap → DetectionResult mapping
"""

from .history import TemporalHistory
from .confidence import ConfidenceEstimator
from .overlap import OverlapResolver
from .orchestrator import DetectionOrchestrator, TickReport
from .rules import (
    InstrumentRule,
    InstrumentDetection,
    DEFAULT_INSTRUMENT_RULES,
    classify_instruments,
)
from .batch import BatchAnalyzer, BatchReport

__all__ = [
    "TemporalHistory",
    "ConfidenceEstimator",
    "OverlapResolver",
    "DetectionOrchestrator",
    "TickReport",
    "InstrumentRule",
    "InstrumentDetection",
    "DEFAULT_INSTRUMENT_RULES",
    "classify_instruments",
    "BatchAnalyzer",
    "BatchReport",
]
