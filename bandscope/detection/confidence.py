"""Confidence scoring from a band's recent energy history.

Two rules, selected by band kind:

- Percussive: look for a transient (a sample more than 1.5x its
  predecessor) in the last five samples. 0.8 with a transient, 0.4 without.
- Sustained: ``clamp(0.3, 0.9, 0.7 - variance * 5)`` over the last five
  samples, so steady bands score higher than fluctuating ones.

With fewer than five samples the neutral confidence 0.5 is returned.
"""

from typing import Sequence

import numpy as np

from ..core import BandKind
from ..core.constants import (
    CONFIDENCE_WINDOW,
    MIN_HISTORY,
    NEUTRAL_CONFIDENCE,
    NO_TRANSIENT_CONFIDENCE,
    SUSTAINED_BASELINE,
    SUSTAINED_CAP,
    SUSTAINED_FLOOR,
    SUSTAINED_VARIANCE_WEIGHT,
    TRANSIENT_CONFIDENCE,
    TRANSIENT_RATIO,
)
from .history import TemporalHistory


class ConfidenceEstimator:
    """Scores how much a band's recent history looks like a real instrument."""

    def __init__(
        self,
        window: int = CONFIDENCE_WINDOW,
        min_history: int = MIN_HISTORY,
        transient_ratio: float = TRANSIENT_RATIO,
    ):
        self.window = window
        self.min_history = min_history
        self.transient_ratio = transient_ratio

    def estimate(self, kind: BandKind, history: TemporalHistory) -> float:
        """
        Confidence for a band given its kind and history.

        Args:
            kind: Percussive or sustained
            history: The band's temporal history

        Returns:
            Confidence in [0, 1]
        """
        if len(history) < self.min_history:
            return NEUTRAL_CONFIDENCE

        recent = history.recent(self.window)
        if kind == BandKind.PERCUSSIVE:
            return self.percussive_confidence(recent)
        return self.sustained_confidence(recent)

    def has_transient(self, values: Sequence[float]) -> bool:
        """True if any sample exceeds ``transient_ratio`` times its predecessor."""
        return any(
            current > previous * self.transient_ratio
            for previous, current in zip(values, values[1:])
        )

    def percussive_confidence(self, values: Sequence[float]) -> float:
        if self.has_transient(values):
            return TRANSIENT_CONFIDENCE
        return NO_TRANSIENT_CONFIDENCE

    def sustained_confidence(self, values: Sequence[float]) -> float:
        variance = float(np.var(values))
        score = SUSTAINED_BASELINE - variance * SUSTAINED_VARIANCE_WEIGHT
        return min(SUSTAINED_CAP, max(SUSTAINED_FLOOR, score))
