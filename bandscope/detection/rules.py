"""File-level instrument rules over the six batch bands.

A non-temporal layer applied once per file after band energies are known:

- bass:   bass > 0.6, confidence = bass
- drums:  sub_bass > 0.6 or highs > 0.7, confidence = max of the two
- vocals: mids > 0.7, confidence = mids
- guitar: low_mids > 0.6 and mids > 0.5, confidence = mean of the two
- synth:  high_mids > 0.7 and highs > 0.6, confidence = mean of the two

Piano has no rule: none of the six bands separates it from guitar and
synth, so it is never reported rather than always reported as absent.
"""

from dataclasses import dataclass
from typing import Dict, Mapping, Sequence, Tuple


@dataclass(frozen=True)
class InstrumentDetection:
    """Whether an instrument was detected in a file, and how confidently."""

    detected: bool = False
    confidence: float = 0.0

    def to_dict(self) -> Dict:
        return {"detected": self.detected, "confidence": self.confidence}


@dataclass(frozen=True)
class InstrumentRule:
    """Threshold rule flagging one instrument from band energies.

    Attributes:
        name: Instrument name
        conditions: (band, threshold) pairs; a condition holds when the
            band's energy is strictly above the threshold
        match: "all" or "any" of the conditions must hold
        combine: "mean" or "max" of the conditioned bands' energies
            gives the confidence
    """

    name: str
    conditions: Tuple[Tuple[str, float], ...]
    match: str = "all"
    combine: str = "mean"

    def __post_init__(self):
        if not self.conditions:
            raise ValueError(f"Rule '{self.name}' has no conditions")
        if self.match not in ("all", "any"):
            raise ValueError(f"Rule '{self.name}': match must be 'all' or 'any'")
        if self.combine not in ("mean", "max"):
            raise ValueError(f"Rule '{self.name}': combine must be 'mean' or 'max'")

    def evaluate(self, energies: Mapping[str, float]) -> InstrumentDetection:
        if any(band not in energies for band, _ in self.conditions):
            return InstrumentDetection()

        hits = [energies[band] > threshold for band, threshold in self.conditions]
        detected = all(hits) if self.match == "all" else any(hits)
        if not detected:
            return InstrumentDetection()

        values = [energies[band] for band, _ in self.conditions]
        if self.combine == "max":
            confidence = max(values)
        else:
            confidence = sum(values) / len(values)
        return InstrumentDetection(detected=True, confidence=float(confidence))


DEFAULT_INSTRUMENT_RULES = (
    InstrumentRule("vocals", (("mids", 0.7),)),
    InstrumentRule("guitar", (("low_mids", 0.6), ("mids", 0.5)), match="all", combine="mean"),
    InstrumentRule("bass", (("bass", 0.6),)),
    InstrumentRule("drums", (("sub_bass", 0.6), ("highs", 0.7)), match="any", combine="max"),
    InstrumentRule("synth", (("high_mids", 0.7), ("highs", 0.6)), match="all", combine="mean"),
)


def classify_instruments(
    energies: Mapping[str, float],
    rules: Sequence[InstrumentRule] = DEFAULT_INSTRUMENT_RULES,
) -> Dict[str, InstrumentDetection]:
    """
    Apply instrument rules to a file's band energies.

    Args:
        energies: Band name -> energy in [0, 1]
        rules: Rules to apply, in output order

    Returns:
        Instrument name -> InstrumentDetection for every rule
    """
    return {rule.name: rule.evaluate(energies) for rule in rules}
