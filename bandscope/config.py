"""Detector configuration: band profiles and ambiguous band pairs.

A configuration is built once, validated, and then shared read-only by
every detector that uses it. Defaults cover the two operating modes:

- Real-time: overlapping instrument-shaped bands, kick/snare/hihat grouped
  into "drums", bass suppressing guitar when both are active.
- Batch: six fixed, non-overlapping bands computed once per file.

Configurations can also be loaded from YAML:

    bands:
      - name: bass
        range: [60, 250]
        threshold: 0.5
        kind: sustained
      - name: kick
        range: [20, 100]
        threshold: 0.6
        kind: percussive
        group: drums
    pairs:
      - dominant: bass
        suppressed: guitar
        ratio: 1.2
        damping: 0.7
"""

import numbers
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import yaml

from .core import BandKind, BandProfile
from .core.constants import (
    DEFAULT_SUPPRESSION_DAMPING,
    DEFAULT_SUPPRESSION_RATIO,
    HISTORY_CAPACITY,
)


@dataclass(frozen=True)
class AmbiguousPair:
    """A registered pair of bands that are easily confused.

    When both bands are active and ``dominant`` carries more than
    ``ratio`` times the energy of ``suppressed``, the confidence of
    ``suppressed`` is multiplied by ``damping``.
    """

    dominant: str
    suppressed: str
    ratio: float = DEFAULT_SUPPRESSION_RATIO
    damping: float = DEFAULT_SUPPRESSION_DAMPING

    def __post_init__(self):
        if self.dominant == self.suppressed:
            raise ValueError(f"Ambiguous pair needs two different bands: {self.dominant}")
        if self.ratio <= 0:
            raise ValueError(f"Suppression ratio must be positive, got {self.ratio}")
        if not 0.0 <= self.damping <= 1.0:
            raise ValueError(f"Damping must be in [0, 1], got {self.damping}")


@dataclass(frozen=True)
class DetectorConfig:
    """Immutable set of band profiles and ambiguous pairs.

    Attributes:
        profiles: Band profiles, in output order
        pairs: Registered ambiguous pairs for overlap suppression
        expected_sample_rate: Reject frames at any other rate (None = accept any)
        history_capacity: Samples kept per band
    """

    profiles: Tuple[BandProfile, ...]
    pairs: Tuple[AmbiguousPair, ...] = ()
    expected_sample_rate: Optional[int] = None
    history_capacity: int = HISTORY_CAPACITY

    def __post_init__(self):
        object.__setattr__(self, "profiles", tuple(self.profiles))
        object.__setattr__(self, "pairs", tuple(self.pairs))

        if not self.profiles:
            raise ValueError("Configuration needs at least one band")
        rate = self.expected_sample_rate
        if rate is not None and (
            isinstance(rate, bool) or not isinstance(rate, numbers.Integral) or rate <= 0
        ):
            raise ValueError(f"Expected sample rate must be a positive integer, got {rate!r}")
        if self.history_capacity < 1:
            raise ValueError(f"History capacity must be positive, got {self.history_capacity}")

        names = [p.name for p in self.profiles]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate band names: {', '.join(duplicates)}")

        clashing = sorted(set(self.groups) & set(names))
        if clashing:
            raise ValueError(f"Group names clash with band names: {', '.join(clashing)}")

        for pair in self.pairs:
            for name in (pair.dominant, pair.suppressed):
                if name not in names:
                    raise ValueError(f"Ambiguous pair references unknown band '{name}'")

    @property
    def band_names(self) -> List[str]:
        return [p.name for p in self.profiles]

    @property
    def groups(self) -> Dict[str, List[str]]:
        """Group name -> member band names, in profile order."""
        groups: Dict[str, List[str]] = {}
        for profile in self.profiles:
            if profile.parent_group:
                groups.setdefault(profile.parent_group, []).append(profile.name)
        return groups

    def get_profile(self, name: str) -> BandProfile:
        for profile in self.profiles:
            if profile.name == name:
                return profile
        raise KeyError(name)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DetectorConfig":
        """Build a configuration from a parsed YAML/JSON document."""
        bands = data.get("bands")
        if not bands:
            raise ValueError("Configuration has no 'bands' section")

        profiles = []
        for entry in bands:
            try:
                low, high = entry["range"]
                profiles.append(BandProfile(
                    name=entry["name"],
                    low_hz=float(low),
                    high_hz=float(high),
                    threshold=float(entry["threshold"]),
                    kind=BandKind(entry.get("kind", BandKind.SUSTAINED.value)),
                    parent_group=entry.get("group"),
                ))
            except (KeyError, TypeError) as e:
                raise ValueError(f"Malformed band entry {entry!r}: {e}") from e

        pairs = []
        for entry in data.get("pairs") or []:
            try:
                pairs.append(AmbiguousPair(
                    dominant=entry["dominant"],
                    suppressed=entry["suppressed"],
                    ratio=float(entry.get("ratio", DEFAULT_SUPPRESSION_RATIO)),
                    damping=float(entry.get("damping", DEFAULT_SUPPRESSION_DAMPING)),
                ))
            except (KeyError, TypeError) as e:
                raise ValueError(f"Malformed pair entry {entry!r}: {e}") from e

        expected_sample_rate = data.get("expected_sample_rate")
        if expected_sample_rate is not None:
            try:
                expected_sample_rate = int(expected_sample_rate)
            except (TypeError, ValueError) as e:
                raise ValueError(
                    f"Malformed expected_sample_rate {expected_sample_rate!r}: {e}"
                ) from e

        return cls(
            profiles=tuple(profiles),
            pairs=tuple(pairs),
            expected_sample_rate=expected_sample_rate,
            history_capacity=int(data.get("history_capacity", HISTORY_CAPACITY)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "bands": [p.to_dict() for p in self.profiles],
            "pairs": [
                {
                    "dominant": pair.dominant,
                    "suppressed": pair.suppressed,
                    "ratio": pair.ratio,
                    "damping": pair.damping,
                }
                for pair in self.pairs
            ],
            "expected_sample_rate": self.expected_sample_rate,
            "history_capacity": self.history_capacity,
        }


def load_config(path: Union[str, Path]) -> DetectorConfig:
    """
    Load a detector configuration from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        Validated DetectorConfig

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the document is not a valid configuration
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path) as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")

    return DetectorConfig.from_dict(data)


# Real-time instrument bands (overlapping ranges)
REALTIME_PROFILES = (
    BandProfile("vocals", 300, 3500, 0.45, BandKind.SUSTAINED),
    BandProfile("guitar", 300, 4000, 0.5, BandKind.SUSTAINED),
    BandProfile("bass", 60, 250, 0.5, BandKind.SUSTAINED),
    BandProfile("kick", 20, 100, 0.6, BandKind.PERCUSSIVE, parent_group="drums"),
    BandProfile("snare", 120, 250, 0.5, BandKind.PERCUSSIVE, parent_group="drums"),
    BandProfile("hihat", 800, 5000, 0.4, BandKind.PERCUSSIVE, parent_group="drums"),
    BandProfile("synth", 100, 8000, 0.45, BandKind.SUSTAINED),
)

REALTIME_PAIRS = (
    AmbiguousPair(dominant="bass", suppressed="guitar"),
)

# Batch file-level bands (non-overlapping)
BATCH_PROFILES = (
    BandProfile("sub_bass", 20, 60, 0.6),
    BandProfile("bass", 60, 250, 0.6),
    BandProfile("low_mids", 250, 500, 0.6),
    BandProfile("mids", 500, 2000, 0.7),
    BandProfile("high_mids", 2000, 4000, 0.7),
    BandProfile("highs", 4000, 20000, 0.7),
)


def default_realtime_config(expected_sample_rate: Optional[int] = None) -> DetectorConfig:
    return DetectorConfig(
        profiles=REALTIME_PROFILES,
        pairs=REALTIME_PAIRS,
        expected_sample_rate=expected_sample_rate,
    )


def default_batch_config() -> DetectorConfig:
    return DetectorConfig(profiles=BATCH_PROFILES)

