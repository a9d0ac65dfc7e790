"""Per-tick detection pipeline.

Each call to ``DetectionOrchestrator.tick`` runs, in a fixed order:

1. Energy extraction for every configured band
2. History update for bands with a usable reading
3. Confidence estimation from each band's history
4. Overlap resolution (pair suppression, group composites)

Histories only advance inside ``tick``. A rejected frame or band reading
leaves that band's history untouched and its previous result is reused.
"""

import math
from collections.abc import Mapping as MappingABC
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple, Union

from ..analysis import BandEnergyExtractor
from ..config import DetectorConfig
from ..core import DetectionResult, InvalidFrame, SpectralFrame
from .confidence import ConfidenceEstimator
from .history import TemporalHistory
from .overlap import OverlapResolver


@dataclass
class TickReport(MappingABC):
    """Band name -> DetectionResult for one tick, plus diagnostics.

    Behaves as a read-only mapping over ``results``; composite groups
    follow the individual bands.
    """

    results: Dict[str, DetectionResult] = field(default_factory=dict)
    diagnostics: List[InvalidFrame] = field(default_factory=list)
    tick_index: int = 0

    def __getitem__(self, name: str) -> DetectionResult:
        return self.results[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    @property
    def ok(self) -> bool:
        """True if every band was updated this tick."""
        return not self.diagnostics

    @property
    def active_bands(self) -> List[str]:
        return [name for name, result in self.results.items() if result.active]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tick": self.tick_index,
            "results": {name: r.to_dict() for name, r in self.results.items()},
            "diagnostics": [str(d) for d in self.diagnostics],
        }


class DetectionOrchestrator:
    """
    Multi-band activity detector for one stream or file.

    Owns one TemporalHistory per configured band. Create one orchestrator
    per stream; the configuration itself may be shared.

    Usage:
        detector = DetectionOrchestrator(default_realtime_config())
        for frame in SpectralFrameSource().frames(audio, sr):
            report = detector.tick(frame)
            if report["drums"].active:
                ...

        # Band-energy input (e.g. file-level RMS readings)
        report = detector.tick({"bass": 0.7, "guitar": 0.4, ...})
    """

    def __init__(
        self,
        config: DetectorConfig,
        extractor: Optional[BandEnergyExtractor] = None,
        estimator: Optional[ConfidenceEstimator] = None,
    ):
        """
        Initialize DetectionOrchestrator.

        Args:
            config: Band profiles and ambiguous pairs
            extractor: Band energy extractor (default: new instance)
            estimator: Confidence estimator (default: new instance)
        """
        self.config = config
        self.extractor = extractor or BandEnergyExtractor()
        self.estimator = estimator or ConfidenceEstimator()
        self.resolver = OverlapResolver(config.pairs, config.groups)
        self.reset()

    def reset(self) -> None:
        """Discard all histories and held results."""
        self._histories: Dict[str, TemporalHistory] = {
            profile.name: TemporalHistory(self.config.history_capacity)
            for profile in self.config.profiles
        }
        self._raw: Dict[str, DetectionResult] = {}
        self._tick_count = 0

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def history(self, band: str) -> TemporalHistory:
        return self._histories[band]

    def tick(self, source: Union[SpectralFrame, Mapping[str, float]]) -> TickReport:
        """
        Run one detection tick.

        Args:
            source: A SpectralFrame, or a mapping of band name -> energy in [0, 1]

        Returns:
            TickReport with results for every band that has ever been
            measured, plus any composite groups that are complete
        """
        if isinstance(source, SpectralFrame):
            energies, diagnostics = self._energies_from_frame(source)
        elif isinstance(source, MappingABC):
            energies, diagnostics = self._energies_from_bands(source)
        else:
            raise TypeError(
                f"tick() expects a SpectralFrame or a mapping of band energies, "
                f"got {type(source).__name__}"
            )

        for profile in self.config.profiles:
            if profile.name not in energies:
                continue
            energy = energies[profile.name]
            history = self._histories[profile.name]
            history.push(energy)
            self._raw[profile.name] = DetectionResult(
                energy=energy,
                active=energy > profile.threshold,
                confidence=self.estimator.estimate(profile.kind, history),
            )

        raw = {
            profile.name: self._raw[profile.name]
            for profile in self.config.profiles
            if profile.name in self._raw
        }
        results = self.resolver.resolve(raw)

        self._tick_count += 1
        return TickReport(
            results=results,
            diagnostics=diagnostics,
            tick_index=self._tick_count,
        )

    def _energies_from_frame(
        self, frame: SpectralFrame
    ) -> Tuple[Dict[str, float], List[InvalidFrame]]:
        try:
            energies = self.extractor.extract_frame(
                frame,
                self.config.profiles,
                expected_sample_rate=self.config.expected_sample_rate,
            )
        except InvalidFrame as e:
            return {}, [e]
        return energies, []

    def _energies_from_bands(
        self, readings: Mapping[str, float]
    ) -> Tuple[Dict[str, float], List[InvalidFrame]]:
        energies = {}
        diagnostics = []
        for profile in self.config.profiles:
            name = profile.name
            if name not in readings:
                diagnostics.append(InvalidFrame(f"No reading for band '{name}'", band=name))
                continue
            try:
                value = float(readings[name])
            except (TypeError, ValueError):
                diagnostics.append(
                    InvalidFrame(f"Reading for band '{name}' is not a number", band=name)
                )
                continue
            if not math.isfinite(value) or not 0.0 <= value <= 1.0:
                diagnostics.append(
                    InvalidFrame(f"Reading for band '{name}' outside [0, 1]: {value}", band=name)
                )
                continue
            energies[name] = value
        return energies, diagnostics
