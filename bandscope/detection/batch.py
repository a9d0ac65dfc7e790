"""File-level (batch) band analysis.

Pipeline:
1. Optionally start stem separation in the background
2. Band-pass filter the signal for every band, concurrently
3. Wait for all bands (join), then take each band's RMS energy
4. Run one detection tick over the band energies
5. Apply the instrument rules
6. Collect the separation outcome, if one was started
"""

import time
from concurrent.futures import ThreadPoolExecutor, wait
from concurrent.futures import TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from ..analysis import BandEnergyExtractor, BandFilterBank
from ..config import DetectorConfig, default_batch_config
from ..core import AnalysisTimeout, BandProfile, DetectionResult, InvalidFrame
from ..input import AudioInfo, AudioLoader
from ..separation import SeparationOutcome, StemSeparator
from .orchestrator import DetectionOrchestrator
from .rules import (
    DEFAULT_INSTRUMENT_RULES,
    InstrumentDetection,
    InstrumentRule,
    classify_instruments,
)


@dataclass
class BatchReport:
    """Complete analysis of one file."""

    profiles: Tuple[BandProfile, ...]
    bands: Dict[str, DetectionResult]
    instruments: Dict[str, InstrumentDetection]
    separation: Optional[SeparationOutcome] = None
    metadata: Optional[AudioInfo] = None
    diagnostics: List[str] = field(default_factory=list)
    analysis_time: float = 0.0

    @property
    def energies(self) -> Dict[str, float]:
        return {name: result.energy for name, result in self.bands.items()}

    @property
    def detected_instruments(self) -> List[str]:
        return [name for name, det in self.instruments.items() if det.detected]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready analysis document."""
        frequency_bands = {}
        for profile in self.profiles:
            result = self.bands.get(profile.name)
            if result is None:
                continue
            frequency_bands[profile.name] = {
                "range": [profile.low_hz, profile.high_hz],
                **result.to_dict(),
            }

        return {
            "metadata": self.metadata.to_dict() if self.metadata else None,
            "frequency_bands": frequency_bands,
            "stems": self.separation.to_dict() if self.separation else None,
            "instrument_detection": {
                name: det.to_dict() for name, det in self.instruments.items()
            },
            "diagnostics": list(self.diagnostics),
            "analysis_time": self.analysis_time,
        }


class BatchAnalyzer:
    """
    Analyze whole files: band energies, activity and instrument flags.

    Each call to ``analyze`` uses a fresh DetectionOrchestrator, so
    analyzers can be reused across files without sharing history.

    Usage:
        analyzer = BatchAnalyzer(timeout=60.0)
        report = analyzer.analyze_file("song.wav")
        print(report.detected_instruments)
    """

    def __init__(
        self,
        config: Optional[DetectorConfig] = None,
        rules: Sequence[InstrumentRule] = DEFAULT_INSTRUMENT_RULES,
        max_workers: int = 6,
        timeout: Optional[float] = None,
        separator: Optional[StemSeparator] = None,
        separation_timeout: Optional[float] = None,
        loader: Optional[AudioLoader] = None,
    ):
        """
        Initialize BatchAnalyzer.

        Args:
            config: Band configuration (default: six fixed batch bands)
            rules: Instrument rules applied to the band energies
            max_workers: Threads used for band filtering
            timeout: Seconds allowed for band analysis (None = no limit)
            separator: Optional stem separator run alongside band analysis
            separation_timeout: Seconds to wait for separation after
                band analysis is done (None = no limit)
            loader: Audio loader for analyze_file (default: native rate, mono)
        """
        self.config = config or default_batch_config()
        self.rules = tuple(rules)
        self.max_workers = max_workers
        self.timeout = timeout
        self.separator = separator
        self.separation_timeout = separation_timeout
        self.loader = loader or AudioLoader(target_sr=None, mono=True)

        self.extractor = BandEnergyExtractor()
        self.filters = BandFilterBank()

    def _band_energy(
        self, audio: np.ndarray, profile: BandProfile, sample_rate: int, peak: float
    ) -> float:
        filtered = self.filters.apply(audio, profile, sample_rate)
        return self.extractor.rms_energy(filtered, peak, band=profile.name)

    def band_energies(
        self, audio: np.ndarray, sample_rate: int
    ) -> Tuple[Dict[str, float], List[InvalidFrame]]:
        """
        Normalized RMS energy for every configured band.

        Bands are filtered concurrently; the call returns once all of
        them are done.

        Returns:
            Tuple of (band name -> energy, per-band errors)

        Raises:
            AnalysisTimeout: If the bands are not done within ``timeout``
        """
        audio = np.asarray(audio, dtype=np.float64)
        if audio.ndim > 1:
            audio = np.mean(audio, axis=0)
        peak = float(np.max(np.abs(audio))) if audio.size else 0.0

        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        try:
            futures = {
                executor.submit(self._band_energy, audio, profile, sample_rate, peak): profile.name
                for profile in self.config.profiles
            }
            done, pending = wait(futures, timeout=self.timeout)
            if pending:
                for future in pending:
                    future.cancel()
                raise AnalysisTimeout(
                    f"Band analysis did not finish within {self.timeout:g}s "
                    f"({len(pending)} of {len(futures)} bands pending)"
                )

            energies = {}
            errors = []
            for future, name in futures.items():
                try:
                    energies[name] = future.result()
                except InvalidFrame as e:
                    errors.append(e)
            return energies, errors
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def analyze(
        self,
        audio: np.ndarray,
        sample_rate: int,
        metadata: Optional[AudioInfo] = None,
    ) -> BatchReport:
        """
        Analyze a decoded signal.

        Args:
            audio: Audio array (mono, or channels-first)
            sample_rate: Sample rate of the audio
            metadata: Optional file metadata to attach to the report

        Returns:
            BatchReport

        Raises:
            AnalysisTimeout: If band analysis exceeds ``timeout``
        """
        start_time = time.time()

        separation_pool = None
        separation_future = None
        if self.separator is not None:
            separation_pool = ThreadPoolExecutor(max_workers=1)
            separation_future = separation_pool.submit(self.separator.separate, audio, sample_rate)

        try:
            energies, errors = self.band_energies(audio, sample_rate)

            detector = DetectionOrchestrator(self.config, extractor=self.extractor)
            tick = detector.tick(energies)
            diagnostics = [str(e) for e in errors]
            diagnostics += [str(d) for d in tick.diagnostics if str(d) not in diagnostics]

            bands = {name: tick[name] for name in self.config.band_names if name in tick}
            instruments = classify_instruments(
                {name: result.energy for name, result in bands.items()},
                self.rules,
            )

            separation = None
            if separation_future is not None:
                separation = self._collect_separation(separation_future)
                if not separation.succeeded:
                    diagnostics.append(f"Stem separation unavailable: {separation.error}")
        finally:
            if separation_pool is not None:
                separation_pool.shutdown(wait=False, cancel_futures=True)

        return BatchReport(
            profiles=self.config.profiles,
            bands=bands,
            instruments=instruments,
            separation=separation,
            metadata=metadata,
            diagnostics=diagnostics,
            analysis_time=time.time() - start_time,
        )

    def _collect_separation(self, future) -> SeparationOutcome:
        try:
            return future.result(timeout=self.separation_timeout)
        except FutureTimeoutError:
            future.cancel()
            return SeparationOutcome.failure(
                f"timed out after {self.separation_timeout:g}s"
            )
        except Exception as e:
            return SeparationOutcome.failure(str(e))

    def analyze_file(self, path: Union[str, Path]) -> BatchReport:
        """
        Load and analyze an audio file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If the format is not supported
            AnalysisTimeout: If band analysis exceeds ``timeout``
        """
        metadata = self.loader.info(path)
        audio, sr = self.loader.load(path)
        return self.analyze(audio, sr, metadata=metadata)
