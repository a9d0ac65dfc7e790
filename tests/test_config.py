"""Tests for band profiles and detector configuration."""

from dataclasses import FrozenInstanceError

import numpy as np
import pytest

from bandscope.config import (
    AmbiguousPair,
    DetectorConfig,
    default_batch_config,
    default_realtime_config,
    load_config,
)
from bandscope.core import BandKind, BandProfile, SpectralFrame
from bandscope.detection import DetectionOrchestrator

CONFIG_YAML = """
bands:
  - name: bass
    range: [60, 250]
    threshold: 0.5
  - name: guitar
    range: [300, 4000]
    threshold: 0.5
    kind: sustained
  - name: kick
    range: [20, 100]
    threshold: 0.6
    kind: percussive
    group: drums
  - name: snare
    range: [120, 250]
    threshold: 0.5
    kind: percussive
    group: drums
pairs:
  - dominant: bass
    suppressed: guitar
    damping: 0.5
expected_sample_rate: 48000
history_capacity: 10
"""


class TestBandProfile:
    """Test band profile construction and validation."""

    def test_fields(self):
        """Profile fields should be exposed through properties."""
        profile = BandProfile("kick", 20, 100, 0.6, BandKind.PERCUSSIVE, "drums")
        assert profile.frequency_range == (20, 100)
        assert profile.is_percussive
        assert profile.parent_group == "drums"

    def test_kind_from_string(self):
        """A kind given as a string should be converted."""
        profile = BandProfile("pad", 100, 800, 0.4, kind="sustained")
        assert profile.kind is BandKind.SUSTAINED

    def test_immutable(self):
        """Profiles should be read-only."""
        profile = BandProfile("bass", 60, 250, 0.5)
        with pytest.raises(FrozenInstanceError):
            profile.threshold = 0.9

    @pytest.mark.parametrize("low, high", [
        (-10, 100),
        (300, 200),
        (float("nan"), 250),
        (60, float("nan")),
        (60, float("inf")),
        (float("-inf"), 100),
    ])
    def test_invalid_range(self, low, high):
        """Negative, inverted or non-finite ranges should be rejected."""
        with pytest.raises(ValueError):
            BandProfile("bad", low, high, 0.5)

    @pytest.mark.parametrize("threshold", [-0.1, 1.5])
    def test_invalid_threshold(self, threshold):
        """Thresholds outside [0, 1] should be rejected."""
        with pytest.raises(ValueError):
            BandProfile("bad", 60, 250, threshold)

    def test_empty_name(self):
        """An empty band name should be rejected."""
        with pytest.raises(ValueError):
            BandProfile("", 60, 250, 0.5)


class TestAmbiguousPair:
    """Test ambiguous pair validation."""

    def test_defaults(self):
        """Pairs should default to ratio 1.2 and damping 0.7."""
        pair = AmbiguousPair("bass", "guitar")
        assert pair.ratio == 1.2
        assert pair.damping == 0.7

    def test_same_band_rejected(self):
        """A band should not be paired with itself."""
        with pytest.raises(ValueError):
            AmbiguousPair("bass", "bass")

    def test_damping_range(self):
        """Damping outside [0, 1] should be rejected."""
        with pytest.raises(ValueError):
            AmbiguousPair("bass", "guitar", damping=1.5)


class TestDetectorConfig:
    """Test detector configuration validation."""

    def test_realtime_defaults(self):
        """Real-time defaults should group drums and pair bass with guitar."""
        config = default_realtime_config()
        assert config.band_names == [
            "vocals", "guitar", "bass", "kick", "snare", "hihat", "synth",
        ]
        assert config.groups == {"drums": ["kick", "snare", "hihat"]}
        assert config.get_profile("kick").is_percussive
        assert config.get_profile("vocals").threshold == 0.45
        assert config.pairs[0].dominant == "bass"

    def test_batch_defaults(self):
        """Batch defaults should be six plain bands."""
        config = default_batch_config()
        assert config.band_names == [
            "sub_bass", "bass", "low_mids", "mids", "high_mids", "highs",
        ]
        assert config.get_profile("highs").frequency_range == (4000, 20000)
        assert config.groups == {}
        assert config.pairs == ()

    def test_empty_rejected(self):
        """A configuration without bands should be rejected."""
        with pytest.raises(ValueError):
            DetectorConfig(profiles=())

    def test_duplicate_names_rejected(self):
        """Duplicate band names should be rejected."""
        with pytest.raises(ValueError, match="Duplicate"):
            DetectorConfig(profiles=(
                BandProfile("bass", 60, 250, 0.5),
                BandProfile("bass", 40, 200, 0.5),
            ))

    def test_group_name_clash_rejected(self):
        """A group named like a band should be rejected."""
        with pytest.raises(ValueError, match="clash"):
            DetectorConfig(profiles=(
                BandProfile("drums", 20, 100, 0.5),
                BandProfile("kick", 20, 100, 0.5, parent_group="drums"),
            ))

    def test_pair_with_unknown_band_rejected(self):
        """Pairs should only reference configured bands."""
        with pytest.raises(ValueError, match="unknown band"):
            DetectorConfig(
                profiles=(BandProfile("bass", 60, 250, 0.5),),
                pairs=(AmbiguousPair("bass", "guitar"),),
            )

    @pytest.mark.parametrize("rate", ["44100", 0, -8000, 44100.0, True])
    def test_invalid_expected_sample_rate(self, rate):
        """Only positive integer sample rates should be accepted."""
        with pytest.raises(ValueError):
            DetectorConfig(
                profiles=(BandProfile("bass", 60, 250, 0.5),),
                expected_sample_rate=rate,
            )

    def test_unknown_profile(self):
        """Looking up an unknown band should raise KeyError."""
        with pytest.raises(KeyError):
            default_realtime_config().get_profile("piano")

    def test_dict_round_trip(self):
        """to_dict output should rebuild an equal configuration."""
        config = default_realtime_config(expected_sample_rate=44100)
        assert DetectorConfig.from_dict(config.to_dict()) == config

    def test_malformed_band_entry(self):
        """A band entry without a range should be rejected."""
        with pytest.raises(ValueError, match="Malformed"):
            DetectorConfig.from_dict({"bands": [{"name": "bass", "threshold": 0.5}]})

    def test_missing_bands(self):
        """A document without bands should be rejected."""
        with pytest.raises(ValueError):
            DetectorConfig.from_dict({"pairs": []})


class TestLoadConfig:
    """Test loading configurations from YAML files."""

    def test_load_yaml(self, tmp_path):
        """Every field of a YAML configuration should be loaded."""
        path = tmp_path / "bands.yaml"
        path.write_text(CONFIG_YAML)

        config = load_config(path)

        assert config.band_names == ["bass", "guitar", "kick", "snare"]
        assert config.get_profile("bass").kind is BandKind.SUSTAINED
        assert config.get_profile("kick").kind is BandKind.PERCUSSIVE
        assert config.groups == {"drums": ["kick", "snare"]}
        assert config.pairs[0].damping == 0.5
        assert config.pairs[0].ratio == 1.2
        assert config.expected_sample_rate == 48000
        assert config.history_capacity == 10

    def test_missing_file(self, tmp_path):
        """A missing file should raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "missing.yaml")

    def test_not_a_mapping(self, tmp_path):
        """A YAML list should be rejected."""
        path = tmp_path / "bands.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_invalid_threshold_in_file(self, tmp_path):
        """Invalid thresholds in a file should be rejected."""
        path = tmp_path / "bands.yaml"
        path.write_text("bands:\n  - name: bass\n    range: [60, 250]\n    threshold: 2\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_non_finite_range_in_file(self, tmp_path):
        """A NaN band edge in a file should be rejected at load time."""
        path = tmp_path / "bands.yaml"
        path.write_text("bands:\n  - name: bass\n    range: [.nan, 250]\n    threshold: 0.5\n")
        with pytest.raises(ValueError):
            load_config(path)

    def test_sample_rate_string_coerced(self, tmp_path):
        """A quoted sample rate should be read as a number."""
        path = tmp_path / "bands.yaml"
        path.write_text(
            "bands:\n  - name: bass\n    range: [60, 250]\n    threshold: 0.5\n"
            "expected_sample_rate: '44100'\n"
        )

        config = load_config(path)
        assert config.expected_sample_rate == 44100

        report = DetectionOrchestrator(config).tick(SpectralFrame(np.zeros(1024), 44100, 1024))
        assert report.ok
        assert "bass" in report

    def test_malformed_sample_rate_in_file(self, tmp_path):
        """A non-numeric sample rate should be rejected."""
        path = tmp_path / "bands.yaml"
        path.write_text(
            "bands:\n  - name: bass\n    range: [60, 250]\n    threshold: 0.5\n"
            "expected_sample_rate: fast\n"
        )
        with pytest.raises(ValueError):
            load_config(path)
