"""Tests for the bandscope command-line interface."""

import json

import numpy as np
import pytest
import soundfile as sf
from typer.testing import CliRunner

from bandscope.cli import app

runner = CliRunner()

SR = 22050


@pytest.fixture
def tone_file(tmp_path):
    t = np.arange(SR) / SR
    audio = 0.5 * np.sin(2 * np.pi * 1000 * t)
    path = tmp_path / "tone.wav"
    sf.write(str(path), audio, SR)
    return path


class TestBandsCommand:
    """Test the bands command."""

    def test_realtime_bands(self):
        """Default bands should include the drum group and pairs."""
        result = runner.invoke(app, ["bands"])
        assert result.exit_code == 0
        assert "kick" in result.output
        assert "drums" in result.output
        assert "Ambiguous pairs" in result.output

    def test_batch_bands(self):
        """Batch bands should be listed without pairs."""
        result = runner.invoke(app, ["bands", "--batch"])
        assert result.exit_code == 0
        assert "sub_bass" in result.output
        assert "Ambiguous pairs" not in result.output

    def test_bands_from_yaml(self, tmp_path):
        """Bands should be read from a YAML file."""
        path = tmp_path / "bands.yaml"
        path.write_text("bands:\n  - name: rumble\n    range: [20, 80]\n    threshold: 0.3\n")
        result = runner.invoke(app, ["bands", "--config", str(path)])
        assert result.exit_code == 0
        assert "rumble" in result.output

    def test_missing_config(self, tmp_path):
        """A missing config file should exit with an error."""
        result = runner.invoke(app, ["bands", "--config", str(tmp_path / "nope.yaml")])
        assert result.exit_code == 1


class TestAnalyzeCommand:
    """Test the analyze command."""

    def test_analyze(self, tone_file):
        """Analyzing a file should print the band table."""
        result = runner.invoke(app, ["analyze", str(tone_file)])
        assert result.exit_code == 0, result.output
        assert "Frequency Bands" in result.output
        assert "Analysis complete" in result.output

    def test_analyze_json(self, tone_file, tmp_path):
        """Analysis should be written to JSON when requested."""
        out = tmp_path / "out" / "analysis.json"
        result = runner.invoke(app, ["analyze", str(tone_file), "--json", str(out)])
        assert result.exit_code == 0, result.output

        data = json.loads(out.read_text())
        assert data["metadata"]["sample_rate"] == SR
        assert "mids" in data["frequency_bands"]
        assert data["stems"] is None

    def test_missing_file(self, tmp_path):
        """A missing input file should exit with an error."""
        result = runner.invoke(app, ["analyze", str(tmp_path / "missing.wav")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_unsupported_format(self, tmp_path):
        """An unsupported file format should exit with an error."""
        path = tmp_path / "notes.txt"
        path.write_text("not audio")
        result = runner.invoke(app, ["analyze", str(path)])
        assert result.exit_code == 1


class TestStreamCommand:
    """Test the stream command."""

    def test_stream(self, tone_file):
        """Streaming a file should print the summary table."""
        result = runner.invoke(app, ["stream", str(tone_file)])
        assert result.exit_code == 0, result.output
        assert "Stream Summary" in result.output
        assert "ticks" in result.output

    def test_stream_json(self, tone_file, tmp_path):
        """The stream summary should count one tick per frame."""
        out = tmp_path / "stream.json"
        result = runner.invoke(app, ["stream", str(tone_file), "--json", str(out)])
        assert result.exit_code == 0, result.output

        data = json.loads(out.read_text())
        assert data["ticks"] == 1 + SR // 1024
        assert data["skipped_ticks"] == 0
        assert set(data["bands"]) >= {"vocals", "bass", "drums"}
        assert data["bands"]["kick"]["ticks"] == data["ticks"]

    def test_invalid_smoothing(self, tone_file):
        """Out-of-range smoothing should exit with an error."""
        result = runner.invoke(app, ["stream", str(tone_file), "--smoothing", "1.5"])
        assert result.exit_code == 1
