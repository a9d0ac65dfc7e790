"""Tests for audio loading and file metadata."""

import numpy as np
import pytest
import soundfile as sf

from bandscope.input import AudioLoader

SR = 22050


@pytest.fixture
def stereo_file(tmp_path):
    t = np.arange(SR) / SR
    left = 0.25 * np.sin(2 * np.pi * 440 * t)
    right = 0.25 * np.sin(2 * np.pi * 660 * t)
    path = tmp_path / "stereo.wav"
    sf.write(str(path), np.stack([left, right], axis=1), SR)
    return path


class TestAudioLoader:
    """Test audio loading and metadata."""

    def test_load_native_rate_mono(self, stereo_file):
        """Loading without a target rate should keep the file's rate."""
        audio, sr = AudioLoader(target_sr=None).load(stereo_file)
        assert sr == SR
        assert audio.ndim == 1
        assert len(audio) == SR

    def test_load_resampled(self, stereo_file):
        """Loading with a target rate should resample."""
        audio, sr = AudioLoader(target_sr=11025).load(stereo_file)
        assert sr == 11025
        assert len(audio) == pytest.approx(11025, abs=2)

    def test_load_stereo_channels_first(self, stereo_file):
        """Stereo loading should return channels first."""
        audio, _ = AudioLoader(target_sr=None, mono=False).load(stereo_file)
        assert audio.shape == (2, SR)

    def test_normalize(self, stereo_file):
        """Normalized audio should peak at 1."""
        audio, _ = AudioLoader(target_sr=None, normalize=True).load(stereo_file)
        assert np.abs(audio).max() == pytest.approx(1.0)

    def test_info(self, stereo_file):
        """info should read metadata without decoding."""
        info = AudioLoader().info(stereo_file)
        assert info.sample_rate == SR
        assert info.channels == 2
        assert info.duration == pytest.approx(1.0)
        assert info.format == "WAV"
        assert info.to_dict()["path"] == str(stereo_file)

    def test_missing_file(self, tmp_path):
        """A missing file should raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            AudioLoader().load(tmp_path / "missing.wav")

    def test_unsupported_format(self, tmp_path):
        """Unknown extensions should be rejected."""
        path = tmp_path / "notes.txt"
        path.write_text("not audio")
        with pytest.raises(ValueError, match="Unsupported format"):
            AudioLoader().info(path)
