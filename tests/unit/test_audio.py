"""Unit tests for audio conversion utilities."""

import numpy as np
import pytest
import soundfile as sf

from sherpa_asr.audio import as_float32_mono, chunk_audio, duration_seconds, load_audio


class TestConversion:
    """Tests for sample conversion."""

    def test_int16_scaled(self):
        result = as_float32_mono(np.array([0, 16384, -32768], dtype=np.int16))
        assert result.dtype == np.float32
        np.testing.assert_allclose(result, [0.0, 0.5, -1.0])

    @pytest.mark.parametrize("dtype, value, expected", [
        (np.int8, -64, -0.5),
        (np.int32, 2**30, 0.5),
        (np.uint8, 192, 0.5),
        (np.uint8, 128, 0.0),
    ])
    def test_integer_pcm_scaled(self, dtype, value, expected):
        result = as_float32_mono(np.array([value], dtype=dtype))
        np.testing.assert_allclose(result, [expected], atol=1e-6)

    def test_int64_rejected(self):
        """64-bit ints match no PCM format and would reach the engine unscaled."""
        with pytest.raises(ValueError, match="int64"):
            as_float32_mono(np.array([1000, 2000], dtype=np.int64))

    def test_stereo_downmixed(self):
        stereo = np.array([[0.2, 0.4], [-0.2, 0.0]], dtype=np.float32)
        np.testing.assert_allclose(as_float32_mono(stereo), [0.3, -0.1], atol=1e-6)

    def test_float64_converted(self):
        result = as_float32_mono(np.linspace(-1, 1, 5))
        assert result.dtype == np.float32
        assert result.flags["C_CONTIGUOUS"]


class TestChunking:
    """Tests for audio chunking."""

    def test_exact_division(self):
        chunks = list(chunk_audio(np.zeros(16000, dtype=np.float32), 16000, 100))
        assert len(chunks) == 10
        assert all(len(c) == 1600 for c in chunks)

    def test_with_remainder(self):
        chunks = list(chunk_audio(np.zeros(5000, dtype=np.float32), 16000, 100))
        assert [len(c) for c in chunks] == [1600, 1600, 1600, 200]

    def test_invalid_duration(self):
        with pytest.raises(ValueError):
            list(chunk_audio(np.zeros(10, dtype=np.float32), 16000, 0))

    def test_duration(self):
        assert duration_seconds(np.zeros(8000), 16000) == 0.5


class TestLoad:
    """Tests for file loading."""

    def test_wav_roundtrip(self, tmp_path):
        path = tmp_path / "mono.wav"
        samples = (0.5 * np.sin(np.linspace(0, 100, 8000))).astype(np.float32)
        sf.write(str(path), samples, 8000, subtype="PCM_16")

        loaded, rate = load_audio(path)
        assert rate == 8000
        assert loaded.dtype == np.float32
        np.testing.assert_allclose(loaded, samples, atol=1e-3)

    def test_stereo_file(self, tmp_path):
        path = tmp_path / "stereo.wav"
        frames = np.stack([np.full(100, 0.5), np.full(100, -0.5)], axis=1).astype(np.float32)
        sf.write(str(path), frames, 16000)

        loaded, rate = load_audio(path)
        assert loaded.shape == (100,)
        np.testing.assert_allclose(loaded, 0.0, atol=1e-4)
