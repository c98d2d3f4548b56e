"""Unit tests for the sherpa-asr command line."""

import numpy as np
import pytest
import soundfile as sf

from conftest import silence, tone
from sherpa_asr import __version__
from sherpa_asr.cli import main


@pytest.fixture
def wav(tmp_path):
    path = tmp_path / "speech.wav"
    audio = np.concatenate([tone(0.5), silence(0.3)])
    sf.write(str(path), audio, 16000, subtype="FLOAT")
    return path


@pytest.fixture
def offline_dir(tmp_path):
    path = tmp_path / "paraformer"
    path.mkdir()
    for name in ("model.onnx", "tokens.txt"):
        (path / name).write_bytes(b"")
    return path


class TestCommands:
    """Tests for the file and stream subcommands."""

    def test_version(self, capsys):
        assert main(["--fake", "--version"]) == 0
        out = capsys.readouterr().out
        assert __version__ in out
        assert "Engine: fake" in out

    def test_file(self, capsys, wav, offline_dir):
        assert main(["--fake", "file", str(wav), "--model-dir", str(offline_dir)]) == 0
        out = capsys.readouterr().out
        assert "Model: paraformer" in out
        result_line = next(line for line in out.splitlines() if line.startswith("Result:"))
        assert len(result_line.split()) == 6

    def test_stream(self, capsys, wav, model_dir):
        argv = ["--fake", "stream", str(wav), "--model-dir", str(model_dir), "--chunk-ms", "160"]
        assert main(argv) == 0
        out = capsys.readouterr().out
        assert "[1]" in out
        assert "Samples processed: 12800" in out
        assert "Segments: 1" in out

    def test_stream_counts_only_transcribed_segments(self, capsys, model_dir, tmp_path):
        """An endpoint followed by silence does not add an empty segment."""
        path = tmp_path / "pause.wav"
        sf.write(str(path), np.concatenate([tone(0.5), silence(1.5)]), 16000, subtype="FLOAT")
        argv = ["--fake", "stream", str(path), "--model-dir", str(model_dir), "--chunk-ms", "500"]
        assert main(argv) == 0
        out = capsys.readouterr().out
        assert "[1]" in out
        assert "[2]" not in out
        assert "Segments: 1" in out

    def test_stream_partials(self, capsys, wav, model_dir):
        argv = ["--fake", "stream", str(wav), "--model-dir", str(model_dir), "--partials"]
        assert main(argv) == 0
        out = capsys.readouterr().out
        assert "[ASR] Session opened" in out
        assert "[ASR] Session closed" in out

    def test_no_command_prints_help(self, capsys):
        assert main(["--fake"]) == 0
        assert "usage" in capsys.readouterr().out


class TestErrors:
    """Tests for error exit codes."""

    def test_missing_model_dir(self, capsys, wav, tmp_path):
        assert main(["--fake", "file", str(wav), "--model-dir", str(tmp_path / "nope")]) == 1
        assert "model directory not found" in capsys.readouterr().err

    def test_missing_audio(self, capsys, offline_dir, tmp_path):
        assert main(["--fake", "file", str(tmp_path / "none.wav"), "--model-dir", str(offline_dir)]) == 1
        assert "Error" in capsys.readouterr().err

    def test_missing_native_library(self, capsys, monkeypatch, tmp_path):
        monkeypatch.setenv("SHERPA_ONNX_LIB", str(tmp_path / "missing.so"))
        assert main(["--version"]) == 1
        assert "Failed to load" in capsys.readouterr().err
