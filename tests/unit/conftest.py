"""Shared fixtures: a fake engine, ready-made configs and test signals."""

import numpy as np
import pytest

from sherpa_asr.config import OfflineConfig, OnlineConfig, ParaformerModel, TransducerModel
from sherpa_asr.engine import FakeEngine, set_default_engine

SAMPLE_RATE = 16000


def silence(seconds: float, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    return np.zeros(int(seconds * sample_rate), dtype=np.float32)


def tone(seconds: float, freq: float = 440.0, amplitude: float = 0.3, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    t = np.arange(int(seconds * sample_rate)) / sample_rate
    return (amplitude * np.sin(2 * np.pi * freq * t)).astype(np.float32)


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture(autouse=True)
def no_default_engine():
    """Keep tests from loading the native library by accident."""
    set_default_engine(None)
    yield
    set_default_engine(None)


@pytest.fixture
def online_config():
    return OnlineConfig(
        model=TransducerModel("encoder.onnx", "decoder.onnx", "joiner.onnx"),
        tokens="tokens.txt",
        provider="cpu",
    )


@pytest.fixture
def offline_config():
    return OfflineConfig(model=ParaformerModel("m.onnx"), tokens="t.bin", provider="cpu")


@pytest.fixture
def model_dir(tmp_path):
    """Directory laid out like a downloaded streaming transducer."""
    for name in ("encoder-epoch-99.onnx", "decoder-epoch-99.onnx", "joiner-epoch-99.onnx",
                 "encoder-epoch-99.int8.onnx", "tokens.txt"):
        (tmp_path / name).write_bytes(b"")
    return tmp_path
