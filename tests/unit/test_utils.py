"""Unit tests for the quick recognition helpers."""

import numpy as np
import soundfile as sf

from conftest import silence, tone
from sherpa_asr.callback import CollectCallback
from sherpa_asr.engine import set_default_engine
from sherpa_asr.utils import get_version, stream_file, transcribe, transcribe_file


def write_wav(path, audio):
    sf.write(str(path), audio, 16000, subtype="FLOAT")
    return path


class TestQuickFunctions:

    def test_transcribe_file(self, engine, offline_config, tmp_path):
        path = write_wav(tmp_path / "a.wav", tone(0.3))
        text = transcribe_file(path, offline_config, engine=engine)
        assert len(text.split()) == 3
        assert transcribe is transcribe_file
        assert engine.live_recognizers == 0

    def test_stream_file(self, engine, online_config, tmp_path):
        path = write_wav(tmp_path / "b.wav", np.concatenate([tone(0.4), silence(0.2)]))
        callback = CollectCallback()
        results = list(stream_file(path, online_config, chunk_ms=200, engine=engine, callback=callback))
        assert results[-1].is_final
        assert len(results[-1].text.split()) == 4
        assert callback.events[-1] == "close"
        assert engine.live_streams == 0

    def test_get_version_uses_default_engine(self, engine):
        set_default_engine(engine)
        assert get_version() == "fake"
