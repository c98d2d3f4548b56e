"""Unit tests for recognizer and stream ownership."""

import gc

import pytest

from conftest import silence
from sherpa_asr.config import OfflineConfig, OnlineConfig, ParaformerModel, TransducerModel
from sherpa_asr.engine import set_default_engine
from sherpa_asr.errors import ConfigError, InvalidState
from sherpa_asr.recognizer import OfflineRecognizer, OnlineRecognizer, OnlineStream


def destroy_order(engine):
    return [name for name in engine.call_names() if name.startswith("destroy_") and "result" not in name]


class TestCreation:
    """Tests for recognizer construction."""

    def test_invalid_config_never_reaches_engine(self, engine):
        config = OnlineConfig(model=TransducerModel("e.onnx", "d.onnx"), tokens="t.txt")
        with pytest.raises(ConfigError, match="joiner"):
            OnlineRecognizer(config, engine=engine)
        assert engine.calls == []

    def test_engine_rejection_is_config_error(self, engine, offline_config):
        engine.missing_files.add("m.onnx")
        with pytest.raises(ConfigError, match="m.onnx"):
            OfflineRecognizer(offline_config, engine=engine)
        assert engine.live_recognizers == 0

    def test_wrong_config_kind(self, engine, offline_config):
        with pytest.raises(TypeError):
            OnlineRecognizer(offline_config, engine=engine)

    def test_default_engine(self, engine, online_config):
        set_default_engine(engine)
        with OnlineRecognizer(online_config) as recognizer:
            assert recognizer.engine is engine
        assert engine.live_recognizers == 0


class TestOwnership:
    """Tests for destroy ordering and exactly-once release."""

    def test_streams_destroyed_before_recognizer(self, engine, online_config):
        with OnlineRecognizer(online_config, engine=engine) as recognizer:
            with recognizer.create_stream() as stream:
                stream.accept_waveform(16000, silence(0.1))
        assert destroy_order(engine) == ["destroy_online_stream", "destroy_online_recognizer"]
        assert engine.live_streams == 0
        assert engine.live_recognizers == 0

    def test_destroy_with_live_stream_rejected(self, engine, online_config):
        recognizer = OnlineRecognizer(online_config, engine=engine)
        stream = recognizer.create_stream()
        with pytest.raises(InvalidState, match="live"):
            recognizer.close()
        assert not recognizer.closed
        assert "destroy_online_recognizer" not in engine.call_names()
        stream.close()
        recognizer.close()
        assert recognizer.closed

    def test_close_is_idempotent(self, engine, online_config):
        recognizer = OnlineRecognizer(online_config, engine=engine)
        stream = recognizer.create_stream()
        stream.close()
        stream.close()
        recognizer.close()
        recognizer.close()
        assert destroy_order(engine) == ["destroy_online_stream", "destroy_online_recognizer"]

    def test_garbage_collection_releases_in_order(self, engine, online_config):
        recognizer = OnlineRecognizer(online_config, engine=engine)
        stream = recognizer.create_stream()
        del recognizer
        gc.collect()
        # The stream keeps its recognizer alive
        assert engine.live_recognizers == 1
        del stream
        gc.collect()
        assert destroy_order(engine) == ["destroy_online_stream", "destroy_online_recognizer"]

    def test_stream_creation_failure_still_releases_recognizer(self, engine, online_config):
        engine.fail_stream_creation = True
        with pytest.raises(ConfigError):
            with OnlineRecognizer(online_config, engine=engine) as recognizer:
                recognizer.create_stream()
        assert engine.live_recognizers == 0
        assert recognizer.live_streams == 0

    def test_exception_with_live_stream_defers_release(self, engine, online_config):
        with pytest.raises(ValueError):
            with OnlineRecognizer(online_config, engine=engine) as recognizer:
                stream = recognizer.create_stream()
                raise ValueError("boom")
        assert not recognizer.closed
        stream.close()
        recognizer.close()
        assert destroy_order(engine) == ["destroy_online_stream", "destroy_online_recognizer"]

    def test_shared_recognizer(self, engine, online_config):
        with OnlineRecognizer(online_config, engine=engine) as recognizer:
            first = recognizer.create_stream()
            second = recognizer.create_stream()
            assert recognizer.live_streams == 2
            first.close()
            assert recognizer.live_streams == 1
            second.close()
        assert engine.live_recognizers == 0


class TestUseAfterClose:
    """Tests for operations on destroyed handles."""

    def test_stream_after_close(self, engine, online_config):
        with OnlineRecognizer(online_config, engine=engine) as recognizer:
            stream = recognizer.create_stream()
            stream.close()
            with pytest.raises(InvalidState):
                stream.accept_waveform(16000, silence(0.1))
            with pytest.raises(InvalidState):
                stream.handle

    def test_create_stream_after_close(self, engine, online_config):
        recognizer = OnlineRecognizer(online_config, engine=engine)
        recognizer.close()
        with pytest.raises(InvalidState):
            recognizer.create_stream()
        assert "create_online_stream" not in engine.call_names()


class TestStreams:
    """Tests for the thin stream wrappers."""

    def test_result_before_audio_is_empty(self, engine, online_config):
        with OnlineRecognizer(online_config, engine=engine) as recognizer:
            with recognizer.create_stream() as stream:
                assert isinstance(stream, OnlineStream)
                assert stream.get_result().text == ""
        assert engine.live_results == 0

    def test_null_result_is_empty(self, engine, offline_config):
        engine.null_results = True
        with OfflineRecognizer(offline_config, engine=engine) as recognizer:
            with recognizer.create_stream() as stream:
                stream.accept_waveform(16000, silence(0.5))
                stream.decode()
                assert stream.get_result().is_empty

    def test_decode_streams_rejects_foreign_stream(self, engine, offline_config):
        other_config = OfflineConfig(model=ParaformerModel("other.onnx"), tokens="t.bin")
        with OfflineRecognizer(offline_config, engine=engine) as first, \
                OfflineRecognizer(other_config, engine=engine) as second:
            with second.create_stream() as stream:
                with pytest.raises(InvalidState, match="different recognizer"):
                    first.decode_streams([stream])

    def test_repr(self, engine, online_config):
        recognizer = OnlineRecognizer(online_config, engine=engine)
        assert "transducer" in repr(recognizer)
        recognizer.close()
        assert "closed" in repr(recognizer)
