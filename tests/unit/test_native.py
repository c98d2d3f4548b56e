"""Unit tests for the ctypes layer that do not need the shared library."""

import ctypes

import pytest

from sherpa_asr.engine import get_default_engine
from sherpa_asr.engine import native
from sherpa_asr.engine.structs import (
    SherpaOnnxOfflineModelConfig,
    SherpaOnnxOfflineRecognizerConfig,
    SherpaOnnxOfflineRecognizerResult,
    SherpaOnnxOnlineModelConfig,
    SherpaOnnxOnlineRecognizerConfig,
    SherpaOnnxOnlineRecognizerResult,
)
from sherpa_asr.result import RecognitionResult


def field_names(struct_type):
    return [name for name, _ in struct_type._fields_]


class TestStructLayout:
    """Field order must follow c-api.h exactly."""

    def test_online_model_config(self):
        names = field_names(SherpaOnnxOnlineModelConfig)
        assert names[:3] == ["transducer", "paraformer", "zipformer2_ctc"]
        assert names[-1] == "nemo_ctc"

    def test_online_recognizer_config(self):
        names = field_names(SherpaOnnxOnlineRecognizerConfig)
        assert names[:5] == ["feat_config", "model_config", "decoding_method",
                             "max_active_paths", "enable_endpoint"]
        assert names[-1] == "hr"

    def test_offline_model_config(self):
        names = field_names(SherpaOnnxOfflineModelConfig)
        assert names.index("telespeech_ctc") < names.index("sense_voice")
        assert names[-1] == "dolphin"

    def test_offline_recognizer_config(self):
        names = field_names(SherpaOnnxOfflineRecognizerConfig)
        assert names[:3] == ["feat_config", "model_config", "lm_config"]
        assert names[-2:] == ["blank_penalty", "hr"]

    def test_result_fields_differ_by_mode(self):
        assert field_names(SherpaOnnxOnlineRecognizerResult)[:2] == ["text", "tokens"]
        assert field_names(SherpaOnnxOfflineRecognizerResult)[:2] == ["text", "timestamps"]


class TestResultCopy:
    """Tests for copying native results."""

    def test_offline_extra_fields(self):
        raw = SherpaOnnxOfflineRecognizerResult()
        raw.text = b" hello "
        raw.lang = b"<|en|>"
        result = RecognitionResult.from_native(raw)
        assert result.text == "hello"
        assert result.lang == "<|en|>"
        assert result.tokens == ()

    def test_token_arrays(self):
        raw = SherpaOnnxOnlineRecognizerResult()
        words = (ctypes.c_char_p * 2)(b"a", b"b")
        times = (ctypes.c_float * 2)(0.0, 0.5)
        raw.tokens_arr = ctypes.cast(words, ctypes.POINTER(ctypes.c_char_p))
        raw.timestamps = ctypes.cast(times, ctypes.POINTER(ctypes.c_float))
        raw.count = 2
        result = RecognitionResult.from_native(raw)
        assert result.tokens == ("a", "b")
        assert result.timestamps == (0.0, 0.5)
        assert result.lang == ""


class TestLibraryLoading:
    """Tests for locating libsherpa-onnx-c-api."""

    def test_env_path_wins(self, monkeypatch):
        monkeypatch.setenv(native.LIBRARY_ENV, "/opt/sherpa/libsherpa-onnx-c-api.so")
        assert native.find_library() == "/opt/sherpa/libsherpa-onnx-c-api.so"

    def test_not_found(self, monkeypatch):
        monkeypatch.delenv(native.LIBRARY_ENV, raising=False)
        monkeypatch.setattr(native.ctypes.util, "find_library", lambda name: None)
        with pytest.raises(ImportError, match="not found"):
            native.find_library()

    def test_unloadable_path(self, monkeypatch, tmp_path):
        monkeypatch.setenv(native.LIBRARY_ENV, str(tmp_path / "missing.so"))
        with pytest.raises(ImportError, match="Failed to load"):
            native.NativeEngine()

    def test_default_engine_surfaces_import_error(self, monkeypatch, tmp_path):
        monkeypatch.setenv(native.LIBRARY_ENV, str(tmp_path / "missing.so"))
        with pytest.raises(ImportError):
            get_default_engine()
