"""
Native engine - ctypes bindings for libsherpa-onnx-c-api

The shared library is located through ``SHERPA_ONNX_LIB`` (full path) or the
system loader search path. Every entry point gets explicit argtypes/restype so
handles and result pointers cross the boundary with the right width.
"""

import ctypes
import ctypes.util
import logging
import os
from ctypes import POINTER, c_char_p, c_float, c_int32, c_void_p
from typing import Optional, Sequence

import numpy as np

from .structs import (
    SherpaOnnxOfflineRecognizerConfig,
    SherpaOnnxOfflineRecognizerResult,
    SherpaOnnxOnlineRecognizerConfig,
    SherpaOnnxOnlineRecognizerResult,
)

logger = logging.getLogger(__name__)

LIBRARY_ENV = "SHERPA_ONNX_LIB"
LIBRARY_NAME = "sherpa-onnx-c-api"

_INSTALL_HINT = (
    "libsherpa-onnx-c-api not found. Build or download the sherpa-onnx C API:\n"
    "  cmake -DBUILD_SHARED_LIBS=ON .. && make sherpa-onnx-c-api\n"
    f"then point {LIBRARY_ENV} at the library or add its directory to the loader path"
)


def find_library() -> str:
    """Resolve the shared library path"""
    path = os.environ.get(LIBRARY_ENV, "").strip()
    if path:
        return path
    found = ctypes.util.find_library(LIBRARY_NAME)
    if not found:
        raise ImportError(_INSTALL_HINT)
    return found


def load_library(path: Optional[str] = None) -> ctypes.CDLL:
    """
    Load the sherpa-onnx C API.

    Raises:
        ImportError: library missing or not loadable
    """
    path = path or find_library()
    try:
        lib = ctypes.CDLL(path)
    except OSError as e:
        raise ImportError(f"Failed to load {path}: {e}\n{_INSTALL_HINT}") from e
    logger.debug("Loaded sherpa-onnx C API from %s", path)
    return lib


def _as_float_ptr(samples: np.ndarray):
    return samples.ctypes.data_as(POINTER(c_float))


class NativeEngine:
    """
    Engine backed by the sherpa-onnx shared library.

    Example:
        engine = NativeEngine()
        print(engine.version())
    """

    def __init__(self, library_path: Optional[str] = None):
        """
        Load and bind the C API.

        Args:
            library_path: Explicit library path (default: SHERPA_ONNX_LIB or loader search)
        """
        self._lib = load_library(library_path)
        self._bind()

    def _proto(self, name: str, restype, *argtypes):
        fn = getattr(self._lib, name)
        fn.restype = restype
        fn.argtypes = list(argtypes)
        return fn

    def _bind(self):
        online_result = POINTER(SherpaOnnxOnlineRecognizerResult)
        offline_result = POINTER(SherpaOnnxOfflineRecognizerResult)

        # Online
        self._create_online_recognizer = self._proto(
            "SherpaOnnxCreateOnlineRecognizer", c_void_p, POINTER(SherpaOnnxOnlineRecognizerConfig))
        self._destroy_online_recognizer = self._proto(
            "SherpaOnnxDestroyOnlineRecognizer", None, c_void_p)
        self._create_online_stream = self._proto(
            "SherpaOnnxCreateOnlineStream", c_void_p, c_void_p)
        self._destroy_online_stream = self._proto(
            "SherpaOnnxDestroyOnlineStream", None, c_void_p)
        self._online_accept = self._proto(
            "SherpaOnnxOnlineStreamAcceptWaveform", None, c_void_p, c_int32, POINTER(c_float), c_int32)
        self._is_online_ready = self._proto(
            "SherpaOnnxIsOnlineStreamReady", c_int32, c_void_p, c_void_p)
        self._decode_online = self._proto(
            "SherpaOnnxDecodeOnlineStream", None, c_void_p, c_void_p)
        self._get_online_result = self._proto(
            "SherpaOnnxGetOnlineStreamResult", online_result, c_void_p, c_void_p)
        self._destroy_online_result = self._proto(
            "SherpaOnnxDestroyOnlineRecognizerResult", None, online_result)
        self._online_is_endpoint = self._proto(
            "SherpaOnnxOnlineStreamIsEndpoint", c_int32, c_void_p, c_void_p)
        self._online_reset = self._proto(
            "SherpaOnnxOnlineStreamReset", None, c_void_p, c_void_p)
        self._online_input_finished = self._proto(
            "SherpaOnnxOnlineStreamInputFinished", None, c_void_p)

        # Offline
        self._create_offline_recognizer = self._proto(
            "SherpaOnnxCreateOfflineRecognizer", c_void_p, POINTER(SherpaOnnxOfflineRecognizerConfig))
        self._destroy_offline_recognizer = self._proto(
            "SherpaOnnxDestroyOfflineRecognizer", None, c_void_p)
        self._create_offline_stream = self._proto(
            "SherpaOnnxCreateOfflineStream", c_void_p, c_void_p)
        self._destroy_offline_stream = self._proto(
            "SherpaOnnxDestroyOfflineStream", None, c_void_p)
        self._offline_accept = self._proto(
            "SherpaOnnxAcceptWaveformOffline", None, c_void_p, c_int32, POINTER(c_float), c_int32)
        self._decode_offline = self._proto(
            "SherpaOnnxDecodeOfflineStream", None, c_void_p, c_void_p)
        self._decode_multiple_offline = self._proto(
            "SherpaOnnxDecodeMultipleOfflineStreams", None, c_void_p, POINTER(c_void_p), c_int32)
        self._get_offline_result = self._proto(
            "SherpaOnnxGetOfflineStreamResult", offline_result, c_void_p)
        self._destroy_offline_result = self._proto(
            "SherpaOnnxDestroyOfflineRecognizerResult", None, offline_result)

    # -------------------------------------------------------------------------
    # Online
    # -------------------------------------------------------------------------

    def create_online_recognizer(self, config: SherpaOnnxOnlineRecognizerConfig) -> Optional[int]:
        return self._create_online_recognizer(ctypes.byref(config))

    def destroy_online_recognizer(self, recognizer: int) -> None:
        self._destroy_online_recognizer(recognizer)

    def create_online_stream(self, recognizer: int) -> Optional[int]:
        return self._create_online_stream(recognizer)

    def destroy_online_stream(self, stream: int) -> None:
        self._destroy_online_stream(stream)

    def online_stream_accept_waveform(self, stream: int, sample_rate: int, samples: np.ndarray) -> None:
        samples = np.ascontiguousarray(samples, dtype=np.float32)
        self._online_accept(stream, sample_rate, _as_float_ptr(samples), len(samples))

    def is_online_stream_ready(self, recognizer: int, stream: int) -> bool:
        return self._is_online_ready(recognizer, stream) != 0

    def decode_online_stream(self, recognizer: int, stream: int) -> None:
        self._decode_online(recognizer, stream)

    def get_online_stream_result(self, recognizer: int, stream: int):
        return self._get_online_result(recognizer, stream)

    def destroy_online_recognizer_result(self, result) -> None:
        self._destroy_online_result(result)

    def online_stream_is_endpoint(self, recognizer: int, stream: int) -> bool:
        return self._online_is_endpoint(recognizer, stream) != 0

    def online_stream_reset(self, recognizer: int, stream: int) -> None:
        self._online_reset(recognizer, stream)

    def online_stream_input_finished(self, stream: int) -> None:
        self._online_input_finished(stream)

    # -------------------------------------------------------------------------
    # Offline
    # -------------------------------------------------------------------------

    def create_offline_recognizer(self, config: SherpaOnnxOfflineRecognizerConfig) -> Optional[int]:
        return self._create_offline_recognizer(ctypes.byref(config))

    def destroy_offline_recognizer(self, recognizer: int) -> None:
        self._destroy_offline_recognizer(recognizer)

    def create_offline_stream(self, recognizer: int) -> Optional[int]:
        return self._create_offline_stream(recognizer)

    def destroy_offline_stream(self, stream: int) -> None:
        self._destroy_offline_stream(stream)

    def offline_stream_accept_waveform(self, stream: int, sample_rate: int, samples: np.ndarray) -> None:
        samples = np.ascontiguousarray(samples, dtype=np.float32)
        self._offline_accept(stream, sample_rate, _as_float_ptr(samples), len(samples))

    def decode_offline_stream(self, recognizer: int, stream: int) -> None:
        self._decode_offline(recognizer, stream)

    def decode_multiple_offline_streams(self, recognizer: int, streams: Sequence[int]) -> None:
        handles = (c_void_p * len(streams))(*streams)
        self._decode_multiple_offline(recognizer, handles, len(streams))

    def get_offline_stream_result(self, stream: int):
        return self._get_offline_result(stream)

    def destroy_offline_recognizer_result(self, result) -> None:
        self._destroy_offline_result(result)

    # -------------------------------------------------------------------------

    def version(self) -> str:
        """Library version string"""
        try:
            fn = self._proto("SherpaOnnxGetVersionStr", c_char_p)
        except AttributeError:
            return "unknown"
        return fn().decode("utf-8")
