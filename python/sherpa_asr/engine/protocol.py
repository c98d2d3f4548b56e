"""Engine protocol defining the decoding backend boundary.

This is the seam between the handle/session layer and the sherpa-onnx C API.
Handles are plain integers (the pointer values the engine hands out) and
``None`` stands for a NULL return. Nothing behind this boundary tracks
ownership or call order; the callers in ``recognizer`` and ``session`` do.
"""

from typing import Optional, Protocol, Sequence

import numpy as np

from .structs import (
    SherpaOnnxOfflineRecognizerConfig,
    SherpaOnnxOnlineRecognizerConfig,
)


class Engine(Protocol):
    """Protocol for speech-recognition engines.

    Implementations: ``NativeEngine`` (ctypes over libsherpa-onnx-c-api)
    and ``FakeEngine`` (deterministic CPU engine for tests).
    """

    # -- online ---------------------------------------------------------------

    def create_online_recognizer(self, config: SherpaOnnxOnlineRecognizerConfig) -> Optional[int]:
        """Create a streaming recognizer; ``None`` when the descriptor is rejected."""
        ...

    def destroy_online_recognizer(self, recognizer: int) -> None:
        ...

    def create_online_stream(self, recognizer: int) -> Optional[int]:
        ...

    def destroy_online_stream(self, stream: int) -> None:
        ...

    def online_stream_accept_waveform(self, stream: int, sample_rate: int, samples: np.ndarray) -> None:
        """Feed float32 mono samples in [-1, 1]."""
        ...

    def is_online_stream_ready(self, recognizer: int, stream: int) -> bool:
        ...

    def decode_online_stream(self, recognizer: int, stream: int) -> None:
        ...

    def get_online_stream_result(self, recognizer: int, stream: int):
        """Return a pointer to a transient ``SherpaOnnxOnlineRecognizerResult``.

        The pointer may be NULL (falsy). A non-NULL result must be passed to
        ``destroy_online_recognizer_result`` exactly once.
        """
        ...

    def destroy_online_recognizer_result(self, result) -> None:
        ...

    def online_stream_is_endpoint(self, recognizer: int, stream: int) -> bool:
        ...

    def online_stream_reset(self, recognizer: int, stream: int) -> None:
        ...

    def online_stream_input_finished(self, stream: int) -> None:
        ...

    # -- offline --------------------------------------------------------------

    def create_offline_recognizer(self, config: SherpaOnnxOfflineRecognizerConfig) -> Optional[int]:
        ...

    def destroy_offline_recognizer(self, recognizer: int) -> None:
        ...

    def create_offline_stream(self, recognizer: int) -> Optional[int]:
        ...

    def destroy_offline_stream(self, stream: int) -> None:
        ...

    def offline_stream_accept_waveform(self, stream: int, sample_rate: int, samples: np.ndarray) -> None:
        ...

    def decode_offline_stream(self, recognizer: int, stream: int) -> None:
        """Decode everything accepted so far; complete when it returns."""
        ...

    def decode_multiple_offline_streams(self, recognizer: int, streams: Sequence[int]) -> None:
        ...

    def get_offline_stream_result(self, stream: int):
        """Return a pointer to a transient ``SherpaOnnxOfflineRecognizerResult``."""
        ...

    def destroy_offline_recognizer_result(self, result) -> None:
        ...

    # -- misc -----------------------------------------------------------------

    def version(self) -> str:
        ...
