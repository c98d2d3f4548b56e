"""Fake engine for CPU-based testing.

Implements the engine protocol without the native library. Audio is cut into
10 ms frames; frames whose RMS passes a threshold count as voiced, and every
100 ms of voiced audio emits one word picked from the frame peak. Decoding
works in 320 ms units, so readiness, draining and endpointing follow the same
rules a streaming model imposes. The output only depends on the samples, not
on how they were chunked.

The fake is strict where the C API is silent: destroying an unknown handle,
destroying a recognizer that still has streams, or releasing a result twice
raises ``RuntimeError``. Every call is recorded in ``calls``.
"""

import ctypes
import itertools
from ctypes import POINTER, c_char_p, c_float
from typing import Dict, List, Optional, Sequence, Set, Tuple

import numpy as np

from .structs import (
    OFFLINE_FAMILY_SLOTS,
    ONLINE_FAMILY_SLOTS,
    SherpaOnnxOfflineRecognizerConfig,
    SherpaOnnxOfflineRecognizerResult,
    SherpaOnnxOnlineRecognizerConfig,
    SherpaOnnxOnlineRecognizerResult,
)

FRAME_MS = 10
CHUNK_FRAMES = 32  # 320 ms per streaming decode step
WORD_FRAMES = 10  # one word per 100 ms of voiced audio
SPEECH_RMS = 0.01

VOCAB = ("hello", "world", "speech", "stream", "sherpa", "onnx", "voice", "token")

_REQUIRED = {
    (True, "transducer"): ("encoder", "decoder", "joiner"),
    (True, "paraformer"): ("encoder", "decoder"),
    (False, "transducer"): ("encoder", "decoder", "joiner"),
    (False, "whisper"): ("encoder", "decoder"),
    (False, "moonshine"): ("preprocessor", "encoder", "uncached_decoder", "cached_decoder"),
    (False, "fire_red_asr"): ("encoder", "decoder"),
}


class _FakeRecognizer:
    def __init__(self, online: bool, family: str, descriptor):
        self.online = online
        self.family = family
        self.sample_rate = descriptor.feat_config.sample_rate
        self.num_threads = descriptor.model_config.num_threads
        self.provider = (descriptor.model_config.provider or b"").decode()
        self.decoding_method = (descriptor.decoding_method or b"").decode()
        if online:
            self.enable_endpoint = bool(descriptor.enable_endpoint)
            # c_float fields come back widened; round so 2.4 compares as 2.4
            self.rule1 = round(descriptor.rule1_min_trailing_silence, 4)
            self.rule2 = round(descriptor.rule2_min_trailing_silence, 4)
            self.rule3 = round(descriptor.rule3_min_utterance_length, 4)
        else:
            self.enable_endpoint = False


class _FakeStream:
    def __init__(self, recognizer: int, online: bool):
        self.recognizer = recognizer
        self.online = online
        self.pending = np.zeros(0, dtype=np.float32)
        self.sample_rate = 0
        self.finished = False
        self.accepted_samples = 0
        self.reset_utterance()

    def reset_utterance(self):
        self.tokens: List[str] = []
        self.timestamps: List[float] = []
        self.utterance_frames = 0
        self.trailing_frames = 0
        self.voiced_run = 0
        self.peak = 0.0

    @property
    def frame_len(self) -> int:
        return max(1, self.sample_rate * FRAME_MS // 1000)

    @property
    def chunk_len(self) -> int:
        return self.frame_len * CHUNK_FRAMES

    def consume(self, n_samples: int):
        segment, self.pending = self.pending[:n_samples], self.pending[n_samples:]
        frame_len = self.frame_len
        for start in range(0, len(segment), frame_len):
            self._process_frame(segment[start:start + frame_len])

    def _process_frame(self, frame: np.ndarray):
        rms = float(np.sqrt(np.mean(frame.astype(np.float64) ** 2))) if len(frame) else 0.0
        self.utterance_frames += 1
        if rms >= SPEECH_RMS:
            self.trailing_frames = 0
            self.voiced_run += 1
            self.peak = max(self.peak, float(np.max(np.abs(frame))))
            if self.voiced_run % WORD_FRAMES == 0:
                self.tokens.append(VOCAB[int(round(self.peak * 100)) % len(VOCAB)])
                start_frame = self.utterance_frames - WORD_FRAMES
                self.timestamps.append(round(start_frame * FRAME_MS / 1000, 2))
                self.peak = 0.0
        else:
            self.trailing_frames += 1
            self.voiced_run = 0
            self.peak = 0.0


class FakeEngine:
    """Deterministic CPU engine for testing.

    Attributes:
        calls: (function name, handle) for every engine call, in order
        fail_stream_creation: make create_*_stream return NULL
        null_results: make get_*_result return NULL
        missing_files: model paths to treat as unreadable
    """

    def __init__(self):
        self.calls: List[Tuple[str, Optional[int]]] = []
        self.fail_stream_creation = False
        self.null_results = False
        self.missing_files: Set[str] = set()
        self.decode_calls = 0

        self._ids = itertools.count(0x1000, 0x10)
        self._recognizers: Dict[int, _FakeRecognizer] = {}
        self._streams: Dict[int, _FakeStream] = {}
        self._results: Dict[int, tuple] = {}

    # -------------------------------------------------------------------------
    # Inspection helpers
    # -------------------------------------------------------------------------

    @property
    def live_recognizers(self) -> int:
        return len(self._recognizers)

    @property
    def live_streams(self) -> int:
        return len(self._streams)

    @property
    def live_results(self) -> int:
        return len(self._results)

    def call_names(self) -> List[str]:
        return [name for name, _ in self.calls]

    def recognizer_info(self, handle: int) -> _FakeRecognizer:
        return self._recognizers[handle]

    # -------------------------------------------------------------------------
    # Shared bookkeeping
    # -------------------------------------------------------------------------

    def _create_recognizer(self, name: str, online: bool, descriptor) -> Optional[int]:
        family = self._check_descriptor(online, descriptor)
        if family is None:
            self.calls.append((name, None))
            return None
        handle = next(self._ids)
        self._recognizers[handle] = _FakeRecognizer(online, family, descriptor)
        self.calls.append((name, handle))
        return handle

    def _check_descriptor(self, online: bool, descriptor) -> Optional[str]:
        model_config = descriptor.model_config
        slots = ONLINE_FAMILY_SLOTS if online else OFFLINE_FAMILY_SLOTS

        def strings(slot):
            struct = getattr(model_config, slot)
            return {f: getattr(struct, f) for f, t in struct._fields_ if t is c_char_p}

        populated = [slot for slot in slots if any(strings(slot).values())]
        if not online and model_config.telespeech_ctc:
            populated.append("telespeech_ctc")
        if len(populated) != 1:
            return None
        family = populated[0]
        if family == "telespeech_ctc":
            paths = [model_config.telespeech_ctc]
        else:
            values = strings(family)
            paths = [values[f] for f in _REQUIRED.get((online, family), ("model",))]
        paths.append(model_config.tokens)

        if not all(paths):
            return None
        if any(p.decode() in self.missing_files for p in paths):
            return None
        if model_config.num_threads < 1:
            return None
        return family

    def _destroy_recognizer(self, name: str, handle: int):
        self.calls.append((name, handle))
        if handle not in self._recognizers:
            raise RuntimeError(f"{name}: unknown or already destroyed recognizer {handle:#x}")
        dependents = [s for s, st in self._streams.items() if st.recognizer == handle]
        if dependents:
            raise RuntimeError(f"{name}: recognizer {handle:#x} still has live streams {dependents}")
        del self._recognizers[handle]

    def _create_stream(self, name: str, recognizer: int, online: bool) -> Optional[int]:
        if recognizer not in self._recognizers or self.fail_stream_creation:
            self.calls.append((name, None))
            return None
        handle = next(self._ids)
        self._streams[handle] = _FakeStream(recognizer, online)
        self.calls.append((name, handle))
        return handle

    def _destroy_stream(self, name: str, handle: int):
        self.calls.append((name, handle))
        if self._streams.pop(handle, None) is None:
            raise RuntimeError(f"{name}: unknown or already destroyed stream {handle:#x}")

    def _stream(self, handle: int, recognizer: Optional[int] = None) -> _FakeStream:
        stream = self._streams.get(handle)
        if stream is None:
            raise RuntimeError(f"use of unknown or destroyed stream {handle}")
        if recognizer is not None and stream.recognizer != recognizer:
            raise RuntimeError(f"stream {handle:#x} does not belong to recognizer {recognizer:#x}")
        return stream

    def _accept(self, name: str, handle: int, sample_rate: int, samples: np.ndarray):
        self.calls.append((name, handle))
        stream = self._stream(handle)
        samples = np.ascontiguousarray(samples, dtype=np.float32).reshape(-1)
        stream.sample_rate = sample_rate
        stream.pending = np.concatenate([stream.pending, samples])
        stream.accepted_samples += len(samples)

    def _make_result(self, struct_type, stream: _FakeStream):
        raw = struct_type()
        tokens = [t.encode("utf-8") for t in stream.tokens]
        keep = []
        raw.text = b" ".join(tokens)
        raw.tokens = b"".join(tokens)
        raw.count = len(tokens)
        if tokens:
            tokens_arr = (c_char_p * len(tokens))(*tokens)
            timestamps = (c_float * len(tokens))(*stream.timestamps)
            raw.tokens_arr = ctypes.cast(tokens_arr, POINTER(c_char_p))
            raw.timestamps = ctypes.cast(timestamps, POINTER(c_float))
            keep.extend([tokens_arr, timestamps])
        self._results[ctypes.addressof(raw)] = (raw, keep)
        return ctypes.pointer(raw)

    def _destroy_result(self, name: str, result):
        self.calls.append((name, None))
        if self._results.pop(ctypes.addressof(result.contents), None) is None:
            raise RuntimeError(f"{name}: result released twice or never issued")

    # -------------------------------------------------------------------------
    # Online
    # -------------------------------------------------------------------------

    def create_online_recognizer(self, config: SherpaOnnxOnlineRecognizerConfig) -> Optional[int]:
        return self._create_recognizer("create_online_recognizer", True, config)

    def destroy_online_recognizer(self, recognizer: int) -> None:
        self._destroy_recognizer("destroy_online_recognizer", recognizer)

    def create_online_stream(self, recognizer: int) -> Optional[int]:
        return self._create_stream("create_online_stream", recognizer, online=True)

    def destroy_online_stream(self, stream: int) -> None:
        self._destroy_stream("destroy_online_stream", stream)

    def online_stream_accept_waveform(self, stream: int, sample_rate: int, samples: np.ndarray) -> None:
        self._accept("online_stream_accept_waveform", stream, sample_rate, samples)

    def is_online_stream_ready(self, recognizer: int, stream: int) -> bool:
        self.calls.append(("is_online_stream_ready", stream))
        st = self._stream(stream, recognizer)
        if not st.sample_rate:
            return False
        return len(st.pending) >= st.chunk_len or (st.finished and len(st.pending) > 0)

    def decode_online_stream(self, recognizer: int, stream: int) -> None:
        self.calls.append(("decode_online_stream", stream))
        self.decode_calls += 1
        st = self._stream(stream, recognizer)
        if len(st.pending) >= st.chunk_len:
            st.consume(st.chunk_len)
        elif st.finished:
            st.consume(len(st.pending))

    def get_online_stream_result(self, recognizer: int, stream: int):
        self.calls.append(("get_online_stream_result", stream))
        st = self._stream(stream, recognizer)
        if self.null_results:
            return None
        return self._make_result(SherpaOnnxOnlineRecognizerResult, st)

    def destroy_online_recognizer_result(self, result) -> None:
        self._destroy_result("destroy_online_recognizer_result", result)

    def online_stream_is_endpoint(self, recognizer: int, stream: int) -> bool:
        self.calls.append(("online_stream_is_endpoint", stream))
        rec = self._recognizers[recognizer]
        st = self._stream(stream, recognizer)
        if not rec.enable_endpoint:
            return False
        trailing = st.trailing_frames * FRAME_MS / 1000
        length = st.utterance_frames * FRAME_MS / 1000
        if not st.tokens and st.utterance_frames and trailing >= rec.rule1:
            return True
        if st.tokens and trailing >= rec.rule2:
            return True
        return length >= rec.rule3

    def online_stream_reset(self, recognizer: int, stream: int) -> None:
        self.calls.append(("online_stream_reset", stream))
        self._stream(stream, recognizer).reset_utterance()

    def online_stream_input_finished(self, stream: int) -> None:
        self.calls.append(("online_stream_input_finished", stream))
        self._stream(stream).finished = True

    # -------------------------------------------------------------------------
    # Offline
    # -------------------------------------------------------------------------

    def create_offline_recognizer(self, config: SherpaOnnxOfflineRecognizerConfig) -> Optional[int]:
        return self._create_recognizer("create_offline_recognizer", False, config)

    def destroy_offline_recognizer(self, recognizer: int) -> None:
        self._destroy_recognizer("destroy_offline_recognizer", recognizer)

    def create_offline_stream(self, recognizer: int) -> Optional[int]:
        return self._create_stream("create_offline_stream", recognizer, online=False)

    def destroy_offline_stream(self, stream: int) -> None:
        self._destroy_stream("destroy_offline_stream", stream)

    def offline_stream_accept_waveform(self, stream: int, sample_rate: int, samples: np.ndarray) -> None:
        self._accept("offline_stream_accept_waveform", stream, sample_rate, samples)

    def decode_offline_stream(self, recognizer: int, stream: int) -> None:
        self.calls.append(("decode_offline_stream", stream))
        self.decode_calls += 1
        st = self._stream(stream, recognizer)
        st.finished = True
        st.consume(len(st.pending))

    def decode_multiple_offline_streams(self, recognizer: int, streams: Sequence[int]) -> None:
        self.calls.append(("decode_multiple_offline_streams", None))
        self.decode_calls += 1
        for handle in streams:
            st = self._stream(handle, recognizer)
            st.finished = True
            st.consume(len(st.pending))

    def get_offline_stream_result(self, stream: int):
        self.calls.append(("get_offline_stream_result", stream))
        st = self._stream(stream)
        if self.null_results:
            return None
        return self._make_result(SherpaOnnxOfflineRecognizerResult, st)

    def destroy_offline_recognizer_result(self, result) -> None:
        self._destroy_result("destroy_offline_recognizer_result", result)

    # -------------------------------------------------------------------------

    def version(self) -> str:
        return "fake"
