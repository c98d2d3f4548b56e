"""
Recognizer and stream handles - ownership of engine objects

A recognizer is created once from a config and shared by any number of
streams; a stream holds the decoding state of one utterance. The engine does
not enforce any lifetime rule, so the handles do:

* a handle only exists if the engine returned a non-NULL pointer;
* each pointer is destroyed exactly once, by a ``weakref.finalize`` that runs
  on ``close()``, on context-manager exit, on garbage collection or at
  interpreter exit, whichever comes first;
* a stream keeps its recognizer alive until the stream is destroyed, and
  ``close()`` on a recognizer with live streams raises ``InvalidState``, so
  streams are always destroyed before their recognizer.

Threading: a recognizer may be shared by streams used from different threads.
A single stream must only be driven by one thread at a time; nothing here
locks.

Example:
    with OnlineRecognizer(config) as recognizer:
        with recognizer.create_stream() as stream:
            stream.accept_waveform(16000, samples)
            while stream.is_ready():
                stream.decode()
            print(stream.get_result().text)
"""

import logging
import weakref
from typing import Optional, Sequence, Set

import numpy as np

from .audio import as_float32_mono
from .config import OfflineConfig, OnlineConfig
from .engine import Engine, get_default_engine
from .errors import ConfigError, InvalidState
from .result import EMPTY_RESULT, RecognitionResult
from .translate import translate_offline, translate_online

logger = logging.getLogger(__name__)


def _release_recognizer(destroy, handle: int, kind: str):
    logger.debug("Destroying %s recognizer %#x", kind, handle)
    destroy(handle)


def _release_stream(destroy, handle: int, recognizer: "RecognizerHandle"):
    # Holding ``recognizer`` here keeps it alive until this stream is gone
    logger.debug("Destroying %s stream %#x", recognizer.kind, handle)
    try:
        destroy(handle)
    finally:
        recognizer._detach(handle)


def _copy_result(result, destroy) -> RecognitionResult:
    """Copy a transient engine result and release it; NULL is an empty result"""
    if not result:
        return EMPTY_RESULT
    try:
        return RecognitionResult.from_native(result.contents)
    finally:
        destroy(result)


# =============================================================================
# Recognizers
# =============================================================================

class RecognizerHandle:
    """Owned engine recognizer; subclassed per engine mode"""

    kind = ""
    config_type: type = object

    def __init__(self, config, engine: Optional[Engine] = None):
        """
        Create the engine recognizer.

        Args:
            config: OnlineConfig or OfflineConfig matching the subclass
            engine: Engine to use (default: the native library)

        Raises:
            ConfigError: invalid config, or the engine returned NULL
        """
        if not isinstance(config, self.config_type):
            raise TypeError(
                f"{type(self).__name__} needs {self.config_type.__name__}, got {type(config).__name__}"
            )
        config.validate()

        self._engine = engine if engine is not None else get_default_engine()
        self._config = config
        self._streams: Set[int] = set()

        handle = self._create(self._translate(config))
        if not handle:
            raise ConfigError(f"engine rejected {self.kind} recognizer descriptor ({config.describe()})")

        self._handle = handle
        self._finalizer = weakref.finalize(
            self, _release_recognizer, self._destroy_fn(), handle, self.kind)
        logger.debug("Created %s recognizer %#x (%s)", self.kind, handle, config.describe())

    # -- subclass hooks ---------------------------------------------------------

    def _translate(self, config):
        raise NotImplementedError

    def _create(self, descriptor) -> Optional[int]:
        raise NotImplementedError

    def _destroy_fn(self):
        raise NotImplementedError

    def _create_stream_handle(self) -> Optional[int]:
        raise NotImplementedError

    def create_stream(self):
        raise NotImplementedError

    # -- ownership --------------------------------------------------------------

    def _attach(self, stream: int):
        self._streams.add(stream)

    def _detach(self, stream: int):
        self._streams.discard(stream)

    @property
    def handle(self) -> int:
        """Engine pointer value"""
        if not self._finalizer.alive:
            raise InvalidState(f"{self.kind} recognizer has been destroyed")
        return self._handle

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def config(self):
        return self._config

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    @property
    def live_streams(self) -> int:
        """Number of streams created from this recognizer and not yet destroyed"""
        return len(self._streams)

    def close(self):
        """
        Destroy the engine recognizer.

        Raises:
            InvalidState: streams created from this recognizer are still live
        """
        if not self._finalizer.alive:
            return
        if self._streams:
            raise InvalidState(
                f"cannot destroy {self.kind} recognizer while {len(self._streams)} "
                f"stream(s) are live; close them first"
            )
        self._finalizer()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None and self._streams:
            # Streams escaping the block keep us alive; release follows theirs
            logger.warning(
                "%s recognizer left with %d live stream(s) during an exception; "
                "release deferred", self.kind, len(self._streams))
            return False
        self.close()
        return False

    def __repr__(self) -> str:
        state = "closed" if self.closed else f"{self._handle:#x}"
        return f"{type(self).__name__}({state}, family={self._config.family}, streams={self.live_streams})"


class OnlineRecognizer(RecognizerHandle):
    """Streaming recognizer"""

    kind = "online"
    config_type = OnlineConfig

    def _translate(self, config):
        return translate_online(config)

    def _create(self, descriptor):
        return self._engine.create_online_recognizer(descriptor)

    def _destroy_fn(self):
        return self._engine.destroy_online_recognizer

    def _create_stream_handle(self):
        return self._engine.create_online_stream(self.handle)

    def create_stream(self) -> "OnlineStream":
        """Create a stream for one utterance/session"""
        return OnlineStream(self)


class OfflineRecognizer(RecognizerHandle):
    """Batch recognizer"""

    kind = "offline"
    config_type = OfflineConfig

    def _translate(self, config):
        return translate_offline(config)

    def _create(self, descriptor):
        return self._engine.create_offline_recognizer(descriptor)

    def _destroy_fn(self):
        return self._engine.destroy_offline_recognizer

    def _create_stream_handle(self):
        return self._engine.create_offline_stream(self.handle)

    def create_stream(self) -> "OfflineStream":
        return OfflineStream(self)

    def decode_streams(self, streams: Sequence["OfflineStream"]):
        """Decode several streams of this recognizer in one engine call"""
        handles = []
        for stream in streams:
            if stream.recognizer is not self:
                raise InvalidState("stream belongs to a different recognizer")
            handles.append(stream.handle)
        if handles:
            self._engine.decode_multiple_offline_streams(self.handle, handles)


# =============================================================================
# Streams
# =============================================================================

class StreamHandle:
    """Owned engine stream bound to one recognizer"""

    def __init__(self, recognizer: RecognizerHandle):
        """
        Create a stream.

        Raises:
            InvalidState: the recognizer was already destroyed
            ConfigError: the engine returned NULL
        """
        handle = recognizer._create_stream_handle()
        if not handle:
            raise ConfigError(
                f"engine could not create a stream for {recognizer.kind} recognizer "
                f"{recognizer.handle:#x}")

        self._recognizer = recognizer
        self._engine = recognizer.engine
        self._handle = handle
        recognizer._attach(handle)
        self._finalizer = weakref.finalize(
            self, _release_stream, self._destroy_fn(), handle, recognizer)
        logger.debug("Created %s stream %#x", recognizer.kind, handle)

    def _destroy_fn(self):
        raise NotImplementedError

    def _handles(self):
        if not self._finalizer.alive:
            raise InvalidState(f"{self._recognizer.kind} stream has been destroyed")
        return self._recognizer.handle, self._handle

    @property
    def handle(self) -> int:
        return self._handles()[1]

    @property
    def recognizer(self) -> RecognizerHandle:
        return self._recognizer

    @property
    def closed(self) -> bool:
        return not self._finalizer.alive

    def close(self):
        """Destroy the engine stream (no-op when already destroyed)"""
        self._finalizer()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        state = "closed" if self.closed else f"{self._handle:#x}"
        return f"{type(self).__name__}({state})"


class OnlineStream(StreamHandle):
    """
    Streaming decode context.

    Thin, unchecked mapping of the engine calls; ``StreamingSession`` adds the
    protocol on top.
    """

    def _destroy_fn(self):
        return self._engine.destroy_online_stream

    def accept_waveform(self, sample_rate: int, samples: np.ndarray):
        _, stream = self._handles()
        self._engine.online_stream_accept_waveform(stream, sample_rate, as_float32_mono(samples))

    def is_ready(self) -> bool:
        return self._engine.is_online_stream_ready(*self._handles())

    def decode(self):
        self._engine.decode_online_stream(*self._handles())

    def get_result(self) -> RecognitionResult:
        result = self._engine.get_online_stream_result(*self._handles())
        return _copy_result(result, self._engine.destroy_online_recognizer_result)

    def is_endpoint(self) -> bool:
        return self._engine.online_stream_is_endpoint(*self._handles())

    def reset(self):
        self._engine.online_stream_reset(*self._handles())

    def input_finished(self):
        _, stream = self._handles()
        self._engine.online_stream_input_finished(stream)


class OfflineStream(StreamHandle):
    """One-shot decode context"""

    def _destroy_fn(self):
        return self._engine.destroy_offline_stream

    def accept_waveform(self, sample_rate: int, samples: np.ndarray):
        _, stream = self._handles()
        self._engine.offline_stream_accept_waveform(stream, sample_rate, as_float32_mono(samples))

    def decode(self):
        self._engine.decode_offline_stream(*self._handles())

    def get_result(self) -> RecognitionResult:
        _, stream = self._handles()
        result = self._engine.get_offline_stream_result(stream)
        return _copy_result(result, self._engine.destroy_offline_recognizer_result)

