"""
Streaming session - decode protocol over one recognizer/stream pair

The engine buffers audio by its own frame granularity, so one chunk may give
zero, one or several decode steps. The session therefore always polls
readiness and drains, both while streaming and after the input is finished:

    accept_waveform -> while is_ready(): decode() -> get_result -> is_endpoint
        -> reset (new utterance) | input_finished -> drain -> FINISHED

Phases:

    IDLE -> ACCEPTING -> READY -> DECODED -> ACCEPTING | ENDPOINT
    ENDPOINT -> reset() -> ACCEPTING
    any -> input_finished() -> drained -> FINISHED (terminal)

If input_finished() is given a step cap and frames remain buffered, the
session stays in DECODED; drain() or decode() finish the tail and the session
becomes FINISHED once the engine reports nothing left.

Threading: a session owns its stream exclusively and must only be driven by
one thread at a time. Several sessions may share one OnlineRecognizer across
threads. There is no internal locking.

Example:
    with StreamingSession.open(config) as session:
        for chunk in chunks:
            result = session.process(16000, chunk)
            if result.is_final:
                print(result.text)
        print(session.finish().text)
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Optional

import numpy as np

from .audio import as_float32_mono
from .callback import AsrCallback
from .config import OnlineConfig
from .engine import Engine
from .errors import InvalidState, StreamNotReady
from .recognizer import OnlineRecognizer
from .result import RecognitionResult

logger = logging.getLogger(__name__)


class SessionPhase(Enum):
    """Protocol position of a StreamingSession"""
    IDLE = "idle"
    ACCEPTING = "accepting"
    READY = "ready"
    DECODED = "decoded"
    ENDPOINT = "endpoint"
    FINISHED = "finished"


@dataclass
class StreamingState:
    """Session bookkeeping (not engine state)"""

    session_active: bool = True
    total_samples_processed: int = 0
    last_partial_result: str = ""
    endpoint_detected: bool = False
    session_start_time: float = field(default_factory=time.monotonic)
    segment_index: int = 0

    @property
    def elapsed_seconds(self) -> float:
        """Wall-clock seconds since the session started"""
        return time.monotonic() - self.session_start_time


class StreamingSession:
    """
    Streaming recognition session.

    Owns one OnlineStream. The recognizer is either shared (constructor) or
    owned by the session (``open()``), in which case ``close()`` destroys it
    after the stream.
    """

    def __init__(
        self,
        recognizer: OnlineRecognizer,
        callback: Optional[AsrCallback] = None,
        max_decode_steps: Optional[int] = None,
    ):
        """
        Start a session on an existing recognizer.

        Args:
            recognizer: Streaming recognizer, possibly shared with other sessions
            callback: Receives open/event/complete/error/close events
            max_decode_steps: Cap on decode steps per drain (None: until not ready)

        Raises:
            ConfigError: the engine could not create a stream
            InvalidState: the recognizer was already destroyed
        """
        if not isinstance(recognizer, OnlineRecognizer):
            raise TypeError(f"StreamingSession needs an OnlineRecognizer, got {type(recognizer).__name__}")

        self._recognizer = recognizer
        self._owns_recognizer = False
        self._callback = callback
        self._max_decode_steps = max_decode_steps
        self._stream = recognizer.create_stream()
        self._phase = SessionPhase.IDLE
        self._state = StreamingState()
        self._closed = False
        self._input_done = False

        try:
            self._emit("on_open")
        except BaseException:
            self._closed = True
            self._stream.close()
            raise
        logger.debug("Streaming session started on %r", recognizer)

    @classmethod
    def open(
        cls,
        config: OnlineConfig,
        engine: Optional[Engine] = None,
        callback: Optional[AsrCallback] = None,
        max_decode_steps: Optional[int] = None,
    ) -> "StreamingSession":
        """
        Create a recognizer and a session that owns it.

        If the stream cannot be created the recognizer is destroyed before the
        error propagates.

        Raises:
            ConfigError: recognizer or stream creation failed
        """
        recognizer = OnlineRecognizer(config, engine=engine)
        try:
            session = cls(recognizer, callback=callback, max_decode_steps=max_decode_steps)
        except BaseException:
            recognizer.close()
            raise
        session._owns_recognizer = True
        return session

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def state(self) -> StreamingState:
        return self._state

    @property
    def recognizer(self) -> OnlineRecognizer:
        return self._recognizer

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def is_finished(self) -> bool:
        return self._phase is SessionPhase.FINISHED

    @property
    def input_done(self) -> bool:
        """True once input_finished() was called, even if frames remain to decode"""
        return self._input_done

    # -------------------------------------------------------------------------
    # Protocol steps
    # -------------------------------------------------------------------------

    def _check_open(self):
        if self._closed:
            raise InvalidState("streaming session is closed")

    def _check_active(self, operation: str):
        self._check_open()
        if self._phase is SessionPhase.FINISHED:
            raise InvalidState(f"{operation}() after input_finished(); the session is finished")

    def _check_accepting(self, operation: str):
        self._check_active(operation)
        if self._input_done:
            raise InvalidState(f"{operation}() after input_finished(); only drain() and decode() remain")

    def _settle(self):
        """Enter FINISHED once the input is over and the engine has nothing left"""
        if not self._input_done or self._phase is SessionPhase.FINISHED:
            return
        if self._stream.is_ready():
            return
        self._phase = SessionPhase.FINISHED
        self._state.session_active = False
        logger.debug("Streaming session finished after %d samples", self._state.total_samples_processed)

    def accept_waveform(self, sample_rate: int, samples: np.ndarray):
        """
        Feed one chunk of audio.

        Args:
            sample_rate: Sample rate of ``samples`` (the engine resamples)
            samples: float32 mono in [-1, 1] (integer PCM is scaled)
        """
        self._check_accepting("accept_waveform")
        audio = as_float32_mono(samples)
        self._stream.accept_waveform(sample_rate, audio)
        self._state.total_samples_processed += len(audio)
        self._phase = SessionPhase.ACCEPTING

    def is_ready(self) -> bool:
        """True when the engine has enough buffered frames for a decode step"""
        self._check_open()
        ready = self._stream.is_ready()
        if ready and self._phase is not SessionPhase.FINISHED:
            self._phase = SessionPhase.READY
        return ready

    def decode(self):
        """
        Run one decode step.

        Raises:
            StreamNotReady: the engine is not ready; poll is_ready() first
        """
        self._check_active("decode")
        if not self._stream.is_ready():
            raise StreamNotReady("decode() called while the stream is not ready; loop on is_ready()")
        self._stream.decode()
        self._phase = SessionPhase.DECODED
        self._settle()

    def _drain(self, limit: Optional[int]) -> int:
        steps = 0
        while self._stream.is_ready():
            if limit is not None and steps >= limit:
                logger.warning("Drain stopped after %d decode steps with frames still buffered", steps)
                break
            self._stream.decode()
            steps += 1
        if steps:
            self._phase = SessionPhase.DECODED
        return steps

    def drain(self, max_iterations: Optional[int] = None) -> int:
        """
        Decode while the engine reports ready.

        After input_finished() this also completes the session once the last
        buffered frame is decoded.

        Args:
            max_iterations: Stop after this many steps (None: session default)

        Returns:
            Number of decode steps run
        """
        self._check_active("drain")
        limit = self._max_decode_steps if max_iterations is None else max_iterations
        steps = self._drain(limit)
        self._settle()
        return steps

    def get_result(self) -> RecognitionResult:
        """Current transcript of the utterance; empty when the engine has none"""
        self._check_open()
        result = self._stream.get_result()
        self._state.last_partial_result = result.text
        return result

    def is_endpoint(self) -> bool:
        """True when an endpoint rule fired for the current utterance"""
        self._check_open()
        detected = self._stream.is_endpoint()
        self._state.endpoint_detected = detected
        if detected and self._phase is not SessionPhase.FINISHED:
            self._phase = SessionPhase.ENDPOINT
        return detected

    def reset(self):
        """Start a new utterance on the same stream"""
        self._check_accepting("reset")
        self._stream.reset()
        if self._phase is SessionPhase.ENDPOINT:
            self._state.segment_index += 1
        self._state.last_partial_result = ""
        self._state.endpoint_detected = False
        self._phase = SessionPhase.ACCEPTING

    def input_finished(self, max_iterations: Optional[int] = None):
        """
        Signal the end of audio and drain the remaining frames.

        The session-level ``max_decode_steps`` does not apply here. With an
        explicit ``max_iterations`` the drain may stop early; the session then
        stays open for drain()/decode() and becomes FINISHED when the engine
        reports nothing left.
        """
        self._check_active("input_finished")
        if not self._input_done:
            self._stream.input_finished()
            self._input_done = True
        self._drain(max_iterations)
        self._settle()

    # -------------------------------------------------------------------------
    # Convenience
    # -------------------------------------------------------------------------

    def process(self, sample_rate: int, samples: np.ndarray) -> RecognitionResult:
        """
        Accept a chunk, drain, and read the result.

        When an endpoint fires the returned result is final and the stream is
        reset for the next utterance.

        Returns:
            Partial result, or the final result of a finished segment
        """
        try:
            self.accept_waveform(sample_rate, samples)
            self.drain()
            previous = self._state.last_partial_result
            result = self.get_result()
            if self.is_endpoint():
                result = result.as_final()
                logger.debug("Endpoint in segment %d: %r", self._state.segment_index, result.text)
                self.reset()
                if result.text:
                    self._emit("on_event", result)
            elif result.text != previous:
                self._emit("on_event", result)
        except Exception as e:
            self._emit("on_error", e)
            raise
        return result

    def finish(self) -> RecognitionResult:
        """
        Finish input, drain, and return the final result of the last segment.
        """
        try:
            self.input_finished()
            result = self.get_result().as_final()
        except Exception as e:
            self._emit("on_error", e)
            raise
        if result.text:
            self._emit("on_event", result)
        self._emit("on_complete")
        return result

    def transcribe(self, chunks: Iterable[np.ndarray], sample_rate: int = 16000) -> Iterator[RecognitionResult]:
        """
        Run a whole stream of chunks through the session.

        Yields:
            Changed partial results and every non-empty final result,
            ending with the result of finish()
        """
        last = ""
        for chunk in chunks:
            result = self.process(sample_rate, chunk)
            if result.is_final:
                if result.text:
                    yield result
                last = ""
            elif result.text != last:
                last = result.text
                yield result

        result = self.finish()
        if result.text:
            yield result

    # -------------------------------------------------------------------------
    # Lifetime
    # -------------------------------------------------------------------------

    def _emit(self, hook: str, *args):
        if self._callback is not None:
            getattr(self._callback, hook)(*args)

    def close(self):
        """Destroy the stream, then the recognizer if this session owns it"""
        if self._closed:
            return
        self._closed = True
        self._state.session_active = False
        try:
            self._stream.close()
            if self._owns_recognizer:
                self._recognizer.close()
        finally:
            self._emit("on_close")

    def __enter__(self) -> "StreamingSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        return (
            f"StreamingSession(phase={self._phase.value}, "
            f"samples={self._state.total_samples_processed}, closed={self._closed})"
        )
