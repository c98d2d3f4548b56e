"""
Batch session - one-shot recognition of complete audio buffers

Each transcription creates a transient stream, feeds the whole buffer,
decodes once and destroys the stream before returning, also when a step
raises. Offline decoding is complete after a single call, so there is no
readiness loop and no partial result.
"""

import logging
from contextlib import ExitStack
from typing import Iterable, List, Optional, Tuple

import numpy as np

from .config import OfflineConfig
from .engine import Engine
from .recognizer import OfflineRecognizer
from .result import RecognitionResult

logger = logging.getLogger(__name__)


class BatchSession:
    """
    Batch recognition over an OfflineRecognizer.

    Example:
        with BatchSession.open(OfflineConfig.from_model_dir("~/models/paraformer")) as batch:
            print(batch.transcribe(16000, samples).text)
    """

    def __init__(self, recognizer: OfflineRecognizer):
        if not isinstance(recognizer, OfflineRecognizer):
            raise TypeError(f"BatchSession needs an OfflineRecognizer, got {type(recognizer).__name__}")
        self._recognizer = recognizer
        self._owns_recognizer = False

    @classmethod
    def open(cls, config: OfflineConfig, engine: Optional[Engine] = None) -> "BatchSession":
        """
        Create a recognizer owned by the session.

        Raises:
            ConfigError: the engine rejected the config
        """
        session = cls(OfflineRecognizer(config, engine=engine))
        session._owns_recognizer = True
        return session

    @property
    def recognizer(self) -> OfflineRecognizer:
        return self._recognizer

    def transcribe(self, sample_rate: int, samples: np.ndarray) -> RecognitionResult:
        """
        Recognize one complete buffer.

        Args:
            sample_rate: Sample rate of ``samples``
            samples: float32 mono in [-1, 1] (integer PCM is scaled)

        Returns:
            Recognition result (empty when the engine reports nothing)

        Raises:
            ConfigError: the engine could not create a stream
        """
        with self._recognizer.create_stream() as stream:
            stream.accept_waveform(sample_rate, samples)
            stream.decode()
            return stream.get_result()

    def transcribe_batch(self, items: Iterable[Tuple[int, np.ndarray]]) -> List[RecognitionResult]:
        """
        Recognize several buffers with one engine decode call.

        Args:
            items: (sample_rate, samples) pairs

        Returns:
            One result per input, in order
        """
        with ExitStack() as stack:
            streams = []
            for sample_rate, samples in items:
                stream = stack.enter_context(self._recognizer.create_stream())
                stream.accept_waveform(sample_rate, samples)
                streams.append(stream)
            if not streams:
                return []
            logger.debug("Decoding %d offline streams in one batch", len(streams))
            self._recognizer.decode_streams(streams)
            return [stream.get_result() for stream in streams]

    def close(self):
        """Destroy the recognizer if this session owns it"""
        if self._owns_recognizer:
            self._recognizer.close()

    def __enter__(self) -> "BatchSession":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
