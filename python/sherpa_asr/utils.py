"""
ASR Utility Functions - Quick and easy recognition
"""

from pathlib import Path
from typing import Iterator, Optional, Union

import numpy as np

from .audio import chunk_audio, load_audio
from .batch import BatchSession
from .callback import AsrCallback
from .config import OfflineConfig, OnlineConfig
from .engine import Engine, get_default_engine
from .result import RecognitionResult
from .session import StreamingSession


def transcribe_file(
    file_path: Union[str, Path],
    config: OfflineConfig,
    engine: Optional[Engine] = None,
) -> str:
    """
    Quick recognition of audio file.

    Args:
        file_path: Path to audio file
        config: Offline recognizer configuration
        engine: Engine to use (default: native library)

    Returns:
        Recognized text

    Example:
        config = OfflineConfig.from_model_dir("~/models/paraformer-zh")
        print(transcribe_file("audio.wav", config))
    """
    samples, sample_rate = load_audio(file_path)
    return transcribe_audio(samples, config, sample_rate=sample_rate, engine=engine)


def transcribe_audio(
    audio: np.ndarray,
    config: OfflineConfig,
    sample_rate: int = 16000,
    engine: Optional[Engine] = None,
) -> str:
    """
    Quick recognition of audio data.

    Args:
        audio: Audio samples (numpy array)
        config: Offline recognizer configuration
        sample_rate: Sample rate of audio (the engine resamples)
        engine: Engine to use (default: native library)

    Returns:
        Recognized text
    """
    with BatchSession.open(config, engine=engine) as batch:
        return batch.transcribe(sample_rate, audio).text


def stream_file(
    file_path: Union[str, Path],
    config: OnlineConfig,
    chunk_ms: int = 100,
    engine: Optional[Engine] = None,
    callback: Optional[AsrCallback] = None,
) -> Iterator[RecognitionResult]:
    """
    Feed an audio file through a streaming session chunk by chunk.

    Yields:
        Partial and final results as the session produces them

    Example:
        for result in stream_file("audio.wav", config):
            if result.is_final:
                print(result.text)
    """
    samples, sample_rate = load_audio(file_path)
    with StreamingSession.open(config, engine=engine, callback=callback) as session:
        yield from session.transcribe(chunk_audio(samples, sample_rate, chunk_ms), sample_rate)


def get_version(engine: Optional[Engine] = None) -> str:
    """Get engine library version"""
    return (engine or get_default_engine()).version()


# Convenience aliases
transcribe = transcribe_file
