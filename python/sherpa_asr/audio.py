"""Audio helpers: sample conversion, file loading and chunking.

The engine takes float32 mono samples in [-1, 1] at any sample rate; it
resamples to the model rate internally.
"""

from pathlib import Path
from typing import Iterator, Tuple, Union

import numpy as np
import soundfile as sf


def as_float32_mono(samples) -> np.ndarray:
    """Convert samples to a contiguous float32 mono array.

    Args:
        samples: 1-D array, or 2-D (frames, channels) as soundfile returns.
            8/16/32-bit integer PCM is scaled to [-1, 1] by its dtype range
            (unsigned input is centred first).

    Returns:
        float32 1-D array

    Raises:
        ValueError: 64-bit integer input (where plain lists of ints land),
            which matches no PCM format; cast to int16/int32 first
    """
    audio = np.asarray(samples)
    if np.issubdtype(audio.dtype, np.integer):
        info = np.iinfo(audio.dtype)
        if info.bits > 32:
            raise ValueError(
                f"{audio.dtype} samples are not PCM; pass float32 in [-1, 1] "
                f"or cast to int16/int32")
        if info.min == 0:
            half = (info.max + 1) / 2.0
            audio = (audio.astype(np.float64) - half) / half
        else:
            audio = audio.astype(np.float64) / -float(info.min)
    if audio.ndim > 1:
        audio = audio.mean(axis=1)
    return np.ascontiguousarray(audio, dtype=np.float32)


def load_audio(path: Union[str, Path]) -> Tuple[np.ndarray, int]:
    """Read an audio file into float32 mono samples.

    Args:
        path: Any format libsndfile reads (WAV, FLAC, OGG, ...)

    Returns:
        (samples, sample_rate)
    """
    samples, sample_rate = sf.read(str(Path(path).expanduser()), dtype="float32", always_2d=False)
    return as_float32_mono(samples), int(sample_rate)


def chunk_audio(samples: np.ndarray, sample_rate: int, chunk_ms: int = 100) -> Iterator[np.ndarray]:
    """Split audio into fixed-duration chunks; the last one may be shorter."""
    if chunk_ms <= 0:
        raise ValueError(f"chunk_ms must be positive, got {chunk_ms}")
    step = max(1, sample_rate * chunk_ms // 1000)
    for start in range(0, len(samples), step):
        yield samples[start:start + step]


def duration_seconds(samples: np.ndarray, sample_rate: int) -> float:
    return len(samples) / float(sample_rate)
