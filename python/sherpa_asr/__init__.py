"""
Sherpa ASR (Automatic Speech Recognition) Python Module

A Python interface for the sherpa-onnx C API: streaming and batch
recognition with explicit ownership of engine recognizers and streams.

Usage:
    import sherpa_asr

    # Quick recognition
    config = sherpa_asr.OfflineConfig.from_model_dir("~/models/paraformer-zh")
    text = sherpa_asr.transcribe_file("audio.wav", config)
    print(text)

    # Streaming
    config = sherpa_asr.OnlineConfig.from_model_dir("~/models/zipformer-streaming")
    with sherpa_asr.StreamingSession.open(config) as session:
        for chunk in chunks:
            result = session.process(16000, chunk)
            if result.is_final:
                print(result.text)
        print(session.finish().text)

    # Full control
    with sherpa_asr.OnlineRecognizer(config) as recognizer:
        with recognizer.create_stream() as stream:
            stream.accept_waveform(16000, samples)
            while stream.is_ready():
                stream.decode()
            print(stream.get_result().text)
"""

from .errors import AsrError, ConfigError, StreamNotReady, InvalidState
from .config import (
    OnlineConfig,
    OfflineConfig,
    TransducerModel,
    OnlineParaformerModel,
    ParaformerModel,
    Zipformer2CtcModel,
    NemoCtcModel,
    WhisperModel,
    SenseVoiceModel,
    default_provider,
)
from .engine import Engine, FakeEngine, get_default_engine, set_default_engine
from .result import RecognitionResult
from .recognizer import (
    RecognizerHandle,
    OnlineRecognizer,
    OfflineRecognizer,
    StreamHandle,
    OnlineStream,
    OfflineStream,
)
from .session import SessionPhase, StreamingState, StreamingSession
from .batch import BatchSession
from .callback import AsrCallback, PrintCallback, CollectCallback
from .audio import load_audio, chunk_audio
from .utils import transcribe_file, transcribe_audio, stream_file, get_version

__version__ = "1.0.0"

__all__ = [
    # Errors
    "AsrError",
    "ConfigError",
    "StreamNotReady",
    "InvalidState",
    # Configuration
    "OnlineConfig",
    "OfflineConfig",
    "TransducerModel",
    "OnlineParaformerModel",
    "ParaformerModel",
    "Zipformer2CtcModel",
    "NemoCtcModel",
    "WhisperModel",
    "SenseVoiceModel",
    "default_provider",
    # Engine
    "Engine",
    "FakeEngine",
    "get_default_engine",
    "set_default_engine",
    # Handles
    "RecognitionResult",
    "RecognizerHandle",
    "OnlineRecognizer",
    "OfflineRecognizer",
    "StreamHandle",
    "OnlineStream",
    "OfflineStream",
    # Sessions
    "SessionPhase",
    "StreamingState",
    "StreamingSession",
    "BatchSession",
    # Callbacks
    "AsrCallback",
    "PrintCallback",
    "CollectCallback",
    # Quick functions
    "load_audio",
    "chunk_audio",
    "transcribe_file",
    "transcribe_audio",
    "stream_file",
    "get_version",
]
