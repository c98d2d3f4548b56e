"""Decoding engine boundary: protocol, native ctypes engine and fake engine."""

import threading
from typing import Optional

from .fake import FakeEngine
from .protocol import Engine

_default_engine: Optional[Engine] = None
_default_lock = threading.Lock()


def get_default_engine() -> Engine:
    """
    Engine used when a recognizer is created without one.

    The native library is loaded on first use.

    Raises:
        ImportError: libsherpa-onnx-c-api could not be loaded
    """
    global _default_engine
    with _default_lock:
        if _default_engine is None:
            from .native import NativeEngine
            _default_engine = NativeEngine()
        return _default_engine


def set_default_engine(engine: Optional[Engine]) -> None:
    """Replace the default engine (``None`` reloads the native one on next use)"""
    global _default_engine
    with _default_lock:
        _default_engine = engine


__all__ = [
    "Engine",
    "FakeEngine",
    "get_default_engine",
    "set_default_engine",
]
