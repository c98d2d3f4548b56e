"""
ASR Errors - Exception hierarchy for recognizer and session failures
"""


class AsrError(RuntimeError):
    """Base class for all sherpa_asr errors"""


class ConfigError(AsrError):
    """
    The configuration is invalid or the engine rejected the descriptor.

    Only raised while creating a recognizer or a stream, never mid-session.
    The engine reports no detail beyond a NULL handle, so the message names
    the model family and files that were handed over.
    """


class StreamNotReady(AsrError):
    """decode() was called while the engine reported the stream not ready"""


class InvalidState(AsrError):
    """Operation on a finished session or a destroyed handle"""
