"""
Recognition result - immutable snapshot copied out of the engine
"""

from dataclasses import dataclass, replace
from typing import Optional, Tuple


def _text(value: Optional[bytes]) -> str:
    if not value:
        return ""
    return value.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class RecognitionResult:
    """Recognition result"""

    text: str = ""
    tokens: Tuple[str, ...] = ()
    timestamps: Tuple[float, ...] = ()
    lang: str = ""
    emotion: str = ""
    event: str = ""
    is_final: bool = False

    @classmethod
    def from_native(cls, raw) -> "RecognitionResult":
        """
        Copy an engine result struct into Python objects.

        Works for both the online and offline result structs; fields only the
        offline struct has are read when present.

        Args:
            raw: SherpaOnnxOnlineRecognizerResult or SherpaOnnxOfflineRecognizerResult

        Returns:
            RecognitionResult owning its own data
        """
        count = max(0, raw.count)
        tokens = ()
        if count and raw.tokens_arr:
            tokens = tuple(_text(raw.tokens_arr[i]) for i in range(count))
        timestamps = ()
        if count and raw.timestamps:
            timestamps = tuple(float(raw.timestamps[i]) for i in range(count))

        return cls(
            text=_text(raw.text).strip(),
            tokens=tokens,
            timestamps=timestamps,
            lang=_text(getattr(raw, "lang", None)),
            emotion=_text(getattr(raw, "emotion", None)),
            event=_text(getattr(raw, "event", None)),
        )

    def as_final(self) -> "RecognitionResult":
        """Copy marked as the final result of a segment"""
        return replace(self, is_final=True)

    @property
    def is_empty(self) -> bool:
        """Check if result is empty"""
        return not self.text

    def __str__(self) -> str:
        return self.text

    def __bool__(self) -> bool:
        return not self.is_empty


EMPTY_RESULT = RecognitionResult()
