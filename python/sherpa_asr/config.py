"""
ASR Configuration - Model families and recognizer settings

A configuration is a value: ``model`` holds exactly one model family and the
remaining fields are the decoder and feature settings. Helpers return updated
copies instead of mutating in place.

Example:
    config = OnlineConfig(
        model=TransducerModel("encoder.onnx", "decoder.onnx", "joiner.onnx"),
        tokens="tokens.txt",
    ).with_threads(2)

    config = OfflineConfig.from_model_dir("~/models/paraformer-zh")
"""

import dataclasses
import logging
import os
import platform
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, List, Optional, Tuple, Union

from .errors import ConfigError

logger = logging.getLogger(__name__)

PROVIDER_ENV = "SHERPA_ASR_PROVIDER"

DEFAULT_SAMPLE_RATE = 16000
DEFAULT_FEATURE_DIM = 80
DEFAULT_DECODING_METHOD = "greedy_search"


def default_provider() -> str:
    """
    Execution provider used when a config leaves ``provider`` unset.

    ``SHERPA_ASR_PROVIDER`` wins; otherwise CoreML on macOS and CPU elsewhere.
    """
    provider = os.environ.get(PROVIDER_ENV, "").strip()
    if provider:
        return provider
    if platform.system() == "Darwin":
        return "coreml"
    return "cpu"


# -----------------------------------------------------------------------------
# Model families
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class _ModelFamily:
    family: ClassVar[str] = ""
    required: ClassVar[Tuple[str, ...]] = ()

    def missing_fields(self) -> List[str]:
        """Required path fields that are empty"""
        return [name for name in self.required if not getattr(self, name)]

    def files(self) -> List[str]:
        return [getattr(self, name) for name in self.required]


@dataclass(frozen=True)
class TransducerModel(_ModelFamily):
    """Encoder/decoder/joiner transducer (zipformer, conformer, lstm)"""
    family: ClassVar[str] = "transducer"
    required: ClassVar[Tuple[str, ...]] = ("encoder", "decoder", "joiner")

    encoder: str = ""
    decoder: str = ""
    joiner: str = ""


@dataclass(frozen=True)
class OnlineParaformerModel(_ModelFamily):
    """Streaming paraformer, split into encoder and decoder"""
    family: ClassVar[str] = "paraformer"
    required: ClassVar[Tuple[str, ...]] = ("encoder", "decoder")

    encoder: str = ""
    decoder: str = ""


@dataclass(frozen=True)
class ParaformerModel(_ModelFamily):
    """Non-streaming paraformer, single model file"""
    family: ClassVar[str] = "paraformer"
    required: ClassVar[Tuple[str, ...]] = ("model",)

    model: str = ""


@dataclass(frozen=True)
class Zipformer2CtcModel(_ModelFamily):
    family: ClassVar[str] = "zipformer2_ctc"
    required: ClassVar[Tuple[str, ...]] = ("model",)

    model: str = ""


@dataclass(frozen=True)
class NemoCtcModel(_ModelFamily):
    family: ClassVar[str] = "nemo_ctc"
    required: ClassVar[Tuple[str, ...]] = ("model",)

    model: str = ""


@dataclass(frozen=True)
class WhisperModel(_ModelFamily):
    family: ClassVar[str] = "whisper"
    required: ClassVar[Tuple[str, ...]] = ("encoder", "decoder")

    encoder: str = ""
    decoder: str = ""
    language: str = ""
    task: str = "transcribe"
    tail_paddings: int = -1


@dataclass(frozen=True)
class SenseVoiceModel(_ModelFamily):
    family: ClassVar[str] = "sense_voice"
    required: ClassVar[Tuple[str, ...]] = ("model",)

    model: str = ""
    language: str = "auto"
    use_itn: bool = True


OnlineModel = Union[TransducerModel, OnlineParaformerModel, Zipformer2CtcModel, NemoCtcModel]
OfflineModel = Union[TransducerModel, ParaformerModel, NemoCtcModel, WhisperModel, SenseVoiceModel]

ONLINE_FAMILIES = (TransducerModel, OnlineParaformerModel, Zipformer2CtcModel, NemoCtcModel)
OFFLINE_FAMILIES = (TransducerModel, ParaformerModel, NemoCtcModel, WhisperModel, SenseVoiceModel)


# -----------------------------------------------------------------------------
# Recognizer configs
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class _RecognizerConfig:
    tokens: str = ""
    num_threads: int = 1
    provider: Optional[str] = None
    debug: bool = False
    decoding_method: str = DEFAULT_DECODING_METHOD
    sample_rate: int = DEFAULT_SAMPLE_RATE
    feature_dim: int = DEFAULT_FEATURE_DIM
    model_type: str = ""
    modeling_unit: str = ""
    bpe_vocab: str = ""
    max_active_paths: int = 4
    hotwords_file: str = ""
    hotwords_score: float = 1.5
    blank_penalty: float = 0.0

    _families: ClassVar[tuple] = ()

    @property
    def family(self) -> str:
        """Name of the selected model family"""
        return getattr(self.model, "family", type(self.model).__name__)

    @property
    def resolved_provider(self) -> str:
        """Configured provider, or the platform default"""
        return self.provider or default_provider()

    def validate(self) -> None:
        """
        Check the config before it is handed to the engine.

        Raises:
            ConfigError: naming the first problem found
        """
        model = self.model
        if not isinstance(model, self._families):
            allowed = ", ".join(cls.__name__ for cls in self._families)
            raise ConfigError(
                f"{type(self).__name__} does not support model {type(model).__name__} "
                f"(expected one of: {allowed})"
            )
        missing = model.missing_fields()
        if missing:
            raise ConfigError(
                f"{model.family} model requires a path for: {', '.join(missing)}"
            )
        if not self.tokens:
            raise ConfigError(f"{model.family} model requires a tokens file")
        if self.num_threads < 1:
            raise ConfigError(f"num_threads must be >= 1, got {self.num_threads}")
        if self.sample_rate <= 0 or self.feature_dim <= 0:
            raise ConfigError(
                f"sample_rate and feature_dim must be positive, got "
                f"{self.sample_rate}/{self.feature_dim}"
            )
        if self.max_active_paths < 1:
            raise ConfigError(f"max_active_paths must be >= 1, got {self.max_active_paths}")

    def describe(self) -> str:
        """Short human-readable summary used in error messages"""
        files = ", ".join(self.model.files())
        return f"family={self.family} files=[{files}] tokens={self.tokens}"

    def with_provider(self, provider: str):
        """Set execution provider (returns a copy)"""
        return dataclasses.replace(self, provider=provider)

    def with_threads(self, num_threads: int):
        """Set thread count (returns a copy)"""
        return dataclasses.replace(self, num_threads=num_threads)

    def with_hotwords(self, hotwords_file: str, score: float = 1.5):
        """Set hotwords file and boosting score (returns a copy)"""
        return dataclasses.replace(self, hotwords_file=hotwords_file, hotwords_score=score)


@dataclass(frozen=True)
class OnlineConfig(_RecognizerConfig):
    """Streaming recognizer configuration"""

    model: OnlineModel = dataclasses.field(default_factory=TransducerModel)

    # Endpoint detection
    enable_endpoint: bool = True
    rule1_min_trailing_silence: float = 2.4
    rule2_min_trailing_silence: float = 1.2
    rule3_min_utterance_length: float = 20.0

    _families: ClassVar[tuple] = ONLINE_FAMILIES

    def with_endpoint(
        self,
        enabled: bool = True,
        rule1: Optional[float] = None,
        rule2: Optional[float] = None,
        rule3: Optional[float] = None,
    ) -> "OnlineConfig":
        """Set endpoint detection and its thresholds (returns a copy)"""
        return dataclasses.replace(
            self,
            enable_endpoint=enabled,
            rule1_min_trailing_silence=self.rule1_min_trailing_silence if rule1 is None else rule1,
            rule2_min_trailing_silence=self.rule2_min_trailing_silence if rule2 is None else rule2,
            rule3_min_utterance_length=self.rule3_min_utterance_length if rule3 is None else rule3,
        )

    @classmethod
    def from_model_dir(
        cls,
        model_dir: Union[str, Path],
        family: Optional[str] = None,
        **options,
    ) -> "OnlineConfig":
        """
        Build a config from a downloaded streaming model directory.

        Args:
            model_dir: Directory holding tokens.txt and the .onnx files
            family: Force a family ("transducer", "paraformer",
                "zipformer2_ctc", "nemo_ctc"); detected from the files if None
            **options: Any other OnlineConfig field

        Returns:
            OnlineConfig pointing at the files found
        """
        path = _expand_dir(model_dir)
        files = _scan_model_dir(path)
        family = family or _detect_family(files, online=True)

        if family == "transducer":
            model = TransducerModel(files["encoder"], files["decoder"], files["joiner"])
        elif family == "paraformer":
            model = OnlineParaformerModel(files["encoder"], files["decoder"])
        elif family == "zipformer2_ctc":
            model = Zipformer2CtcModel(files["model"])
        elif family == "nemo_ctc":
            model = NemoCtcModel(files["model"])
        else:
            raise ConfigError(f"unsupported streaming model family: {family}")

        logger.debug("Detected %s streaming model in %s", family, path)
        return cls(model=model, tokens=files["tokens"], **options)


@dataclass(frozen=True)
class OfflineConfig(_RecognizerConfig):
    """Batch (non-streaming) recognizer configuration"""

    model: OfflineModel = dataclasses.field(default_factory=ParaformerModel)

    _families: ClassVar[tuple] = OFFLINE_FAMILIES

    @classmethod
    def from_model_dir(
        cls,
        model_dir: Union[str, Path],
        family: Optional[str] = None,
        **options,
    ) -> "OfflineConfig":
        """
        Build a config from a downloaded non-streaming model directory.

        Args:
            model_dir: Directory holding tokens.txt and the .onnx files
            family: Force a family ("transducer", "paraformer", "nemo_ctc",
                "whisper", "sense_voice"); detected from the files if None
                (single-file models default to paraformer)
            **options: Any other OfflineConfig field

        Returns:
            OfflineConfig pointing at the files found
        """
        path = _expand_dir(model_dir)
        files = _scan_model_dir(path)
        family = family or _detect_family(files, online=False)

        if family == "transducer":
            model = TransducerModel(files["encoder"], files["decoder"], files["joiner"])
        elif family == "whisper":
            model = WhisperModel(encoder=files["encoder"], decoder=files["decoder"])
        elif family == "paraformer":
            model = ParaformerModel(files["model"])
        elif family == "nemo_ctc":
            model = NemoCtcModel(files["model"])
        elif family == "sense_voice":
            model = SenseVoiceModel(model=files["model"])
        else:
            raise ConfigError(f"unsupported offline model family: {family}")

        logger.debug("Detected %s offline model in %s", family, path)
        return cls(model=model, tokens=files["tokens"], **options)


# -----------------------------------------------------------------------------
# Model directory scanning
# -----------------------------------------------------------------------------

_PATTERNS = {
    "encoder": "*encoder*.onnx",
    "decoder": "*decoder*.onnx",
    "joiner": "*joiner*.onnx",
    "model": "model*.onnx",
    "tokens": "*tokens.txt",
}


def _expand_dir(model_dir: Union[str, Path]) -> Path:
    path = Path(model_dir).expanduser()
    if not path.is_dir():
        raise ConfigError(f"model directory not found: {path}")
    return path


def _pick(path: Path, pattern: str) -> str:
    candidates = sorted(path.glob(pattern))
    if not candidates:
        return ""
    # Prefer full precision over int8 when both are shipped
    full = [c for c in candidates if ".int8." not in c.name]
    return str((full or candidates)[0])


def _scan_model_dir(path: Path) -> dict:
    files = {key: _pick(path, pattern) for key, pattern in _PATTERNS.items()}
    if not files["tokens"]:
        raise ConfigError(f"no tokens file in {path}")
    return files


def _detect_family(files: dict, online: bool) -> str:
    if files["encoder"] and files["decoder"] and files["joiner"]:
        return "transducer"
    if files["encoder"] and files["decoder"]:
        return "paraformer" if online else "whisper"
    if files["model"]:
        return "zipformer2_ctc" if online else "paraformer"
    raise ConfigError("could not find model files (encoder/decoder/joiner or model*.onnx)")
