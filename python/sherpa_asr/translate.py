"""
Config translation - OnlineConfig / OfflineConfig to engine descriptors

Pure functions. The selected family fills its own slot; every other family
slot is overwritten with a fresh all-NULL structure, so the engine never sees
leftover values in a slot it inspects to pick the model type.

The returned descriptor owns its encoded string buffers. Keep it alive for the
duration of the create call and drop it afterwards.
"""

from typing import Optional, Union

from .config import (
    NemoCtcModel,
    OfflineConfig,
    OnlineConfig,
    OnlineParaformerModel,
    ParaformerModel,
    SenseVoiceModel,
    TransducerModel,
    WhisperModel,
    Zipformer2CtcModel,
)
from .engine.structs import (
    OFFLINE_FAMILY_SLOTS,
    ONLINE_FAMILY_SLOTS,
    SherpaOnnxFeatureConfig,
    SherpaOnnxHomophoneReplacerConfig,
    SherpaOnnxOfflineLMConfig,
    SherpaOnnxOfflineRecognizerConfig,
    SherpaOnnxOnlineCtcFstDecoderConfig,
    SherpaOnnxOnlineRecognizerConfig,
)


def _c(value: Optional[str]) -> Optional[bytes]:
    """Encode a string for a ``const char *`` field; empty means NULL"""
    if not value:
        return None
    return value.encode("utf-8")


def _fill_common_model(model_config, config) -> None:
    model_config.tokens = _c(config.tokens)
    model_config.num_threads = config.num_threads
    model_config.provider = _c(config.resolved_provider)
    model_config.debug = int(config.debug)
    model_config.model_type = _c(config.model_type)
    model_config.modeling_unit = _c(config.modeling_unit)
    model_config.bpe_vocab = _c(config.bpe_vocab)


def _fill_online_family(model_config, model) -> None:
    for slot, struct_type in ONLINE_FAMILY_SLOTS.items():
        setattr(model_config, slot, struct_type())

    if isinstance(model, TransducerModel):
        model_config.transducer.encoder = _c(model.encoder)
        model_config.transducer.decoder = _c(model.decoder)
        model_config.transducer.joiner = _c(model.joiner)
    elif isinstance(model, OnlineParaformerModel):
        model_config.paraformer.encoder = _c(model.encoder)
        model_config.paraformer.decoder = _c(model.decoder)
    elif isinstance(model, Zipformer2CtcModel):
        model_config.zipformer2_ctc.model = _c(model.model)
    elif isinstance(model, NemoCtcModel):
        model_config.nemo_ctc.model = _c(model.model)
    else:
        raise TypeError(f"not a streaming model family: {type(model).__name__}")


def _fill_offline_family(model_config, model) -> None:
    for slot, struct_type in OFFLINE_FAMILY_SLOTS.items():
        setattr(model_config, slot, struct_type())
    model_config.telespeech_ctc = None

    if isinstance(model, TransducerModel):
        model_config.transducer.encoder = _c(model.encoder)
        model_config.transducer.decoder = _c(model.decoder)
        model_config.transducer.joiner = _c(model.joiner)
    elif isinstance(model, ParaformerModel):
        model_config.paraformer.model = _c(model.model)
    elif isinstance(model, NemoCtcModel):
        model_config.nemo_ctc.model = _c(model.model)
    elif isinstance(model, WhisperModel):
        model_config.whisper.encoder = _c(model.encoder)
        model_config.whisper.decoder = _c(model.decoder)
        model_config.whisper.language = _c(model.language)
        model_config.whisper.task = _c(model.task)
        model_config.whisper.tail_paddings = model.tail_paddings
    elif isinstance(model, SenseVoiceModel):
        model_config.sense_voice.model = _c(model.model)
        model_config.sense_voice.language = _c(model.language)
        model_config.sense_voice.use_itn = int(model.use_itn)
    else:
        raise TypeError(f"not an offline model family: {type(model).__name__}")


def translate_online(config: OnlineConfig) -> SherpaOnnxOnlineRecognizerConfig:
    """
    Translate a streaming config into ``SherpaOnnxOnlineRecognizerConfig``.

    Args:
        config: Streaming recognizer configuration

    Returns:
        Descriptor ready for ``create_online_recognizer``
    """
    descriptor = SherpaOnnxOnlineRecognizerConfig()
    descriptor.feat_config = SherpaOnnxFeatureConfig(config.sample_rate, config.feature_dim)

    model_config = descriptor.model_config
    _fill_online_family(model_config, config.model)
    _fill_common_model(model_config, config)
    model_config.tokens_buf = None
    model_config.tokens_buf_size = 0

    descriptor.decoding_method = _c(config.decoding_method)
    descriptor.max_active_paths = config.max_active_paths
    descriptor.enable_endpoint = int(config.enable_endpoint)
    descriptor.rule1_min_trailing_silence = config.rule1_min_trailing_silence
    descriptor.rule2_min_trailing_silence = config.rule2_min_trailing_silence
    descriptor.rule3_min_utterance_length = config.rule3_min_utterance_length
    descriptor.hotwords_file = _c(config.hotwords_file)
    descriptor.hotwords_score = config.hotwords_score
    descriptor.ctc_fst_decoder_config = SherpaOnnxOnlineCtcFstDecoderConfig()
    descriptor.rule_fsts = None
    descriptor.rule_fars = None
    descriptor.blank_penalty = config.blank_penalty
    descriptor.hotwords_buf = None
    descriptor.hotwords_buf_size = 0
    descriptor.hr = SherpaOnnxHomophoneReplacerConfig()
    return descriptor


def translate_offline(config: OfflineConfig) -> SherpaOnnxOfflineRecognizerConfig:
    """
    Translate a batch config into ``SherpaOnnxOfflineRecognizerConfig``.

    Args:
        config: Offline recognizer configuration

    Returns:
        Descriptor ready for ``create_offline_recognizer``
    """
    descriptor = SherpaOnnxOfflineRecognizerConfig()
    descriptor.feat_config = SherpaOnnxFeatureConfig(config.sample_rate, config.feature_dim)

    model_config = descriptor.model_config
    _fill_offline_family(model_config, config.model)
    _fill_common_model(model_config, config)

    descriptor.lm_config = SherpaOnnxOfflineLMConfig()
    descriptor.decoding_method = _c(config.decoding_method)
    descriptor.max_active_paths = config.max_active_paths
    descriptor.hotwords_file = _c(config.hotwords_file)
    descriptor.hotwords_score = config.hotwords_score
    descriptor.rule_fsts = None
    descriptor.rule_fars = None
    descriptor.blank_penalty = config.blank_penalty
    descriptor.hr = SherpaOnnxHomophoneReplacerConfig()
    return descriptor


def translate(
    config: Union[OnlineConfig, OfflineConfig],
) -> Union[SherpaOnnxOnlineRecognizerConfig, SherpaOnnxOfflineRecognizerConfig]:
    """Translate either config kind"""
    if isinstance(config, OnlineConfig):
        return translate_online(config)
    if isinstance(config, OfflineConfig):
        return translate_offline(config)
    raise TypeError(f"not a recognizer config: {type(config).__name__}")
