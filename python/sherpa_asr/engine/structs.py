"""
Engine descriptor structures

ctypes mirrors of the sherpa-onnx C API structs. Field order follows
c-api.h; a freshly constructed structure is all NULL / zero, which is the
engine's "absent" value for every model family slot.

Layout is pinned to the sherpa-onnx v1.11 c-api.h that introduced the
homophone replacer: both recognizer configs end in ``hr``, ``nemo_ctc`` is the
last online model family and ``dolphin`` the last offline one. Releases that
append further families or fields need these mirrors extended to match.
"""

import ctypes
from ctypes import POINTER, c_char_p, c_float, c_int32


# =========================================================================
# Shared
# =========================================================================

class SherpaOnnxFeatureConfig(ctypes.Structure):
    _fields_ = [
        ("sample_rate", c_int32),
        ("feature_dim", c_int32),
    ]


class SherpaOnnxHomophoneReplacerConfig(ctypes.Structure):
    _fields_ = [
        ("dict_dir", c_char_p),
        ("lexicon", c_char_p),
        ("rule_fsts", c_char_p),
    ]


# =========================================================================
# Online (streaming)
# =========================================================================

class SherpaOnnxOnlineTransducerModelConfig(ctypes.Structure):
    _fields_ = [
        ("encoder", c_char_p),
        ("decoder", c_char_p),
        ("joiner", c_char_p),
    ]


class SherpaOnnxOnlineParaformerModelConfig(ctypes.Structure):
    _fields_ = [
        ("encoder", c_char_p),
        ("decoder", c_char_p),
    ]


class SherpaOnnxOnlineZipformer2CtcModelConfig(ctypes.Structure):
    _fields_ = [
        ("model", c_char_p),
    ]


class SherpaOnnxOnlineNemoCtcModelConfig(ctypes.Structure):
    _fields_ = [
        ("model", c_char_p),
    ]


class SherpaOnnxOnlineModelConfig(ctypes.Structure):
    _fields_ = [
        ("transducer", SherpaOnnxOnlineTransducerModelConfig),
        ("paraformer", SherpaOnnxOnlineParaformerModelConfig),
        ("zipformer2_ctc", SherpaOnnxOnlineZipformer2CtcModelConfig),
        ("tokens", c_char_p),
        ("num_threads", c_int32),
        ("provider", c_char_p),
        ("debug", c_int32),
        ("model_type", c_char_p),
        ("modeling_unit", c_char_p),
        ("bpe_vocab", c_char_p),
        ("tokens_buf", c_char_p),
        ("tokens_buf_size", c_int32),
        ("nemo_ctc", SherpaOnnxOnlineNemoCtcModelConfig),
    ]


class SherpaOnnxOnlineCtcFstDecoderConfig(ctypes.Structure):
    _fields_ = [
        ("graph", c_char_p),
        ("max_active", c_int32),
    ]


class SherpaOnnxOnlineRecognizerConfig(ctypes.Structure):
    _fields_ = [
        ("feat_config", SherpaOnnxFeatureConfig),
        ("model_config", SherpaOnnxOnlineModelConfig),
        ("decoding_method", c_char_p),
        ("max_active_paths", c_int32),
        ("enable_endpoint", c_int32),
        ("rule1_min_trailing_silence", c_float),
        ("rule2_min_trailing_silence", c_float),
        ("rule3_min_utterance_length", c_float),
        ("hotwords_file", c_char_p),
        ("hotwords_score", c_float),
        ("ctc_fst_decoder_config", SherpaOnnxOnlineCtcFstDecoderConfig),
        ("rule_fsts", c_char_p),
        ("rule_fars", c_char_p),
        ("blank_penalty", c_float),
        ("hotwords_buf", c_char_p),
        ("hotwords_buf_size", c_int32),
        ("hr", SherpaOnnxHomophoneReplacerConfig),
    ]


class SherpaOnnxOnlineRecognizerResult(ctypes.Structure):
    _fields_ = [
        ("text", c_char_p),
        ("tokens", c_char_p),
        ("tokens_arr", POINTER(c_char_p)),
        ("timestamps", POINTER(c_float)),
        ("count", c_int32),
        ("json", c_char_p),
    ]


# =========================================================================
# Offline (batch)
# =========================================================================

class SherpaOnnxOfflineTransducerModelConfig(ctypes.Structure):
    _fields_ = [
        ("encoder", c_char_p),
        ("decoder", c_char_p),
        ("joiner", c_char_p),
    ]


class SherpaOnnxOfflineParaformerModelConfig(ctypes.Structure):
    _fields_ = [
        ("model", c_char_p),
    ]


class SherpaOnnxOfflineNemoEncDecCtcModelConfig(ctypes.Structure):
    _fields_ = [
        ("model", c_char_p),
    ]


class SherpaOnnxOfflineWhisperModelConfig(ctypes.Structure):
    _fields_ = [
        ("encoder", c_char_p),
        ("decoder", c_char_p),
        ("language", c_char_p),
        ("task", c_char_p),
        ("tail_paddings", c_int32),
    ]


class SherpaOnnxOfflineTdnnModelConfig(ctypes.Structure):
    _fields_ = [
        ("model", c_char_p),
    ]


class SherpaOnnxOfflineSenseVoiceModelConfig(ctypes.Structure):
    _fields_ = [
        ("model", c_char_p),
        ("language", c_char_p),
        ("use_itn", c_int32),
    ]


class SherpaOnnxOfflineMoonshineModelConfig(ctypes.Structure):
    _fields_ = [
        ("preprocessor", c_char_p),
        ("encoder", c_char_p),
        ("uncached_decoder", c_char_p),
        ("cached_decoder", c_char_p),
    ]


class SherpaOnnxOfflineFireRedAsrModelConfig(ctypes.Structure):
    _fields_ = [
        ("encoder", c_char_p),
        ("decoder", c_char_p),
    ]


class SherpaOnnxOfflineDolphinModelConfig(ctypes.Structure):
    _fields_ = [
        ("model", c_char_p),
    ]


class SherpaOnnxOfflineModelConfig(ctypes.Structure):
    _fields_ = [
        ("transducer", SherpaOnnxOfflineTransducerModelConfig),
        ("paraformer", SherpaOnnxOfflineParaformerModelConfig),
        ("nemo_ctc", SherpaOnnxOfflineNemoEncDecCtcModelConfig),
        ("whisper", SherpaOnnxOfflineWhisperModelConfig),
        ("tdnn", SherpaOnnxOfflineTdnnModelConfig),
        ("tokens", c_char_p),
        ("num_threads", c_int32),
        ("debug", c_int32),
        ("provider", c_char_p),
        ("model_type", c_char_p),
        ("modeling_unit", c_char_p),
        ("bpe_vocab", c_char_p),
        ("telespeech_ctc", c_char_p),
        ("sense_voice", SherpaOnnxOfflineSenseVoiceModelConfig),
        ("moonshine", SherpaOnnxOfflineMoonshineModelConfig),
        ("fire_red_asr", SherpaOnnxOfflineFireRedAsrModelConfig),
        ("dolphin", SherpaOnnxOfflineDolphinModelConfig),
    ]


class SherpaOnnxOfflineLMConfig(ctypes.Structure):
    _fields_ = [
        ("model", c_char_p),
        ("scale", c_float),
    ]


class SherpaOnnxOfflineRecognizerConfig(ctypes.Structure):
    _fields_ = [
        ("feat_config", SherpaOnnxFeatureConfig),
        ("model_config", SherpaOnnxOfflineModelConfig),
        ("lm_config", SherpaOnnxOfflineLMConfig),
        ("decoding_method", c_char_p),
        ("max_active_paths", c_int32),
        ("hotwords_file", c_char_p),
        ("hotwords_score", c_float),
        ("rule_fsts", c_char_p),
        ("rule_fars", c_char_p),
        ("blank_penalty", c_float),
        ("hr", SherpaOnnxHomophoneReplacerConfig),
    ]


class SherpaOnnxOfflineRecognizerResult(ctypes.Structure):
    _fields_ = [
        ("text", c_char_p),
        ("timestamps", POINTER(c_float)),
        ("count", c_int32),
        ("tokens", c_char_p),
        ("tokens_arr", POINTER(c_char_p)),
        ("json", c_char_p),
        ("lang", c_char_p),
        ("emotion", c_char_p),
        ("event", c_char_p),
    ]


# Family slot names per descriptor, used to null every slot but the selected one
ONLINE_FAMILY_SLOTS = {
    "transducer": SherpaOnnxOnlineTransducerModelConfig,
    "paraformer": SherpaOnnxOnlineParaformerModelConfig,
    "zipformer2_ctc": SherpaOnnxOnlineZipformer2CtcModelConfig,
    "nemo_ctc": SherpaOnnxOnlineNemoCtcModelConfig,
}

OFFLINE_FAMILY_SLOTS = {
    "transducer": SherpaOnnxOfflineTransducerModelConfig,
    "paraformer": SherpaOnnxOfflineParaformerModelConfig,
    "nemo_ctc": SherpaOnnxOfflineNemoEncDecCtcModelConfig,
    "whisper": SherpaOnnxOfflineWhisperModelConfig,
    "tdnn": SherpaOnnxOfflineTdnnModelConfig,
    "sense_voice": SherpaOnnxOfflineSenseVoiceModelConfig,
    "moonshine": SherpaOnnxOfflineMoonshineModelConfig,
    "fire_red_asr": SherpaOnnxOfflineFireRedAsrModelConfig,
    "dolphin": SherpaOnnxOfflineDolphinModelConfig,
}
