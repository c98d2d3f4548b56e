"""Unit tests for config translation into engine descriptors."""

import pytest

from sherpa_asr.config import (
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
from sherpa_asr.engine.structs import (
    OFFLINE_FAMILY_SLOTS,
    ONLINE_FAMILY_SLOTS,
    SherpaOnnxOfflineRecognizerConfig,
    SherpaOnnxOnlineRecognizerConfig,
)
from sherpa_asr.translate import translate, translate_offline, translate_online


def populated_slots(model_config, slots):
    """Names of family slots with at least one non-NULL string field."""
    result = []
    for slot in slots:
        struct = getattr(model_config, slot)
        if any(getattr(struct, name) for name, _ in struct._fields_ if isinstance(getattr(struct, name), bytes)):
            result.append(slot)
    return result


class TestOnline:
    """Tests for streaming descriptors."""

    def test_transducer_fields(self, online_config):
        descriptor = translate_online(online_config)
        model_config = descriptor.model_config
        assert model_config.transducer.encoder == b"encoder.onnx"
        assert model_config.transducer.joiner == b"joiner.onnx"
        assert model_config.tokens == b"tokens.txt"
        assert model_config.num_threads == 1
        assert model_config.provider == b"cpu"
        assert descriptor.feat_config.sample_rate == 16000
        assert descriptor.feat_config.feature_dim == 80
        assert descriptor.decoding_method == b"greedy_search"
        assert descriptor.enable_endpoint == 1
        assert descriptor.rule1_min_trailing_silence == pytest.approx(2.4)
        assert descriptor.rule2_min_trailing_silence == pytest.approx(1.2)
        assert descriptor.rule3_min_utterance_length == pytest.approx(20.0)

    @pytest.mark.parametrize("model, slot", [
        (TransducerModel("e.onnx", "d.onnx", "j.onnx"), "transducer"),
        (OnlineParaformerModel("e.onnx", "d.onnx"), "paraformer"),
        (Zipformer2CtcModel("m.onnx"), "zipformer2_ctc"),
        (NemoCtcModel("m.onnx"), "nemo_ctc"),
    ])
    def test_only_selected_slot_is_populated(self, model, slot):
        descriptor = translate_online(OnlineConfig(model=model, tokens="t.txt"))
        assert populated_slots(descriptor.model_config, ONLINE_FAMILY_SLOTS) == [slot]

    def test_empty_strings_become_null(self, online_config):
        descriptor = translate_online(online_config)
        assert descriptor.hotwords_file is None
        assert descriptor.model_config.model_type is None
        assert descriptor.rule_fsts is None
        assert descriptor.hr.dict_dir is None

    def test_disabled_endpoint(self, online_config):
        descriptor = translate_online(online_config.with_endpoint(False))
        assert descriptor.enable_endpoint == 0


class TestOffline:
    """Tests for batch descriptors."""

    def test_single_file_family(self, offline_config):
        descriptor = translate_offline(offline_config)
        assert descriptor.model_config.paraformer.model == b"m.onnx"
        assert descriptor.model_config.tokens == b"t.bin"
        assert descriptor.model_config.telespeech_ctc is None
        assert descriptor.lm_config.model is None
        assert descriptor.hr.dict_dir is None
        assert descriptor.hr.lexicon is None

    @pytest.mark.parametrize("model, slot", [
        (TransducerModel("e.onnx", "d.onnx", "j.onnx"), "transducer"),
        (ParaformerModel("m.onnx"), "paraformer"),
        (NemoCtcModel("m.onnx"), "nemo_ctc"),
        (WhisperModel("e.onnx", "d.onnx"), "whisper"),
        (SenseVoiceModel("m.onnx"), "sense_voice"),
    ])
    def test_only_selected_slot_is_populated(self, model, slot):
        descriptor = translate_offline(OfflineConfig(model=model, tokens="t.txt"))
        assert populated_slots(descriptor.model_config, OFFLINE_FAMILY_SLOTS) == [slot]

    def test_whisper_options(self):
        model = WhisperModel("e.onnx", "d.onnx", language="en", tail_paddings=50)
        whisper = translate_offline(OfflineConfig(model=model, tokens="t.txt")).model_config.whisper
        assert whisper.language == b"en"
        assert whisper.task == b"transcribe"
        assert whisper.tail_paddings == 50

    def test_sense_voice_options(self):
        model = SenseVoiceModel("m.onnx", language="zh", use_itn=False)
        sense_voice = translate_offline(OfflineConfig(model=model, tokens="t.txt")).model_config.sense_voice
        assert sense_voice.language == b"zh"
        assert sense_voice.use_itn == 0


class TestDispatch:
    """Tests for translate()."""

    def test_dispatch_by_config_type(self, online_config, offline_config):
        assert isinstance(translate(online_config), SherpaOnnxOnlineRecognizerConfig)
        assert isinstance(translate(offline_config), SherpaOnnxOfflineRecognizerConfig)

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            translate({"tokens": "t.txt"})

    def test_rejects_mismatched_family(self):
        with pytest.raises(TypeError):
            translate_online(OnlineConfig(model=WhisperModel("e.onnx", "d.onnx"), tokens="t.txt"))
