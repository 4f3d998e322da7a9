import aiohttp
import pytest

from tourlingo.config import Config, ElevenLabsConfig, GoogleTranslateConfig
from tourlingo.errors import (
    ServiceUnavailableError,
    SynthesisError,
    TranscriptionError,
    TranslationError,
)
from tourlingo.providers import (
    ElevenLabsSpeechToText,
    ElevenLabsSynthesizer,
    GoogleTranslator,
    ServiceFactory,
    SynthesisOptions,
    best_tts_model,
    decode_audio_payload,
    encode_audio_payload,
    estimate_stt_cost,
    estimate_tts_cost,
    options_for_style,
)

from .fakes import FakeHttpSession, FakeResponse, connection_error


def _translation(text):
    return FakeResponse(body={"data": {"translations": [{"translatedText": text}]}})


class TestSpeechToText:
    @pytest.mark.asyncio
    async def test_transcribe_posts_multipart_with_key(self):
        session = FakeHttpSession(FakeResponse(body={"text": "Welcome aboard"}))
        stt = ElevenLabsSpeechToText(ElevenLabsConfig(api_key="el-key"), session=session)

        text = await stt.transcribe(b"\x00\x01", "en")

        assert text == "Welcome aboard"
        request = session.requests[0]
        assert request["method"] == "POST"
        assert request["url"] == "https://api.elevenlabs.io/v1/speech-to-text"
        assert request["headers"] == {"xi-api-key": "el-key"}
        assert isinstance(request["data"], aiohttp.FormData)

    @pytest.mark.asyncio
    async def test_missing_text_means_no_speech(self):
        session = FakeHttpSession(FakeResponse(body={"text": None}))
        stt = ElevenLabsSpeechToText(ElevenLabsConfig(api_key="k"), session=session)
        assert await stt.transcribe(b"x") == ""

    @pytest.mark.asyncio
    async def test_without_key_no_request_is_made(self):
        session = FakeHttpSession()
        stt = ElevenLabsSpeechToText(ElevenLabsConfig(), session=session)
        with pytest.raises(ServiceUnavailableError):
            await stt.transcribe(b"x")
        assert session.requests == []

    @pytest.mark.asyncio
    async def test_http_error_carries_status_and_body(self):
        session = FakeHttpSession(FakeResponse(status=422, body="bad audio", reason="Unprocessable"))
        stt = ElevenLabsSpeechToText(ElevenLabsConfig(api_key="k"), session=session)
        with pytest.raises(TranscriptionError) as info:
            await stt.transcribe(b"x")
        assert info.value.status == 422
        assert info.value.body == "bad audio"

    @pytest.mark.asyncio
    async def test_connection_failure_becomes_transcription_error(self):
        stt = ElevenLabsSpeechToText(ElevenLabsConfig(api_key="k"), session=FakeHttpSession(connection_error()))
        with pytest.raises(TranscriptionError):
            await stt.transcribe(b"x")

    @pytest.mark.asyncio
    async def test_detailed_transcription_keeps_words(self):
        body = {
            "text": "Hello there",
            "language_code": "en",
            "language_probability": 0.97,
            "words": [{"text": "Hello", "start": 0.0, "end": 0.4}, {"text": "there", "start": 0.5, "end": 0.9}],
        }
        stt = ElevenLabsSpeechToText(ElevenLabsConfig(api_key="k"), session=FakeHttpSession(FakeResponse(body=body)))
        result = await stt.transcribe_detailed(b"x")
        assert result.detected_language == "en"
        assert result.confidence == pytest.approx(0.97)
        assert [w.word for w in result.words] == ["Hello", "there"]

    @pytest.mark.asyncio
    async def test_borrowed_session_is_not_closed(self):
        session = FakeHttpSession()
        stt = ElevenLabsSpeechToText(ElevenLabsConfig(api_key="k"), session=session)
        await stt.close()
        assert session.closed is False


class TestTranslator:
    @pytest.mark.asyncio
    async def test_same_language_makes_no_remote_call(self):
        session = FakeHttpSession()
        translator = GoogleTranslator(GoogleTranslateConfig(api_key="g"), session=session)
        assert await translator.translate("Bonjour à tous", "fr", "fr") == "Bonjour à tous"
        assert session.requests == []

    @pytest.mark.asyncio
    async def test_same_language_works_without_credentials(self):
        translator = GoogleTranslator(GoogleTranslateConfig(), session=FakeHttpSession())
        assert await translator.translate("Hello", "en", "en") == "Hello"

    @pytest.mark.asyncio
    async def test_request_shape_and_chinese_code_mapping(self):
        session = FakeHttpSession(_translation("你好"))
        translator = GoogleTranslator(GoogleTranslateConfig(api_key="g-key"), session=session)

        assert await translator.translate("Hello", "en", "zh") == "你好"

        request = session.requests[0]
        assert request["url"] == "https://translation.googleapis.com/language/translate/v2"
        assert request["params"] == {"key": "g-key"}
        assert request["json"] == {"q": "Hello", "source": "en", "target": "zh-CN", "format": "text"}

    @pytest.mark.asyncio
    async def test_empty_translation_falls_back_to_input(self):
        translator = GoogleTranslator(GoogleTranslateConfig(api_key="g"), session=FakeHttpSession(_translation("")))
        assert await translator.translate("Hello", "en", "de") == "Hello"

    @pytest.mark.asyncio
    async def test_unexpected_shape_is_translation_error(self):
        session = FakeHttpSession(FakeResponse(body={"data": {}}))
        translator = GoogleTranslator(GoogleTranslateConfig(api_key="g"), session=session)
        with pytest.raises(TranslationError):
            await translator.translate("Hello", "en", "de")

    @pytest.mark.asyncio
    async def test_http_error_is_translation_error(self):
        session = FakeHttpSession(FakeResponse(status=403, body='{"error": "forbidden"}', reason="Forbidden"))
        translator = GoogleTranslator(GoogleTranslateConfig(api_key="g"), session=session)
        with pytest.raises(TranslationError) as info:
            await translator.translate("Hello", "en", "de")
        assert info.value.status == 403

    @pytest.mark.asyncio
    async def test_batch_keeps_source_and_falls_back_per_language(self):
        session = FakeHttpSession(_translation("Hallo"), FakeResponse(status=500, body="boom"))
        translator = GoogleTranslator(GoogleTranslateConfig(api_key="g"), session=session)

        results = await translator.translate_batch("Hello", "en", ["de", "en", "fr"])

        assert results["en"] == "Hello"
        assert results["de"] == "Hallo"
        assert results["fr"] == "Hello"
        assert len(session.requests) == 2


class TestSynthesizer:
    def _config(self, **overrides):
        values = {"api_key": "el", "language_voices": {"de": "voice-de"}, "operator_voice_id": "voice-guide"}
        values.update(overrides)
        return ElevenLabsConfig(**values)

    def test_voice_precedence(self):
        tts = ElevenLabsSynthesizer(self._config(), session=FakeHttpSession())
        assert tts.select_voice("de", SynthesisOptions(voice_id="explicit", use_operator_voice=True)) == "explicit"
        assert tts.select_voice("de", SynthesisOptions(use_operator_voice=True)) == "voice-guide"
        assert tts.select_voice("de", SynthesisOptions()) == "voice-de"
        assert tts.select_voice("fr", SynthesisOptions()) == "2pwMUCWPsm9t6AwXYaCj"

    def test_operator_voice_requested_but_not_configured(self):
        tts = ElevenLabsSynthesizer(self._config(operator_voice_id=None), session=FakeHttpSession())
        assert tts.select_voice("de", SynthesisOptions(use_operator_voice=True)) == "voice-de"

    @pytest.mark.asyncio
    async def test_fast_and_quality_models(self):
        session = FakeHttpSession(FakeResponse(body=b"mp3-fast"), FakeResponse(body=b"mp3-quality"))
        tts = ElevenLabsSynthesizer(self._config(), session=session)

        assert await tts.synthesize("Hallo", "de", SynthesisOptions(fast_mode=True)) == b"mp3-fast"
        assert await tts.synthesize("Hallo", "de", SynthesisOptions(fast_mode=False)) == b"mp3-quality"

        fast, quality = session.requests
        assert fast["url"] == "https://api.elevenlabs.io/v1/text-to-speech/voice-de"
        assert fast["json"]["model_id"] == "eleven_flash_v2_5"
        assert quality["json"]["model_id"] == "eleven_multilingual_v2"
        assert fast["headers"]["xi-api-key"] == "el"
        assert fast["json"]["voice_settings"] == {
            "stability": 0.5,
            "similarity_boost": 0.75,
            "style": 0.0,
            "use_speaker_boost": True,
        }

    @pytest.mark.asyncio
    async def test_error_response_is_synthesis_error(self):
        session = FakeHttpSession(FakeResponse(status=401, body="invalid key", reason="Unauthorized"))
        tts = ElevenLabsSynthesizer(self._config(), session=session)
        with pytest.raises(SynthesisError):
            await tts.synthesize("Hallo", "de")

    @pytest.mark.asyncio
    async def test_without_key_is_configuration_error(self):
        tts = ElevenLabsSynthesizer(self._config(api_key=None), session=FakeHttpSession())
        with pytest.raises(ServiceUnavailableError):
            await tts.synthesize("Hallo", "de")

    @pytest.mark.asyncio
    async def test_stream_yields_chunks_with_latency_hint(self):
        audio = bytes(range(256)) * 40
        session = FakeHttpSession(FakeResponse(body=audio))
        tts = ElevenLabsSynthesizer(self._config(), session=session)

        chunks = [chunk async for chunk in tts.synthesize_stream("Hallo", "de", SynthesisOptions(fast_mode=False))]

        assert b"".join(chunks) == audio
        assert len(chunks) == 3
        request = session.requests[0]
        assert request["url"].endswith("/text-to-speech/voice-de/stream")
        assert request["json"]["optimize_streaming_latency"] == 3
        assert request["json"]["model_id"] == "eleven_flash_v2_5"

    def test_voice_style_presets(self):
        assert options_for_style("conversation").stability == pytest.approx(0.4)
        assert options_for_style("narration", fast_mode=False).fast_mode is False
        assert options_for_style("unknown") == SynthesisOptions()

    def test_audio_payload_is_a_data_url(self):
        payload = encode_audio_payload(b"ID3audio")
        assert payload.startswith("data:audio/mpeg;base64,")
        assert decode_audio_payload(payload) == b"ID3audio"
        with pytest.raises(ValueError):
            decode_audio_payload("data:audio/mpeg,notbase64")


class TestDetectLanguage:
    @pytest.mark.asyncio
    async def test_detect_language(self):
        body = {"data": {"detections": [[{"language": "de", "confidence": 0.98}]]}}
        session = FakeHttpSession(FakeResponse(body=body))
        translator = GoogleTranslator(GoogleTranslateConfig(api_key="g"), session=session)

        assert await translator.detect_language("Guten Morgen") == "de"
        assert session.requests[0]["url"].endswith("/language/translate/v2/detect")

    @pytest.mark.asyncio
    async def test_detect_language_defaults_to_english(self):
        session = FakeHttpSession(FakeResponse(body={"data": {"detections": []}}))
        translator = GoogleTranslator(GoogleTranslateConfig(api_key="g"), session=session)
        assert await translator.detect_language("???") == "en"


class TestServiceFactory:
    @pytest.mark.asyncio
    async def test_create_wires_configured_adapters(self):
        session = FakeHttpSession()
        services = ServiceFactory.create(Config(), session=session)

        assert isinstance(services.stt, ElevenLabsSpeechToText)
        assert isinstance(services.translator, GoogleTranslator)
        assert isinstance(services.synthesizer, ElevenLabsSynthesizer)
        await services.close()
        assert session.closed is False

    @pytest.mark.asyncio
    async def test_mock_bundle(self):
        services = ServiceFactory.create_mock("Hello there everyone")
        assert await services.stt.transcribe(b"x") == "Hello there everyone"
        assert await services.translator.translate("Hello", "en", "it") == "[it] Hello"
        assert await services.synthesizer.synthesize("Ciao", "it") == b"audio:it:Ciao"


class TestCosts:
    def test_tts_cost_by_plan(self):
        assert estimate_tts_cost(2000) == pytest.approx(0.48)
        assert estimate_tts_cost(1000, plan="scale") == pytest.approx(0.11)
        with pytest.raises(ValueError):
            estimate_tts_cost(1000, plan="enterprise")

    def test_stt_cost(self):
        assert estimate_stt_cost(90) == pytest.approx(0.009)

    def test_best_model_follows_latency_need(self):
        config = ElevenLabsConfig(tts_quality_model="custom-quality")
        assert best_tts_model(config, require_low_latency=True) == "eleven_flash_v2_5"
        assert best_tts_model(config, require_low_latency=False) == "custom-quality"
