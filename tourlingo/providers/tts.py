"""Speech synthesis through ElevenLabs text-to-speech."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Any, AsyncIterator, Dict, Optional

import aiohttp

from ..config import ElevenLabsConfig
from ..errors import ServiceUnavailableError, SynthesisError
from ..models.audio_payload import AudioPayloadCodec
from .base import SpeechSynthesizer, SynthesisOptions
from .costs import best_tts_model
from .http import HttpServiceClient

logger = logging.getLogger(__name__)

STREAM_CHUNK_BYTES = 4096

# Voice shaping presets by use case.
VOICE_STYLES: Dict[str, Dict[str, float]] = {
    # tour narration: clear and stable
    "narration": {"stability": 0.6, "similarity_boost": 0.75, "style": 0.1},
    # questions and back-and-forth: more expressive
    "conversation": {"stability": 0.4, "similarity_boost": 0.8, "style": 0.3},
    "announcement": {"stability": 0.8, "similarity_boost": 0.7, "style": 0.0},
}


def encode_audio_payload(audio: bytes) -> str:
    return AudioPayloadCodec.encode(audio)


def decode_audio_payload(payload: str) -> bytes:
    return AudioPayloadCodec.decode(payload)


def options_for_style(style: str, **overrides: Any) -> SynthesisOptions:
    """Build synthesis options from a named preset; unknown styles use the defaults."""
    preset = VOICE_STYLES.get(style, {})
    return dataclasses.replace(SynthesisOptions(), **{**preset, **overrides})


class ElevenLabsSynthesizer(HttpServiceClient, SpeechSynthesizer):
    name = "elevenlabs_tts"
    service_name = "elevenlabs_tts"
    error_cls = SynthesisError

    def __init__(self, config: ElevenLabsConfig, *, session: Optional[aiohttp.ClientSession] = None):
        super().__init__(timeout_s=config.request_timeout_s, session=session)
        self.config = config

    def select_voice(self, language: str, options: SynthesisOptions) -> str:
        """Explicit voice, then the operator's cloned voice, then the language voice, then the default."""
        if options.voice_id:
            return options.voice_id
        if options.use_operator_voice and self.config.operator_voice_id:
            return self.config.operator_voice_id
        return self.config.language_voices.get(language) or self.config.default_voice_id

    def select_model(self, options: SynthesisOptions) -> str:
        return best_tts_model(self.config, require_low_latency=options.fast_mode)

    async def synthesize(self, text: str, language: str, options: Optional[SynthesisOptions] = None) -> bytes:
        options = options or SynthesisOptions()
        voice_id = self.select_voice(language, options)
        model_id = self.select_model(options)

        audio = await self._request_bytes(
            "POST",
            f"{self._tts_url()}/{voice_id}",
            headers=self._headers(),
            json=self._body(text, model_id, options),
        )
        logger.debug(
            "synthesized language=%s voice=%s model=%s chars=%s bytes=%s",
            language, voice_id, model_id, len(text), len(audio),
        )
        return audio

    async def synthesize_stream(
        self, text: str, language: str, options: Optional[SynthesisOptions] = None
    ) -> AsyncIterator[bytes]:
        """Yield audio as it is produced. Always uses the low-latency model."""
        options = dataclasses.replace(options or SynthesisOptions(), fast_mode=True)
        voice_id = self.select_voice(language, options)
        body = self._body(text, self.select_model(options), options)
        body["optimize_streaming_latency"] = self.config.stream_latency_optimization
        headers = self._headers()

        try:
            async with self._http().request(
                "POST",
                f"{self._tts_url()}/{voice_id}/stream",
                headers=headers,
                json=body,
                timeout=self._timeout,
            ) as resp:
                await self._raise_for_status(resp)
                async for chunk in resp.content.iter_chunked(STREAM_CHUNK_BYTES):
                    yield chunk
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise SynthesisError(f"streaming request failed: {exc or type(exc).__name__}") from exc

    def _tts_url(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/text-to-speech"

    def _headers(self) -> Dict[str, str]:
        if not self.config.api_key:
            raise ServiceUnavailableError("ElevenLabs text-to-speech", "services.elevenlabs.api_key")
        return {"xi-api-key": self.config.api_key, "Accept": "audio/mpeg"}

    @staticmethod
    def _body(text: str, model_id: str, options: SynthesisOptions) -> Dict[str, Any]:
        return {
            "text": text,
            "model_id": model_id,
            "voice_settings": {
                "stability": options.stability,
                "similarity_boost": options.similarity_boost,
                "style": options.style,
                "use_speaker_boost": options.use_speaker_boost,
            },
        }


__all__ = [
    "ElevenLabsSynthesizer",
    "VOICE_STYLES",
    "decode_audio_payload",
    "encode_audio_payload",
    "options_for_style",
]
