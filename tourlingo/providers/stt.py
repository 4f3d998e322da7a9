"""Speech-to-text through ElevenLabs Scribe."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import aiohttp

from ..config import ElevenLabsConfig
from ..errors import ServiceUnavailableError, TranscriptionError
from .base import SpeechToText, TranscribedWord, TranscriptionResult
from .http import HttpServiceClient

logger = logging.getLogger(__name__)


class ElevenLabsSpeechToText(HttpServiceClient, SpeechToText):
    name = "elevenlabs_scribe"
    service_name = "elevenlabs_stt"
    error_cls = TranscriptionError

    def __init__(self, config: ElevenLabsConfig, *, session: Optional[aiohttp.ClientSession] = None):
        super().__init__(timeout_s=config.request_timeout_s, session=session)
        self.config = config

    @property
    def endpoint(self) -> str:
        return f"{self.config.base_url.rstrip('/')}/speech-to-text"

    async def transcribe(self, audio: bytes, language_hint: Optional[str] = None) -> str:
        data = await self._submit(audio, language_hint, tag_audio_events=False)
        return data.get("text") or ""

    async def transcribe_detailed(
        self, audio: bytes, language_hint: Optional[str] = None
    ) -> TranscriptionResult:
        """Transcribe and keep word timings, detected language and its probability."""
        data = await self._submit(audio, language_hint, tag_audio_events=True)
        words = [
            TranscribedWord(word=w.get("text", ""), start=float(w.get("start", 0.0)), end=float(w.get("end", 0.0)))
            for w in data.get("words") or []
            if isinstance(w, dict)
        ]
        return TranscriptionResult(
            text=data.get("text") or "",
            confidence=float(data.get("language_probability") or 1.0),
            detected_language=data.get("language_code"),
            words=words,
        )

    async def _submit(self, audio: bytes, language_hint: Optional[str], *, tag_audio_events: bool) -> Dict[str, Any]:
        if not self.config.api_key:
            raise ServiceUnavailableError("ElevenLabs speech-to-text", "services.elevenlabs.api_key")

        form = aiohttp.FormData()
        form.add_field("file", audio, filename="audio.webm", content_type="audio/webm")
        form.add_field("model_id", self.config.stt_model)
        if language_hint:
            form.add_field("language_code", language_hint)
        if tag_audio_events:
            form.add_field("tag_audio_events", "true")

        logger.debug("stt_request bytes=%s language=%s", len(audio), language_hint)
        data = await self._request_json(
            "POST",
            self.endpoint,
            headers={"xi-api-key": self.config.api_key},
            data=form,
        )
        if not isinstance(data, dict):
            raise TranscriptionError(f"unexpected response type {type(data).__name__}")
        return data


__all__ = ["ElevenLabsSpeechToText"]
