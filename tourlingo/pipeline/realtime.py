"""Live pipeline: streamed audio in, translated speech streamed out per language.

Audio chunks go to the realtime transcriber. Every final transcript passes the
same noise filter and speech gate as recorded segments, then each target
language is translated and its speech synthesis stream is opened in parallel.
"""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, Awaitable, Callable, Iterable, List, Optional, Set

from ..config import ElevenLabsConfig
from ..errors import ConfigurationError, SynthesisError, TranslationError
from ..filtering import NoiseFilter
from ..providers.base import SpeechSynthesizer, TextTranslator
from ..providers.realtime_stt import ErrorHandler, RealtimeTranscriber, TranscriptHandler
from ..providers.tts import options_for_style
from .orchestrator import PipelineOptions

logger = logging.getLogger(__name__)

TranslationHandler = Callable[[str, str, AsyncIterator[bytes]], Awaitable[None]]


async def _empty() -> AsyncIterator[bytes]:
    return
    yield  # pragma: no cover


async def _primed(stream: AsyncIterator[bytes]) -> AsyncIterator[bytes]:
    """Pull the first chunk now so request errors surface before the stream is handed out."""
    try:
        first = await stream.__anext__()
    except StopAsyncIteration:
        return _empty()

    async def _rest() -> AsyncIterator[bytes]:
        yield first
        async for chunk in stream:
            yield chunk

    return _rest()


class RealtimePipeline:
    def __init__(
        self,
        stt_config: ElevenLabsConfig,
        translator: TextTranslator,
        synthesizer: SpeechSynthesizer,
        source_language: str,
        target_languages: Iterable[str],
        *,
        on_translation: TranslationHandler,
        on_transcript: Optional[TranscriptHandler] = None,
        on_error: Optional[ErrorHandler] = None,
        options: Optional[PipelineOptions] = None,
        noise_filter: Optional[NoiseFilter] = None,
    ):
        self.translator = translator
        self.synthesizer = synthesizer
        self.source_language = source_language
        self.target_languages: List[str] = list(dict.fromkeys(target_languages))
        self.options = options or PipelineOptions()
        self.noise_filter = noise_filter or NoiseFilter()
        self._on_translation = on_translation
        self._on_transcript = on_transcript
        self._on_error = on_error
        self._segments: Set[asyncio.Task] = set()
        self.transcriber = RealtimeTranscriber(
            stt_config,
            self._handle_transcript,
            on_error=self._report,
            language=source_language,
        )

    async def start(self) -> None:
        await self.transcriber.connect()

    async def process_audio_chunk(self, chunk: bytes) -> None:
        await self.transcriber.send_audio(chunk)

    async def commit(self) -> None:
        """Finalize the utterance in progress; its translations follow asynchronously."""
        await self.transcriber.commit()

    async def drain(self) -> None:
        """Wait until every final transcript received so far has been handed out."""
        while self._segments:
            await asyncio.gather(*list(self._segments), return_exceptions=True)

    async def close(self) -> None:
        await self.transcriber.close()
        await self.drain()

    async def _handle_transcript(self, text: str, is_final: bool) -> None:
        if self._on_transcript is not None:
            await self._on_transcript(text, is_final)
        if not is_final or not text.strip():
            return

        if self.options.enable_noise_filter:
            verdict = self.noise_filter.filter(text)
            if verdict.is_noise:
                logger.info("live_segment_filtered reason=noise descriptions=%s", verdict.noise_descriptions)
                return
            text = verdict.filtered_text
        if not self.noise_filter.is_likely_speech(text):
            logger.info("live_segment_filtered reason=too_short text=%r", text)
            return

        task = asyncio.create_task(self._translate_segment(text), name="live-segment")
        self._segments.add(task)
        task.add_done_callback(self._segments.discard)

    async def _translate_segment(self, text: str) -> None:
        await asyncio.gather(*(self._translate_language(text, language) for language in self.target_languages))

    async def _translate_language(self, text: str, language: str) -> None:
        try:
            translated = await self.translator.translate(text, self.source_language, language)
            audio = _empty()
            if self.options.generate_audio:
                synthesis = options_for_style(
                    self.options.voice_style,
                    use_operator_voice=self.options.use_operator_voice,
                    fast_mode=True,
                )
                audio = await _primed(self.synthesizer.synthesize_stream(translated, language, synthesis))
        except (TranslationError, SynthesisError, ConfigurationError) as exc:
            logger.warning("live_language_failed language=%s error=%s", language, exc)
            await self._report(exc)
            return
        except Exception as exc:
            logger.exception("live_language_failed_unexpected language=%s", language)
            await self._report(exc)
            return

        try:
            await self._on_translation(language, translated, audio)
        except Exception:
            logger.exception("live_translation_handler_failed language=%s", language)

    async def _report(self, error: Exception) -> None:
        if self._on_error is None:
            return
        try:
            await self._on_error(error)
        except Exception:
            logger.exception("live_error_handler_failed")


__all__ = ["RealtimePipeline", "TranslationHandler"]
