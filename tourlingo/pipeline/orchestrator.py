"""Translation pipeline: one audio segment in, per-language text and audio out."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Tuple

from ..errors import ConfigurationError, SynthesisError, TranslationError
from ..filtering import NoiseFilter
from ..models.pipeline import FilterReason, LanguageOutput, PipelineResult
from ..providers.base import SpeechSynthesizer, SpeechToText, TextTranslator
from ..providers.tts import options_for_style
from ..utils.time_utils import MonotonicClock

logger = logging.getLogger(__name__)

# Nominal per-call latencies used for up-front estimates.
STT_LATENCY_MS = 150
TRANSLATE_LATENCY_MS = 50
TTS_LATENCY_MS = 75
OVERHEAD_MS = 100

_LANGUAGE_ERRORS = (TranslationError, SynthesisError)


@dataclass(frozen=True)
class PipelineOptions:
    generate_audio: bool = True
    enable_noise_filter: bool = True
    use_operator_voice: bool = False
    fast_mode: bool = True
    voice_style: str = "narration"


def estimate_processing_time_ms(language_count: int, generate_audio: bool = True) -> int:
    """Rough wall time for a segment; languages run in parallel so count only adds overhead."""
    estimate = STT_LATENCY_MS + OVERHEAD_MS
    if language_count > 0:
        estimate += TRANSLATE_LATENCY_MS
        if generate_audio:
            estimate += TTS_LATENCY_MS
    return estimate


class TranslationPipeline:
    """Transcribe, filter, then translate and synthesize every target language concurrently.

    A failure in one language is recorded on that language's output and never
    aborts the others. Transcription failures and missing service
    configuration propagate to the caller.
    """

    def __init__(
        self,
        stt: SpeechToText,
        translator: TextTranslator,
        synthesizer: SpeechSynthesizer,
        noise_filter: Optional[NoiseFilter] = None,
    ):
        self.stt = stt
        self.translator = translator
        self.synthesizer = synthesizer
        self.noise_filter = noise_filter or NoiseFilter()

    async def process(
        self,
        audio: bytes,
        source_language: str,
        target_languages: Iterable[str],
        options: Optional[PipelineOptions] = None,
    ) -> PipelineResult:
        options = options or PipelineOptions()
        started = MonotonicClock.now()

        transcript = await self.stt.transcribe(audio, source_language)
        if not transcript or not transcript.strip():
            logger.info("segment_empty source=%s bytes=%s", source_language, len(audio))
            return PipelineResult(
                original_text=transcript or "",
                original_language=source_language,
                processing_time_ms=MonotonicClock.elapsed_ms_from(started),
            )

        text = transcript
        descriptions: List[str] = []
        filtered_text: Optional[str] = None
        if options.enable_noise_filter:
            verdict = self.noise_filter.filter(transcript)
            descriptions = verdict.noise_descriptions
            if verdict.is_noise:
                logger.info("segment_filtered reason=noise descriptions=%s", descriptions)
                return self._suppressed(transcript, source_language, FilterReason.NOISE, descriptions, started)
            text = verdict.filtered_text
            if descriptions:
                filtered_text = text

        if not self.noise_filter.is_likely_speech(text):
            logger.info("segment_filtered reason=too_short text=%r", text)
            return self._suppressed(
                transcript, source_language, FilterReason.TOO_SHORT, descriptions, started, filtered_text=filtered_text
            )

        translations = await self._fan_out(text, source_language, target_languages, options)
        elapsed = MonotonicClock.elapsed_ms_from(started)
        logger.info(
            "segment_processed source=%s languages=%s failed=%s elapsed_ms=%s",
            source_language,
            sorted(translations),
            sorted(lang for lang, output in translations.items() if output.failed),
            elapsed,
        )
        return PipelineResult(
            original_text=transcript,
            original_language=source_language,
            translations=translations,
            processing_time_ms=elapsed,
            filtered=filtered_text is not None,
            filtered_text=filtered_text,
            noise_descriptions=descriptions,
        )

    async def translate_text_only(
        self, text: str, source_language: str, target_languages: Iterable[str]
    ) -> Dict[str, LanguageOutput]:
        """Translate already-transcribed text without synthesizing audio."""
        options = PipelineOptions(generate_audio=False, enable_noise_filter=False)
        return await self._fan_out(text, source_language, target_languages, options)

    async def _fan_out(
        self, text: str, source_language: str, target_languages: Iterable[str], options: PipelineOptions
    ) -> Dict[str, LanguageOutput]:
        languages = list(dict.fromkeys(target_languages))
        outputs = await asyncio.gather(
            *(self._process_language(text, source_language, lang, options) for lang in languages)
        )
        return dict(outputs)

    async def _process_language(
        self, text: str, source_language: str, language: str, options: PipelineOptions
    ) -> Tuple[str, LanguageOutput]:
        try:
            translated = await self.translator.translate(text, source_language, language)
            audio = None
            if options.generate_audio:
                synthesis = options_for_style(
                    options.voice_style,
                    use_operator_voice=options.use_operator_voice,
                    fast_mode=options.fast_mode,
                )
                audio = await self.synthesizer.synthesize(translated, language, synthesis)
        except ConfigurationError:
            raise
        except _LANGUAGE_ERRORS as exc:
            logger.warning("language_failed language=%s error=%s", language, exc)
            return language, LanguageOutput.failure(str(exc))
        except Exception as exc:
            logger.exception("language_failed_unexpected language=%s", language)
            return language, LanguageOutput.failure(str(exc) or type(exc).__name__)
        return language, LanguageOutput(text=translated, audio=audio)

    @staticmethod
    def _suppressed(
        transcript: str,
        source_language: str,
        reason: FilterReason,
        descriptions: List[str],
        started: float,
        filtered_text: Optional[str] = None,
    ) -> PipelineResult:
        return PipelineResult(
            original_text=transcript,
            original_language=source_language,
            processing_time_ms=MonotonicClock.elapsed_ms_from(started),
            filtered=True,
            filter_reason=reason,
            filtered_text=filtered_text,
            noise_descriptions=list(descriptions),
        )

    async def close(self) -> None:
        await self.stt.close()
        await self.translator.close()
        await self.synthesizer.close()


def options_from_config(pipeline_config) -> PipelineOptions:
    """Map the ``pipeline`` config section onto per-segment options."""
    fields = {f.name for f in dataclasses.fields(PipelineOptions)}
    return PipelineOptions(**{k: v for k, v in pipeline_config.to_dict().items() if k in fields})


__all__ = [
    "PipelineOptions",
    "TranslationPipeline",
    "estimate_processing_time_ms",
    "options_from_config",
]
