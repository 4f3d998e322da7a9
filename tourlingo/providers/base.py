from __future__ import annotations

import abc
import asyncio
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator, Dict, Iterable, List, Optional

from ..errors import ConfigurationError, TranslationError

logger = logging.getLogger(__name__)


@dataclass
class TranscribedWord:
    word: str
    start: float
    end: float


@dataclass
class TranscriptionResult:
    text: str
    confidence: float = 1.0
    detected_language: Optional[str] = None
    words: List[TranscribedWord] = field(default_factory=list)


@dataclass(frozen=True)
class SynthesisOptions:
    voice_id: Optional[str] = None
    use_operator_voice: bool = False
    fast_mode: bool = True
    stability: float = 0.5
    similarity_boost: float = 0.75
    style: float = 0.0
    use_speaker_boost: bool = True


class SpeechToText(abc.ABC):
    name: str

    @abc.abstractmethod
    async def transcribe(self, audio: bytes, language_hint: Optional[str] = None) -> str:  # pragma: no cover - interface
        """Return the transcript, or an empty string when no speech was detected."""

    async def close(self) -> None:
        return None


class TextTranslator(abc.ABC):
    name: str

    async def translate(self, text: str, source: str, target: str) -> str:
        """Translate ``text``; identical languages and blank text never reach the service."""
        if source == target or not text.strip():
            return text
        return await self._translate(text, source, target)

    @abc.abstractmethod
    async def _translate(self, text: str, source: str, target: str) -> str:  # pragma: no cover - interface
        ...

    async def translate_batch(self, text: str, source: str, targets: Iterable[str]) -> Dict[str, str]:
        """Translate into several languages at once.

        The source language is always present. Languages whose translation
        fails fall back to the source text.
        """
        results: Dict[str, str] = {source: text}
        pending = [target for target in dict.fromkeys(targets) if target != source]

        async def _one(target: str) -> None:
            try:
                results[target] = await self.translate(text, source, target)
            except (TranslationError, ConfigurationError) as exc:
                logger.warning("batch_translation_fallback target=%s error=%s", target, exc)
                results[target] = text

        await asyncio.gather(*(_one(target) for target in pending))
        return results

    async def close(self) -> None:
        return None


class SpeechSynthesizer(abc.ABC):
    name: str

    @abc.abstractmethod
    async def synthesize(
        self, text: str, language: str, options: Optional[SynthesisOptions] = None
    ) -> bytes:  # pragma: no cover - interface
        ...

    async def synthesize_stream(
        self, text: str, language: str, options: Optional[SynthesisOptions] = None
    ) -> AsyncIterator[bytes]:
        """Yield audio as it is produced. Adapters without streaming yield it in one piece."""
        yield await self.synthesize(text, language, options)

    async def close(self) -> None:
        return None
