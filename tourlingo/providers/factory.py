"""Builds the external service adapters from configuration."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

import aiohttp

from ..config import Config
from .base import SpeechSynthesizer, SpeechToText, TextTranslator
from .mock import PlaceholderSynthesizer, ScriptedSpeechToText, TaggingTranslator
from .stt import ElevenLabsSpeechToText
from .translate import GoogleTranslator
from .tts import ElevenLabsSynthesizer

logger = logging.getLogger(__name__)


@dataclass
class ServiceBundle:
    stt: SpeechToText
    translator: TextTranslator
    synthesizer: SpeechSynthesizer

    async def close(self) -> None:
        await self.stt.close()
        await self.translator.close()
        await self.synthesizer.close()


class ServiceFactory:
    @staticmethod
    def create(config: Config, session: Optional[aiohttp.ClientSession] = None) -> ServiceBundle:
        """Create the production adapters. A shared session is borrowed, never closed."""
        services = config.services
        logger.info(
            "Creating service adapters stt=%s translate=%s tts=%s",
            ElevenLabsSpeechToText.name, GoogleTranslator.name, ElevenLabsSynthesizer.name,
        )
        return ServiceBundle(
            stt=ElevenLabsSpeechToText(services.elevenlabs, session=session),
            translator=GoogleTranslator(services.google_translate, session=session),
            synthesizer=ElevenLabsSynthesizer(services.elevenlabs, session=session),
        )

    @staticmethod
    def create_mock(transcript: str) -> ServiceBundle:
        logger.info("Creating mock service adapters")
        return ServiceBundle(
            stt=ScriptedSpeechToText(transcript),
            translator=TaggingTranslator(),
            synthesizer=PlaceholderSynthesizer(),
        )
