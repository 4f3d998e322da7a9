from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from .base import SpeechSynthesizer, SpeechToText, SynthesisOptions, TextTranslator

logger = logging.getLogger(__name__)


class ScriptedSpeechToText(SpeechToText):
    """Returns a fixed transcript for every segment."""

    name = "mock_stt"

    def __init__(self, transcript: str = ""):
        self.transcript = transcript
        self.calls: List[Tuple[int, Optional[str]]] = []

    async def transcribe(self, audio: bytes, language_hint: Optional[str] = None) -> str:
        self.calls.append((len(audio), language_hint))
        logger.debug("MockSpeechToText transcribed bytes=%s language=%s", len(audio), language_hint)
        return self.transcript


class TaggingTranslator(TextTranslator):
    """Prefixes text with the target language code, or returns canned translations."""

    name = "mock_translate"

    def __init__(self, canned: Optional[Dict[str, str]] = None):
        self.canned = canned or {}
        self.calls: List[Tuple[str, str, str]] = []

    async def _translate(self, text: str, source: str, target: str) -> str:
        self.calls.append((text, source, target))
        return self.canned.get(target, f"[{target}] {text}")


class PlaceholderSynthesizer(SpeechSynthesizer):
    """Produces deterministic fake audio bytes instead of calling a TTS service."""

    name = "mock_tts"

    def __init__(self):
        self.calls: List[Tuple[str, str, SynthesisOptions]] = []

    async def synthesize(self, text: str, language: str, options: Optional[SynthesisOptions] = None) -> bytes:
        options = options or SynthesisOptions()
        self.calls.append((text, language, options))
        return f"audio:{language}:{text}".encode("utf-8")
