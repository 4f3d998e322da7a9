"""Result of running one audio segment through the translation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .audio_payload import AudioPayloadCodec

TRANSLATION_FAILED_TEXT = "[Translation failed]"


class FilterReason(str, Enum):
    NOISE = "noise"
    TOO_SHORT = "too_short"


@dataclass(frozen=True)
class LanguageOutput:
    text: str
    audio: Optional[bytes] = None
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.error is not None

    @classmethod
    def failure(cls, error: str) -> "LanguageOutput":
        return cls(text=TRANSLATION_FAILED_TEXT, audio=None, error=error)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"text": self.text}
        if self.audio is not None:
            data["audioPayload"] = AudioPayloadCodec.encode(self.audio)
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class PipelineResult:
    original_text: str
    original_language: str
    translations: Dict[str, LanguageOutput] = field(default_factory=dict)
    processing_time_ms: int = 0
    filtered: bool = False
    filter_reason: Optional[FilterReason] = None
    filtered_text: Optional[str] = None
    noise_descriptions: List[str] = field(default_factory=list)

    @property
    def suppressed(self) -> bool:
        """True when the segment was dropped before translation."""
        return self.filter_reason is not None

    @property
    def has_speech(self) -> bool:
        return bool(self.original_text.strip()) and not self.suppressed

    @property
    def text(self) -> str:
        """The text that was actually translated."""
        return self.filtered_text if self.filtered_text is not None else self.original_text

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "originalText": self.original_text,
            "originalLanguage": self.original_language,
            "translations": {lang: output.to_dict() for lang, output in self.translations.items()},
            "processingTimeMs": self.processing_time_ms,
            "filtered": self.filtered,
        }
        if self.filter_reason is not None:
            data["filterReason"] = self.filter_reason.value
        if self.filtered_text is not None:
            data["filteredText"] = self.filtered_text
        if self.noise_descriptions:
            data["noiseDescriptions"] = list(self.noise_descriptions)
        return data
