"""Rule-based cleanup of speech-to-text output.

Transcription services describe ambient sound inline ("[traffic noise]",
"(background music)", "*coughs*") and emit filler tokens for hesitations.
None of that is worth translating and voicing for a tour group, so segments
are cleaned before translation and dropped entirely when nothing is left.

The rules are heuristics. They are tuned so that obvious noise and obvious
speech are classified correctly; borderline cases may go either way.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List, Pattern

logger = logging.getLogger(__name__)

_NOISE_KEYWORDS = (
    "noise|sound|music|traffic|wind|rain|background|ambient|silence|static|breathing|"
    "cough|sneeze|laugh|sigh|pause|inaudible|unclear|unintelligible"
)
_ACTION_KEYWORDS = "noise|sound|cough|sneeze|laugh|sigh|clears throat|breathing"
_FILLERS = "um+|uh+|ah+|er+|hmm+|mhm+"
# "er" and "ah" are words in some source languages; they are only stripped as whole lines.
_INLINE_FILLERS = "um+|uh+|hmm+|mhm+"

# Applied in order; every match is removed and kept as a noise description.
NOISE_PATTERNS: List[Pattern[str]] = [
    re.compile(rf"\[[^\[\]]*?(?:{_NOISE_KEYWORDS})[^\[\]]*?\]", re.IGNORECASE),
    re.compile(rf"\([^()]*?(?:{_NOISE_KEYWORDS})[^()]*?\)", re.IGNORECASE),
    re.compile(rf"\*[^*]*?(?:{_ACTION_KEYWORDS})[^*]*?\*", re.IGNORECASE),
    re.compile(rf"\b(?:{_INLINE_FILLERS})\b[,.!?]*", re.IGNORECASE),
    re.compile(rf"^[ \t]*(?:{_FILLERS}|oh+)[ \t]*[,.!?]*[ \t]*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"^[ \t.,!?;:'\"]+$", re.MULTILINE),
    re.compile(r"^[^\n]{1,2}$", re.MULTILINE),
]

# Text consisting of exactly one delimited span is a description, not speech.
WHOLLY_BRACKETED: List[Pattern[str]] = [
    re.compile(r"^\[([^\[\]]*)\]$"),
    re.compile(r"^\(([^()]*)\)$"),
    re.compile(r"^\*([^*]*)\*$"),
]

_PUNCTUATION_ONLY = re.compile(r"^[\s.,!?;:'\"]*$")
_FILLER_WORD = re.compile(rf"^(?:{_FILLERS})$", re.IGNORECASE)
_DELIMITER_CHARS = re.compile(r"[\[\]()*]")
_WHITESPACE = re.compile(r"\s+")

MIN_SPEECH_CHARS = 3
MIN_SPEECH_WORDS = 2


@dataclass
class NoiseFilterResult:
    original_text: str
    filtered_text: str
    is_noise: bool
    noise_descriptions: List[str] = field(default_factory=list)
    confidence: float = 1.0


def wholly_bracketed_description(text: str) -> str | None:
    """Return the inner description when ``text`` is a single delimited span."""
    stripped = text.strip()
    for pattern in WHOLLY_BRACKETED:
        match = pattern.match(stripped)
        if match:
            return match.group(1).strip()
    return None


class NoiseFilter:
    """Classifies transcriptions as noise or speech and strips noise spans."""

    def filter(self, text: str) -> NoiseFilterResult:
        text = text or ""

        description = wholly_bracketed_description(text)
        if description is not None:
            return NoiseFilterResult(
                original_text=text,
                filtered_text="",
                is_noise=True,
                noise_descriptions=[description] if description else [],
                confidence=0.9,
            )

        descriptions: List[str] = []
        cleaned = text
        for pattern in NOISE_PATTERNS:
            for match in pattern.finditer(cleaned):
                span = match.group(0).strip()
                if span:
                    descriptions.append(span)
            cleaned = pattern.sub("", cleaned)

        cleaned = _WHITESPACE.sub(" ", cleaned).strip()
        is_noise = len(cleaned) < MIN_SPEECH_CHARS or bool(_PUNCTUATION_ONLY.match(cleaned))

        if descriptions:
            logger.debug("noise_spans_stripped count=%s is_noise=%s", len(descriptions), is_noise)

        return NoiseFilterResult(
            original_text=text,
            filtered_text="" if is_noise else cleaned,
            is_noise=is_noise,
            noise_descriptions=descriptions,
            confidence=0.8 if descriptions else 1.0,
        )

    def is_likely_speech(self, text: str) -> bool:
        """Second-stage gate: at least two real words must survive."""
        if not text or len(text.strip()) < MIN_SPEECH_CHARS:
            return False
        if wholly_bracketed_description(text) is not None:
            return False

        words = [
            word
            for word in text.split()
            if len(word) > 2 and not _FILLER_WORD.match(word) and not _DELIMITER_CHARS.search(word)
        ]
        return len(words) >= MIN_SPEECH_WORDS


_default_filter = NoiseFilter()


def filter_noise(text: str) -> NoiseFilterResult:
    return _default_filter.filter(text)


def is_likely_speech(text: str) -> bool:
    return _default_filter.is_likely_speech(text)


__all__ = [
    "NoiseFilter",
    "NoiseFilterResult",
    "filter_noise",
    "is_likely_speech",
    "wholly_bracketed_description",
]
