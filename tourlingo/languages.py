"""Languages offered to tour guests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional


@dataclass(frozen=True)
class Language:
    code: str
    name: str
    native_name: str


SUPPORTED_LANGUAGES: List[Language] = [
    Language("en", "English", "English"),
    Language("de", "German", "Deutsch"),
    Language("ja", "Japanese", "日本語"),
    Language("zh", "Chinese", "中文"),
    Language("ko", "Korean", "한국어"),
    Language("fr", "French", "Français"),
    Language("es", "Spanish", "Español"),
    Language("it", "Italian", "Italiano"),
    Language("pt", "Portuguese", "Português"),
    Language("nl", "Dutch", "Nederlands"),
]

LANGUAGE_CODES = [language.code for language in SUPPORTED_LANGUAGES]
DEFAULT_LANGUAGE = "en"


def get_language(code: str) -> Optional[Language]:
    for language in SUPPORTED_LANGUAGES:
        if language.code == code:
            return language
    return None


def language_name(code: str) -> str:
    language = get_language(code)
    return language.name if language else code


def is_supported(code: str) -> bool:
    return get_language(code) is not None


def active_languages(languages: Iterable[str]) -> List[str]:
    """Distinct supported codes from ``languages``, in first-seen order."""
    seen: List[str] = []
    for code in languages:
        if code not in seen and is_supported(code):
            seen.append(code)
    return seen


__all__ = [
    "Language",
    "SUPPORTED_LANGUAGES",
    "LANGUAGE_CODES",
    "DEFAULT_LANGUAGE",
    "get_language",
    "language_name",
    "is_supported",
    "active_languages",
]
