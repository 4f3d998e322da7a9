"""Text translation through Google Cloud Translation (v2 REST)."""

from __future__ import annotations

import logging
from typing import Optional

import aiohttp

from ..config import GoogleTranslateConfig
from ..errors import ServiceUnavailableError, TranslationError
from ..languages import DEFAULT_LANGUAGE
from .base import TextTranslator
from .http import HttpServiceClient

logger = logging.getLogger(__name__)


class GoogleTranslator(HttpServiceClient, TextTranslator):
    name = "google_translate"
    service_name = "google_translate"
    error_cls = TranslationError

    def __init__(self, config: GoogleTranslateConfig, *, session: Optional[aiohttp.ClientSession] = None):
        super().__init__(timeout_s=config.request_timeout_s, session=session)
        self.config = config

    def service_code(self, code: str) -> str:
        return self.config.language_code_map.get(code, code)

    def _api_key(self) -> str:
        if not self.config.api_key:
            raise ServiceUnavailableError("Google Translate", "services.google_translate.api_key")
        return self.config.api_key

    async def _translate(self, text: str, source: str, target: str) -> str:
        data = await self._request_json(
            "POST",
            self.config.base_url,
            params={"key": self._api_key()},
            json={
                "q": text,
                "source": self.service_code(source),
                "target": self.service_code(target),
                "format": "text",
            },
        )
        try:
            translated = data["data"]["translations"][0].get("translatedText")
        except (KeyError, IndexError, TypeError, AttributeError) as exc:
            raise TranslationError(f"unexpected response shape: {exc!r}") from exc

        logger.debug("translated source=%s target=%s chars=%s", source, target, len(text))
        return translated or text

    async def detect_language(self, text: str) -> str:
        """Best guess of the language of ``text``; English when the service has no opinion."""
        data = await self._request_json(
            "POST",
            f"{self.config.base_url.rstrip('/')}/detect",
            params={"key": self._api_key()},
            json={"q": text},
        )
        try:
            return data["data"]["detections"][0][0]["language"] or DEFAULT_LANGUAGE
        except (KeyError, IndexError, TypeError):
            return DEFAULT_LANGUAGE


__all__ = ["GoogleTranslator"]
