"""Pre-rendered announcements: the same message spoken once per language."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Mapping, Optional, Tuple

from ..errors import ConfigurationError, SynthesisError
from ..providers.base import SpeechSynthesizer
from ..providers.tts import options_for_style

logger = logging.getLogger(__name__)


async def render_announcements(
    synthesizer: SpeechSynthesizer,
    translations: Mapping[str, str],
    *,
    use_operator_voice: bool = False,
    voice_style: str = "narration",
) -> Dict[str, bytes]:
    """Synthesize every translation with the quality model.

    Languages whose synthesis fails are left out of the result. Missing
    service configuration propagates.
    """
    options = options_for_style(voice_style, use_operator_voice=use_operator_voice, fast_mode=False)

    async def _render(language: str, text: str) -> Tuple[str, Optional[bytes]]:
        try:
            return language, await synthesizer.synthesize(text, language, options)
        except ConfigurationError:
            raise
        except SynthesisError as exc:
            logger.warning("announcement_failed language=%s error=%s", language, exc)
        except Exception:
            logger.exception("announcement_failed_unexpected language=%s", language)
        return language, None

    rendered = await asyncio.gather(*(_render(lang, text) for lang, text in translations.items()))
    audio = {language: data for language, data in rendered if data is not None}
    logger.info("announcements_rendered languages=%s dropped=%s", sorted(audio), sorted(set(translations) - set(audio)))
    return audio


__all__ = ["render_announcements"]
