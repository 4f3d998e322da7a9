"""Rough ElevenLabs cost estimates and model choice."""

from __future__ import annotations

from typing import Dict

from ..config import ElevenLabsConfig

# USD per 1,000 synthesized characters, by subscription plan.
TTS_COST_PER_1K_CHARS: Dict[str, float] = {
    "starter": 0.30,
    "creator": 0.24,
    "pro": 0.18,
    "scale": 0.11,
}
STT_COST_PER_SECOND = 0.0001


def estimate_tts_cost(character_count: int, plan: str = "creator") -> float:
    try:
        rate = TTS_COST_PER_1K_CHARS[plan]
    except KeyError:
        raise ValueError(f"Unknown plan {plan!r}; choose from {', '.join(TTS_COST_PER_1K_CHARS)}") from None
    return character_count / 1000 * rate


def estimate_stt_cost(duration_s: float) -> float:
    return duration_s * STT_COST_PER_SECOND


def best_tts_model(config: ElevenLabsConfig, require_low_latency: bool) -> str:
    return config.tts_fast_model if require_low_latency else config.tts_quality_model


__all__ = [
    "STT_COST_PER_SECOND",
    "TTS_COST_PER_1K_CHARS",
    "best_tts_model",
    "estimate_stt_cost",
    "estimate_tts_cost",
]
