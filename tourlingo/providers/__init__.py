"""Adapters for the external speech-to-text, translation and synthesis services."""

from .base import (
    SpeechSynthesizer,
    SpeechToText,
    SynthesisOptions,
    TextTranslator,
    TranscribedWord,
    TranscriptionResult,
)
from .costs import best_tts_model, estimate_stt_cost, estimate_tts_cost
from .factory import ServiceBundle, ServiceFactory
from .realtime_stt import RealtimeTranscriber
from .stt import ElevenLabsSpeechToText
from .translate import GoogleTranslator
from .tts import (
    VOICE_STYLES,
    ElevenLabsSynthesizer,
    decode_audio_payload,
    encode_audio_payload,
    options_for_style,
)

__all__ = [
    "SpeechSynthesizer",
    "SpeechToText",
    "SynthesisOptions",
    "TextTranslator",
    "TranscribedWord",
    "TranscriptionResult",
    "best_tts_model",
    "estimate_stt_cost",
    "estimate_tts_cost",
    "RealtimeTranscriber",
    "ServiceBundle",
    "ServiceFactory",
    "ElevenLabsSpeechToText",
    "GoogleTranslator",
    "ElevenLabsSynthesizer",
    "VOICE_STYLES",
    "decode_audio_payload",
    "encode_audio_payload",
    "options_for_style",
]
