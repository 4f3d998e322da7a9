"""Data model shared by the pipeline, messaging and routing layers."""

from .audio_payload import AudioPayloadCodec
from .messages import (
    AUDIO_CHUNK_TYPE,
    CHANNEL_ALL,
    CHANNEL_GUIDE,
    TRANSLATED_AUDIO_TYPE,
    ChunkMessage,
    TranslatedAudioMessage,
)
from .participant import Participant, ParticipantMetadata, Role
from .pipeline import TRANSLATION_FAILED_TEXT, FilterReason, LanguageOutput, PipelineResult

__all__ = [
    "AudioPayloadCodec",
    "AUDIO_CHUNK_TYPE",
    "CHANNEL_ALL",
    "CHANNEL_GUIDE",
    "TRANSLATED_AUDIO_TYPE",
    "ChunkMessage",
    "TranslatedAudioMessage",
    "Participant",
    "ParticipantMetadata",
    "Role",
    "TRANSLATION_FAILED_TEXT",
    "FilterReason",
    "LanguageOutput",
    "PipelineResult",
]
