"""Wire messages carried on the room data channel."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

TRANSLATED_AUDIO_TYPE = "translated_audio"
AUDIO_CHUNK_TYPE = "audio_chunk"

CHANNEL_ALL = "all"
CHANNEL_GUIDE = "guide"


def _require(data: Dict[str, Any], key: str, kind: type) -> Any:
    value = data.get(key)
    if not isinstance(value, kind) or isinstance(value, bool) and kind is not bool:
        raise ValueError(f"Field '{key}' must be {kind.__name__}, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class TranslatedAudioMessage:
    """One translated utterance for one language."""

    language: str
    text: str
    audio_payload: str
    timestamp: int
    sender_name: str
    sender_language: str
    target_channel: str = CHANNEL_ALL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": TRANSLATED_AUDIO_TYPE,
            "language": self.language,
            "text": self.text,
            "audioPayload": self.audio_payload,
            "timestamp": self.timestamp,
            "senderName": self.sender_name,
            "senderLanguage": self.sender_language,
            "targetChannel": self.target_channel,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TranslatedAudioMessage":
        if data.get("type") != TRANSLATED_AUDIO_TYPE:
            raise ValueError(f"Not a {TRANSLATED_AUDIO_TYPE} message: {data.get('type')!r}")
        return cls(
            language=_require(data, "language", str),
            text=data.get("text") or "",
            audio_payload=data.get("audioPayload") or "",
            timestamp=int(data.get("timestamp") or 0),
            sender_name=data.get("senderName") or "",
            sender_language=data.get("senderLanguage") or "",
            target_channel=data.get("targetChannel") or CHANNEL_ALL,
        )


@dataclass(frozen=True)
class ChunkMessage:
    """One slice of a serialized message too large for a single data packet."""

    message_id: str
    chunk_index: int
    total_chunks: int
    data: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": AUDIO_CHUNK_TYPE,
            "messageId": self.message_id,
            "chunkIndex": self.chunk_index,
            "totalChunks": self.total_chunks,
            "data": self.data,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChunkMessage":
        message_id = data.get("messageId")
        if isinstance(message_id, int) and not isinstance(message_id, bool):
            message_id = str(message_id)
        if not isinstance(message_id, str) or not message_id:
            raise ValueError("Field 'messageId' must be a non-empty string")
        chunk_index = _require(data, "chunkIndex", int)
        total_chunks = _require(data, "totalChunks", int)
        payload = _require(data, "data", str)
        if total_chunks < 1:
            raise ValueError(f"totalChunks must be positive, got {total_chunks}")
        if not 0 <= chunk_index < total_chunks:
            raise ValueError(f"chunkIndex {chunk_index} out of range for {total_chunks} chunks")
        return cls(message_id=message_id, chunk_index=chunk_index, total_chunks=total_chunks, data=payload)
