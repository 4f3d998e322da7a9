"""Splitting oversized data-channel messages into chunks and putting them back together.

The room's reliable data channel rejects packets above a hard ceiling, while a
message carrying synthesized audio is routinely larger. Messages are
serialized once, sliced into ``audio_chunk`` envelopes that share a
``messageId``, and rebuilt on the receiving side from indexed slots so
delivery order does not matter. Buffers that never complete are swept after
a timeout.
"""

from __future__ import annotations

import asyncio
import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

from ..models.messages import AUDIO_CHUNK_TYPE, TRANSLATED_AUDIO_TYPE, ChunkMessage
from ..utils.time_utils import MonotonicClock

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHUNK_CHARS = 50_000
DEFAULT_INTER_CHUNK_DELAY_S = 0.01
DEFAULT_REASSEMBLY_TIMEOUT_S = 30.0


class DataTransport(Protocol):
    async def send_data(
        self,
        data: bytes,
        *,
        reliable: bool = True,
        destination_identities: Optional[Sequence[str]] = None,
    ) -> None: ...


def serialize(message: Dict[str, Any]) -> str:
    return json.dumps(message, separators=(",", ":"))


def new_message_id() -> str:
    """``<epoch_ms>-<8 hex>``; the prefix lets receivers age buffers."""
    return f"{MonotonicClock.epoch_ms()}-{uuid.uuid4().hex[:8]}"


def split_message(serialized: str, max_chunk_chars: int, message_id: Optional[str] = None) -> List[ChunkMessage]:
    if max_chunk_chars < 1:
        raise ValueError(f"max_chunk_chars must be positive, got {max_chunk_chars}")
    message_id = message_id or new_message_id()
    pieces = [serialized[i:i + max_chunk_chars] for i in range(0, len(serialized), max_chunk_chars)] or [""]
    return [
        ChunkMessage(message_id=message_id, chunk_index=index, total_chunks=len(pieces), data=piece)
        for index, piece in enumerate(pieces)
    ]


class ChunkedSender:
    def __init__(
        self,
        max_chunk_chars: int = DEFAULT_MAX_CHUNK_CHARS,
        inter_chunk_delay_s: float = DEFAULT_INTER_CHUNK_DELAY_S,
    ):
        if max_chunk_chars < 1:
            raise ValueError(f"max_chunk_chars must be positive, got {max_chunk_chars}")
        self.max_chunk_chars = max_chunk_chars
        self.inter_chunk_delay_s = inter_chunk_delay_s

    async def send(
        self,
        message: Dict[str, Any],
        transport: DataTransport,
        destination_identities: Optional[Sequence[str]] = None,
    ) -> int:
        """Send ``message`` whole or in chunks. Returns the number of packets sent."""
        serialized = serialize(message)
        if len(serialized) < self.max_chunk_chars:
            await transport.send_data(
                serialized.encode("utf-8"), reliable=True, destination_identities=destination_identities
            )
            return 1

        chunks = split_message(serialized, self.max_chunk_chars)
        logger.debug(
            "sending_chunked message_id=%s chunks=%s chars=%s",
            chunks[0].message_id, len(chunks), len(serialized),
        )
        for chunk in chunks:
            if chunk.chunk_index and self.inter_chunk_delay_s > 0:
                await asyncio.sleep(self.inter_chunk_delay_s)
            await transport.send_data(
                serialize(chunk.to_dict()).encode("utf-8"),
                reliable=True,
                destination_identities=destination_identities,
            )
        return len(chunks)


@dataclass
class _Buffer:
    total_chunks: int
    started_ms: int
    chunks: Dict[int, str] = field(default_factory=dict)

    @property
    def complete(self) -> bool:
        return len(self.chunks) == self.total_chunks

    def join(self) -> str:
        return "".join(self.chunks[i] for i in range(self.total_chunks))


def _stamp_from_id(message_id: str, now_ms: int) -> Optional[int]:
    prefix, sep, _ = message_id.partition("-")
    if not sep or not prefix.isdigit():
        return None
    stamp = int(prefix)
    return stamp if stamp <= now_ms else None


class ChunkReassembler:
    """Receive side of the chunk protocol. Owns its buffers; nothing else touches them."""

    def __init__(self, timeout_s: float = DEFAULT_REASSEMBLY_TIMEOUT_S):
        self.timeout_ms = int(timeout_s * 1000)
        self._buffers: Dict[str, _Buffer] = {}
        self._sweeper: Optional[asyncio.Task] = None

    def receive(self, raw: Union[bytes, str, Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        """Feed one packet. Returns a complete ``translated_audio`` message, or None.

        Chunks still outstanding, unparseable packets and other message types
        all yield None."""
        message = self._parse(raw)
        if message is None:
            return None
        if message.get("type") == TRANSLATED_AUDIO_TYPE:
            return message
        if message.get("type") != AUDIO_CHUNK_TYPE:
            logger.debug("message_ignored type=%s", message.get("type"))
            return None

        try:
            chunk = ChunkMessage.from_dict(message)
        except ValueError as exc:
            logger.warning("chunk_rejected error=%s", exc)
            return None
        return self._add(chunk)

    def _add(self, chunk: ChunkMessage) -> Optional[Dict[str, Any]]:
        now_ms = MonotonicClock.epoch_ms()
        buffer = self._buffers.get(chunk.message_id)
        if buffer is None:
            started = _stamp_from_id(chunk.message_id, now_ms)
            buffer = _Buffer(total_chunks=chunk.total_chunks, started_ms=started if started is not None else now_ms)
            self._buffers[chunk.message_id] = buffer
        elif buffer.total_chunks != chunk.total_chunks:
            logger.warning(
                "chunk_rejected message_id=%s reason=total_changed expected=%s got=%s",
                chunk.message_id, buffer.total_chunks, chunk.total_chunks,
            )
            return None

        if chunk.chunk_index in buffer.chunks:
            logger.debug("chunk_duplicate message_id=%s index=%s", chunk.message_id, chunk.chunk_index)
            return None
        buffer.chunks[chunk.chunk_index] = chunk.data
        if not buffer.complete:
            return None

        del self._buffers[chunk.message_id]
        assembled = self._parse(buffer.join())
        if assembled is not None and assembled.get("type") != TRANSLATED_AUDIO_TYPE:
            logger.debug("message_ignored message_id=%s type=%s", chunk.message_id, assembled.get("type"))
            return None
        if assembled is not None:
            logger.debug("message_reassembled message_id=%s chunks=%s", chunk.message_id, buffer.total_chunks)
        return assembled

    @staticmethod
    def _parse(raw: Union[bytes, str, Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if isinstance(raw, dict):
            return raw
        try:
            if isinstance(raw, (bytes, bytearray)):
                raw = raw.decode("utf-8")
            message = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.debug("message_unparseable error=%s", exc)
            return None
        if not isinstance(message, dict):
            logger.debug("message_unparseable error=not an object")
            return None
        return message

    def sweep(self, now_ms: Optional[int] = None) -> int:
        """Drop buffers older than the timeout. Returns how many were dropped."""
        now_ms = MonotonicClock.epoch_ms() if now_ms is None else now_ms
        stale = [mid for mid, buf in self._buffers.items() if now_ms - buf.started_ms > self.timeout_ms]
        for message_id in stale:
            buffer = self._buffers.pop(message_id)
            logger.info(
                "reassembly_expired message_id=%s received=%s total=%s",
                message_id, len(buffer.chunks), buffer.total_chunks,
            )
        return len(stale)

    def pending_message_ids(self) -> List[str]:
        return list(self._buffers)

    def clear(self) -> None:
        self._buffers.clear()

    def start_sweeper(self, interval_s: float = 5.0) -> None:
        if self._sweeper and not self._sweeper.done():
            return

        async def worker():
            while True:
                try:
                    await asyncio.sleep(interval_s)
                    self.sweep()
                except asyncio.CancelledError:
                    break

        self._sweeper = asyncio.create_task(worker(), name="chunk-reassembly-sweeper")

    async def stop_sweeper(self) -> None:
        if self._sweeper and not self._sweeper.done():
            self._sweeper.cancel()
            await asyncio.gather(self._sweeper, return_exceptions=True)
        self._sweeper = None


__all__ = [
    "ChunkReassembler",
    "ChunkedSender",
    "DataTransport",
    "new_message_id",
    "serialize",
    "split_message",
]
