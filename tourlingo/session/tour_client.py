"""Tour participant: speaks segments into the room and collects what others say."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from ..config import Config
from ..errors import MessagingError, SegmentInProgressError
from ..messaging import BoundedQueue, ChunkedSender, ChunkReassembler, OverflowPolicy
from ..models.audio_payload import AudioPayloadCodec
from ..models.messages import CHANNEL_ALL, TranslatedAudioMessage
from ..models.pipeline import PipelineResult
from ..pipeline import TranslationPipeline, options_from_config
from ..room.base import Room
from ..routing import accepts, resolve_targets
from ..utils.time_utils import MonotonicClock

logger = logging.getLogger(__name__)


class TourRoomClient:
    """Binds a translation pipeline to a joined room.

    Outgoing: one segment at a time is transcribed, translated for the
    languages its channel reaches and sent as one message per language.
    Incoming: packets are reassembled, checked against the local
    participant and queued for playback.
    """

    def __init__(self, room: Room, pipeline: TranslationPipeline, config: Optional[Config] = None):
        self.room = room
        self.pipeline = pipeline
        self.config = config or Config()
        messaging = self.config.messaging
        self.sender = ChunkedSender(
            max_chunk_chars=messaging.max_chunk_chars,
            inter_chunk_delay_s=messaging.inter_chunk_delay_ms / 1000,
        )
        self.reassembler = ChunkReassembler(timeout_s=messaging.reassembly_timeout_s)
        self.playback: BoundedQueue[TranslatedAudioMessage] = BoundedQueue(
            messaging.playback_queue_max, OverflowPolicy(messaging.overflow_policy)
        )
        self._busy = False
        self._started = False

    @property
    def busy(self) -> bool:
        return self._busy

    async def start(self) -> None:
        if self._started:
            return
        self.room.on_data(self._on_data)
        self.reassembler.start_sweeper(self.config.messaging.sweep_interval_s)
        self._started = True

    async def close(self) -> None:
        await self.reassembler.stop_sweeper()
        self.reassembler.clear()
        await self.playback.clear()
        self._started = False

    async def speak(self, audio: bytes, channel: str = CHANNEL_ALL) -> PipelineResult:
        """Process one recorded segment and deliver it on ``channel``.

        Raises SegmentInProgressError while a previous segment is still being
        processed and asyncio.TimeoutError when the segment deadline passes.
        """
        if self._busy:
            raise SegmentInProgressError("a segment is already being processed")
        self._busy = True
        try:
            return await asyncio.wait_for(
                self._speak(audio, channel), self.config.pipeline.segment_timeout_s
            )
        finally:
            self._busy = False

    async def _speak(self, audio: bytes, channel: str) -> PipelineResult:
        local = self.room.local_participant
        targets = resolve_targets(channel, self.room.participants, sender=local)
        if targets.empty:
            logger.warning("segment_not_routed channel=%s", channel)

        result = await self.pipeline.process(
            audio,
            local.language,
            sorted(targets.languages),
            options_from_config(self.config.pipeline),
        )

        destinations = None if targets.is_broadcast else sorted(targets.recipient_identities)
        timestamp = MonotonicClock.epoch_ms()
        for language, output in result.translations.items():
            if output.audio is None:
                continue
            message = TranslatedAudioMessage(
                language=language,
                text=output.text,
                audio_payload=AudioPayloadCodec.encode(output.audio),
                timestamp=timestamp,
                sender_name=local.display_name,
                sender_language=local.language,
                target_channel=channel,
            )
            try:
                await self.sender.send(message.to_dict(), self.room, destination_identities=destinations)
            except MessagingError as exc:
                logger.error("send_failed language=%s channel=%s error=%s", language, channel, exc)
        return result

    async def _on_data(self, data: bytes, sender_identity: Optional[str]) -> None:
        message = self.reassembler.receive(data)
        if message is None:
            return
        try:
            utterance = TranslatedAudioMessage.from_dict(message)
        except ValueError as exc:
            logger.warning("message_rejected sender=%s error=%s", sender_identity, exc)
            return
        if not accepts(utterance, self.room.local_participant):
            logger.debug(
                "message_ignored sender=%s language=%s channel=%s",
                sender_identity, utterance.language, utterance.target_channel,
            )
            return
        await self.playback.put(utterance)

    async def next_message(self, timeout: Optional[float] = None) -> TranslatedAudioMessage:
        return await self.playback.get(timeout)


__all__ = ["TourRoomClient"]
