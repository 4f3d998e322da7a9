"""Room client speaking the relay's frame protocol over a websocket."""

from __future__ import annotations

import asyncio
import binascii
import json
import logging
from typing import List, Optional

import websockets
from websockets.exceptions import ConnectionClosed

from ..errors import MessagingError
from ..models.participant import Participant
from . import protocol
from .base import MAX_MESSAGE_BYTES, Room

logger = logging.getLogger(__name__)


class WebSocketRoom(Room):
    def __init__(self, websocket, local: Participant, *, max_message_bytes: int = MAX_MESSAGE_BYTES):
        super().__init__(local, max_message_bytes=max_message_bytes)
        self._websocket = websocket
        self._participants: List[Participant] = []
        self._joined = asyncio.Event()
        self._reader: Optional[asyncio.Task] = None

    @classmethod
    async def connect(
        cls,
        url: str,
        local: Participant,
        *,
        max_message_bytes: int = MAX_MESSAGE_BYTES,
        join_timeout_s: float = 5.0,
    ) -> "WebSocketRoom":
        """Connect, join as ``local`` and wait for the first participant list."""
        websocket = await websockets.connect(url, max_size=None)
        room = cls(websocket, local, max_message_bytes=max_message_bytes)
        await websocket.send(
            protocol.encode_frame(
                protocol.JOIN,
                identity=local.identity,
                name=local.display_name,
                metadata=local.metadata().to_json(),
            )
        )
        room._reader = asyncio.create_task(room._read_loop(), name=f"room-reader-{local.identity}")
        try:
            await asyncio.wait_for(room._joined.wait(), join_timeout_s)
        except asyncio.TimeoutError as exc:
            await room.close()
            raise MessagingError(f"join not acknowledged by {url}") from exc
        logger.info("room_joined identity=%s url=%s", local.identity, url)
        return room

    @property
    def participants(self) -> List[Participant]:
        return list(self._participants)

    async def _publish(self, data: bytes, reliable: bool, destination_identities: Optional[List[str]]) -> None:
        try:
            await self._websocket.send(protocol.data_frame(data, destinations=destination_identities))
        except ConnectionClosed as exc:
            raise MessagingError(f"room connection closed: {exc}") from exc

    async def _read_loop(self) -> None:
        try:
            async for raw in self._websocket:
                try:
                    frame = protocol.decode_frame(raw)
                except (ValueError, json.JSONDecodeError) as exc:
                    logger.warning("frame_unparseable error=%s", exc)
                    continue
                await self._handle_frame(frame)
        except ConnectionClosed:
            logger.info("room_connection_closed identity=%s", self._local.identity)
        except asyncio.CancelledError:
            pass

    async def _handle_frame(self, frame) -> None:
        kind = frame["type"]
        if kind == protocol.PARTICIPANTS:
            entries = frame.get("participants") or []
            self._participants = [
                protocol.participant_from_entry(entry)
                for entry in entries
                if isinstance(entry, dict) and entry.get("identity") != self._local.identity
            ]
            self._joined.set()
        elif kind == protocol.DATA:
            try:
                payload = protocol.data_payload(frame)
            except (ValueError, binascii.Error) as exc:
                logger.warning("data_frame_invalid error=%s", exc)
                return
            await self._dispatch(payload, frame.get("from"))
        elif kind == protocol.ERROR:
            logger.warning("relay_error identity=%s error=%s", self._local.identity, frame.get("error"))

    async def close(self) -> None:
        if self._reader and not self._reader.done():
            self._reader.cancel()
            await asyncio.gather(self._reader, return_exceptions=True)
        self._reader = None
        await self._websocket.close()


__all__ = ["WebSocketRoom"]
