"""WebSocket relay that plays the part of the real-time room service."""

from __future__ import annotations

import asyncio
import binascii
import json
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

import websockets
from websockets.exceptions import ConnectionClosed

from ..config import RoomConfig
from ..models.participant import Participant
from . import protocol

logger = logging.getLogger(__name__)


@dataclass
class _Peer:
    participant: Participant
    websocket: object


class RoomRelayServer:
    """Single-room relay.

    Each connection joins with an identity and participant metadata, then
    sends ``data`` frames that are forwarded to the other peers, restricted
    to ``destinationIdentities`` when given. Frames above the size ceiling
    are refused.
    """

    def __init__(self, config: Optional[RoomConfig] = None, host: Optional[str] = None, port: Optional[int] = None):
        self.config = config or RoomConfig()
        self.host = host if host is not None else self.config.host
        self.port = port if port is not None else self.config.port
        self.peers: Dict[str, _Peer] = {}
        self._lock = asyncio.Lock()
        self._server = None

    async def start(self) -> None:
        self._server = await websockets.serve(
            self._handle_connection,
            self.host,
            self.port,
            max_size=None,
        )
        sockets = list(self._server.sockets or [])
        if sockets:
            self.port = sockets[0].getsockname()[1]
        logger.info("Room relay listening on %s:%s", self.host, self.port)

    async def run(self) -> None:
        """Start and serve until cancelled."""
        await self.start()
        try:
            await asyncio.Future()
        finally:
            await self.shutdown()

    async def shutdown(self) -> None:
        logger.info("Shutting down room relay")
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
        async with self._lock:
            self.peers.clear()

    def participant_count(self) -> int:
        return len(self.peers)

    async def _handle_connection(self, websocket) -> None:
        peer = await self._join(websocket)
        if peer is None:
            return
        identity = peer.participant.identity
        try:
            async for raw in websocket:
                await self._handle_frame(peer, raw)
        except ConnectionClosed:
            pass
        finally:
            async with self._lock:
                if self.peers.get(identity) is peer:
                    del self.peers[identity]
            logger.info("participant_left identity=%s", identity)
            await self._broadcast_participants()

    async def _join(self, websocket) -> Optional[_Peer]:
        try:
            frame = protocol.decode_frame(await websocket.recv())
        except (ValueError, ConnectionClosed) as exc:
            logger.warning("join_failed error=%s", exc)
            await websocket.close()
            return None

        identity = frame.get("identity")
        if frame["type"] != protocol.JOIN or not isinstance(identity, str) or not identity:
            await websocket.send(protocol.encode_frame(protocol.ERROR, error="expected join frame"))
            await websocket.close()
            return None

        participant = Participant.from_metadata(identity, frame.get("name"), frame.get("metadata"))
        async with self._lock:
            if identity in self.peers:
                duplicate = True
            else:
                duplicate = False
                peer = _Peer(participant=participant, websocket=websocket)
                self.peers[identity] = peer
        if duplicate:
            await websocket.send(protocol.encode_frame(protocol.ERROR, error=f"identity in use: {identity}"))
            await websocket.close()
            return None

        logger.info(
            "participant_joined identity=%s role=%s language=%s",
            identity, participant.role.value, participant.language,
        )
        await self._broadcast_participants()
        return peer

    async def _handle_frame(self, peer: _Peer, raw) -> None:
        sender = peer.participant.identity
        try:
            frame = protocol.decode_frame(raw)
            if frame["type"] != protocol.DATA:
                raise ValueError(f"unexpected frame type {frame['type']!r}")
            payload = protocol.data_payload(frame)
        except (ValueError, binascii.Error, json.JSONDecodeError) as exc:
            logger.warning("frame_rejected sender=%s error=%s", sender, exc)
            await self._send(peer, protocol.encode_frame(protocol.ERROR, error=str(exc)))
            return

        if len(payload) > self.config.max_message_bytes:
            logger.warning("frame_rejected sender=%s bytes=%s reason=too_large", sender, len(payload))
            await self._send(peer, protocol.encode_frame(protocol.ERROR, error="message too large"))
            return

        destinations = frame.get("destinationIdentities")
        if destinations is not None and not isinstance(destinations, list):
            destinations = None
        outbound = protocol.data_frame(payload, sender=sender)
        for target in self._recipients(sender, destinations):
            await self._send(target, outbound)

    def _recipients(self, sender: str, destinations: Optional[List[str]]) -> List[_Peer]:
        return [
            peer
            for identity, peer in self.peers.items()
            if identity != sender and (destinations is None or identity in destinations)
        ]

    async def _broadcast_participants(self) -> None:
        frame = protocol.encode_frame(
            protocol.PARTICIPANTS,
            participants=[protocol.participant_entry(p.participant) for p in self.peers.values()],
        )
        for peer in list(self.peers.values()):
            await self._send(peer, frame)

    @staticmethod
    async def _send(peer: _Peer, frame: str) -> None:
        try:
            await peer.websocket.send(frame)
        except ConnectionClosed:
            logger.debug("send_skipped identity=%s reason=closed", peer.participant.identity)


__all__ = ["RoomRelayServer"]
