"""In-process room used by tests and the single-machine demo."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..models.participant import Participant
from .base import MAX_MESSAGE_BYTES, Room

logger = logging.getLogger(__name__)


class LocalRoomHub:
    """Connects ``LocalRoom`` instances living in the same event loop.

    ``honor_destinations=False`` delivers every packet to everyone, standing
    in for a transport whose recipient restriction leaks.
    """

    def __init__(self, *, honor_destinations: bool = True, max_message_bytes: int = MAX_MESSAGE_BYTES):
        self.honor_destinations = honor_destinations
        self.max_message_bytes = max_message_bytes
        self._rooms: Dict[str, "LocalRoom"] = {}
        self.packets_sent = 0

    def join(self, participant: Participant) -> "LocalRoom":
        if participant.identity in self._rooms:
            raise ValueError(f"Identity already in room: {participant.identity}")
        room = LocalRoom(self, participant, max_message_bytes=self.max_message_bytes)
        self._rooms[participant.identity] = room
        logger.info("participant_joined identity=%s role=%s", participant.identity, participant.role.value)
        return room

    def leave(self, identity: str) -> None:
        if self._rooms.pop(identity, None) is not None:
            logger.info("participant_left identity=%s", identity)

    def participants(self) -> List[Participant]:
        return [room.local_participant for room in self._rooms.values()]

    async def deliver(self, sender: str, data: bytes, destination_identities: Optional[List[str]]) -> None:
        self.packets_sent += 1
        for identity, room in list(self._rooms.items()):
            if identity == sender:
                continue
            if self.honor_destinations and destination_identities is not None and identity not in destination_identities:
                continue
            await room._dispatch(data, sender)


class LocalRoom(Room):
    def __init__(self, hub: LocalRoomHub, local: Participant, *, max_message_bytes: int = MAX_MESSAGE_BYTES):
        super().__init__(local, max_message_bytes=max_message_bytes)
        self._hub = hub

    @property
    def participants(self) -> List[Participant]:
        return [p for p in self._hub.participants() if p.identity != self._local.identity]

    async def _publish(self, data: bytes, reliable: bool, destination_identities: Optional[List[str]]) -> None:
        await self._hub.deliver(self._local.identity, data, destination_identities)

    async def close(self) -> None:
        self._hub.leave(self._local.identity)


__all__ = ["LocalRoom", "LocalRoomHub"]
