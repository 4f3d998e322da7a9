"""Minimal real-time room surface the tour client needs."""

from __future__ import annotations

import abc
import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from ..errors import MessageTooLargeError
from ..models.participant import Participant

logger = logging.getLogger(__name__)

# Hard ceiling of a single reliable data packet.
MAX_MESSAGE_BYTES = 65_536

DataHandler = Callable[[bytes, Optional[str]], Awaitable[None]]


class Room(abc.ABC):
    """A joined room: who is here, and a reliable data channel between them."""

    def __init__(self, local: Participant, *, max_message_bytes: int = MAX_MESSAGE_BYTES):
        self._local = local
        self.max_message_bytes = max_message_bytes
        self._handlers: List[DataHandler] = []

    @property
    def local_participant(self) -> Participant:
        return self._local

    @property
    @abc.abstractmethod
    def participants(self) -> List[Participant]:
        """Remote participants currently in the room."""

    async def send_data(
        self,
        data: bytes,
        *,
        reliable: bool = True,
        destination_identities: Optional[Sequence[str]] = None,
    ) -> None:
        if len(data) > self.max_message_bytes:
            raise MessageTooLargeError(len(data), self.max_message_bytes)
        destinations = list(destination_identities) if destination_identities is not None else None
        await self._publish(data, reliable, destinations)

    @abc.abstractmethod
    async def _publish(self, data: bytes, reliable: bool, destination_identities: Optional[List[str]]) -> None:
        ...

    def on_data(self, handler: DataHandler) -> None:
        self._handlers.append(handler)

    async def _dispatch(self, data: bytes, sender_identity: Optional[str]) -> None:
        for handler in list(self._handlers):
            try:
                await handler(data, sender_identity)
            except Exception:
                logger.exception("data_handler_failed local=%s sender=%s", self._local.identity, sender_identity)

    @abc.abstractmethod
    async def close(self) -> None:
        ...


__all__ = ["DataHandler", "MAX_MESSAGE_BYTES", "Room"]
