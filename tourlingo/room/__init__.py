from .base import MAX_MESSAGE_BYTES, DataHandler, Room
from .local import LocalRoom, LocalRoomHub
from .relay_server import RoomRelayServer
from .websocket_room import WebSocketRoom

__all__ = [
    "MAX_MESSAGE_BYTES",
    "DataHandler",
    "Room",
    "LocalRoom",
    "LocalRoomHub",
    "RoomRelayServer",
    "WebSocketRoom",
]
