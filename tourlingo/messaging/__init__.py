from .chunking import ChunkReassembler, ChunkedSender, DataTransport, new_message_id, serialize, split_message
from .queues import BoundedQueue, OverflowPolicy

__all__ = [
    "BoundedQueue",
    "ChunkReassembler",
    "ChunkedSender",
    "DataTransport",
    "OverflowPolicy",
    "new_message_id",
    "serialize",
    "split_message",
]
