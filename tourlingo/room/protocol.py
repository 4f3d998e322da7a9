"""JSON frames exchanged between ``WebSocketRoom`` clients and the relay."""

from __future__ import annotations

import base64
import json
from typing import Any, Dict, List, Optional

from ..models.participant import Participant

JOIN = "join"
PARTICIPANTS = "participants"
DATA = "data"
ERROR = "error"


def encode_frame(frame_type: str, **fields: Any) -> str:
    return json.dumps({"type": frame_type, **fields}, separators=(",", ":"))


def decode_frame(raw: Any) -> Dict[str, Any]:
    """Parse a frame. Raises ValueError on anything that is not a typed JSON object."""
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    frame = json.loads(raw)
    if not isinstance(frame, dict) or not isinstance(frame.get("type"), str):
        raise ValueError("frame must be a JSON object with a string 'type'")
    return frame


def data_frame(payload: bytes, *, sender: Optional[str] = None, destinations: Optional[List[str]] = None) -> str:
    fields: Dict[str, Any] = {"payload": base64.b64encode(payload).decode("ascii")}
    if sender is not None:
        fields["from"] = sender
    if destinations is not None:
        fields["destinationIdentities"] = destinations
    return encode_frame(DATA, **fields)


def data_payload(frame: Dict[str, Any]) -> bytes:
    payload = frame.get("payload")
    if not isinstance(payload, str):
        raise ValueError("data frame without payload")
    return base64.b64decode(payload, validate=True)


def participant_entry(participant: Participant) -> Dict[str, Any]:
    return {
        "identity": participant.identity,
        "name": participant.display_name,
        "metadata": participant.metadata().to_json(),
    }


def participant_from_entry(entry: Dict[str, Any]) -> Participant:
    return Participant.from_metadata(str(entry.get("identity") or ""), entry.get("name"), entry.get("metadata"))
