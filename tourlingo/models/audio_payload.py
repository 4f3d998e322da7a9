from __future__ import annotations

import base64

DATA_URL_PREFIX = "data:audio/mpeg;base64,"


class AudioPayloadCodec:
    """Encode synthesized audio for text-only transports and back."""

    @staticmethod
    def encode(data: bytes) -> str:
        """Encode raw bytes as a base64 data URL playable by browsers."""
        return DATA_URL_PREFIX + base64.b64encode(data).decode("ascii")

    @staticmethod
    def decode(payload: str) -> bytes:
        """Decode a data URL (or bare base64) into raw bytes. Raises ValueError on invalid input."""
        if payload.startswith("data:"):
            header, sep, payload = payload.partition(",")
            if not sep or not header.endswith(";base64"):
                raise ValueError(f"Unsupported audio data URL header: {header[:40]}")
        return base64.b64decode(payload, validate=True)
