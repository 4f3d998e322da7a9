"""Live speech-to-text over the ElevenLabs realtime websocket."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Awaitable, Callable, Optional
from urllib.parse import urlencode

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, WebSocketException

from ..config import ElevenLabsConfig
from ..errors import ServiceUnavailableError, TranscriptionError

logger = logging.getLogger(__name__)

TranscriptHandler = Callable[[str, bool], Awaitable[None]]
ErrorHandler = Callable[[Exception], Awaitable[None]]

TRANSCRIPT_EVENT = "transcript"


class RealtimeTranscriber:
    """One live transcription stream.

    Audio goes up as binary frames; ``commit`` asks the service to finalize
    the utterance in progress. Every ``transcript`` event is handed to
    ``on_transcript(text, is_final)``. Audio sent while the stream is not open
    is dropped.
    """

    def __init__(
        self,
        config: ElevenLabsConfig,
        on_transcript: TranscriptHandler,
        *,
        on_error: Optional[ErrorHandler] = None,
        language: Optional[str] = None,
    ):
        self.config = config
        self.language = language
        self._on_transcript = on_transcript
        self._on_error = on_error
        self._ws = None
        self._reader: Optional[asyncio.Task] = None

    @property
    def url(self) -> str:
        params = {"model_id": self.config.realtime_stt_model}
        if self.language:
            params["language_code"] = self.language
        return f"{self.config.realtime_url}?{urlencode(params)}"

    @property
    def connected(self) -> bool:
        return self._ws is not None and self._reader is not None and not self._reader.done()

    async def connect(self) -> None:
        if not self.config.api_key:
            raise ServiceUnavailableError("ElevenLabs realtime speech-to-text", "services.elevenlabs.api_key")
        if self.connected:
            logger.debug("realtime_stt_already_connected")
            return
        try:
            self._ws = await websockets.connect(
                self.url,
                additional_headers={"xi-api-key": self.config.api_key},
                ping_interval=20,
                ping_timeout=10,
            )
        except (OSError, WebSocketException) as exc:
            raise TranscriptionError(f"realtime connection failed: {exc}") from exc
        self._reader = asyncio.create_task(self._read_loop(), name="realtime-stt-reader")
        logger.info("realtime_stt_connected language=%s", self.language)

    async def send_audio(self, chunk: bytes) -> None:
        if not self.connected:
            logger.debug("realtime_stt_audio_dropped bytes=%s", len(chunk))
            return
        await self._ws.send(chunk)

    async def commit(self) -> None:
        if not self.connected:
            return
        await self._ws.send(json.dumps({"type": "commit"}))

    async def close(self) -> None:
        if self._ws is not None:
            await self._ws.close()
        if self._reader is not None:
            await asyncio.gather(self._reader, return_exceptions=True)
        self._ws = None
        self._reader = None

    async def _read_loop(self) -> None:
        try:
            async for raw in self._ws:
                try:
                    event = json.loads(raw)
                except (json.JSONDecodeError, UnicodeDecodeError) as exc:
                    logger.warning("realtime_stt_unparseable error=%s", exc)
                    continue
                if not isinstance(event, dict) or event.get("type") != TRANSCRIPT_EVENT:
                    continue
                text = event.get("text") or ""
                is_final = bool(event.get("is_final", False))
                try:
                    await self._on_transcript(text, is_final)
                except Exception:
                    logger.exception("realtime_stt_handler_failed final=%s", is_final)
        except ConnectionClosedError as exc:
            logger.warning("realtime_stt_closed error=%s", exc)
            await self._report(TranscriptionError(f"realtime stream closed: {exc}"))
        except ConnectionClosed:
            logger.info("realtime_stt_closed")

    async def _report(self, error: Exception) -> None:
        if self._on_error is None:
            return
        try:
            await self._on_error(error)
        except Exception:
            logger.exception("realtime_stt_error_handler_failed")


__all__ = ["RealtimeTranscriber", "TRANSCRIPT_EVENT"]
