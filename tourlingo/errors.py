"""Error taxonomy for the relay core.

Configuration problems are fatal and never retried. Remote service failures
carry the HTTP status and response body for diagnostics; the pipeline decides
which of them are isolated per language and which fail the whole segment.
"""

from __future__ import annotations

from typing import Optional


class TourLingoError(Exception):
    """Base class for all relay errors."""


class ConfigurationError(TourLingoError):
    """Raised when configuration is missing or invalid."""


class ServiceUnavailableError(ConfigurationError):
    """Raised when an external service has no credentials configured."""

    def __init__(self, service: str, setting: str):
        super().__init__(f"{service} is not configured ({setting} is missing)")
        self.service = service
        self.setting = setting


class ServiceError(TourLingoError):
    """Raised when a remote service call fails."""

    service = "service"

    def __init__(self, message: str, *, status: Optional[int] = None, body: Optional[str] = None):
        detail = f"{self.service} error"
        if status is not None:
            detail += f" (HTTP {status})"
        super().__init__(f"{detail}: {message}")
        self.status = status
        self.body = body


class TranscriptionError(ServiceError):
    service = "speech-to-text"


class TranslationError(ServiceError):
    service = "translation"


class SynthesisError(ServiceError):
    service = "speech synthesis"


class MessagingError(TourLingoError):
    """Raised when a message cannot be handed to the room transport."""


class MessageTooLargeError(MessagingError):
    """Raised when a single data packet exceeds the transport ceiling."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"Data packet of {size} bytes exceeds the {limit} byte limit")
        self.size = size
        self.limit = limit


class SegmentInProgressError(TourLingoError):
    """Raised when a new segment is submitted while another is still translating."""
