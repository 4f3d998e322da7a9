"""Participants of a tour room and the metadata they join with."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union

from ..languages import DEFAULT_LANGUAGE

logger = logging.getLogger(__name__)


class Role(str, Enum):
    GUIDE = "guide"
    GUEST = "guest"


@dataclass(frozen=True)
class ParticipantMetadata:
    """Typed view of the metadata string a participant joins the room with.

    Decoded once at the room boundary; absent or malformed metadata falls back
    to an English-speaking guest.
    """

    language: str = DEFAULT_LANGUAGE
    role: Role = Role.GUEST
    display_name: Optional[str] = None

    @classmethod
    def parse(cls, raw: Union[str, bytes, Dict[str, Any], None]) -> "ParticipantMetadata":
        if raw is None or raw == "" or raw == b"":
            return cls()

        data: Any = raw
        if isinstance(raw, (str, bytes)):
            try:
                data = json.loads(raw)
            except (json.JSONDecodeError, UnicodeDecodeError):
                logger.warning("participant_metadata_unparseable raw=%r", raw[:80])
                return cls()

        if not isinstance(data, dict):
            logger.warning("participant_metadata_not_object type=%s", type(data).__name__)
            return cls()

        language = data.get("language")
        if not isinstance(language, str) or not language:
            language = DEFAULT_LANGUAGE

        role = Role.GUEST
        raw_role = data.get("role")
        if isinstance(raw_role, str) and raw_role.lower() == Role.GUIDE.value:
            role = Role.GUIDE
        elif data.get("isOperator") is True:
            role = Role.GUIDE

        display_name = data.get("displayName")
        if not isinstance(display_name, str):
            display_name = None

        return cls(language=language, role=role, display_name=display_name)

    def to_json(self) -> str:
        data: Dict[str, Any] = {"language": self.language, "role": self.role.value}
        if self.display_name:
            data["displayName"] = self.display_name
        return json.dumps(data)


@dataclass(frozen=True)
class Participant:
    identity: str
    display_name: str
    language: str = DEFAULT_LANGUAGE
    role: Role = Role.GUEST

    @property
    def is_guide(self) -> bool:
        return self.role == Role.GUIDE

    @classmethod
    def from_metadata(
        cls,
        identity: str,
        name: Optional[str],
        metadata: Union[str, bytes, Dict[str, Any], None],
    ) -> "Participant":
        meta = ParticipantMetadata.parse(metadata)
        return cls(
            identity=identity,
            display_name=name or meta.display_name or identity,
            language=meta.language,
            role=meta.role,
        )

    def metadata(self) -> ParticipantMetadata:
        return ParticipantMetadata(language=self.language, role=self.role, display_name=self.display_name)
