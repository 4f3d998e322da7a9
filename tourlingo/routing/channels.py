"""Who an utterance is for, on the way out and on the way in.

Senders narrow delivery with destination identities; receivers re-check the
channel and language of every message because transport-level restriction
is not guaranteed on every room implementation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

from ..models.messages import CHANNEL_ALL, CHANNEL_GUIDE, TranslatedAudioMessage
from ..models.participant import Participant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteTargets:
    languages: FrozenSet[str]
    # None means broadcast to the whole room.
    recipient_identities: Optional[FrozenSet[str]] = None

    @property
    def is_broadcast(self) -> bool:
        return self.recipient_identities is None

    @property
    def empty(self) -> bool:
        return not self.languages


_NOWHERE = RouteTargets(languages=frozenset(), recipient_identities=frozenset())


def find_guide(participants: Iterable[Participant]) -> Optional[Participant]:
    return next((p for p in participants if p.is_guide), None)


def resolve_targets(
    channel: str,
    participants: Iterable[Participant],
    sender: Optional[Participant] = None,
) -> RouteTargets:
    participants = list(participants)
    if sender is not None and all(p.identity != sender.identity for p in participants):
        participants.append(sender)

    if channel == CHANNEL_ALL:
        return RouteTargets(languages=frozenset(p.language for p in participants))

    guide = find_guide(participants)
    if channel == CHANNEL_GUIDE:
        if guide is None:
            logger.warning("route_unresolved channel=guide reason=no_guide")
            return _NOWHERE
        return RouteTargets(languages=frozenset({guide.language}), recipient_identities=frozenset({guide.identity}))

    addressee = next((p for p in participants if p.identity == channel), None)
    if addressee is None:
        logger.warning("route_unresolved channel=%s reason=unknown_participant", channel)
        return _NOWHERE

    languages = {addressee.language}
    recipients = {addressee.identity}
    if guide is not None:
        languages.add(guide.language)
        recipients.add(guide.identity)
    return RouteTargets(languages=frozenset(languages), recipient_identities=frozenset(recipients))


def accepts(message: TranslatedAudioMessage, local: Participant) -> bool:
    """Receive-side check applied to every incoming utterance."""
    if message.language != local.language:
        return False
    channel = message.target_channel
    if channel == CHANNEL_ALL:
        return True
    if channel == CHANNEL_GUIDE:
        return local.is_guide
    # A guest-addressed message is also meant for the guide.
    return channel == local.identity or local.is_guide


__all__ = ["RouteTargets", "accepts", "find_guide", "resolve_targets"]
