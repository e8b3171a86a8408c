"""Inbound port — platform-agnostic chat event representation."""

from dataclasses import dataclass
from enum import Enum


class EventKind(str, Enum):
    """Kind of transport event carried by an InboundMessage."""

    POSTED = "posted"
    EDITED = "edited"
    DELETED = "deleted"


@dataclass(frozen=True)
class InboundMessage:
    """Discord/Mattermost/CLI-agnostic message event."""

    content: str
    author_id: int
    channel_id: int
    message_id: int
    event_kind: EventKind = EventKind.POSTED
