"""Port interfaces (Hexagonal Architecture)."""

from kubebot.ports.inbound import EventKind, InboundMessage
from kubebot.ports.outbound import CommandRunner, ReplySink

__all__ = [
    "EventKind",
    "InboundMessage",
    "CommandRunner",
    "ReplySink",
]
