"""Outbound ports — interfaces for external system adapters."""

from typing import Optional, Protocol, runtime_checkable

from kubebot.domain.models import CommandInvocation, ExecutionOutcome


@runtime_checkable
class ReplySink(Protocol):
    """Interface for posting text back to the monitored channel.

    Implementations log delivery failures themselves; nothing is raised
    back into the dispatcher.
    """

    async def send(self, text: str, in_reply_to_message_id: Optional[int] = None) -> None: ...


@runtime_checkable
class CommandRunner(Protocol):
    """Interface for running a built command invocation."""

    async def run(self, invocation: CommandInvocation) -> ExecutionOutcome: ...
