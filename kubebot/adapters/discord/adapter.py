"""Discord adapter — bridges discord.Client to the Dispatcher.

DiscordGatewayClient converts Discord gateway events to InboundMessage and
hands them to the Dispatcher; DiscordReplySink posts replies back to the
monitored channel.
"""

import sys
from typing import Optional

import discord

from kubebot.dispatcher import Dispatcher
from kubebot.ports.inbound import EventKind, InboundMessage

MAX_MESSAGE_CHARS = 2000


def _log(msg: str):
    print(msg, file=sys.stderr)


class DiscordReplySink:
    """ReplySink implementation using discord.Client."""

    def __init__(self, client: discord.Client, channel_id: int):
        self._client = client
        self._channel_id = channel_id

    async def send(self, text: str, in_reply_to_message_id: Optional[int] = None) -> None:
        channel = self._client.get_channel(self._channel_id)
        if not channel:
            _log(f"[discord] channel {self._channel_id} not found, reply dropped")
            return

        reference = None
        if in_reply_to_message_id is not None:
            reference = discord.MessageReference(
                message_id=in_reply_to_message_id,
                channel_id=self._channel_id,
                fail_if_not_exists=False,
            )
        try:
            # Split long messages; only the first chunk carries the reply reference
            while text:
                if reference is not None:
                    await channel.send(text[:MAX_MESSAGE_CHARS], reference=reference)
                    reference = None
                else:
                    await channel.send(text[:MAX_MESSAGE_CHARS])
                text = text[MAX_MESSAGE_CHARS:]
        except discord.DiscordException as e:
            _log(f"[discord] failed to send to channel {self._channel_id}: {e}")


class DiscordGatewayClient(discord.Client):
    """Thin Discord client that delegates every event to the Dispatcher."""

    def __init__(self, dispatcher: Dispatcher, **discord_kwargs):
        intents = discord.Intents.default()
        intents.message_content = True
        super().__init__(intents=intents, **discord_kwargs)
        self._dispatcher = dispatcher

    def _to_inbound(self, message: discord.Message, kind: EventKind) -> InboundMessage:
        """Convert a Discord message to a platform-agnostic InboundMessage."""
        content = message.content
        # Strip bot mention prefix so "@kubebot !k ..." parses correctly
        if self.user:
            content = content.replace(f"<@{self.user.id}>", "").strip()
        return InboundMessage(
            content=content,
            author_id=message.author.id,
            channel_id=message.channel.id,
            message_id=message.id,
            event_kind=kind,
        )

    async def setup_hook(self):
        # Runs after login and before the gateway connects, so no message
        # event can reach the dispatcher before it knows the bot's own id
        sink = DiscordReplySink(self, self._dispatcher.channel_id)
        self._dispatcher.wire(sink, self.user.id if self.user else None)

    async def on_ready(self):
        _log(f"[discord] logged in as {self.user}")
        if self.get_channel(self._dispatcher.channel_id) is None:
            _log(f"[discord] channel {self._dispatcher.channel_id} not visible to the bot")

    async def on_message(self, message: discord.Message):
        # Guard: self.user can be None before on_ready fires
        if not self.user:
            return
        self._dispatcher.on_event(self._to_inbound(message, EventKind.POSTED))

    async def on_message_edit(self, before: discord.Message, after: discord.Message):
        if not self.user:
            return
        self._dispatcher.on_event(self._to_inbound(after, EventKind.EDITED))

    async def on_message_delete(self, message: discord.Message):
        if not self.user:
            return
        self._dispatcher.on_event(self._to_inbound(message, EventKind.DELETED))
