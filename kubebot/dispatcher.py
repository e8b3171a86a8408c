"""Per-event entry point — filters events and forwards replies to the sink."""

import asyncio
import sys
from collections import OrderedDict
from typing import Dict, Optional, Set

from kubebot.domain.classifier import IntentClassifier
from kubebot.domain.models import OutboundReply
from kubebot.ports.inbound import EventKind, InboundMessage
from kubebot.ports.outbound import ReplySink


def _log(msg: str):
    print(msg, file=sys.stderr)


class Dispatcher:
    """Routes events from the monitored channel to the classifier.

    Each accepted event is handled in its own task so a slow command does
    not hold up the next message. Collaborators are passed in; the sink and
    the bot identity are bound later through ``wire`` once the transport
    has logged in.
    """

    _MAX_SEEN = 1000  # LRU size for message ids already dispatched

    def __init__(
        self,
        channel_id: int,
        classifier: IntentClassifier,
        bot_name: str = "kubebot",
        sink: Optional[ReplySink] = None,
    ):
        self.channel_id = channel_id
        self.bot_name = bot_name
        self._classifier = classifier
        self._sink = sink
        self._accepting = True
        self._in_flight: Set[asyncio.Task] = set()
        self._seen: "OrderedDict[int, None]" = OrderedDict()
        self.counters: Dict[str, int] = {
            "received": 0,
            "filtered": 0,
            "dispatched": 0,
            "replied": 0,
            "send_failed": 0,
        }

    @property
    def classifier(self) -> IntentClassifier:
        return self._classifier

    @property
    def accepting(self) -> bool:
        return self._accepting

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def wire(self, sink: ReplySink, bot_user_id: Optional[int] = None) -> None:
        """Bind the outbound sink and the bot's own user id."""
        self._sink = sink
        if bot_user_id is not None:
            self._classifier.bot_user_id = bot_user_id

    def accepts(self, msg: InboundMessage) -> bool:
        """Channel and event-kind filters, in that order."""
        if msg.channel_id != self.channel_id:
            return False
        if msg.event_kind is not EventKind.POSTED:
            return False
        return True

    def _mark_seen(self, message_id: int) -> bool:
        """Record a message id. False if it was already dispatched."""
        if message_id in self._seen:
            self._seen.move_to_end(message_id)
            return False
        self._seen[message_id] = None
        while len(self._seen) > self._MAX_SEEN:
            self._seen.popitem(last=False)
        return True

    def on_event(self, msg: InboundMessage) -> Optional[asyncio.Task]:
        """Handle one transport event. Returns the dispatch task, if any."""
        self.counters["received"] += 1
        if not self._accepting or not self.accepts(msg):
            self.counters["filtered"] += 1
            return None
        # Not logged in yet: the bot's own id is unknown and replies have nowhere to go
        if self._sink is None:
            _log(f"[dispatcher] not wired yet, message {msg.message_id} skipped")
            self.counters["filtered"] += 1
            return None
        if not self._mark_seen(msg.message_id):
            _log(f"[dispatcher] duplicate delivery of message {msg.message_id}, skipped")
            self.counters["filtered"] += 1
            return None

        self.counters["dispatched"] += 1
        task = asyncio.create_task(self._dispatch(msg))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    async def _dispatch(self, msg: InboundMessage) -> Optional[OutboundReply]:
        try:
            text = await self._classifier.respond(msg)
        except Exception as e:
            _log(f"[dispatcher] error handling message {msg.message_id}: {e}")
            return None
        if not text:
            return None
        reply = OutboundReply(text=text, in_reply_to_message_id=msg.message_id)
        _log(f"[dispatcher] responding to -> {msg.content[:80]!r}")
        await self._send(reply)
        return reply

    async def _send(self, reply: OutboundReply) -> None:
        if not self._sink:
            _log("[dispatcher] no sink wired, dropping reply")
            self.counters["send_failed"] += 1
            return
        try:
            await self._sink.send(reply.text, reply.in_reply_to_message_id)
            self.counters["replied"] += 1
        except Exception as e:
            self.counters["send_failed"] += 1
            _log(f"[dispatcher] failed to send reply: {e}")

    async def shutdown(self, grace: float = 5.0) -> None:
        """Stop accepting events, drain or cancel in-flight work, say goodbye.

        In-flight dispatches get ``grace`` seconds to finish. Whatever is
        still running after that is cancelled, which kills its kubectl
        process. One final notification is sent to the channel afterwards.
        """
        if not self._accepting:
            return
        self._accepting = False
        pending = set(self._in_flight)
        if pending:
            _log(f"[dispatcher] waiting up to {grace}s for {len(pending)} dispatch(es)")
            _, still_running = await asyncio.wait(pending, timeout=grace)
            for task in still_running:
                task.cancel()
            if still_running:
                await asyncio.gather(*still_running, return_exceptions=True)
                _log(f"[dispatcher] cancelled {len(still_running)} dispatch(es)")

        await self._send(OutboundReply(text=f"_{self.bot_name} has **stopped** running_"))
