"""Intent classification for inbound chat messages.

Ordered decision list, first match wins:

1. messages authored by the bot itself are ignored,
2. messages whose first token is the trigger prefix run the command
   pipeline (policy -> builder -> runner -> formatter),
3. otherwise the canned reply table is tried,
4. otherwise nothing is sent.

The command path always takes priority over conversational replies.
"""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Optional, Pattern, Tuple

from kubebot.domain.builder import build_invocation
from kubebot.domain.formatting import format_outcome
from kubebot.domain.models import CommandRejected, PathStats
from kubebot.domain.policy import Policy
from kubebot.domain.replies import build_reply_table, match_reply
from kubebot.ports.inbound import InboundMessage

if TYPE_CHECKING:
    from kubebot.ports.outbound import CommandRunner


def _log(msg: str):
    print(msg, file=sys.stderr)


class IntentKind(str, Enum):
    COMMAND = "command"
    CANNED = "canned"
    IGNORE = "ignore"


@dataclass(frozen=True)
class Intent:
    kind: IntentKind
    tokens: Tuple[str, ...] = ()
    reply: Optional[str] = None


IGNORE = Intent(IntentKind.IGNORE)


class IntentClassifier:
    """Selects a handling path for a message and produces the reply text."""

    def __init__(
        self,
        policy: Policy,
        runner: "CommandRunner",
        executable: str,
        bot_user_id: Optional[int] = None,
        announce_rejections: bool = False,
        reply_table: Optional[List[Tuple[Pattern[str], str]]] = None,
    ):
        self.policy = policy
        self.bot_user_id = bot_user_id
        self._runner = runner
        self._executable = executable
        self._announce_rejections = announce_rejections
        self._reply_table = (
            reply_table if reply_table is not None else build_reply_table(policy.trigger_prefix)
        )
        self._trigger_re = re.compile(re.escape(policy.trigger_prefix))
        self.stats = PathStats()

    def classify(self, msg: InboundMessage) -> Intent:
        """Pick the handling path. Depends only on the message fields."""
        if self.bot_user_id is not None and msg.author_id == self.bot_user_id:
            return IGNORE

        if self._trigger_re.search(msg.content):
            tokens = tuple(msg.content.split())
            if self.policy.is_triggered(tokens):
                return Intent(IntentKind.COMMAND, tokens=tokens)

        reply = match_reply(msg.content, self._reply_table)
        if reply is not None:
            return Intent(IntentKind.CANNED, reply=reply)
        return IGNORE

    async def respond(self, msg: InboundMessage) -> Optional[str]:
        """Classify the message and run the selected path."""
        intent = self.classify(msg)
        if intent.kind is IntentKind.COMMAND:
            self.stats.command += 1
            return await self._run_command(intent.tokens)
        if intent.kind is IntentKind.CANNED:
            self.stats.canned += 1
            return intent.reply
        self.stats.ignored += 1
        return None

    async def _run_command(self, tokens: Tuple[str, ...]) -> Optional[str]:
        try:
            validated = self.policy.validate(tokens)
        except CommandRejected as e:
            self.stats.rejected += 1
            reason = e.reason.value
            self.stats.rejections_by_reason[reason] = self.stats.rejections_by_reason.get(reason, 0) + 1
            _log(f"[classifier] rejected {' '.join(tokens)[:120]!r}: {e}")
            if self._announce_rejections:
                return f"Command rejected: {reason}"
            return None

        if validated is None:
            return None

        invocation = build_invocation(validated, self._executable)
        _log(f"[classifier] running {list(invocation.argv)}")
        outcome = await self._runner.run(invocation)
        if not outcome.succeeded:
            self.stats.failed += 1
            if outcome.timed_out:
                self.stats.timed_out += 1
            _log(f"[classifier] command failed: {outcome.error_detail or outcome.exit_code}")
        return format_outcome(outcome)
