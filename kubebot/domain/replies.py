"""Canned conversational replies.

The table is evaluated top to bottom and the first matching pattern wins.
Earlier entries shadow later ones: "is help up?" gets the usage text, not
the liveness reply, because ``help`` sits above ``up``.
"""

import re
from typing import List, Optional, Pattern, Tuple

LIVENESS_REPLY = "Yes I'm running"
USAGE_REPLY = "!k [namespace] verb [resource]"
GREETING_REPLY = "Hello my friend !"


def word_pattern(word: str, flags: int = 0) -> Pattern[str]:
    """Whole-word pattern: the word bounded by non-word chars or the ends."""
    return re.compile(rf"(?:^|\W){word}(?:$|\W)", flags)


def build_reply_table(trigger_prefix: str = "!k") -> List[Tuple[Pattern[str], str]]:
    usage = USAGE_REPLY.replace("!k", trigger_prefix, 1)
    return [
        (word_pattern("alive"), LIVENESS_REPLY),
        (word_pattern("help"), usage),
        (word_pattern("up"), LIVENESS_REPLY),
        (word_pattern("running"), LIVENESS_REPLY),
        (word_pattern("[Hh]ello"), GREETING_REPLY),
    ]


REPLY_TABLE = build_reply_table()


def match_reply(
    text: str,
    table: Optional[List[Tuple[Pattern[str], str]]] = None,
) -> Optional[str]:
    """Return the reply of the first matching pattern, or None."""
    for pattern, reply in table if table is not None else REPLY_TABLE:
        if pattern.search(text):
            return reply
    return None
