"""Chat formatting for command output.

Pure Python, no framework dependencies.
"""

import re
from typing import Optional

from kubebot.domain.models import ExecutionOutcome

CODE_FENCE = "```"

# Leaves room for the fences and truncation marker inside one chat message
MAX_OUTPUT_CHARS = 1900
MAX_ERROR_CHARS = 500
TRUNCATED_MARKER = "... (truncated)"

_BLANK_LINES_RE = re.compile(r"\n\s*\n")


def _decode(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def code_block(text: str, limit: int = MAX_OUTPUT_CHARS, truncated: bool = False) -> str:
    """Wrap text in a fixed-width code block, collapsing blank lines.

    ``truncated`` marks text that was already cut short upstream.
    """
    body = _BLANK_LINES_RE.sub("\n", text).rstrip()
    # Keep user text from closing the fence early
    body = body.replace(CODE_FENCE, "`\u200b``")
    if len(body) > limit:
        body = body[:limit].rstrip() + "\n" + TRUNCATED_MARKER
    elif truncated:
        body = body + "\n" + TRUNCATED_MARKER
    return f"{CODE_FENCE}\n{body}\n{CODE_FENCE}"


def format_outcome(outcome: ExecutionOutcome) -> Optional[str]:
    """Map an execution outcome to reply text, or None for no reply."""
    if outcome.succeeded:
        text = _decode(outcome.raw_output)
        if not text.strip():
            return None
        return code_block(text, truncated=outcome.truncated)
    return format_failure(outcome)


def format_failure(outcome: ExecutionOutcome) -> str:
    if outcome.timed_out:
        headline = "Command failed: timed out"
    elif outcome.exit_code is not None:
        headline = f"Command failed (exit {outcome.exit_code})"
    else:
        headline = "Command failed"

    detail = (outcome.error_detail or "").strip()
    if not detail:
        return headline
    return f"{headline}\n{code_block(detail, limit=MAX_ERROR_CHARS)}"
