"""Domain data models — pure Python dataclasses."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class RejectionReason(str, Enum):
    TOO_FEW_ARGUMENTS = "TooFewArguments"
    VERB_NOT_ALLOWED = "VerbNotAllowed"
    FORBIDDEN_FLAG = "ForbiddenFlag"


class CommandRejected(Exception):
    """Raised by the policy when a trigger-prefixed command is refused."""

    def __init__(self, reason: RejectionReason, detail: str = ""):
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason.value}: {detail}" if detail else reason.value)


@dataclass(frozen=True)
class ValidatedCommand:
    """Tokens that passed every policy check."""

    namespace: str
    verb: str
    arguments: Tuple[str, ...] = ()
    all_namespaces: bool = False
    wildcard_flag: str = "--all-namespaces"


@dataclass(frozen=True)
class CommandInvocation:
    """Ready-to-run argument vector."""

    executable: str
    arguments: Tuple[str, ...] = ()

    @property
    def argv(self) -> Tuple[str, ...]:
        return (self.executable,) + self.arguments


@dataclass
class ExecutionOutcome:
    """Result of running one CommandInvocation."""

    succeeded: bool
    raw_output: bytes = b""
    error_detail: Optional[str] = None
    exit_code: Optional[int] = None
    timed_out: bool = False
    truncated: bool = False


@dataclass(frozen=True)
class OutboundReply:
    text: str
    in_reply_to_message_id: Optional[int] = None


@dataclass
class PathStats:
    """Counters per classification outcome, exposed on /status."""

    command: int = 0
    canned: int = 0
    ignored: int = 0
    rejected: int = 0
    failed: int = 0
    timed_out: int = 0
    rejections_by_reason: dict = field(default_factory=dict)
