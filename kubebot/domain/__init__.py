"""Domain layer — pure Python, no framework dependencies."""

from kubebot.domain.models import (
    CommandInvocation,
    CommandRejected,
    ExecutionOutcome,
    OutboundReply,
    RejectionReason,
    ValidatedCommand,
)
from kubebot.domain.policy import Policy
from kubebot.domain.builder import build_invocation
from kubebot.domain.formatting import format_outcome
from kubebot.domain.replies import REPLY_TABLE, match_reply
from kubebot.domain.classifier import Intent, IntentClassifier, IntentKind

__all__ = [
    "CommandInvocation",
    "CommandRejected",
    "ExecutionOutcome",
    "OutboundReply",
    "RejectionReason",
    "ValidatedCommand",
    "Policy",
    "build_invocation",
    "format_outcome",
    "REPLY_TABLE",
    "match_reply",
    "Intent",
    "IntentClassifier",
    "IntentKind",
]
