"""Command policy — verb allow-list and forbidden flag combinations.

Pure Python, no framework dependencies. Validation runs eagerly, before any
process is spawned: a verb that is not allow-listed never reaches kubectl.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, FrozenSet, Optional, Sequence, Set, Tuple

from kubebot.domain.models import CommandRejected, RejectionReason, ValidatedCommand

if TYPE_CHECKING:
    from kubebot.config import PolicyConfig

# prefix, namespace, verb
MIN_TOKENS = 3

_SHORT_GROUP_RE = re.compile(r"^-[A-Za-z]+$")

# kubectl shorthands that consume a value: in "-owide" everything after "o"
# is the value, not more flags
VALUE_SHORTHANDS = frozenset("nolcsL")


def _short_switches(token: str) -> Set[str]:
    """Boolean shorthand letters set by a combined token such as ``-pf``."""
    if not _SHORT_GROUP_RE.match(token):
        return set()
    letters = set()
    for letter in token[1:]:
        if letter in VALUE_SHORTHANDS:
            break
        letters.add(letter)
    return letters


def _flag_present(flag: str, tokens: Sequence[str]) -> bool:
    """True if ``flag`` is set by any token.

    Matches the flag as a token, as ``flag=value``, and, for single-dash
    shorthands, inside a combined group (``-f`` in ``-pf``, ``-it`` in
    ``-itc``).
    """
    short_letters = set(flag[1:]) if _SHORT_GROUP_RE.match(flag) else None
    for tok in tokens:
        if tok == flag or tok.startswith(flag + "="):
            return True
        if short_letters and short_letters <= _short_switches(tok):
            return True
    return False


@dataclass(frozen=True)
class Policy:
    """Immutable, process-wide command policy."""

    trigger_prefix: str
    allowed_verbs: FrozenSet[str]
    forbidden_combinations: FrozenSet[Tuple[str, str]]
    namespace_wildcard: str = "all"
    wildcard_flag: str = "--all-namespaces"

    @classmethod
    def from_config(cls, config: "PolicyConfig") -> "Policy":
        return cls(
            trigger_prefix=config.trigger_prefix,
            allowed_verbs=frozenset(config.allowed_verbs),
            forbidden_combinations=frozenset(config.forbidden_flags),
            namespace_wildcard=config.namespace_wildcard,
            wildcard_flag=config.wildcard_flag,
        )

    def is_triggered(self, tokens: Sequence[str]) -> bool:
        return bool(tokens) and tokens[0] == self.trigger_prefix

    def validate(self, tokens: Sequence[str]) -> Optional[ValidatedCommand]:
        """Check a token sequence against the policy.

        Returns None when the tokens do not start with the trigger prefix
        (the command path does not apply). Raises CommandRejected when they
        do but the command is refused.
        """
        if not self.is_triggered(tokens):
            return None

        if len(tokens) < MIN_TOKENS:
            raise CommandRejected(
                RejectionReason.TOO_FEW_ARGUMENTS,
                f"expected at least {MIN_TOKENS} tokens, got {len(tokens)}",
            )

        namespace, verb = tokens[1], tokens[2]
        rest = tuple(tokens[3:])

        if verb not in self.allowed_verbs:
            raise CommandRejected(RejectionReason.VERB_NOT_ALLOWED, verb)

        for bad_verb, flag in sorted(self.forbidden_combinations):
            if verb == bad_verb and _flag_present(flag, rest):
                raise CommandRejected(RejectionReason.FORBIDDEN_FLAG, f"{verb} {flag}")

        return ValidatedCommand(
            namespace=namespace,
            verb=verb,
            arguments=rest,
            all_namespaces=namespace == self.namespace_wildcard,
            wildcard_flag=self.wildcard_flag,
        )
