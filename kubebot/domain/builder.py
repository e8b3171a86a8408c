"""Command builder — turns a ValidatedCommand into an argument vector."""

from kubebot.domain.models import CommandInvocation, ValidatedCommand

NAMESPACE_FLAG = "-n"


def build_invocation(validated: ValidatedCommand, executable: str) -> CommandInvocation:
    """Build the kubectl argument vector for a validated command.

    The trigger prefix is replaced by ``executable``; the namespace becomes a
    ``-n`` scope, or the wildcard flag when every namespace was requested.
    Tokens are passed through as separate arguments and never re-joined.
    """
    if not isinstance(validated, ValidatedCommand):
        raise TypeError(f"build_invocation needs a ValidatedCommand, got {type(validated).__name__}")

    if validated.all_namespaces:
        args = (validated.verb,) + validated.arguments + (validated.wildcard_flag,)
    else:
        args = (NAMESPACE_FLAG, validated.namespace, validated.verb) + validated.arguments
    return CommandInvocation(executable=executable, arguments=args)
