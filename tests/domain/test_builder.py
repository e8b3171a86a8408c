"""Tests for domain/builder.py."""

import pytest

from kubebot.config import PolicyConfig
from kubebot.domain.builder import build_invocation
from kubebot.domain.models import CommandInvocation, ValidatedCommand
from kubebot.domain.policy import Policy

KUBECTL = "/usr/local/bin/kubectl"


@pytest.fixture
def policy():
    return Policy.from_config(PolicyConfig())


def test_namespace_scope(policy):
    inv = build_invocation(policy.validate(["!k", "prod", "get", "pods"]), KUBECTL)
    assert inv == CommandInvocation(executable=KUBECTL, arguments=("-n", "prod", "get", "pods"))
    assert inv.argv == (KUBECTL, "-n", "prod", "get", "pods")


def test_wildcard_expands_to_all_namespaces(policy):
    inv = build_invocation(policy.validate(["!k", "all", "get", "pods"]), KUBECTL)
    assert "--all-namespaces" in inv.arguments
    assert inv.arguments[-1] == "--all-namespaces"
    # no scoping to a namespace literally named "all"
    assert "-n" not in inv.arguments
    assert "all" not in inv.arguments
    assert inv.arguments == ("get", "pods", "--all-namespaces")


def test_tokens_are_separate_arguments(policy):
    # shell metacharacters stay inside one argument, nothing is re-split
    tokens = ["!k", "prod", "get", "pods;rm", "-l", "app=web&&id"]
    inv = build_invocation(policy.validate(tokens), KUBECTL)
    assert inv.arguments == ("-n", "prod", "get", "pods;rm", "-l", "app=web&&id")


def test_trigger_replaced_by_executable(policy):
    inv = build_invocation(policy.validate(["!k", "prod", "version"]), "kubectl")
    assert inv.executable == "kubectl"
    assert "!k" not in inv.argv


def test_refuses_unvalidated_input():
    with pytest.raises(TypeError):
        build_invocation(["!k", "prod", "delete", "pods"], KUBECTL)


def test_direct_validated_command():
    validated = ValidatedCommand(namespace="kube-system", verb="top", arguments=("nodes",))
    inv = build_invocation(validated, KUBECTL)
    assert inv.arguments == ("-n", "kube-system", "top", "nodes")
