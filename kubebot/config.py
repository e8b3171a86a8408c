"""Configuration loaded from the environment (and .env)."""

__version__ = "0.1.0"

import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

DEFAULT_KUBECTL_PATH = "/usr/local/bin/kubectl"
DEFAULT_TRIGGER = "!k"
DEFAULT_NAMESPACE_WILDCARD = "all"
DEFAULT_WILDCARD_FLAG = "--all-namespaces"

DEFAULT_ALLOWED_VERBS = (
    "get",
    "describe",
    "logs",
    "top",
    "explain",
    "version",
    "api-resources",
    "cluster-info",
    "rollout",
    "scale",
    "exec",
)

# Streaming or interactive sessions the executor cannot keep open
DEFAULT_FORBIDDEN_FLAGS = (
    ("logs", "-f"),
    ("logs", "--follow"),
    ("exec", "-it"),
    ("exec", "-ti"),
    ("exec", "-i"),
    ("exec", "-t"),
    ("exec", "--stdin"),
    ("exec", "--tty"),
    ("get", "-w"),
    ("get", "--watch"),
    ("get", "--watch-only"),
)


class ConfigError(Exception):
    """Raised when required configuration is missing or malformed."""


def _truthy(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def _split_list(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_forbidden_flags(value: str) -> Tuple[Tuple[str, str], ...]:
    """Parse ``verb:flag,verb:flag`` into (verb, flag) pairs."""
    pairs = []
    for item in _split_list(value):
        verb, sep, flag = item.partition(":")
        if not sep or not verb.strip() or not flag.strip():
            raise ConfigError(f"Invalid forbidden flag entry {item!r} (expected verb:flag)")
        pairs.append((verb.strip(), flag.strip()))
    return tuple(pairs)


def _int(env: Mapping[str, str], name: str, default: int) -> int:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")


@dataclass
class PolicyConfig:
    trigger_prefix: str = DEFAULT_TRIGGER
    allowed_verbs: Tuple[str, ...] = DEFAULT_ALLOWED_VERBS
    forbidden_flags: Tuple[Tuple[str, str], ...] = DEFAULT_FORBIDDEN_FLAGS
    namespace_wildcard: str = DEFAULT_NAMESPACE_WILDCARD
    wildcard_flag: str = DEFAULT_WILDCARD_FLAG


@dataclass
class ExecutorConfig:
    kubectl_path: str = DEFAULT_KUBECTL_PATH
    timeout_seconds: float = 30.0
    max_concurrent: int = 4
    max_output_bytes: int = 65536


@dataclass
class DiscordConfig:
    token: str = ""
    channel_id: int = 0


@dataclass
class AppConfig:
    """Typed configuration for the gateway."""

    bot_name: str = "kubebot"
    announce_rejections: bool = False
    shutdown_grace_seconds: float = 5.0
    status_port: int = 0
    discord: DiscordConfig = field(default_factory=DiscordConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    executor: ExecutorConfig = field(default_factory=ExecutorConfig)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "AppConfig":
        """Create AppConfig from environment variables.

        Raises ConfigError rather than returning a partially filled config,
        so the launcher never runs with an incomplete policy.
        """
        env: Mapping[str, str] = os.environ if environ is None else environ

        token = env.get("DISCORD_BOT_TOKEN", "").strip()
        if not token:
            raise ConfigError("DISCORD_BOT_TOKEN is not set")
        channel_id = _int(env, "DISCORD_CHANNEL_ID", 0)
        if not channel_id:
            raise ConfigError("DISCORD_CHANNEL_ID is not set")

        trigger = env.get("KUBE_TRIGGER", DEFAULT_TRIGGER).strip()
        if not trigger:
            raise ConfigError("KUBE_TRIGGER must not be empty")

        verbs_raw = env.get("KUBE_ALLOWED_VERBS")
        verbs = tuple(_split_list(verbs_raw)) if verbs_raw is not None else DEFAULT_ALLOWED_VERBS
        if not verbs:
            raise ConfigError("KUBE_ALLOWED_VERBS must list at least one verb")

        forbidden_raw = env.get("KUBE_FORBIDDEN_FLAGS")
        forbidden = (
            parse_forbidden_flags(forbidden_raw)
            if forbidden_raw is not None
            else DEFAULT_FORBIDDEN_FLAGS
        )

        wildcard = env.get("KUBE_NAMESPACE_WILDCARD", DEFAULT_NAMESPACE_WILDCARD).strip()
        if not wildcard:
            raise ConfigError("KUBE_NAMESPACE_WILDCARD must not be empty")

        max_concurrent = _int(env, "MAX_CONCURRENT_COMMANDS", 4)
        if max_concurrent < 1:
            raise ConfigError("MAX_CONCURRENT_COMMANDS must be at least 1")
        timeout = _float(env, "COMMAND_TIMEOUT_SECONDS", 30.0)
        if timeout <= 0:
            raise ConfigError("COMMAND_TIMEOUT_SECONDS must be positive")
        max_output = _int(env, "MAX_OUTPUT_BYTES", 65536)
        if max_output < 1:
            raise ConfigError("MAX_OUTPUT_BYTES must be at least 1")

        return cls(
            bot_name=env.get("BOT_NAME", "kubebot").strip() or "kubebot",
            announce_rejections=_truthy(env.get("ANNOUNCE_REJECTIONS", "false")),
            shutdown_grace_seconds=_float(env, "SHUTDOWN_GRACE_SECONDS", 5.0),
            status_port=_int(env, "STATUS_PORT", 0),
            discord=DiscordConfig(token=token, channel_id=channel_id),
            policy=PolicyConfig(
                trigger_prefix=trigger,
                allowed_verbs=verbs,
                forbidden_flags=forbidden,
                namespace_wildcard=wildcard,
            ),
            executor=ExecutorConfig(
                kubectl_path=env.get("KUBECTL_PATH", DEFAULT_KUBECTL_PATH).strip()
                or DEFAULT_KUBECTL_PATH,
                timeout_seconds=timeout,
                max_concurrent=max_concurrent,
                max_output_bytes=max_output,
            ),
        )


def policy_summary(config: PolicyConfig) -> Dict[str, object]:
    """Plain dict view of the policy settings, for logging at startup."""
    return {
        "trigger": config.trigger_prefix,
        "verbs": list(config.allowed_verbs),
        "forbidden": [f"{verb} {flag}" for verb, flag in config.forbidden_flags],
        "wildcard": config.namespace_wildcard,
    }
