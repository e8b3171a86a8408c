"""Tests for the typed AppConfig dataclass."""

import pytest

from kubebot.config import (
    DEFAULT_ALLOWED_VERBS,
    DEFAULT_FORBIDDEN_FLAGS,
    AppConfig,
    ConfigError,
    DiscordConfig,
    ExecutorConfig,
    PolicyConfig,
    parse_forbidden_flags,
    policy_summary,
)

BASE_ENV = {
    "DISCORD_BOT_TOKEN": "token-abc",
    "DISCORD_CHANNEL_ID": "123456",
}


def _env(**overrides):
    env = dict(BASE_ENV)
    env.update(overrides)
    return env


class TestDefaults:
    def test_policy_defaults(self):
        c = PolicyConfig()
        assert c.trigger_prefix == "!k"
        assert c.namespace_wildcard == "all"
        assert c.wildcard_flag == "--all-namespaces"
        assert "get" in c.allowed_verbs
        assert ("logs", "-f") in c.forbidden_flags
        assert ("exec", "-it") in c.forbidden_flags

    def test_executor_defaults(self):
        c = ExecutorConfig()
        assert c.kubectl_path == "/usr/local/bin/kubectl"
        assert c.timeout_seconds == 30.0
        assert c.max_concurrent == 4
        assert c.max_output_bytes == 65536

    def test_app_defaults(self):
        c = AppConfig()
        assert c.bot_name == "kubebot"
        assert c.announce_rejections is False
        assert c.status_port == 0
        assert isinstance(c.discord, DiscordConfig)
        assert isinstance(c.policy, PolicyConfig)


class TestFromEnv:
    def test_minimal(self):
        c = AppConfig.from_env(BASE_ENV)
        assert c.discord.token == "token-abc"
        assert c.discord.channel_id == 123456
        assert c.policy.allowed_verbs == DEFAULT_ALLOWED_VERBS
        assert c.policy.forbidden_flags == DEFAULT_FORBIDDEN_FLAGS

    def test_overrides(self):
        c = AppConfig.from_env(
            _env(
                BOT_NAME="opsbot",
                KUBECTL_PATH="/opt/bin/kubectl",
                KUBE_TRIGGER="!kube",
                KUBE_ALLOWED_VERBS="get, describe ,top",
                KUBE_FORBIDDEN_FLAGS="logs:-f,exec:-it",
                KUBE_NAMESPACE_WILDCARD="*",
                COMMAND_TIMEOUT_SECONDS="12.5",
                MAX_CONCURRENT_COMMANDS="2",
                SHUTDOWN_GRACE_SECONDS="1",
                ANNOUNCE_REJECTIONS="yes",
                STATUS_PORT="8080",
            )
        )
        assert c.bot_name == "opsbot"
        assert c.executor.kubectl_path == "/opt/bin/kubectl"
        assert c.executor.timeout_seconds == 12.5
        assert c.executor.max_concurrent == 2
        assert c.policy.trigger_prefix == "!kube"
        assert c.policy.allowed_verbs == ("get", "describe", "top")
        assert c.policy.forbidden_flags == (("logs", "-f"), ("exec", "-it"))
        assert c.policy.namespace_wildcard == "*"
        assert c.shutdown_grace_seconds == 1.0
        assert c.announce_rejections is True
        assert c.status_port == 8080

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("DISCORD_BOT_TOKEN", "from-os")
        monkeypatch.setenv("DISCORD_CHANNEL_ID", "77")
        c = AppConfig.from_env()
        assert c.discord.token == "from-os"
        assert c.discord.channel_id == 77

    def test_empty_forbidden_list_allowed(self):
        c = AppConfig.from_env(_env(KUBE_FORBIDDEN_FLAGS=""))
        assert c.policy.forbidden_flags == ()


class TestStartupErrors:
    def test_missing_token(self):
        with pytest.raises(ConfigError, match="DISCORD_BOT_TOKEN"):
            AppConfig.from_env({"DISCORD_CHANNEL_ID": "1"})

    def test_missing_channel(self):
        with pytest.raises(ConfigError, match="DISCORD_CHANNEL_ID"):
            AppConfig.from_env({"DISCORD_BOT_TOKEN": "t"})

    def test_bad_channel(self):
        with pytest.raises(ConfigError, match="integer"):
            AppConfig.from_env(_env(DISCORD_CHANNEL_ID="general"))

    def test_empty_verbs(self):
        with pytest.raises(ConfigError, match="KUBE_ALLOWED_VERBS"):
            AppConfig.from_env(_env(KUBE_ALLOWED_VERBS=" , "))

    def test_empty_trigger(self):
        with pytest.raises(ConfigError, match="KUBE_TRIGGER"):
            AppConfig.from_env(_env(KUBE_TRIGGER="  "))

    def test_bad_forbidden_entry(self):
        with pytest.raises(ConfigError, match="verb:flag"):
            AppConfig.from_env(_env(KUBE_FORBIDDEN_FLAGS="logs-f"))

    def test_bad_timeout(self):
        with pytest.raises(ConfigError):
            AppConfig.from_env(_env(COMMAND_TIMEOUT_SECONDS="0"))

    def test_bad_pool_size(self):
        with pytest.raises(ConfigError):
            AppConfig.from_env(_env(MAX_CONCURRENT_COMMANDS="0"))

    def test_bad_output_cap(self):
        with pytest.raises(ConfigError, match="MAX_OUTPUT_BYTES"):
            AppConfig.from_env(_env(MAX_OUTPUT_BYTES="0"))

    def test_output_cap_override(self):
        config = AppConfig.from_env(_env(MAX_OUTPUT_BYTES="2048"))
        assert config.executor.max_output_bytes == 2048


def test_parse_forbidden_flags():
    assert parse_forbidden_flags("logs:-f, exec : -it") == (("logs", "-f"), ("exec", "-it"))


def test_policy_summary():
    summary = policy_summary(PolicyConfig(allowed_verbs=("get",), forbidden_flags=(("logs", "-f"),)))
    assert summary == {
        "trigger": "!k",
        "verbs": ["get"],
        "forbidden": ["logs -f"],
        "wildcard": "all",
    }
