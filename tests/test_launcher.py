"""Tests for launcher wiring."""

import asyncio

import pytest

from kubebot import launcher
from kubebot.adapters.kubectl.executor import KubectlExecutor
from kubebot.config import AppConfig, DiscordConfig, ExecutorConfig


def _config(**kwargs) -> AppConfig:
    return AppConfig(
        bot_name="opsbot",
        discord=DiscordConfig(token="t", channel_id=321),
        executor=ExecutorConfig(kubectl_path="/opt/kubectl", timeout_seconds=9, max_concurrent=2,
                                max_output_bytes=4096),
        **kwargs,
    )


def test_build_dispatcher_wires_chain():
    dispatcher, policy, executor = launcher.build_dispatcher(_config(announce_rejections=True))
    assert dispatcher.channel_id == 321
    assert dispatcher.bot_name == "opsbot"
    assert dispatcher.classifier.policy is policy
    runner = dispatcher.classifier._runner
    assert isinstance(runner, KubectlExecutor)
    assert runner is executor
    assert runner.timeout == 9
    assert runner.max_concurrent == 2
    assert runner.max_output_bytes == 4096
    assert dispatcher.classifier._executable == "/opt/kubectl"
    assert dispatcher.classifier._announce_rejections is True


def test_main_exits_on_config_error(monkeypatch, capsys):
    monkeypatch.delenv("DISCORD_BOT_TOKEN", raising=False)
    monkeypatch.setenv("DISCORD_CHANNEL_ID", "1")
    with pytest.raises(SystemExit) as exc:
        launcher.main()
    assert exc.value.code == 1
    assert "DISCORD_BOT_TOKEN" in capsys.readouterr().err


@pytest.mark.asyncio
async def test_spawn_holds_task_until_done():
    tasks = set()
    release = asyncio.Event()

    async def work():
        await release.wait()
        return "stopped"

    task = launcher._spawn(work(), tasks)
    assert task in tasks
    release.set()
    assert await task == "stopped"
    await asyncio.sleep(0)  # done callbacks run on the next loop iteration
    assert tasks == set()
