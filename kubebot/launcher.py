"""Launcher — wires config, policy, executor and Discord client together."""

import asyncio
import contextlib
import signal
import sys
from typing import Awaitable, Optional, Set, Tuple

import uvicorn

from kubebot.adapters.discord.adapter import DiscordGatewayClient
from kubebot.adapters.kubectl.executor import KubectlExecutor
from kubebot.adapters.web.server import create_app
from kubebot.config import AppConfig, ConfigError, policy_summary
from kubebot.dispatcher import Dispatcher
from kubebot.domain.classifier import IntentClassifier
from kubebot.domain.policy import Policy


def _log(msg: str):
    print(msg, file=sys.stderr)


class _StatusServer(uvicorn.Server):
    """uvicorn server that leaves signal handling to the launcher."""

    def install_signal_handlers(self) -> None:
        pass

    @contextlib.contextmanager
    def capture_signals(self):
        yield


def _spawn(coro: Awaitable, tasks: Set[asyncio.Task]) -> asyncio.Task:
    """Schedule ``coro`` and hold a reference to it until it finishes."""
    task = asyncio.ensure_future(coro)
    tasks.add(task)
    task.add_done_callback(tasks.discard)
    return task


def build_dispatcher(config: AppConfig) -> Tuple[Dispatcher, Policy, KubectlExecutor]:
    """Build the policy -> executor -> classifier -> dispatcher chain."""
    policy = Policy.from_config(config.policy)
    executor = KubectlExecutor(
        timeout=config.executor.timeout_seconds,
        max_concurrent=config.executor.max_concurrent,
        max_output_bytes=config.executor.max_output_bytes,
    )
    classifier = IntentClassifier(
        policy,
        executor,
        executable=config.executor.kubectl_path,
        announce_rejections=config.announce_rejections,
    )
    dispatcher = Dispatcher(
        channel_id=config.discord.channel_id,
        classifier=classifier,
        bot_name=config.bot_name,
    )
    return dispatcher, policy, executor


async def run(config: AppConfig) -> None:
    """Run the Discord client (and status app, if enabled) until stopped."""
    dispatcher, policy, executor = build_dispatcher(config)
    client = DiscordGatewayClient(dispatcher)
    _log(f"[{config.bot_name}] policy: {policy_summary(config.policy)}")

    status_server: Optional[_StatusServer] = None
    if config.status_port:
        status_server = _StatusServer(
            uvicorn.Config(
                create_app(dispatcher, policy, executor),
                host="0.0.0.0",
                port=config.status_port,
                log_level="warning",
            )
        )

    stopping = asyncio.Event()

    async def _stop():
        if stopping.is_set():
            return
        stopping.set()
        _log(f"[{config.bot_name}] shutting down")
        await dispatcher.shutdown(config.shutdown_grace_seconds)
        if status_server:
            status_server.should_exit = True
        await client.close()

    stop_tasks: Set[asyncio.Task] = set()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, lambda: _spawn(_stop(), stop_tasks))

    async def _run_client():
        try:
            await client.start(config.discord.token)
        except Exception as e:
            _log(f"[{config.bot_name}] Discord client crashed: {e}")
            if status_server:
                status_server.should_exit = True
            raise

    jobs = [_run_client()]
    if status_server:
        _log(f"[{config.bot_name}] status app on port {config.status_port}")
        jobs.append(status_server.serve())
    await asyncio.gather(*jobs)


def main() -> None:
    try:
        config = AppConfig.from_env()
    except ConfigError as e:
        _log(f"Configuration error: {e}")
        sys.exit(1)

    try:
        asyncio.run(run(config))
    except Exception as e:
        _log(f"Fatal: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
