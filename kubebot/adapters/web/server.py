"""FastAPI status app — health and dispatch counters."""

from dataclasses import asdict
from typing import Dict, List, Optional

from fastapi import FastAPI
from pydantic import BaseModel

from kubebot.adapters.kubectl.executor import KubectlExecutor
from kubebot.config import __version__
from kubebot.dispatcher import Dispatcher
from kubebot.domain.policy import Policy


class HealthResponse(BaseModel):
    status: str


class PolicyView(BaseModel):
    trigger: str
    verbs: List[str]
    forbidden: List[str]
    namespaceWildcard: str


class StatusResponse(BaseModel):
    version: str
    channelId: int
    accepting: bool
    inFlight: int
    runningCommands: int
    dispatcher: Dict[str, int]
    paths: Dict[str, int]
    rejections: Dict[str, int]
    policy: PolicyView


def create_app(
    dispatcher: Dispatcher, policy: Policy, executor: Optional[KubectlExecutor] = None
) -> FastAPI:
    app = FastAPI(title="kubebot status")

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(status="ok" if dispatcher.accepting else "stopping")

    @app.get("/status", response_model=StatusResponse)
    async def status():
        stats = asdict(dispatcher.classifier.stats)
        rejections = stats.pop("rejections_by_reason")
        return StatusResponse(
            version=__version__,
            channelId=dispatcher.channel_id,
            accepting=dispatcher.accepting,
            inFlight=dispatcher.in_flight,
            runningCommands=executor.running if executor else 0,
            dispatcher=dict(dispatcher.counters),
            paths=stats,
            rejections=rejections,
            policy=PolicyView(
                trigger=policy.trigger_prefix,
                verbs=sorted(policy.allowed_verbs),
                forbidden=[f"{verb} {flag}" for verb, flag in sorted(policy.forbidden_combinations)],
                namespaceWildcard=policy.namespace_wildcard,
            ),
        )

    return app
