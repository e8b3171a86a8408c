"""kubebot — chat-driven kubectl gateway."""

from kubebot.config import __version__, AppConfig, ConfigError
from kubebot.dispatcher import Dispatcher
from kubebot.domain.classifier import IntentClassifier
from kubebot.domain.policy import Policy
from kubebot.ports.inbound import EventKind, InboundMessage

__all__ = [
    "__version__",
    "AppConfig",
    "ConfigError",
    "Dispatcher",
    "IntentClassifier",
    "Policy",
    "EventKind",
    "InboundMessage",
]
