"""Testing utilities for in-process relay simulations."""

from .fake_webhook import FakeWebhook, WebhookResponse, build_agent_turns
from .relay_harness import DEFAULT_WEBHOOK_BASE, RelayHarness, build_relay_config

__all__ = [
    "DEFAULT_WEBHOOK_BASE",
    "FakeWebhook",
    "RelayHarness",
    "WebhookResponse",
    "build_agent_turns",
    "build_relay_config",
]
