"""hookrelay - OpenAI-compatible bridge to workflow webhooks.

Relays ``/v1/chat/completions`` requests to n8n-style webhooks and turns the
webhook's streamed JSON objects back into OpenAI chat completions, either as
server-sent events or as one aggregated message.

This module provides:
- ResponseDemultiplexer: turns raw webhook chunks into text fragments
- WebhookClient: posts chat payloads to webhooks
- create_app: FastAPI application factory

Example:
    >>> from hookrelay.main import create_app
    >>> import uvicorn
    >>> uvicorn.run(create_app(), host="0.0.0.0", port=3333)
"""

from .config_loader import load_config
from .core.exceptions import RelayError, StreamTooLargeError, WebhookStatusError
from .core.webhook import UserContext, WebhookClient
from .demux import ResponseDemultiplexer, aggregate, demultiplex
from .logging import logger, setup_logging
from .settings import RelaySettings

__all__ = [
    "RelayError",
    "RelaySettings",
    "ResponseDemultiplexer",
    "StreamTooLargeError",
    "UserContext",
    "WebhookClient",
    "WebhookStatusError",
    "aggregate",
    "demultiplex",
    "load_config",
    "logger",
    "setup_logging",
]
