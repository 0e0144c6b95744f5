"""Core module initialization.

``webhook`` is not re-exported here: it depends on ``hookrelay.demux``,
which itself imports the exceptions below.
"""

from .exceptions import (
    ConfigurationError,
    InvalidRequestError,
    ModelNotFoundError,
    RelayError,
    StreamTooLargeError,
    WebhookStatusError,
)
from .models import ModelRegistry, WebhookModel
from .registry import RelayState, get_state, set_state

__all__ = [
    "ConfigurationError",
    "InvalidRequestError",
    "ModelNotFoundError",
    "ModelRegistry",
    "RelayError",
    "RelayState",
    "StreamTooLargeError",
    "WebhookModel",
    "WebhookStatusError",
    "get_state",
    "set_state",
]
