"""API routes for the relay."""

from .chat import chat_completions, describe_failure
from .health import health
from .models import list_models

__all__ = [
    "chat_completions",
    "describe_failure",
    "health",
    "list_models",
]
