"""Registry for breaking circular imports.

This module holds the per-process relay state so that routes can import it
without causing circular imports with the main module.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..settings import RelaySettings
    from .models import ModelRegistry
    from .webhook import WebhookClient


@dataclass
class RelayState:
    settings: "RelaySettings"
    models: "ModelRegistry"
    client: "WebhookClient"


# Global relay state - set by main.create_app during initialization
_state: Optional[RelayState] = None


def set_state(state: Optional[RelayState]) -> None:
    """Set the global relay state."""
    global _state
    _state = state


def get_state() -> RelayState:
    """Get the global relay state."""
    if _state is None:
        raise RuntimeError("Relay not initialized. Did you call set_state?")
    return _state


def peek_state() -> Optional[RelayState]:
    """Return the current state without raising when unset."""
    return _state
