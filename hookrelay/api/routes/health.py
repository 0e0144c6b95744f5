"""Health check endpoint."""

import time

from ...core.registry import get_state

STARTED_AT = time.monotonic()


async def health() -> dict:
    """GET /health - unauthenticated liveness check."""
    state = get_state()
    return {
        "status": "ok",
        "models": len(state.models),
        "uptime": time.monotonic() - STARTED_AT,
        "logging": state.settings.log_requests,
    }
