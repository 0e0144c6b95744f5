"""FastAPI application factory for the relay."""

import logging
import socket
from typing import Any, Mapping, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.middleware import REQUEST_ID_HEADER, RequestContextMiddleware
from .api.routes import chat_completions, health, list_models
from .config_loader import load_config
from .core.models import ModelRegistry
from .core.registry import RelayState, set_state
from .core.webhook import WebhookClient
from .settings import RelaySettings

logger = logging.getLogger("hookrelay")


def build_state(config: Mapping[str, Any]) -> RelayState:
    """Resolve settings, models and the webhook client from a config dict."""
    settings = RelaySettings.from_config(config)
    models = ModelRegistry.from_config(config)
    if not len(models):
        logger.warning("No webhook models configured")
    client = WebhookClient.from_settings(settings)
    return RelayState(settings=settings, models=models, client=client)


def create_app(config: Optional[Mapping[str, Any]] = None) -> FastAPI:
    """Create the FastAPI application.

    Args:
        config: Parsed configuration. Loaded from disk when omitted.

    Returns:
        The configured FastAPI application instance.
    """
    if config is None:
        config = load_config()
    state = build_state(config)
    set_state(state)

    app = FastAPI(title="hookrelay")
    app.state.relay = state
    logger.info(f"Relay initialized with {len(state.models)} models")

    app.add_middleware(
        RequestContextMiddleware, log_requests=state.settings.log_requests
    )
    # Added last so it wraps everything, preflight requests included
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=[REQUEST_ID_HEADER],
    )

    @app.on_event("startup")
    async def startup_event():
        settings = state.settings
        logger.info("hookrelay starting up...")
        logger.info("Configured bind address %s:%s", settings.host, settings.port)
        if settings.host == "0.0.0.0":
            hostname = socket.gethostname()
            logger.info("Reachable on local network at http://%s:%s", hostname, settings.port)
        logger.info("Authentication %s", "enabled" if settings.bearer_token else "disabled")
        for model in state.models.list_models():
            logger.info("  - %s", model.name)
        logger.info("hookrelay ready to handle requests")

    app.get("/health")(health)
    app.get("/v1/models")(list_models)
    app.post("/v1/chat/completions")(chat_completions)

    return app


__all__ = ["build_state", "create_app"]
