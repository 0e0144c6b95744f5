"""Models listing endpoint - OpenAI compatible."""

import logging

from fastapi import Request

from ...core.registry import get_state
from ..auth import verify_bearer_token

logger = logging.getLogger("hookrelay")


async def list_models(request: Request) -> dict:
    """List configured webhook models in OpenAI API format.

    GET /v1/models
    """
    verify_bearer_token(request)
    logger.info("Received models list request")
    models = get_state().models.list_models()
    return {
        "object": "list",
        "data": [model.to_openai() for model in models],
    }
