"""Bearer token authentication for client requests."""

from __future__ import annotations

import hmac
import logging

from fastapi import HTTPException, Request

from ..core.registry import get_state

logger = logging.getLogger("hookrelay")


def _auth_error(message: str, code: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={
            "error": {
                "message": message,
                "type": "authentication_error",
                "code": code,
            }
        },
    )


def verify_bearer_token(request: Request) -> None:
    """Reject the request unless it carries the configured bearer token.

    Authentication is disabled when no token is configured.

    Raises:
        HTTPException: 401 for a missing or wrong token.
    """
    expected = get_state().settings.bearer_token
    if not expected:
        return

    auth_header = request.headers.get("Authorization", "")
    if not auth_header.startswith("Bearer "):
        logger.warning("Request rejected: missing bearer token")
        raise _auth_error("Unauthorized", "missing_api_key")

    provided = auth_header[len("Bearer "):]
    if not hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8")):
        logger.warning("Request rejected: invalid bearer token")
        raise _auth_error("Invalid token", "invalid_api_key")
