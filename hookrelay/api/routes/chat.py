"""OpenAI-compatible chat completions endpoint."""

import asyncio
import json
import logging
from typing import Any, AsyncGenerator, Mapping

import httpx
from fastapi import HTTPException, Request, Response
from fastapi.responses import JSONResponse, StreamingResponse

from ...core.exceptions import (
    InvalidRequestError,
    ModelNotFoundError,
    RelayError,
    StreamTooLargeError,
    WebhookStatusError,
)
from ...core.registry import get_state
from ..auth import verify_bearer_token
from ..context import extract_session_id, extract_user_context, validate_chat_request
from ..masking import mask_body
from ..openai_response import (
    SSE_DONE,
    create_completion_response,
    create_error_payload,
    create_streaming_chunk,
    encode_sse,
    new_completion_id,
)

logger = logging.getLogger("hookrelay")


def describe_failure(exc: BaseException) -> tuple[int, dict[str, Any]]:
    """Map a relay failure to an HTTP status and OpenAI error payload."""
    if isinstance(exc, StreamTooLargeError):
        return 502, create_error_payload(exc.message, "server_error", exc.code)
    if isinstance(exc, WebhookStatusError):
        return 502, create_error_payload(
            f"Webhook returned status {exc.status_code}", "server_error", exc.code
        )
    if isinstance(exc, httpx.TimeoutException):
        return 504, create_error_payload(
            "Webhook request timed out", "server_error", "webhook_timeout"
        )
    if isinstance(exc, httpx.HTTPError):
        return 502, create_error_payload(
            "Webhook request failed", "server_error", "webhook_error"
        )
    return 500, create_error_payload("Internal server error", "server_error")


def _bad_request(exc: InvalidRequestError) -> HTTPException:
    return HTTPException(
        status_code=400,
        detail=create_error_payload(exc.message, "invalid_request_error", exc.code),
    )


async def _read_payload(request: Request) -> Mapping[str, Any]:
    body = await request.body()
    try:
        payload = json.loads(body or b"{}")
    except json.JSONDecodeError as exc:
        logger.error(f"Invalid JSON payload: {exc}")
        raise HTTPException(
            status_code=400,
            detail=create_error_payload(
                "Invalid JSON payload", "invalid_request_error", "invalid_json"
            ),
        ) from exc
    try:
        validate_chat_request(payload)
    except InvalidRequestError as exc:
        logger.error(f"Rejected chat request: {exc.message}")
        raise _bad_request(exc) from exc
    return payload


def _relay_events(
    fragments: AsyncGenerator[str, None], model: str, session_id: str
) -> AsyncGenerator[str, None]:
    completion_id = new_completion_id()

    async def iterator() -> AsyncGenerator[str, None]:
        fragment_count = 0
        try:
            async for fragment in fragments:
                fragment_count += 1
                yield encode_sse(
                    create_streaming_chunk(model, fragment, None, completion_id)
                )
            yield encode_sse(create_streaming_chunk(model, None, "stop", completion_id))
            yield SSE_DONE
            logger.info(
                "Streaming completed for session %s (%d fragments)",
                session_id,
                fragment_count,
            )
        except asyncio.CancelledError:
            logger.info("Stream for session %s cancelled by client", session_id)
            raise
        except (RelayError, httpx.HTTPError) as exc:
            logger.error("Stream error for session %s: %s", session_id, exc)
            _, payload = describe_failure(exc)
            if not isinstance(exc, StreamTooLargeError):
                payload["error"]["message"] = "Error during streaming"
            yield encode_sse(payload)
        finally:
            await fragments.aclose()

    return iterator()


async def chat_completions(request: Request) -> Response:
    """Chat completions endpoint - OpenAI compatible.

    POST /v1/chat/completions
    """
    verify_bearer_token(request)
    state = get_state()
    payload = await _read_payload(request)

    model_name = payload["model"]
    messages = payload["messages"]
    is_stream = bool(payload.get("stream"))

    try:
        model = state.models.get(model_name)
    except ModelNotFoundError as exc:
        logger.warning(exc.message)
        raise HTTPException(
            status_code=404,
            detail=create_error_payload(exc.message, "invalid_request_error", exc.code),
        ) from exc

    session_id, session_source = extract_session_id(
        payload, request.headers, state.settings.headers.session_id
    )
    user = extract_user_context(payload, request.headers, state.settings.headers)

    request_id = getattr(request.state, "request_id", "-")
    logger.info(
        f"[{request_id}] Processing request for model {model_name}, stream={is_stream}"
    )
    if state.settings.log_requests:
        logger.info("[%s] Body: %s", request_id, mask_body(payload))
        logger.info(
            "[%s] Session %s (source: %s), user %s",
            request_id,
            session_id,
            session_source,
            user.user_id,
        )

    if is_stream:
        fragments = state.client.stream_completion(
            model.webhook_url, messages, session_id, user
        )
        return StreamingResponse(
            _relay_events(fragments, model_name, session_id),
            media_type="text/event-stream",
            headers={"Cache-Control": "no-cache", "Connection": "keep-alive"},
        )

    try:
        content = await state.client.complete(
            model.webhook_url, messages, session_id, user
        )
    except (RelayError, httpx.HTTPError) as exc:
        logger.error(f"Error processing request for model {model_name}: {exc}")
        status_code, error_payload = describe_failure(exc)
        return JSONResponse(error_payload, status_code=status_code)

    if state.settings.log_requests:
        logger.info("Non-streaming completed for session %s", session_id)
    return JSONResponse(create_completion_response(model_name, content))
