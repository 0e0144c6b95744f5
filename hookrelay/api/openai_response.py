"""OpenAI-compatible response envelopes and SSE framing."""

from __future__ import annotations

import json
import time
import uuid
from typing import Any, Optional

SSE_DONE = "data: [DONE]\n\n"


def new_completion_id() -> str:
    return f"chatcmpl-{uuid.uuid4()}"


def create_streaming_chunk(
    model: str,
    content: Optional[str],
    finish_reason: Optional[str] = None,
    completion_id: Optional[str] = None,
) -> dict[str, Any]:
    """Build one ``chat.completion.chunk`` object."""
    return {
        "id": completion_id or new_completion_id(),
        "object": "chat.completion.chunk",
        "created": int(time.time()),
        "model": model,
        "choices": [
            {
                "index": 0,
                "delta": {"content": content} if content else {},
                "finish_reason": finish_reason,
            }
        ],
    }


def create_completion_response(model: str, content: str) -> dict[str, Any]:
    """Build a non-streaming ``chat.completion`` object."""
    return {
        "id": new_completion_id(),
        "object": "chat.completion",
        "created": int(time.time()),
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {
            "prompt_tokens": 0,
            "completion_tokens": 0,
            "total_tokens": 0,
        },
    }


def create_error_payload(
    message: str, error_type: str = "server_error", code: Optional[str] = None
) -> dict[str, Any]:
    error: dict[str, Any] = {"message": message, "type": error_type}
    if code:
        error["code"] = code
    return {"error": error}


def encode_sse(payload: Any) -> str:
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"
