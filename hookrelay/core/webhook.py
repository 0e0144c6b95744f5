"""HTTP client for workflow webhooks."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, AsyncGenerator, AsyncIterator, Mapping, Optional, Sequence

import httpx

from ..demux import DEFAULT_SEPARATOR, MAX_BUFFER_SIZE, aggregate, demultiplex
from .exceptions import WebhookStatusError
from .webhook_transport import transports

logger = logging.getLogger("hookrelay")

DEFAULT_TIMEOUT = 300.0


@dataclass(frozen=True)
class UserContext:
    user_id: str = "anonymous"
    user_email: Optional[str] = None
    user_name: Optional[str] = None
    user_role: Optional[str] = None


def message_text(message: Mapping[str, Any]) -> str:
    """Return the text of a chat message, joining text parts of list content."""
    content = message.get("content")
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for part in content:
            if isinstance(part, Mapping) and part.get("type") == "text":
                text = part.get("text")
                if isinstance(text, str):
                    parts.append(text)
        return " ".join(parts)
    return ""


def format_httpx_error(exc: Exception, url: str, timeout: float) -> str:
    """Produce a detailed description of an httpx error for logs."""
    parts = [exc.__class__.__name__]
    message = str(exc).strip()
    if message:
        parts.append(message)
    parts.append(f"url={url}")
    if isinstance(exc, httpx.TimeoutException):
        parts.append(f"timeout={timeout}s")
    return "; ".join(parts)


class WebhookClient:
    """Posts chat payloads to webhooks and demultiplexes the streamed reply."""

    def __init__(
        self,
        *,
        bearer_token: str = "",
        timeout: float = DEFAULT_TIMEOUT,
        separator: str = DEFAULT_SEPARATOR,
        max_buffer_size: int = MAX_BUFFER_SIZE,
    ) -> None:
        self.bearer_token = bearer_token
        self.timeout = timeout
        self.separator = separator
        self.max_buffer_size = max_buffer_size

    @classmethod
    def from_settings(cls, settings: Any) -> "WebhookClient":
        return cls(
            bearer_token=settings.webhook_bearer_token,
            timeout=settings.webhook_timeout,
            separator=settings.agent_turn_separator,
            max_buffer_size=settings.max_buffer_size,
        )

    def build_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.bearer_token:
            headers["Authorization"] = f"Bearer {self.bearer_token}"
        return headers

    def build_payload(
        self,
        messages: Sequence[Mapping[str, Any]],
        session_id: str,
        user: UserContext,
    ) -> dict[str, Any]:
        """Build the JSON body the webhook workflow receives."""
        system_message = next(
            (m for m in messages if m.get("role") == "system"), None
        )
        system_prompt = message_text(system_message) if system_message else ""
        current_message = message_text(messages[-1]) if messages else ""

        payload: dict[str, Any] = {
            "systemPrompt": system_prompt,
            "currentMessage": current_message,
            "chatInput": current_message,
            "messages": [dict(m) for m in messages if m.get("role") != "system"],
            "sessionId": session_id,
            "userId": user.user_id,
            # No task detection; always a plain chat turn
            "isTask": False,
            "taskType": None,
        }
        if user.user_email:
            payload["userEmail"] = user.user_email
        if user.user_name:
            payload["userName"] = user.user_name
        if user.user_role:
            payload["userRole"] = user.user_role
        return payload

    async def stream_chunks(
        self, url: str, payload: Mapping[str, Any]
    ) -> AsyncIterator[bytes]:
        """Yield raw response body chunks from the webhook.

        Non-2xx answers raise ``WebhookStatusError`` before any chunk is
        yielded. The HTTP client is closed however iteration ends.
        """
        timeout = httpx.Timeout(self.timeout)
        transport = transports.lookup(url)
        client = httpx.AsyncClient(
            timeout=timeout, transport=transport, follow_redirects=True
        )
        try:
            request = client.build_request(
                "POST", url, headers=self.build_headers(), json=dict(payload)
            )
            logger.debug("Sending webhook request to %s", url)
            resp = await client.send(request, stream=True)
        except httpx.HTTPError as exc:
            logger.error(
                "Failed to reach webhook: %s", format_httpx_error(exc, url, self.timeout)
            )
            await client.aclose()
            raise
        except BaseException:
            await client.aclose()
            raise

        try:
            if not 200 <= resp.status_code < 300:
                body = await resp.aread()
                logger.warning(
                    "Webhook %s returned status %s", url, resp.status_code
                )
                raise WebhookStatusError(resp.status_code, url, body)

            chunk_count = 0
            async for chunk in resp.aiter_bytes():
                if not chunk:
                    continue
                chunk_count += 1
                yield chunk
            logger.debug("Webhook stream from %s ended after %d chunks", url, chunk_count)
        except httpx.HTTPError as exc:
            logger.error(
                "Error while reading webhook stream: %s",
                format_httpx_error(exc, url, self.timeout),
            )
            raise
        finally:
            await resp.aclose()
            await client.aclose()

    def stream_completion(
        self,
        url: str,
        messages: Sequence[Mapping[str, Any]],
        session_id: str,
        user: UserContext,
    ) -> AsyncGenerator[str, None]:
        """Return the fragment stream for one webhook call."""
        payload = self.build_payload(messages, session_id, user)
        return demultiplex(
            self.stream_chunks(url, payload),
            separator=self.separator,
            max_buffer_size=self.max_buffer_size,
        )

    async def complete(
        self,
        url: str,
        messages: Sequence[Mapping[str, Any]],
        session_id: str,
        user: UserContext,
    ) -> str:
        """Call the webhook and return the whole reply as one string.

        Webhooks always stream, so this aggregates the same fragment stream
        progressive relay consumes.
        """
        return await aggregate(self.stream_completion(url, messages, session_id, user))
