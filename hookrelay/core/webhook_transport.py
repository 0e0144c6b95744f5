"""Per-origin httpx transport overrides for webhook calls.

Tests and in-process setups route a webhook origin (scheme, host and port) to
a fake transport instead of the network. Lookups that find nothing fall back
to the default httpx transport.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional
from urllib.parse import urlparse

import httpx

logger = logging.getLogger("hookrelay")


def webhook_origin(url: str) -> Optional[str]:
    """Return ``scheme://netloc`` for a webhook URL, lowercased."""
    parsed = urlparse((url or "").strip())
    if not parsed.scheme or not parsed.netloc:
        return None
    return f"{parsed.scheme.lower()}://{parsed.netloc.lower()}"


class WebhookTransportRegistry:
    def __init__(self) -> None:
        self._transports: dict[str, httpx.AsyncBaseTransport] = {}

    def __len__(self) -> int:
        return len(self._transports)

    def register(self, url: str, transport: httpx.AsyncBaseTransport) -> None:
        origin = webhook_origin(url)
        if origin is None:
            raise ValueError(f"Cannot route webhook URL without scheme and host: {url!r}")
        self._transports[origin] = transport
        logger.debug("Routing webhook origin %s to %s", origin, type(transport).__name__)

    def unregister(self, url: str) -> None:
        origin = webhook_origin(url)
        if origin is not None:
            self._transports.pop(origin, None)

    def clear(self) -> None:
        self._transports.clear()

    def lookup(self, url: str) -> Optional[httpx.AsyncBaseTransport]:
        origin = webhook_origin(url)
        if origin is None:
            return None
        return self._transports.get(origin)

    @contextmanager
    def override(
        self, url: str, transport: httpx.AsyncBaseTransport
    ) -> Iterator[httpx.AsyncBaseTransport]:
        """Route ``url``'s origin to ``transport`` for the duration of the block."""
        previous = self.lookup(url)
        self.register(url, transport)
        try:
            yield transport
        finally:
            if previous is None:
                self.unregister(url)
            else:
                self.register(url, previous)


transports = WebhookTransportRegistry()
