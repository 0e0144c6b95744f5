"""Byte decoding and bounded text buffering for webhook streams."""

from __future__ import annotations

import codecs
import logging

from ..core.exceptions import StreamTooLargeError

logger = logging.getLogger("hookrelay")

MAX_BUFFER_SIZE = 10 * 1024 * 1024


class ChunkDecoder:
    """UTF-8 decoder that carries split multi-byte sequences across chunks."""

    def __init__(self, encoding: str = "utf-8") -> None:
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")

    def decode(self, chunk: bytes) -> str:
        if not chunk:
            return ""
        return self._decoder.decode(chunk)

    def flush(self) -> str:
        """Return any held-back bytes, replacing an incomplete sequence."""
        text = self._decoder.decode(b"", final=True)
        self._decoder.reset()
        return text


class BufferAccumulator:
    """Pending text buffer with a hard size ceiling."""

    def __init__(self, max_size: int = MAX_BUFFER_SIZE) -> None:
        self.max_size = max_size
        self._buffer = ""

    def __len__(self) -> int:
        return len(self._buffer)

    @property
    def text(self) -> str:
        return self._buffer

    def append(self, text: str) -> None:
        if not text:
            return
        self._buffer += text
        if len(self._buffer) > self.max_size:
            logger.error(
                "Webhook response buffer reached %d chars (limit %d)",
                len(self._buffer),
                self.max_size,
            )
            self._buffer = ""
            raise StreamTooLargeError(self.max_size)

    def replace(self, text: str) -> None:
        self._buffer = text

    def consume_remainder(self) -> str:
        remainder = self._buffer
        self._buffer = ""
        return remainder
