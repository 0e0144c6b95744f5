"""Demultiplexing of a webhook response body into text fragments.

The webhook answers with a stream of concatenated JSON objects, split at
arbitrary byte boundaries by the transport::

    {"type":"begin"}{"type":"item","content":"Hel"}{"type":"item","content":"lo"}{"type":"end"}

``ResponseDemultiplexer`` turns that body into the ordered text fragments
``["Hel", "lo"]``. Fragments are produced lazily, one upstream chunk at a
time, so the rate at which a caller consumes them also gates upstream reads.
Progressive relay forwards each fragment as it arrives; aggregation joins
them with :func:`aggregate`. Both walk the same sequence.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator, AsyncIterable

from .classifier import classify_object, classify_remainder
from .decoder import MAX_BUFFER_SIZE, BufferAccumulator, ChunkDecoder
from .extractor import extract_json_objects
from .separator import DEFAULT_SEPARATOR, TurnSeparatorPolicy

logger = logging.getLogger("hookrelay")


class ResponseDemultiplexer:
    """Per-request state for turning raw chunks into fragments.

    One instance serves exactly one webhook response; it is not restartable.
    """

    def __init__(
        self,
        separator: str = DEFAULT_SEPARATOR,
        max_buffer_size: int = MAX_BUFFER_SIZE,
    ) -> None:
        self.decoder = ChunkDecoder()
        self.buffer = BufferAccumulator(max_buffer_size)
        self.separators = TurnSeparatorPolicy(separator)
        self._started = False
        self._finished = False

    def feed(self, chunk: bytes) -> list[str]:
        """Process one raw chunk and return the fragments it completes."""
        if self._finished:
            raise RuntimeError("demultiplexer already finished")
        self.buffer.append(self.decoder.decode(chunk))
        return self._drain_objects()

    def finish(self) -> list[str]:
        """Flush decoder and buffer at the end of the stream."""
        if self._finished:
            return []
        self._finished = True
        self.buffer.append(self.decoder.flush())
        fragments = self._drain_objects()
        remainder = self.buffer.consume_remainder()
        fragments.extend(self.separators.apply(classify_remainder(remainder)))
        return fragments

    async def iter_fragments(
        self, chunks: AsyncIterable[bytes]
    ) -> AsyncGenerator[str, None]:
        """Yield fragments while pulling chunks from ``chunks`` on demand.

        Errors raised by the chunk source propagate unchanged. If iteration
        stops early the chunk source is closed so the transport is released.
        """
        if self._started:
            raise RuntimeError("fragment stream can only be iterated once")
        self._started = True

        iterator = chunks.__aiter__()
        try:
            async for chunk in iterator:
                for fragment in self.feed(chunk):
                    yield fragment
            for fragment in self.finish():
                yield fragment
        finally:
            aclose = getattr(iterator, "aclose", None)
            if aclose is not None:
                await aclose()

    def _drain_objects(self) -> list[str]:
        if not len(self.buffer):
            return []
        objects, remainder = extract_json_objects(self.buffer.text)
        self.buffer.replace(remainder)
        fragments: list[str] = []
        for obj in objects:
            fragments.extend(self.separators.apply(classify_object(obj)))
        return fragments


def demultiplex(
    chunks: AsyncIterable[bytes],
    *,
    separator: str = DEFAULT_SEPARATOR,
    max_buffer_size: int = MAX_BUFFER_SIZE,
) -> AsyncGenerator[str, None]:
    """Return the fragment stream for one webhook response."""
    demux = ResponseDemultiplexer(separator=separator, max_buffer_size=max_buffer_size)
    return demux.iter_fragments(chunks)


async def aggregate(fragments: AsyncIterable[str]) -> str:
    """Consume a fragment stream to exhaustion and join it."""
    parts: list[str] = []
    async for fragment in fragments:
        parts.append(fragment)
    return "".join(parts)
