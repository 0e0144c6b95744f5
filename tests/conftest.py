"""Pytest configuration and fixtures for testing."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import AsyncIterator, Generator, Iterable

import pytest

# Make the project importable without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))


class ChunkSource:
    """Async chunk source that records how far it was consumed."""

    def __init__(self, chunks: Iterable[bytes], error: Exception | None = None) -> None:
        self.chunks = list(chunks)
        self.error = error
        self.pulled = 0
        self.closed = False

    async def _iterate(self) -> AsyncIterator[bytes]:
        try:
            for chunk in self.chunks:
                self.pulled += 1
                yield chunk
            if self.error is not None:
                raise self.error
        finally:
            self.closed = True

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iterate()


@pytest.fixture
def chunk_source():
    """Factory for ``ChunkSource`` instances."""
    return ChunkSource


@pytest.fixture
def clear_transport_registry() -> Generator[None, None, None]:
    """Clear the webhook transport registry after the test.

    Use this fixture in tests that register fake transports.
    """
    from hookrelay.core.webhook_transport import transports

    yield
    transports.clear()


@pytest.fixture(autouse=True)
def reset_relay_state() -> Generator[None, None, None]:
    """Restore the global relay state after each test."""
    from hookrelay.core.registry import peek_state, set_state

    previous = peek_state()
    yield
    set_state(previous)
