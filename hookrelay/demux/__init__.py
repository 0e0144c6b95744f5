"""Webhook response demultiplexer.

Pipeline per upstream chunk: ChunkDecoder -> BufferAccumulator ->
extract_json_objects -> classify_object -> TurnSeparatorPolicy.
"""

from .classifier import (
    CONTENT_FIELDS,
    MARKER_TYPES,
    ClassifiedFragment,
    classify_object,
    classify_remainder,
    extract_content,
)
from .decoder import MAX_BUFFER_SIZE, BufferAccumulator, ChunkDecoder
from .extractor import extract_json_objects
from .separator import DEFAULT_SEPARATOR, TurnSeparatorPolicy
from .stream import ResponseDemultiplexer, aggregate, demultiplex

__all__ = [
    "BufferAccumulator",
    "CONTENT_FIELDS",
    "ChunkDecoder",
    "ClassifiedFragment",
    "DEFAULT_SEPARATOR",
    "MARKER_TYPES",
    "MAX_BUFFER_SIZE",
    "ResponseDemultiplexer",
    "TurnSeparatorPolicy",
    "aggregate",
    "classify_object",
    "classify_remainder",
    "demultiplex",
    "extract_content",
    "extract_json_objects",
]
