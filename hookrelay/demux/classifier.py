"""Classification of webhook stream objects into fragments."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Literal, Optional

logger = logging.getLogger("hookrelay")

FragmentKind = Literal["content", "turn_end", "ignored", "plain_text", "dropped"]

# Marker types n8n-style agents emit around their output
MARKER_TYPES = frozenset({"begin", "end", "error", "metadata"})
TURN_END_TYPE = "end"

# Checked in order; the first non-empty string wins
CONTENT_FIELDS = ("content", "text", "output", "message")


@dataclass(frozen=True)
class ClassifiedFragment:
    kind: FragmentKind
    text: Optional[str] = None

    @property
    def has_text(self) -> bool:
        return self.kind in ("content", "plain_text")


IGNORED = ClassifiedFragment("ignored")
DROPPED = ClassifiedFragment("dropped")
TURN_END = ClassifiedFragment("turn_end")


def _to_utf8(value: str) -> str:
    # JSON escapes can produce lone surrogates, which cannot be encoded
    return value.encode("utf-8", "replace").decode("utf-8")


def extract_content(data: dict[str, Any]) -> Optional[str]:
    for field_name in CONTENT_FIELDS:
        value = data.get(field_name)
        if isinstance(value, str) and value:
            return _to_utf8(value)
    return None


def _classify_unparsed(text: str) -> ClassifiedFragment:
    stripped = text.strip()
    if not stripped:
        return IGNORED
    if stripped.startswith("{"):
        logger.debug("Dropping malformed JSON object from webhook: %.200s", stripped)
        return DROPPED
    return ClassifiedFragment("plain_text", stripped)


def classify_object(text: str) -> ClassifiedFragment:
    """Classify one extracted JSON object string.

    ``{"type": "end"}`` marks the end of an agent turn; the other marker types
    carry no output. Without a marker type, the first non-empty content field
    becomes the fragment text.
    """
    try:
        data = json.loads(text)
    except RecursionError:
        logger.debug("Dropping over-nested JSON object from webhook (%d chars)", len(text))
        return DROPPED
    except ValueError:
        return _classify_unparsed(text)

    if not isinstance(data, dict):
        return IGNORED

    marker = data.get("type")
    if isinstance(marker, str) and marker in MARKER_TYPES:
        if marker == TURN_END_TYPE:
            return TURN_END
        return IGNORED

    content = extract_content(data)
    if content is None:
        return IGNORED
    return ClassifiedFragment("content", content)


def classify_remainder(text: str) -> ClassifiedFragment:
    """Classify the text left in the buffer once the stream has ended.

    Any complete object would already have been extracted, so a remainder
    starting with ``{`` is a truncated object and gets dropped.
    """
    return _classify_unparsed(text)
