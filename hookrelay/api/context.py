"""Request validation and session/user context extraction."""

from __future__ import annotations

import uuid
from typing import Any, Callable, Iterable, Mapping, Optional

from ..core.exceptions import InvalidRequestError
from ..core.webhook import UserContext
from ..settings import HeaderSettings

SESSION_BODY_FIELDS = ("session_id", "conversation_id", "chat_id")


def validate_chat_request(payload: Any) -> None:
    """Check the minimal shape of a chat completion request.

    Raises:
        InvalidRequestError: if ``model`` or ``messages`` is missing or invalid.
    """
    if not isinstance(payload, Mapping):
        raise InvalidRequestError(
            "Request body must be a JSON object", code="invalid_json_shape"
        )
    model = payload.get("model")
    messages = payload.get("messages")
    if not model or not messages:
        raise InvalidRequestError(
            "Missing required fields: model, messages", code="missing_parameter"
        )
    if not isinstance(model, str):
        raise InvalidRequestError("model must be a string", code="invalid_parameter")
    if not isinstance(messages, list) or not all(
        isinstance(m, Mapping) for m in messages
    ):
        raise InvalidRequestError(
            "messages must be a non-empty array", code="invalid_parameter"
        )


def _lower_headers(headers: Mapping[str, str]) -> dict[str, str]:
    return {key.lower(): value for key, value in headers.items()}


def first_header(
    headers: Mapping[str, str], names: Iterable[str]
) -> Optional[tuple[str, str]]:
    """Return ``(name, value)`` for the first configured header present."""
    lowered = _lower_headers(headers)
    for name in names:
        value = lowered.get(name.lower())
        if value:
            return name, value
    return None


def _first_body_value(body: Mapping[str, Any], fields: Iterable[str]) -> Optional[str]:
    for field_name in fields:
        value = body.get(field_name)
        if value:
            return str(value)
    return None


def extract_session_id(
    body: Mapping[str, Any],
    headers: Mapping[str, str],
    header_names: Iterable[str],
    id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
) -> tuple[str, str]:
    """Resolve the session id: body fields, then headers, then a new UUID.

    Returns:
        ``(session_id, source)`` where source describes where it came from.
    """
    for field_name in SESSION_BODY_FIELDS:
        value = body.get(field_name)
        if value:
            return str(value), f"body.{field_name}"

    found = first_header(headers, header_names)
    if found:
        name, value = found
        return value, f"headers[{name}]"

    return id_factory(), "generated"


def extract_user_context(
    body: Mapping[str, Any],
    headers: Mapping[str, str],
    header_settings: HeaderSettings,
) -> UserContext:
    """Collect user identity, preferring headers over body fields."""

    def pick(names: Iterable[str], fields: Iterable[str]) -> Optional[str]:
        found = first_header(headers, names)
        if found:
            return found[1]
        return _first_body_value(body, fields)

    user_id = pick(header_settings.user_id, ("user", "user_id", "userId"))
    return UserContext(
        user_id=user_id or "anonymous",
        user_email=pick(header_settings.user_email, ("user_email", "userEmail")),
        user_name=pick(header_settings.user_name, ("user_name", "userName")),
        user_role=pick(header_settings.user_role, ("user_role", "userRole")),
    )
