"""Masking of credentials before request details reach the logs."""

from __future__ import annotations

from typing import Any, Mapping

SENSITIVE_BODY_KEYS = ("api_key",)


def mask_secret(value: str) -> str:
    """Keep the first 8 and last 4 characters of secrets longer than 12."""
    if len(value) <= 12:
        return value
    return f"{value[:8]}...{value[-4:]}"


def mask_headers(headers: Mapping[str, str]) -> dict[str, str]:
    masked = {key.lower(): value for key, value in headers.items()}
    authorization = masked.get("authorization")
    if authorization:
        parts = authorization.split(" ")
        if len(parts) == 2:
            masked["authorization"] = f"{parts[0]} {mask_secret(parts[1])}"
    return masked


def mask_body(body: Any) -> Any:
    """Mask top-level API keys in a request body; non-mappings pass through."""
    if not isinstance(body, Mapping):
        return body
    masked = dict(body)
    for key in SENSITIVE_BODY_KEYS:
        value = masked.get(key)
        if isinstance(value, str):
            masked[key] = mask_secret(value)
    return masked
