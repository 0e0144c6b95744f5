"""Typed runtime settings derived from the loaded configuration."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .core.exceptions import ConfigurationError

logger = logging.getLogger("hookrelay")

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3333
DEFAULT_WEBHOOK_TIMEOUT = 300.0
DEFAULT_MAX_BUFFER_SIZE = 10 * 1024 * 1024
DEFAULT_AGENT_TURN_SEPARATOR = "\n\n"

DEFAULT_SESSION_ID_HEADERS = ("X-Session-Id", "X-Chat-Id")
DEFAULT_USER_ID_HEADERS = ("X-User-Id",)
DEFAULT_USER_EMAIL_HEADERS = ("X-User-Email",)
DEFAULT_USER_NAME_HEADERS = ("X-User-Name",)
DEFAULT_USER_ROLE_HEADERS = ("X-User-Role",)

_ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "\\": "\\"}


def _parse_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def parse_header_list(value: Any, default: tuple[str, ...]) -> tuple[str, ...]:
    """Parse a header list given as a YAML list or a comma-separated string.

    Blank entries are skipped; an empty result falls back to ``default``.
    """
    if value is None:
        return default
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = [str(item) for item in value if item is not None]
    else:
        return default
    headers = tuple(item.strip() for item in items if item.strip())
    return headers or default


def unescape_separator(value: str) -> str:
    r"""Turn literal ``\n``, ``\t``, ``\r`` and ``\\`` sequences into characters."""
    out: list[str] = []
    i = 0
    while i < len(value):
        char = value[i]
        if char == "\\" and i + 1 < len(value) and value[i + 1] in _ESCAPES:
            out.append(_ESCAPES[value[i + 1]])
            i += 2
            continue
        out.append(char)
        i += 1
    return "".join(out)


@dataclass(frozen=True)
class HeaderSettings:
    session_id: tuple[str, ...] = DEFAULT_SESSION_ID_HEADERS
    user_id: tuple[str, ...] = DEFAULT_USER_ID_HEADERS
    user_email: tuple[str, ...] = DEFAULT_USER_EMAIL_HEADERS
    user_name: tuple[str, ...] = DEFAULT_USER_NAME_HEADERS
    user_role: tuple[str, ...] = DEFAULT_USER_ROLE_HEADERS


@dataclass(frozen=True)
class RelaySettings:
    """Resolved settings for one running relay."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    bearer_token: str = ""
    webhook_bearer_token: str = ""
    webhook_timeout: float = DEFAULT_WEBHOOK_TIMEOUT
    max_buffer_size: int = DEFAULT_MAX_BUFFER_SIZE
    agent_turn_separator: str = DEFAULT_AGENT_TURN_SEPARATOR
    log_requests: bool = False
    log_level: str = "INFO"
    headers: HeaderSettings = field(default_factory=HeaderSettings)

    @classmethod
    def from_config(
        cls,
        config: Mapping[str, Any],
        environ: Optional[Mapping[str, str]] = None,
    ) -> "RelaySettings":
        """Build settings from a config dict.

        Environment variables take priority over the config file for the
        server bind address and the agent turn separator.
        """
        environ = os.environ if environ is None else environ
        proxy_settings = config.get("proxy_settings") or {}
        server_cfg = proxy_settings.get("server") or {}
        auth_cfg = proxy_settings.get("auth") or {}
        webhook_cfg = proxy_settings.get("webhook") or {}
        stream_cfg = proxy_settings.get("stream") or {}
        headers_cfg = proxy_settings.get("headers") or {}
        logging_cfg = proxy_settings.get("logging") or {}

        host = environ.get("HOOKRELAY_HOST") or str(server_cfg.get("host", DEFAULT_HOST))

        port_raw = environ.get("HOOKRELAY_PORT")
        if port_raw is None:
            port_raw = server_cfg.get("port", DEFAULT_PORT)
        try:
            port = int(port_raw)
        except (TypeError, ValueError):
            logger.warning("Invalid port %r, falling back to %s", port_raw, DEFAULT_PORT)
            port = DEFAULT_PORT

        try:
            timeout = float(webhook_cfg.get("timeout", DEFAULT_WEBHOOK_TIMEOUT))
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                f"webhook.timeout must be a number, got {webhook_cfg.get('timeout')!r}"
            ) from exc

        try:
            max_buffer_size = int(
                webhook_cfg.get("max_buffer_size", DEFAULT_MAX_BUFFER_SIZE)
            )
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(
                "webhook.max_buffer_size must be an integer"
            ) from exc
        if max_buffer_size <= 0:
            raise ConfigurationError("webhook.max_buffer_size must be positive")

        separator_raw = environ.get("HOOKRELAY_AGENT_TURN_SEPARATOR")
        if separator_raw is None:
            separator_raw = stream_cfg.get(
                "agent_turn_separator", DEFAULT_AGENT_TURN_SEPARATOR
            )
        separator = unescape_separator(str(separator_raw if separator_raw is not None else ""))

        headers = HeaderSettings(
            session_id=parse_header_list(
                headers_cfg.get("session_id"), DEFAULT_SESSION_ID_HEADERS
            ),
            user_id=parse_header_list(headers_cfg.get("user_id"), DEFAULT_USER_ID_HEADERS),
            user_email=parse_header_list(
                headers_cfg.get("user_email"), DEFAULT_USER_EMAIL_HEADERS
            ),
            user_name=parse_header_list(
                headers_cfg.get("user_name"), DEFAULT_USER_NAME_HEADERS
            ),
            user_role=parse_header_list(
                headers_cfg.get("user_role"), DEFAULT_USER_ROLE_HEADERS
            ),
        )

        return cls(
            host=host,
            port=port,
            bearer_token=str(auth_cfg.get("bearer_token") or ""),
            webhook_bearer_token=str(webhook_cfg.get("bearer_token") or ""),
            webhook_timeout=timeout,
            max_buffer_size=max_buffer_size,
            agent_turn_separator=separator,
            log_requests=_parse_bool(logging_cfg.get("log_requests", False)),
            log_level=str(
                environ.get("HOOKRELAY_LOG_LEVEL") or logging_cfg.get("level") or "INFO"
            ).upper(),
            headers=headers,
        )
