"""Core exceptions for the relay."""

from typing import Optional


class RelayError(Exception):
    """Base exception for relay errors."""

    code = "relay_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ConfigurationError(RelayError):
    """Raised when there's an issue with the configuration."""

    code = "configuration_error"


class ModelNotFoundError(RelayError):
    """Raised when a requested model is not found in the configuration."""

    code = "model_not_found"


class InvalidRequestError(RelayError):
    """Raised when an incoming request is invalid."""

    def __init__(self, message: str, code: str = "invalid_request") -> None:
        super().__init__(message)
        self.code = code


class StreamTooLargeError(RelayError):
    """Raised when pending webhook output exceeds the buffer ceiling.

    This is terminal for the whole relay operation: the webhook stream must
    not be read any further once it is raised.
    """

    code = "stream_too_large"

    def __init__(self, max_size: int) -> None:
        super().__init__(
            f"Response buffer exceeded maximum size of {max_size} bytes"
        )
        self.max_size = max_size


class WebhookStatusError(RelayError):
    """Raised when the webhook answers with a non-2xx status."""

    code = "webhook_error"

    def __init__(
        self, status_code: int, url: str, body: Optional[bytes] = None
    ) -> None:
        super().__init__(f"Webhook {url} returned status {status_code}")
        self.status_code = status_code
        self.url = url
        self.body = body
