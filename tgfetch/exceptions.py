"""Exception hierarchy for the tgfetch Telegram client."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, List, Optional

if TYPE_CHECKING:
    from tgfetch.models import ResponseParameters


class TelegramError(Exception):
    """Base class for every error raised by :mod:`tgfetch`."""


class ConfigurationError(TelegramError, ValueError):
    """Raised when a :class:`~tgfetch.config.TelegramConfig` cannot be built.

    Attributes:
        errors: Pydantic error dicts describing every offending field.
    """

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None) -> None:
        self.errors = errors or []
        super().__init__(message)


class TelegramAPIError(TelegramError):
    """The Bot API answered with ``{"ok": false, ...}``.

    Attributes:
        error_code: Numeric error code from the response envelope.
        description: Human-readable description from the envelope.
        parameters: Optional :class:`~tgfetch.models.ResponseParameters`
            (``retry_after``, ``migrate_to_chat_id``).
        status_code: HTTP status code of the response, when known.
    """

    def __init__(
        self,
        error_code: int,
        description: str,
        parameters: Optional["ResponseParameters"] = None,
        status_code: Optional[int] = None,
    ) -> None:
        self.error_code = error_code
        self.description = description
        self.parameters = parameters
        self.status_code = status_code
        super().__init__(f"Telegram API Error {error_code}: {description}")


class TelegramTimeoutError(TelegramError, TimeoutError):
    """No response arrived within the configured timeout.

    Attributes:
        timeout: The timeout that elapsed, in milliseconds.
        method: Bot API method that was being called.
    """

    def __init__(self, timeout: int, method: str) -> None:
        self.timeout = timeout
        self.method = method
        super().__init__(f"Request timeout after {timeout}ms ({method})")
