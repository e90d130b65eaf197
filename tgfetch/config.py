"""Client configuration: bot token, API base URL and request timeout.

Values are validated eagerly; a bad token, URL or timeout fails at
construction rather than on the first request.  :meth:`TelegramConfig.from_env`
loads them from the environment via ``python-dotenv``.
"""

# ── stdlib ───────────────────────────────────────────────────────────────────
import os
from typing import Any, Dict, Mapping, Optional

# ── third-party ──────────────────────────────────────────────────────────────
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, HttpUrl, StrictInt, TypeAdapter, ValidationError, field_validator
from pydantic.alias_generators import to_camel

# ── local ────────────────────────────────────────────────────────────────────
from tgfetch.exceptions import ConfigurationError

DEFAULT_BASE_URL: str = "https://api.telegram.org"
DEFAULT_TIMEOUT_MS: int = 30000

_http_url = TypeAdapter(HttpUrl)


class TelegramConfig(BaseModel):
    """Immutable configuration for :class:`~tgfetch.client.TelegramBot`.

    Attributes:
        bot_token: Token obtained from @BotFather, e.g.
            ``"123456789:ABCdefGHIjklMNOpqrsTUVwxyz"``.
        base_url: Bot API origin, without trailing slash.
        timeout: Per-request timeout in milliseconds.
    """

    bot_token: str = Field(min_length=1)
    base_url: str = DEFAULT_BASE_URL
    timeout: StrictInt = Field(default=DEFAULT_TIMEOUT_MS, gt=0)

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
        extra="forbid",
    )

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        try:
            _http_url.validate_python(value)
        except ValidationError as exc:
            raise ValueError(f"base_url must be an http(s) URL, got {value!r}") from exc
        return value.rstrip("/")

    @property
    def timeout_seconds(self) -> float:
        """Timeout in seconds, as :mod:`requests` expects it."""
        return self.timeout / 1000

    @classmethod
    def build(cls, data: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "TelegramConfig":
        """Validate *data* / *kwargs* into a config or raise :class:`ConfigurationError`."""
        values: Dict[str, Any] = dict(data or {})
        values.update(kwargs)
        try:
            return cls.model_validate(values)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid Telegram configuration: {exc}", exc.errors()) from exc

    @classmethod
    def from_env(cls, prefix: str = "TELEGRAM_", dotenv_path: Optional[str] = None) -> "TelegramConfig":
        """Build a config from ``<prefix>BOT_TOKEN``, ``<prefix>BASE_URL`` and ``<prefix>TIMEOUT``.

        A ``.env`` file is loaded first (without overriding variables that
        are already set).  Unset optional variables fall back to defaults.
        """
        load_dotenv(dotenv_path)
        values: Dict[str, Any] = {"bot_token": os.environ.get(f"{prefix}BOT_TOKEN", "")}
        base_url = os.environ.get(f"{prefix}BASE_URL")
        if base_url:
            values["base_url"] = base_url
        timeout = os.environ.get(f"{prefix}TIMEOUT")
        if timeout:
            try:
                values["timeout"] = int(timeout)
            except ValueError as exc:
                raise ConfigurationError(f"{prefix}TIMEOUT must be an integer, got {timeout!r}") from exc
        return cls.build(values)
