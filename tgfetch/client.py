"""TelegramBot -- thin client for the Telegram Bot API.

Every call is one ``POST <base_url>/bot<token>/<method>``.  Parameters are
sent as a JSON body, or as ``multipart/form-data`` when any value is a file.
The ``{"ok": ..., "result": ...}`` envelope is unwrapped into a typed result
or a :class:`~tgfetch.exceptions.TelegramAPIError`.  HTTP calls use the
``requests`` library.

The module also provides async free-function helpers (``call_async``,
``send_message_async``, etc.) that offload the blocking call via
:func:`asyncio.to_thread`, so several calls can be in flight on one event
loop.  No ordering is guaranteed between concurrent calls.
"""

from __future__ import annotations

import asyncio
import json
import time
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

import requests
from pydantic import BaseModel, TypeAdapter
from urllib3.exceptions import ReadTimeoutError

from tgfetch.config import TelegramConfig
from tgfetch.exceptions import TelegramAPIError, TelegramTimeoutError
from tgfetch.files import InputFile, as_input_file, is_file_like
from tgfetch.keyboards import (
    ForceReply,
    InlineKeyboardMarkup,
    ReplyKeyboardMarkup,
    ReplyKeyboardRemove,
)
from tgfetch.logger import describe_error, get_logger, mask_token, redact
from tgfetch.models import Envelope, Error, Message, MessageEntity, User, WebhookInfo

logger = get_logger(__name__)

_BODY_CHUNK_SIZE = 1

ChatId = Union[int, str]
ReplyMarkupParam = Union[InlineKeyboardMarkup, ReplyKeyboardMarkup, ReplyKeyboardRemove, ForceReply, Dict[str, Any]]


def _jsonable(value: Any) -> Any:
    """Convert models and containers into plain JSON-ready values, dropping ``None``."""
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True, exclude_none=True)
    if isinstance(value, Mapping):
        return {key: _jsonable(item) for key, item in value.items() if item is not None}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


def _form_value(value: Any) -> str:
    """Stringify a non-file value for a multipart form field."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(_jsonable(value))


def _encode_multipart(params: Dict[str, Any]) -> Tuple[Dict[str, str], Dict[str, Tuple[Any, ...]]]:
    data: Dict[str, str] = {}
    files: Dict[str, Tuple[Any, ...]] = {}
    for key, value in params.items():
        if is_file_like(value):
            files[key] = as_input_file(value).to_requests_file()
        else:
            data[key] = _form_value(value)
    return data, files


@lru_cache(maxsize=None)
def _adapter(result_type: Any) -> TypeAdapter:
    return TypeAdapter(result_type)


class _DeadlineExceeded(Exception):
    """The overall call deadline passed while the body was still arriving."""


def _is_read_timeout(exc: requests.ConnectionError) -> bool:
    # requests wraps a read timeout during body streaming in ConnectionError.
    return bool(exc.args) and isinstance(exc.args[0], ReadTimeoutError)


def _read_body(response: requests.Response, deadline: float) -> bytes:
    """Read a streamed body, giving each socket read only what is left of *deadline*.

    Chunks are a single byte so that every read is at most one ``recv`` on
    the socket, whose timeout is lowered to the remaining budget first.
    """
    sock = getattr(getattr(response.raw, "connection", None), "sock", None)
    chunks = iter(response.iter_content(chunk_size=_BODY_CHUNK_SIZE))
    body = bytearray()
    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            raise _DeadlineExceeded()
        if sock is not None and sock.fileno() != -1:
            sock.settimeout(remaining)
        try:
            chunk = next(chunks, None)
        except requests.ConnectionError as exc:
            if _is_read_timeout(exc):
                raise _DeadlineExceeded() from exc
            raise
        if chunk is None:
            return bytes(body)
        body += chunk


class TelegramBot:
    """Client-side service layer for the Telegram Bot API.

    Usage::

        bot = TelegramBot(bot_token="123456789:ABC...")
        bot.set_webhook("https://example.com/webhook", secret_token="s3cret")
        message = bot.send_message(123456789, "Hello, World!")

    Raises:
        ConfigurationError: If the configuration is invalid.
    """

    def __init__(self, config: Union[TelegramConfig, Mapping[str, Any], None] = None, **kwargs: Any) -> None:
        """Create a client from a :class:`TelegramConfig`, a mapping, or keyword arguments.

        Accepted keys are ``bot_token`` (required), ``base_url`` and
        ``timeout`` (milliseconds), or their camel-case spellings.
        """
        if isinstance(config, TelegramConfig) and not kwargs:
            self._config = config
        elif isinstance(config, TelegramConfig):
            self._config = TelegramConfig.build(config.model_dump(), **kwargs)
        else:
            self._config = TelegramConfig.build(config, **kwargs)

    # ------------------------------------------------------------------
    #  Configuration
    # ------------------------------------------------------------------

    @property
    def config(self) -> TelegramConfig:
        """The current (immutable) configuration."""
        return self._config

    def update_bot_token(self, new_bot_token: str) -> None:
        """Rotate the bot token for all subsequent calls.

        The new configuration is validated first and then swapped in with a
        single assignment, so a concurrent call sees either the old token or
        the new one.

        Raises:
            ConfigurationError: If *new_bot_token* is empty.
        """
        config = self._config
        self._config = TelegramConfig.build(config.model_dump(), bot_token=new_bot_token)
        logger.debug("Bot token rotated", extra={"bot_token": mask_token(new_bot_token)})

    def get_bot_token_masked(self) -> str:
        """Return the current token masked as ``abc...xyz``."""
        return mask_token(self._config.bot_token)

    @property
    def bot_token_masked(self) -> str:
        return self.get_bot_token_masked()

    def __repr__(self) -> str:
        return f"TelegramBot(base_url={self._config.base_url!r}, bot_token={self.get_bot_token_masked()!r})"

    # ------------------------------------------------------------------
    #  Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _api_url(config: TelegramConfig, method: str) -> str:
        return f"{config.base_url}/bot{config.bot_token}/{method}"

    def _post(self, method: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Send one request and return the ``result`` of the envelope.

        ``None`` values in *params* are dropped.  If any remaining value is
        file-like, the whole set is sent as multipart form data.  The
        configured timeout is one deadline for the whole call, covering the
        connection, the response headers and the body.

        Raises:
            TelegramAPIError: If the envelope says ``ok: false``.
            TelegramTimeoutError: If the response is not complete within the timeout.
            requests.RequestException: On other transport-level failures.
            ValueError: If the body is not JSON or not an envelope.
        """
        config = self._config
        url = self._api_url(config, method)
        fields = {key: value for key, value in (params or {}).items() if value is not None}

        if any(is_file_like(value) for value in fields.values()):
            data, files = _encode_multipart(fields)
            request_kwargs: Dict[str, Any] = {"data": data, "files": files}
            encoding = "multipart"
        else:
            request_kwargs = {
                "data": json.dumps(_jsonable(fields)),
                "headers": {"Content-Type": "application/json"},
            }
            encoding = "json"

        logger.debug(
            "Calling Bot API",
            extra={"api_endpoint": method, "encoding": encoding, "bot_token": mask_token(config.bot_token)},
        )
        deadline = time.monotonic() + config.timeout_seconds
        try:
            response = requests.post(url, timeout=config.timeout_seconds, stream=True, **request_kwargs)
            try:
                raw_body = _read_body(response, deadline)
            finally:
                response.close()
        except (requests.Timeout, _DeadlineExceeded) as exc:
            logger.warning("Bot API call timed out", extra={"api_endpoint": method, "timeout_ms": config.timeout})
            raise TelegramTimeoutError(config.timeout, method) from exc
        except requests.RequestException as exc:
            logger.warning("Bot API request failed", extra={"api_endpoint": method, "error": describe_error(exc)})
            raise

        body = json.loads(raw_body)
        envelope = Envelope.model_validate(body)
        logger.debug(
            "Bot API responded",
            extra={"api_endpoint": method, "status_code": response.status_code, "ok": envelope.ok},
        )
        if not envelope.ok:
            error = Error.model_validate(body)
            logger.warning(
                "Bot API returned an error",
                extra={"api_endpoint": method, "error_code": error.error_code, "error": redact(error.description)},
            )
            raise TelegramAPIError(error.error_code, error.description, error.parameters, response.status_code)
        return envelope.result

    # ------------------------------------------------------------------
    #  Bot API methods
    # ------------------------------------------------------------------

    def call(self, method: str, params: Optional[Mapping[str, Any]] = None, result_type: Any = Any) -> Any:
        """Call any Bot API *method* sharing the standard envelope.

        The ``result`` is validated against *result_type* (a pydantic model,
        a builtin type, or any type :class:`pydantic.TypeAdapter` accepts).
        """
        result = self._post(method, params)
        if result_type is Any:
            return result
        return _adapter(result_type).validate_python(result)

    def set_webhook(
        self,
        url: str,
        certificate: Optional[Union[InputFile, bytes]] = None,
        ip_address: Optional[str] = None,
        max_connections: Optional[int] = None,
        allowed_updates: Optional[List[str]] = None,
        drop_pending_updates: Optional[bool] = None,
        secret_token: Optional[str] = None,
    ) -> bool:
        """Specify a URL to receive incoming updates via an outgoing webhook.

        Pass an empty *url* to remove the webhook.  A *certificate* upload
        switches the request to multipart form data.
        """
        payload: Dict[str, Any] = {
            "url": url,
            "certificate": certificate,
            "ip_address": ip_address,
            "max_connections": max_connections,
            "allowed_updates": allowed_updates,
            "drop_pending_updates": drop_pending_updates,
            "secret_token": secret_token,
        }
        return self.call("setWebhook", payload, bool)

    def delete_webhook(self, drop_pending_updates: Optional[bool] = None) -> bool:
        """Remove the webhook integration."""
        return self.call("deleteWebhook", {"drop_pending_updates": drop_pending_updates}, bool)

    def get_webhook_info(self) -> WebhookInfo:
        """Get the current webhook status."""
        return self.call("getWebhookInfo", None, WebhookInfo)

    def get_me(self) -> User:
        """Return basic information about the bot; useful to test the token."""
        return self.call("getMe", None, User)

    def send_message(
        self,
        chat_id: ChatId,
        text: str,
        message_thread_id: Optional[int] = None,
        parse_mode: Optional[str] = None,
        entities: Optional[List[Union[MessageEntity, Dict[str, Any]]]] = None,
        disable_web_page_preview: Optional[bool] = None,
        disable_notification: Optional[bool] = None,
        protect_content: Optional[bool] = None,
        reply_to_message_id: Optional[int] = None,
        allow_sending_without_reply: Optional[bool] = None,
        reply_markup: Optional[ReplyMarkupParam] = None,
    ) -> Message:
        """Send a text message.  On success, the sent :class:`Message` is returned."""
        payload: Dict[str, Any] = {
            "chat_id": chat_id,
            "text": text,
            "message_thread_id": message_thread_id,
            "parse_mode": parse_mode,
            "entities": entities,
            "disable_web_page_preview": disable_web_page_preview,
            "disable_notification": disable_notification,
            "protect_content": protect_content,
            "reply_to_message_id": reply_to_message_id,
            "allow_sending_without_reply": allow_sending_without_reply,
            "reply_markup": reply_markup,
        }
        return self.call("sendMessage", payload, Message)

    def send_photo(
        self,
        chat_id: ChatId,
        photo: Union[str, InputFile, bytes],
        message_thread_id: Optional[int] = None,
        caption: Optional[str] = None,
        parse_mode: Optional[str] = None,
        caption_entities: Optional[List[Union[MessageEntity, Dict[str, Any]]]] = None,
        has_spoiler: Optional[bool] = None,
        disable_notification: Optional[bool] = None,
        protect_content: Optional[bool] = None,
        reply_to_message_id: Optional[int] = None,
        allow_sending_without_reply: Optional[bool] = None,
        reply_markup: Optional[ReplyMarkupParam] = None,
    ) -> Message:
        """Send a photo by file_id, by HTTP URL, or as a new upload.

        Strings are passed through as a file_id or URL; an :class:`InputFile`,
        bytes or an open binary file is uploaded with multipart form data.
        """
        payload: Dict[str, Any] = {
            "chat_id": chat_id,
            "photo": photo,
            "message_thread_id": message_thread_id,
            "caption": caption,
            "parse_mode": parse_mode,
            "caption_entities": caption_entities,
            "has_spoiler": has_spoiler,
            "disable_notification": disable_notification,
            "protect_content": protect_content,
            "reply_to_message_id": reply_to_message_id,
            "allow_sending_without_reply": allow_sending_without_reply,
            "reply_markup": reply_markup,
        }
        return self.call("sendPhoto", payload, Message)

    def answer_callback_query(
        self,
        callback_query_id: str,
        text: Optional[str] = None,
        show_alert: Optional[bool] = None,
        url: Optional[str] = None,
        cache_time: Optional[int] = None,
    ) -> bool:
        """Acknowledge a callback query so the button spinner disappears for the user."""
        payload: Dict[str, Any] = {
            "callback_query_id": callback_query_id,
            "text": text,
            "show_alert": show_alert,
            "url": url,
            "cache_time": cache_time,
        }
        return self.call("answerCallbackQuery", payload, bool)


# ── Module-level async helpers ───────────────────────────────────────────────
#
# Each helper runs one blocking client call in a worker thread via
# :func:`asyncio.to_thread`.  Every call keeps its own timeout; cancelling
# the awaiting task does not affect other in-flight calls.
# ─────────────────────────────────────────────────────────────────────────────


async def call_async(
    bot: TelegramBot,
    method: str,
    params: Optional[Mapping[str, Any]] = None,
    result_type: Any = Any,
) -> Any:
    """Async counterpart of :meth:`TelegramBot.call`."""
    return await asyncio.to_thread(bot.call, method, params, result_type)


async def set_webhook_async(bot: TelegramBot, url: str, **kwargs: Any) -> bool:
    """Async counterpart of :meth:`TelegramBot.set_webhook`."""
    return await asyncio.to_thread(bot.set_webhook, url, **kwargs)


async def send_message_async(bot: TelegramBot, chat_id: ChatId, text: str, **kwargs: Any) -> Message:
    """Async counterpart of :meth:`TelegramBot.send_message`."""
    return await asyncio.to_thread(bot.send_message, chat_id, text, **kwargs)


async def send_photo_async(
    bot: TelegramBot,
    chat_id: ChatId,
    photo: Union[str, InputFile, bytes],
    **kwargs: Any,
) -> Message:
    """Async counterpart of :meth:`TelegramBot.send_photo`."""
    return await asyncio.to_thread(bot.send_photo, chat_id, photo, **kwargs)


__all__ = [
    "TelegramBot",
    "call_async",
    "mask_token",
    "send_message_async",
    "send_photo_async",
    "set_webhook_async",
]
