"""Typed Telegram Bot API client and webhook payload validation.

The :class:`TelegramBot` client wraps ``setWebhook``, ``sendMessage``,
``sendPhoto`` and a few related methods.  Pydantic models validate inbound
webhook payloads (:func:`parse_update`) and keyboard markups.

Usage::

    from tgfetch import TelegramBot, TelegramAPIError, parse_update
    from tgfetch.models import Update, Message
    from tgfetch.client import send_message_async  # async helpers
"""

from tgfetch.client import TelegramBot
from tgfetch.config import TelegramConfig
from tgfetch.exceptions import ConfigurationError, TelegramAPIError, TelegramError, TelegramTimeoutError
from tgfetch.files import InputFile
from tgfetch.keyboards import (
    ForceReply,
    InlineKeyboardButton,
    InlineKeyboardMarkup,
    KeyboardButton,
    ReplyKeyboardMarkup,
    ReplyKeyboardRemove,
    ReplyMarkup,
    parse_reply_markup,
)
from tgfetch.models import (
    CallbackQuery,
    Chat,
    Location,
    Message,
    MessageEntity,
    PhotoSize,
    Update,
    User,
    parse_update,
    parse_update_json,
)

__all__ = [
    "TelegramBot",
    "TelegramConfig",
    "TelegramError",
    "ConfigurationError",
    "TelegramAPIError",
    "TelegramTimeoutError",
    "InputFile",
    "ForceReply",
    "InlineKeyboardButton",
    "InlineKeyboardMarkup",
    "KeyboardButton",
    "ReplyKeyboardMarkup",
    "ReplyKeyboardRemove",
    "ReplyMarkup",
    "parse_reply_markup",
    "CallbackQuery",
    "Chat",
    "Location",
    "Message",
    "MessageEntity",
    "PhotoSize",
    "Update",
    "User",
    "parse_update",
    "parse_update_json",
]
