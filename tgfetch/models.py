"""Pydantic models for inbound webhook payloads and Bot API response envelopes.

Every class corresponds to an object of the Telegram Bot API.  Models are
immutable and ignore unknown keys, since Telegram adds fields over time.
Identifiers, dates and sizes use strict integers: fractional numbers and
numeric strings are rejected instead of being coerced.

Usage::

    from tgfetch.models import parse_update

    update = parse_update(request_json)
    if update.message and update.message.text:
        ...
"""

from __future__ import annotations

from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field, StrictBool, StrictFloat, StrictInt

from tgfetch.keyboards import InlineKeyboardMarkup

ChatType = Literal["private", "group", "supergroup", "channel"]

MessageEntityType = Literal[
    "mention",
    "hashtag",
    "cashtag",
    "bot_command",
    "url",
    "email",
    "phone_number",
    "bold",
    "italic",
    "underline",
    "strikethrough",
    "spoiler",
    "code",
    "pre",
    "text_link",
    "text_mention",
    "custom_emoji",
]

UPDATE_EVENT_FIELDS: tuple = (
    "message",
    "edited_message",
    "channel_post",
    "edited_channel_post",
    "callback_query",
)


class User(BaseModel):
    """A Telegram user or bot."""

    id: StrictInt
    is_bot: StrictBool
    first_name: str
    last_name: Optional[str] = None
    username: Optional[str] = None
    language_code: Optional[str] = None
    is_premium: Optional[StrictBool] = None
    added_to_attachment_menu: Optional[StrictBool] = None
    can_join_groups: Optional[StrictBool] = None
    can_read_all_group_messages: Optional[StrictBool] = None
    supports_inline_queries: Optional[StrictBool] = None

    model_config = {"frozen": True, "populate_by_name": True}


class Chat(BaseModel):
    """A chat.  ``type`` is one of private, group, supergroup or channel."""

    id: StrictInt
    type: ChatType
    title: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    is_forum: Optional[StrictBool] = None

    model_config = {"frozen": True, "populate_by_name": True}


class PhotoSize(BaseModel):
    """One size of a photo or a file / sticker thumbnail."""

    file_id: str
    file_unique_id: str
    width: StrictInt
    height: StrictInt
    file_size: Optional[StrictInt] = None

    model_config = {"frozen": True, "populate_by_name": True}


class Location(BaseModel):
    """A point on the map."""

    longitude: Union[StrictInt, StrictFloat]
    latitude: Union[StrictInt, StrictFloat]
    horizontal_accuracy: Optional[Union[StrictInt, StrictFloat]] = None
    live_period: Optional[StrictInt] = None
    heading: Optional[StrictInt] = None
    proximity_alert_radius: Optional[StrictInt] = None

    model_config = {"frozen": True, "populate_by_name": True}


class MessageEntity(BaseModel):
    """One special entity in a text message: hashtags, usernames, URLs, etc.

    ``offset`` and ``length`` are measured in UTF-16 code units.  Whether the
    span actually lies inside the text is not checked.
    """

    type: MessageEntityType
    offset: StrictInt
    length: StrictInt
    url: Optional[str] = None
    user: Optional["User"] = None
    language: Optional[str] = None
    custom_emoji_id: Optional[str] = None

    model_config = {"frozen": True, "populate_by_name": True}


class Message(BaseModel):
    """A message.

    ``reply_to_message`` refers back to :class:`Message`; pydantic resolves the
    reference lazily so reply chains of any depth validate.
    """

    message_id: StrictInt
    message_thread_id: Optional[StrictInt] = None
    from_field: Optional["User"] = Field(None, alias="from")
    sender_chat: Optional["Chat"] = None
    date: StrictInt
    chat: "Chat"
    forward_from: Optional["User"] = None
    forward_from_chat: Optional["Chat"] = None
    forward_from_message_id: Optional[StrictInt] = None
    forward_signature: Optional[str] = None
    forward_sender_name: Optional[str] = None
    forward_date: Optional[StrictInt] = None
    is_topic_message: Optional[StrictBool] = None
    is_automatic_forward: Optional[StrictBool] = None
    reply_to_message: Optional["Message"] = None
    via_bot: Optional["User"] = None
    edit_date: Optional[StrictInt] = None
    has_protected_content: Optional[StrictBool] = None
    media_group_id: Optional[str] = None
    author_signature: Optional[str] = None
    text: Optional[str] = None
    entities: Optional[List["MessageEntity"]] = None
    caption: Optional[str] = None
    caption_entities: Optional[List["MessageEntity"]] = None
    photo: Optional[List["PhotoSize"]] = None
    location: Optional["Location"] = None
    reply_markup: Optional[InlineKeyboardMarkup] = None

    model_config = {"frozen": True, "populate_by_name": True}

    @property
    def largest_photo(self) -> Optional[PhotoSize]:
        """The last (largest) entry of ``photo``, if any."""
        if not self.photo:
            return None
        return self.photo[-1]


class CallbackQuery(BaseModel):
    """An incoming callback query from a button of an inline keyboard.

    Telegram sets exactly one of ``data`` and ``game_short_name``; both are
    accepted as optional here.
    """

    id: str
    from_field: "User" = Field(..., alias="from")
    message: Optional["Message"] = None
    inline_message_id: Optional[str] = None
    chat_instance: str
    data: Optional[str] = None
    game_short_name: Optional[str] = None

    model_config = {"frozen": True, "populate_by_name": True}


class Update(BaseModel):
    """An incoming update.  At most one of the optional event fields is set."""

    update_id: StrictInt
    message: Optional["Message"] = None
    edited_message: Optional["Message"] = None
    channel_post: Optional["Message"] = None
    edited_channel_post: Optional["Message"] = None
    callback_query: Optional["CallbackQuery"] = None

    model_config = {"frozen": True, "populate_by_name": True}

    @property
    def event_type(self) -> Optional[str]:
        """Name of the first populated event field, or ``None``."""
        for name in UPDATE_EVENT_FIELDS:
            if getattr(self, name) is not None:
                return name
        return None

    @property
    def effective_message(self) -> Optional[Message]:
        """The message carried by this update, whatever the event kind."""
        if self.callback_query is not None:
            return self.callback_query.message
        for name in UPDATE_EVENT_FIELDS[:-1]:
            message = getattr(self, name)
            if message is not None:
                return message
        return None


# ── Response envelope ────────────────────────────────────────────────────────


class ResponseParameters(BaseModel):
    """Contains information about why a request was unsuccessful."""

    migrate_to_chat_id: Optional[int] = None
    retry_after: Optional[int] = None

    model_config = {"populate_by_name": True}


class Envelope(BaseModel):
    """Outer wrapper of every Bot API response."""

    ok: StrictBool
    result: Any = None
    error_code: Optional[int] = None
    description: Optional[str] = None
    parameters: Optional[ResponseParameters] = None

    model_config = {"populate_by_name": True}


class Error(BaseModel):
    """Error envelope from the Telegram Bot API."""

    ok: Literal[False] = False
    error_code: int
    description: str
    parameters: Optional[ResponseParameters] = None

    model_config = {"populate_by_name": True}


class WebhookInfo(BaseModel):
    """Current status of a webhook, as returned by ``getWebhookInfo``."""

    url: str
    has_custom_certificate: bool
    pending_update_count: int
    ip_address: Optional[str] = None
    last_error_date: Optional[int] = None
    last_error_message: Optional[str] = None
    last_synchronization_error_date: Optional[int] = None
    max_connections: Optional[int] = None
    allowed_updates: Optional[List[str]] = None

    model_config = {"populate_by_name": True}


for _model in (MessageEntity, Message, CallbackQuery, Update):
    _model.model_rebuild()


def parse_update(payload: Any) -> Update:
    """Validate a decoded webhook body into an :class:`Update`.

    Raises:
        pydantic.ValidationError: Listing every offending field with its path.
    """
    return Update.model_validate(payload)


def parse_update_json(raw: Union[str, bytes, bytearray]) -> Update:
    """Validate a raw JSON webhook body into an :class:`Update`.

    Raises:
        pydantic.ValidationError: On malformed JSON or a malformed payload.
    """
    return Update.model_validate_json(raw)


def dump_update(update: Update) -> dict:
    """Serialize *update* back to the wire shape, omitting absent fields."""
    return update.model_dump(mode="json", by_alias=True, exclude_unset=True)
