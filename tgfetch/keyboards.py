"""Pydantic models for inline and reply keyboards.

Used both inbound (``Message.reply_markup``) and outbound (the
``reply_markup`` parameter of ``sendMessage`` / ``sendPhoto``).

:data:`ReplyMarkup` is a structural union over the four markup shapes.
Candidates are tried left to right and the first one that validates wins:

1. :class:`InlineKeyboardMarkup` (requires ``inline_keyboard``)
2. :class:`ReplyKeyboardMarkup` (requires ``keyboard``)
3. :class:`ReplyKeyboardRemove` (requires ``remove_keyboard: true``)
4. :class:`ForceReply` (requires ``force_reply: true``)
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    AfterValidator,
    AnyUrl,
    BaseModel,
    Field,
    StrictBool,
    StrictInt,
    TypeAdapter,
    ValidationError,
    field_validator,
)

CALLBACK_DATA_MAX_BYTES: int = 64
PLACEHOLDER_MAX_LENGTH: int = 64

_any_url = TypeAdapter(AnyUrl)


def _check_url(value: str) -> str:
    try:
        _any_url.validate_python(value)
    except ValidationError as exc:
        raise ValueError(f"invalid URL {value!r}") from exc
    return value


UrlStr = Annotated[str, AfterValidator(_check_url)]


class WebAppInfo(BaseModel):
    """Describes a Web App launched from a button."""

    url: UrlStr

    model_config = {"frozen": True, "populate_by_name": True}


class LoginUrl(BaseModel):
    """Parameter of an inline button used to automatically authorize a user."""

    url: UrlStr
    forward_text: Optional[str] = None
    bot_username: Optional[str] = None
    request_write_access: Optional[StrictBool] = None

    model_config = {"frozen": True, "populate_by_name": True}


class SwitchInlineQueryChosenChat(BaseModel):
    """Inline button action prompting the user to pick a chat of a given type."""

    query: Optional[str] = None
    allow_user_chats: Optional[StrictBool] = None
    allow_bot_chats: Optional[StrictBool] = None
    allow_group_chats: Optional[StrictBool] = None
    allow_channel_chats: Optional[StrictBool] = None

    model_config = {"frozen": True, "populate_by_name": True}


class CallbackGame(BaseModel):
    """A placeholder, currently holds no information."""

    model_config = {"frozen": True, "populate_by_name": True}


class InlineKeyboardButton(BaseModel):
    """One button of an inline keyboard.

    Exactly one of the optional action fields is expected by Telegram; this is
    not enforced here.  ``callback_data`` is limited to 64 bytes of UTF-8.
    """

    text: str
    url: Optional[str] = None
    callback_data: Optional[str] = None
    web_app: Optional[WebAppInfo] = None
    login_url: Optional[LoginUrl] = None
    switch_inline_query: Optional[str] = None
    switch_inline_query_current_chat: Optional[str] = None
    switch_inline_query_chosen_chat: Optional[SwitchInlineQueryChosenChat] = None
    callback_game: Optional[CallbackGame] = None
    pay: Optional[StrictBool] = None

    model_config = {"frozen": True, "populate_by_name": True}

    @field_validator("callback_data")
    @classmethod
    def _callback_data_size(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and len(value.encode("utf-8")) > CALLBACK_DATA_MAX_BYTES:
            raise ValueError(f"callback_data must be at most {CALLBACK_DATA_MAX_BYTES} bytes")
        return value


class InlineKeyboardMarkup(BaseModel):
    """An inline keyboard: rows of :class:`InlineKeyboardButton`."""

    inline_keyboard: List[List[InlineKeyboardButton]]

    model_config = {"frozen": True, "populate_by_name": True}


class KeyboardButtonRequestUsers(BaseModel):
    """Criteria for the users offered when a ``request_users`` button is pressed."""

    request_id: StrictInt
    user_is_bot: Optional[StrictBool] = None
    user_is_premium: Optional[StrictBool] = None
    max_quantity: Optional[StrictInt] = None
    request_name: Optional[StrictBool] = None
    request_username: Optional[StrictBool] = None
    request_photo: Optional[StrictBool] = None

    model_config = {"frozen": True, "populate_by_name": True}


class KeyboardButtonRequestChat(BaseModel):
    """Criteria for the chats offered when a ``request_chat`` button is pressed."""

    request_id: StrictInt
    chat_is_channel: StrictBool
    chat_is_forum: Optional[StrictBool] = None
    chat_has_username: Optional[StrictBool] = None
    chat_is_created: Optional[StrictBool] = None
    user_administrator_rights: Optional[Dict[str, StrictBool]] = None
    bot_administrator_rights: Optional[Dict[str, StrictBool]] = None
    bot_is_member: Optional[StrictBool] = None
    request_title: Optional[StrictBool] = None
    request_username: Optional[StrictBool] = None
    request_photo: Optional[StrictBool] = None

    model_config = {"frozen": True, "populate_by_name": True}


class KeyboardButtonPollType(BaseModel):
    """Type of poll the user may create from a ``request_poll`` button."""

    type: Optional[Literal["quiz", "regular"]] = None

    model_config = {"frozen": True, "populate_by_name": True}


class KeyboardButton(BaseModel):
    """One button of a reply keyboard."""

    text: str
    request_users: Optional[KeyboardButtonRequestUsers] = None
    request_chat: Optional[KeyboardButtonRequestChat] = None
    request_contact: Optional[StrictBool] = None
    request_location: Optional[StrictBool] = None
    request_poll: Optional[KeyboardButtonPollType] = None
    web_app: Optional[WebAppInfo] = None

    model_config = {"frozen": True, "populate_by_name": True}


class ReplyKeyboardMarkup(BaseModel):
    """A custom keyboard replacing the user's text input tray."""

    keyboard: List[List[KeyboardButton]]
    is_persistent: Optional[StrictBool] = None
    resize_keyboard: Optional[StrictBool] = None
    one_time_keyboard: Optional[StrictBool] = None
    input_field_placeholder: Optional[str] = Field(None, max_length=PLACEHOLDER_MAX_LENGTH)
    selective: Optional[StrictBool] = None

    model_config = {"frozen": True, "populate_by_name": True}


class ReplyKeyboardRemove(BaseModel):
    """Asks clients to remove the custom keyboard."""

    remove_keyboard: Literal[True]
    selective: Optional[StrictBool] = None

    model_config = {"frozen": True, "populate_by_name": True}


class ForceReply(BaseModel):
    """Asks clients to display a reply interface to the user."""

    force_reply: Literal[True]
    input_field_placeholder: Optional[str] = Field(None, max_length=PLACEHOLDER_MAX_LENGTH)
    selective: Optional[StrictBool] = None

    model_config = {"frozen": True, "populate_by_name": True}


ReplyMarkup = Annotated[
    Union[InlineKeyboardMarkup, ReplyKeyboardMarkup, ReplyKeyboardRemove, ForceReply],
    Field(union_mode="left_to_right"),
]

reply_markup_adapter: TypeAdapter = TypeAdapter(ReplyMarkup)


def parse_reply_markup(payload: Any) -> Union[InlineKeyboardMarkup, ReplyKeyboardMarkup, ReplyKeyboardRemove, ForceReply]:
    """Validate *payload* against the four markup shapes, in documented order.

    Raises:
        pydantic.ValidationError: If no candidate matches.
    """
    return reply_markup_adapter.validate_python(payload)
