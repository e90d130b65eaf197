"""Tests for the inbound webhook models."""

import sys
import os
import pytest

# Ensure the project root is importable.
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from tgfetch.models import (
    CallbackQuery,
    Chat,
    Envelope,
    Error,
    Location,
    Message,
    MessageEntity,
    PhotoSize,
    ResponseParameters,
    Update,
    User,
    WebhookInfo,
    dump_update,
    parse_update,
    parse_update_json,
)
from tgfetch.keyboards import InlineKeyboardMarkup
from pydantic import ValidationError


# ── Fixtures ─────────────────────────────────────────────────────────────────


def _text_update() -> dict:
    return {
        "update_id": 50563505,
        "message": {
            "message_id": 19787,
            "from": {
                "id": 496499134,
                "is_bot": False,
                "first_name": "Carmelo",
                "last_name": "Campos",
                "username": "CamposCarmelo",
                "language_code": "es",
                "is_premium": True,
            },
            "chat": {
                "id": 496499134,
                "first_name": "Carmelo",
                "last_name": "Campos",
                "username": "CamposCarmelo",
                "type": "private",
            },
            "date": 1762922251,
            "text": "Este es un texto de ejemplo",
        },
    }


def _message(message_id: int, **extra) -> dict:
    data = {"message_id": message_id, "date": 1700000000, "chat": {"id": 1, "type": "private"}}
    data.update(extra)
    return data


def _error_locs(exc: ValidationError) -> list:
    return [tuple(err["loc"]) for err in exc.errors()]


# ── Update ───────────────────────────────────────────────────────────────────


class TestUpdateModel:
    """Validate the Update envelope."""

    def test_text_message_update(self) -> None:
        up = parse_update(_text_update())
        assert up.update_id == 50563505
        assert up.message is not None
        assert up.message.text == "Este es un texto de ejemplo"
        assert up.message.from_field is not None
        assert up.message.from_field.username == "CamposCarmelo"
        assert up.message.from_field.is_premium is True

    def test_photo_message_update(self) -> None:
        data = {
            "update_id": 50563506,
            "message": _message(
                19788,
                photo=[
                    {"file_id": "AgAC-small", "file_unique_id": "AQAD-s", "file_size": 1456, "width": 90, "height": 73},
                    {"file_id": "AgAC-big", "file_unique_id": "AQAD-b", "file_size": 24084, "width": 320, "height": 260},
                ],
            ),
        }
        up = parse_update(data)
        assert len(up.message.photo) == 2
        assert up.message.photo[0].width == 90
        assert up.message.largest_photo.file_id == "AgAC-big"

    def test_minimal_update(self) -> None:
        up = Update(update_id=1)
        assert up.message is None
        assert up.event_type is None
        assert up.effective_message is None

    def test_round_trip_preserves_fields(self) -> None:
        data = _text_update()
        assert dump_update(parse_update(data)) == data

    def test_absent_fields_are_not_set(self) -> None:
        up = parse_update(_text_update())
        assert "edited_message" not in up.model_fields_set
        assert up.edited_message is None
        assert "is_forum" not in up.message.chat.model_fields_set
        assert "edited_message" not in dump_update(up)

    def test_parse_update_json(self) -> None:
        raw = b'{"update_id": 7, "message": {"message_id": 1, "date": 0, "chat": {"id": 5, "type": "group"}}}'
        up = parse_update_json(raw)
        assert up.message.chat.type == "group"

    def test_parse_update_json_rejects_garbage(self) -> None:
        with pytest.raises(ValidationError):
            parse_update_json("not json")

    def test_unknown_keys_are_ignored(self) -> None:
        data = _text_update()
        data["message"]["sticker"] = {"file_id": "x"}
        data["business_message"] = {}
        up = parse_update(data)
        assert not hasattr(up.message, "sticker")

    def test_event_type_and_effective_message(self) -> None:
        up = parse_update({"update_id": 2, "edited_channel_post": _message(9, chat={"id": -100, "type": "channel"})})
        assert up.event_type == "edited_channel_post"
        assert up.effective_message.message_id == 9

    def test_callback_query_effective_message(self) -> None:
        up = parse_update({
            "update_id": 3,
            "callback_query": {
                "id": "q1",
                "from": {"id": 42, "is_bot": False, "first_name": "Ada"},
                "chat_instance": "ci",
                "message": _message(77),
                "data": "btn",
            },
        })
        assert up.event_type == "callback_query"
        assert up.effective_message.message_id == 77

    def test_fractional_update_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_update({"update_id": 1.5})

    def test_string_update_id_rejected(self) -> None:
        with pytest.raises(ValidationError):
            parse_update({"update_id": "15"})

    def test_errors_are_accumulated_with_paths(self) -> None:
        data = {"update_id": 1, "message": {"message_id": 1, "chat": {"id": 1, "type": "secret"}}}
        with pytest.raises(ValidationError) as exc_info:
            parse_update(data)
        locs = _error_locs(exc_info.value)
        assert ("message", "chat", "type") in locs
        assert ("message", "date") in locs

    def test_models_are_immutable(self) -> None:
        up = Update(update_id=1)
        with pytest.raises(ValidationError):
            up.update_id = 2


# ── Chat ─────────────────────────────────────────────────────────────────────


class TestChatModel:
    """Validate the Chat schema."""

    @pytest.mark.parametrize("chat_type", ["private", "group", "supergroup", "channel"])
    def test_known_types(self, chat_type: str) -> None:
        assert Chat(id=1, type=chat_type).type == chat_type

    @pytest.mark.parametrize("chat_type", ["secret", "Private", "", "bot"])
    def test_unknown_type_rejected(self, chat_type: str) -> None:
        with pytest.raises(ValidationError):
            Chat.model_validate({"id": 1, "type": chat_type})

    def test_unknown_type_rejected_inside_update(self) -> None:
        data = _text_update()
        data["message"]["chat"]["type"] = "secret"
        with pytest.raises(ValidationError) as exc_info:
            parse_update(data)
        assert ("message", "chat", "type") in _error_locs(exc_info.value)

    def test_negative_group_id(self) -> None:
        """Groups/channels use negative IDs."""
        c = Chat(id=-1001234567890, type="supergroup", is_forum=True)
        assert c.id < 0
        assert c.is_forum is True


# ── User ─────────────────────────────────────────────────────────────────────


class TestUserModel:
    """Validate the User schema."""

    def test_minimal_user(self) -> None:
        u = User(id=42, is_bot=False, first_name="Ada")
        assert u.last_name is None
        assert u.username is None

    def test_64_bit_id(self) -> None:
        """Telegram IDs can be 64-bit integers."""
        u = User(id=5_000_000_000, is_bot=False, first_name="Big")
        assert u.id == 5_000_000_000

    def test_missing_first_name_rejected(self) -> None:
        with pytest.raises(ValidationError):
            User.model_validate({"id": 1, "is_bot": False})

    def test_is_bot_must_be_boolean(self) -> None:
        with pytest.raises(ValidationError):
            User.model_validate({"id": 1, "is_bot": "no", "first_name": "X"})

    def test_bot_capability_flags(self) -> None:
        u = User.model_validate({
            "id": 1,
            "is_bot": True,
            "first_name": "Bot",
            "can_join_groups": True,
            "can_read_all_group_messages": False,
            "supports_inline_queries": True,
        })
        assert u.can_join_groups is True
        assert u.supports_inline_queries is True


# ── Message ──────────────────────────────────────────────────────────────────


class TestMessageModel:
    """Validate the Message schema."""

    def test_entities(self) -> None:
        m = Message.model_validate(
            _message(123, text="Hello @username", entities=[{"type": "mention", "offset": 6, "length": 9}])
        )
        assert m.text == "Hello @username"
        assert m.entities[0].type == "mention"

    def test_reply_to_message_one_level(self) -> None:
        m = Message.model_validate(_message(2, text="reply", reply_to_message=_message(1, text="original")))
        assert isinstance(m.reply_to_message, Message)
        assert m.reply_to_message.message_id == 1
        assert m.reply_to_message.chat.type == "private"

    def test_reply_to_message_is_validated_recursively(self) -> None:
        bad_parent = _message(1)
        bad_parent["chat"] = {"id": 1, "type": "nope"}
        with pytest.raises(ValidationError) as exc_info:
            Message.model_validate(_message(2, reply_to_message=bad_parent))
        assert ("reply_to_message", "chat", "type") in _error_locs(exc_info.value)

    def test_deep_reply_chain(self) -> None:
        data = _message(0)
        for i in range(1, 30):
            data = _message(i, reply_to_message=data)
        m = Message.model_validate(data)
        depth = 0
        while m.reply_to_message is not None:
            m = m.reply_to_message
            depth += 1
        assert depth == 29
        assert m.message_id == 0

    def test_location(self) -> None:
        m = Message.model_validate(_message(1, location={"longitude": 2.35, "latitude": 48.85, "live_period": 60}))
        assert isinstance(m.location, Location)
        assert m.location.live_period == 60

    def test_integer_coordinates_accepted(self) -> None:
        loc = Location.model_validate({"longitude": 2, "latitude": -48, "horizontal_accuracy": 15})
        assert loc.longitude == 2
        assert loc.horizontal_accuracy == 15

    @pytest.mark.parametrize(
        "payload",
        [
            {"longitude": "12.5", "latitude": 48.85},
            {"longitude": 2.35, "latitude": True},
            {"longitude": 2.35, "latitude": 48.85, "horizontal_accuracy": "1.5"},
            {"longitude": None, "latitude": 48.85},
        ],
    )
    def test_coordinates_are_not_coerced(self, payload: dict) -> None:
        with pytest.raises(ValidationError):
            Location.model_validate(payload)

    def test_inline_reply_markup(self) -> None:
        m = Message.model_validate(
            _message(1, reply_markup={"inline_keyboard": [[{"text": "Go", "url": "https://example.com"}]]})
        )
        assert isinstance(m.reply_markup, InlineKeyboardMarkup)

    def test_reply_keyboard_not_accepted_as_message_markup(self) -> None:
        with pytest.raises(ValidationError):
            Message.model_validate(_message(1, reply_markup={"keyboard": [[{"text": "A"}]]}))

    def test_from_alias_and_field_name(self) -> None:
        m = Message(message_id=1, date=0, chat=Chat(id=1, type="private"), from_field=User(id=9, is_bot=False, first_name="X"))
        assert m.model_dump(by_alias=True, exclude_none=True)["from"]["id"] == 9


# ── MessageEntity ────────────────────────────────────────────────────────────


class TestMessageEntityModel:
    def test_text_mention_with_user(self) -> None:
        e = MessageEntity.model_validate({
            "type": "text_mention",
            "offset": 0,
            "length": 3,
            "user": {"id": 1, "is_bot": False, "first_name": "Ada"},
        })
        assert e.user.first_name == "Ada"

    def test_custom_emoji(self) -> None:
        e = MessageEntity.model_validate({"type": "custom_emoji", "offset": 0, "length": 2, "custom_emoji_id": "5368"})
        assert e.custom_emoji_id == "5368"

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(ValidationError):
            MessageEntity.model_validate({"type": "blink", "offset": 0, "length": 1})

    def test_span_is_not_checked(self) -> None:
        m = Message.model_validate(_message(1, text="hi", entities=[{"type": "bold", "offset": 10, "length": 50}]))
        assert m.entities[0].offset == 10


# ── PhotoSize ────────────────────────────────────────────────────────────────


class TestPhotoSizeModel:
    def test_required(self) -> None:
        p = PhotoSize(file_id="abc", file_unique_id="xyz", width=1280, height=720, file_size=50000)
        assert p.width == 1280

    def test_fractional_width_rejected(self) -> None:
        with pytest.raises(ValidationError):
            PhotoSize.model_validate({"file_id": "a", "file_unique_id": "b", "width": 10.5, "height": 1})


# ── CallbackQuery ────────────────────────────────────────────────────────────


class TestCallbackQueryModel:
    def test_callback_query(self) -> None:
        cq = CallbackQuery.model_validate({
            "id": "query123",
            "from": {"id": 123456, "is_bot": False, "first_name": "John"},
            "chat_instance": "chat123",
            "data": "button_clicked",
        })
        assert cq.id == "query123"
        assert cq.data == "button_clicked"
        assert cq.from_field.id == 123456
        assert cq.game_short_name is None

    def test_from_required(self) -> None:
        with pytest.raises(ValidationError):
            CallbackQuery.model_validate({"id": "q", "chat_instance": "c"})

    def test_chat_instance_required(self) -> None:
        with pytest.raises(ValidationError):
            CallbackQuery.model_validate({"id": "q", "from": {"id": 1, "is_bot": False, "first_name": "J"}})


# ── Response envelope ────────────────────────────────────────────────────────


class TestEnvelopeModels:
    def test_success_envelope(self) -> None:
        env = Envelope.model_validate({"ok": True, "result": True})
        assert env.ok is True
        assert env.result is True

    def test_envelope_requires_ok(self) -> None:
        with pytest.raises(ValidationError):
            Envelope.model_validate({"result": True})

    def test_error_with_parameters(self) -> None:
        err = Error.model_validate({
            "ok": False,
            "error_code": 429,
            "description": "Too Many Requests: retry after 5",
            "parameters": {"retry_after": 5},
        })
        assert err.error_code == 429
        assert isinstance(err.parameters, ResponseParameters)
        assert err.parameters.retry_after == 5

    def test_error_missing_description_raises(self) -> None:
        with pytest.raises(ValidationError):
            Error(ok=False, error_code=400)

    def test_webhook_info(self) -> None:
        wh = WebhookInfo(url="https://example.com", has_custom_certificate=False, pending_update_count=0)
        assert wh.url == "https://example.com"
        assert wh.allowed_updates is None
