import copy

from waplug.events import decode_event, event_from_dict, message_kind
from waplug.normalize import TEXT_SOURCES, extract_chat, extract_text, resolve_target
from tests.fakes import GROUP_ID, USER, make_event, user_jid

# every text source populated, in priority order
_ALL_SOURCES = {
    "body": "body",
    "message": {
        "conversation": "conversation",
        "extendedTextMessage": {"text": "extended"},
        "imageMessage": {"caption": "image caption"},
        "videoMessage": {"caption": "video caption"},
        "documentMessage": {"fileName": "report.pdf"},
        "locationMessage": {"name": "Monas", "address": "Jakarta"},
        "contactMessage": {"displayName": "Budi"},
        "pollCreationMessage": {"name": "Lunch?"},
        "reactionMessage": {"text": "👍"},
    },
}

_EXPECTED_ORDER = [
    "body",
    "conversation",
    "extended",
    "image caption",
    "video caption",
    "report.pdf",
    "Monas",
    "Jakarta",
    "Budi",
    "Lunch?",
    "👍",
]


def _drop(payload: dict, text: str) -> None:
    if payload.get("body") == text:
        payload.pop("body")
        return
    message = payload["message"]
    for name, value in list(message.items()):
        if value == text:
            message.pop(name)
            return
        if isinstance(value, dict):
            for field, inner in list(value.items()):
                if inner == text:
                    value.pop(field)
                    return


def test_extract_chat_group_participant() -> None:
    chat = extract_chat(make_event("hi"))

    assert chat.chat_id == GROUP_ID
    assert chat.is_group is True
    assert chat.sender_id == user_jid(USER)
    assert chat.push_name == "Tester"


def test_extract_chat_private_and_from_me() -> None:
    private = extract_chat(make_event("hi", chat_id=user_jid(USER)))
    assert private.is_group is False
    assert private.sender_id == user_jid(USER)

    own = extract_chat(make_event("hi", participant="someone@s.whatsapp.net", from_me=True))
    assert own.sender_id == GROUP_ID


def test_extract_chat_push_name_fallbacks() -> None:
    event = make_event("hi", push_name=None)

    assert extract_chat(event).push_name == "User"
    assert extract_chat(event, bot_name="Waplug").push_name == "Waplug"


def test_extract_text_body_beats_caption() -> None:
    event = event_from_dict(
        {
            "key": {"remoteJid": GROUP_ID},
            "body": "from body",
            "message": {"imageMessage": {"caption": "from caption"}},
        }
    )

    assert extract_text(event) == "from body"


def test_extract_text_follows_priority_order() -> None:
    payload = copy.deepcopy(_ALL_SOURCES)
    payload["key"] = {"remoteJid": GROUP_ID}
    seen = []
    for expected in _EXPECTED_ORDER:
        text = extract_text(event_from_dict(payload))
        seen.append(text)
        _drop(payload, expected)

    assert seen == _EXPECTED_ORDER
    assert extract_text(event_from_dict(payload)) == ""
    assert len(TEXT_SOURCES) == len(_EXPECTED_ORDER)


def test_extract_text_skips_empty_strings() -> None:
    event = make_event(message={"conversation": "", "imageMessage": {"caption": "cap"}})

    assert extract_text(event) == "cap"


def test_resolve_target_prefers_reply_then_mention_then_sender() -> None:
    reply = make_event(
        message={
            "extendedTextMessage": {
                "text": ".kick",
                "contextInfo": {
                    "participant": "628333@s.whatsapp.net",
                    "quotedMessage": {"conversation": "hi"},
                    "mentionedJid": ["628444@s.whatsapp.net"],
                },
            }
        }
    )
    assert resolve_target(reply, user_jid(USER)) == "628333"

    mention = make_event(
        message={
            "extendedTextMessage": {
                "text": ".kick @628444",
                "contextInfo": {"mentionedJid": ["628444@s.whatsapp.net"]},
            }
        }
    )
    assert resolve_target(mention, user_jid(USER)) == "628444"

    plain = make_event(".kick")
    assert resolve_target(plain, user_jid(USER)) == USER


def test_resolve_target_needs_quoted_message_for_reply() -> None:
    event = make_event(
        message={
            "extendedTextMessage": {
                "text": ".info",
                "contextInfo": {"participant": "628333@s.whatsapp.net"},
            }
        }
    )

    assert resolve_target(event, user_jid(USER)) == USER


def test_decode_event_from_json() -> None:
    event = decode_event(
        b'{"key":{"remoteJid":"628@s.whatsapp.net","fromMe":false,"id":"ABC"},'
        b'"pushName":"Ani","message":{"videoMessage":{"caption":".bratvid yo"}},'
        b'"messageTimestamp":1700000000,"unknownField":1}'
    )

    assert event.key.remote_jid == "628@s.whatsapp.net"
    assert event.push_name == "Ani"
    assert message_kind(event) == "video"
    assert extract_text(event) == ".bratvid yo"


def test_message_kind_variants() -> None:
    assert message_kind(make_event("hi")) == "text"
    assert message_kind(make_event(message={"reactionMessage": {"text": "x"}})) == "reaction"
    assert message_kind(make_event(message={"locationMessage": {}})) == "location"
    assert message_kind(make_event(None)) == "empty"


def test_resolve_target_accepts_empty_quoted_message() -> None:
    event = make_event(
        message={
            "extendedTextMessage": {
                "text": ".info",
                "contextInfo": {
                    "participant": "628333@s.whatsapp.net",
                    "quotedMessage": {},
                },
            }
        }
    )

    assert resolve_target(event, user_jid(USER)) == "628333"
