from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from .events import IncomingEvent
from .jid import is_group_jid, strip_user_suffix

DEFAULT_PUSH_NAME = "User"


@dataclass(frozen=True, slots=True)
class ChatInfo:
    chat_id: str
    is_group: bool
    sender_id: str
    push_name: str


def extract_chat(event: IncomingEvent, *, bot_name: str | None = None) -> ChatInfo:
    chat_id = event.key.remote_jid or ""
    if event.key.from_me:
        sender_id = chat_id
    else:
        sender_id = event.key.participant or chat_id
    push_name = event.push_name or bot_name or DEFAULT_PUSH_NAME
    return ChatInfo(
        chat_id=chat_id,
        is_group=is_group_jid(chat_id),
        sender_id=sender_id,
        push_name=push_name,
    )


def _body(event: IncomingEvent) -> str | None:
    return event.body


def _conversation(event: IncomingEvent) -> str | None:
    return event.message.conversation if event.message else None


def _extended_text(event: IncomingEvent) -> str | None:
    message = event.message
    if message is None or message.extended_text_message is None:
        return None
    return message.extended_text_message.text


def _image_caption(event: IncomingEvent) -> str | None:
    message = event.message
    if message is None or message.image_message is None:
        return None
    return message.image_message.caption


def _video_caption(event: IncomingEvent) -> str | None:
    message = event.message
    if message is None or message.video_message is None:
        return None
    return message.video_message.caption


def _document_name(event: IncomingEvent) -> str | None:
    message = event.message
    if message is None or message.document_message is None:
        return None
    return message.document_message.file_name


def _location_name(event: IncomingEvent) -> str | None:
    message = event.message
    if message is None or message.location_message is None:
        return None
    return message.location_message.name


def _location_address(event: IncomingEvent) -> str | None:
    message = event.message
    if message is None or message.location_message is None:
        return None
    return message.location_message.address


def _contact_name(event: IncomingEvent) -> str | None:
    message = event.message
    if message is None or message.contact_message is None:
        return None
    return message.contact_message.display_name


def _poll_name(event: IncomingEvent) -> str | None:
    message = event.message
    if message is None or message.poll_creation_message is None:
        return None
    return message.poll_creation_message.name


def _reaction_text(event: IncomingEvent) -> str | None:
    message = event.message
    if message is None or message.reaction_message is None:
        return None
    return message.reaction_message.text


# Priority order: the first source yielding a non-empty string wins.
TEXT_SOURCES: tuple[Callable[[IncomingEvent], str | None], ...] = (
    _body,
    _conversation,
    _extended_text,
    _image_caption,
    _video_caption,
    _document_name,
    _location_name,
    _location_address,
    _contact_name,
    _poll_name,
    _reaction_text,
)


def extract_text(event: IncomingEvent) -> str:
    for source in TEXT_SOURCES:
        text = source(event)
        if text:
            return text
    return ""


def resolve_target(event: IncomingEvent, sender_id: str) -> str:
    """Who a command applies to: the replied-to user, the first mention, or the sender."""
    context = event.context_info
    if context is not None:
        if context.quoted_message is not None and context.participant:
            return strip_user_suffix(context.participant)
        if context.mentioned_jid:
            return strip_user_suffix(context.mentioned_jid[0])
    return strip_user_suffix(sender_id)
