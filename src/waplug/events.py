"""Msgspec models for the transport's inbound message envelope (subset used by waplug)."""

from __future__ import annotations

from typing import Any, Literal

import msgspec

__all__ = [
    "ContactMessage",
    "ContextInfo",
    "DocumentMessage",
    "ExtendedTextMessage",
    "ImageMessage",
    "IncomingEvent",
    "LocationMessage",
    "MessageContent",
    "MessageKey",
    "MessageKind",
    "PollCreationMessage",
    "ReactionMessage",
    "VideoMessage",
    "decode_event",
    "event_from_dict",
    "message_kind",
]

type MessageKind = Literal[
    "text",
    "extended_text",
    "image",
    "video",
    "document",
    "location",
    "contact",
    "poll",
    "reaction",
    "empty",
]


class MessageKey(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    remote_jid: str | None = None
    participant: str | None = None
    from_me: bool = False
    id: str | None = None


class ContextInfo(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    participant: str | None = None
    stanza_id: str | None = None
    quoted_message: dict[str, Any] | None = None
    mentioned_jid: list[str] | None = None


class ExtendedTextMessage(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    text: str | None = None
    context_info: ContextInfo | None = None


class ImageMessage(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    caption: str | None = None
    mimetype: str | None = None
    context_info: ContextInfo | None = None


class VideoMessage(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    caption: str | None = None
    mimetype: str | None = None
    seconds: int | None = None
    context_info: ContextInfo | None = None


class DocumentMessage(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    file_name: str | None = None
    mimetype: str | None = None
    context_info: ContextInfo | None = None


class LocationMessage(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    name: str | None = None
    address: str | None = None
    degrees_latitude: float | None = None
    degrees_longitude: float | None = None


class ContactMessage(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    display_name: str | None = None
    vcard: str | None = None


class PollCreationMessage(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    name: str | None = None
    selectable_options_count: int | None = None


class ReactionMessage(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    text: str | None = None


class MessageContent(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    conversation: str | None = None
    extended_text_message: ExtendedTextMessage | None = None
    image_message: ImageMessage | None = None
    video_message: VideoMessage | None = None
    document_message: DocumentMessage | None = None
    location_message: LocationMessage | None = None
    contact_message: ContactMessage | None = None
    poll_creation_message: PollCreationMessage | None = None
    reaction_message: ReactionMessage | None = None


class IncomingEvent(msgspec.Struct, rename="camel", forbid_unknown_fields=False):
    key: MessageKey = msgspec.field(default_factory=MessageKey)
    push_name: str | None = None
    body: str | None = None
    message: MessageContent | None = None
    message_timestamp: int | str | None = None

    @property
    def context_info(self) -> ContextInfo | None:
        if self.message is None or self.message.extended_text_message is None:
            return None
        return self.message.extended_text_message.context_info


_EVENT_DECODER = msgspec.json.Decoder(IncomingEvent)


def decode_event(payload: bytes | str) -> IncomingEvent:
    return _EVENT_DECODER.decode(payload)


def event_from_dict(payload: dict[str, Any]) -> IncomingEvent:
    return msgspec.convert(payload, IncomingEvent)


def message_kind(event: IncomingEvent) -> MessageKind:
    content = event.message
    if content is None:
        return "empty"
    match content:
        case MessageContent(conversation=str()):
            return "text"
        case MessageContent(extended_text_message=ExtendedTextMessage()):
            return "extended_text"
        case MessageContent(image_message=ImageMessage()):
            return "image"
        case MessageContent(video_message=VideoMessage()):
            return "video"
        case MessageContent(document_message=DocumentMessage()):
            return "document"
        case MessageContent(location_message=LocationMessage()):
            return "location"
        case MessageContent(contact_message=ContactMessage()):
            return "contact"
        case MessageContent(poll_creation_message=PollCreationMessage()):
            return "poll"
        case MessageContent(reaction_message=ReactionMessage()):
            return "reaction"
        case _:
            return "empty"
