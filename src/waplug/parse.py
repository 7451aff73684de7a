from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from .events import IncomingEvent
from .normalize import ChatInfo, extract_chat, extract_text


@dataclass(frozen=True, slots=True)
class ParsedCommand:
    chat_info: ChatInfo
    text_message: str
    prefix: str
    command_text: str
    args: list[str] = field(default_factory=list)


def _split_command(text: str) -> tuple[str, list[str]]:
    tokens = text.strip().split()
    if not tokens:
        return "", []
    return tokens[0].lower(), tokens[1:]


def match_prefix(text: str, prefixes: Sequence[str]) -> str | None:
    """Return the first prefix in list order that ``text`` starts with."""
    for prefix in prefixes:
        if text.startswith(prefix):
            return prefix
    return None


def parse_message(
    event: IncomingEvent,
    prefixes: Sequence[str],
    *,
    bot_name: str | None = None,
) -> ParsedCommand | None:
    text_message = extract_text(event)
    if not text_message:
        return None
    prefix = match_prefix(text_message, prefixes)
    if prefix is None:
        return None
    command_text, args = _split_command(text_message[len(prefix) :])
    return ParsedCommand(
        chat_info=extract_chat(event, bot_name=bot_name),
        text_message=text_message,
        prefix=prefix,
        command_text=command_text,
        args=args,
    )


def parse_no_prefix(
    event: IncomingEvent, *, bot_name: str | None = None
) -> ParsedCommand | None:
    text_message = extract_text(event)
    if not text_message:
        return None
    command_text, args = _split_command(text_message)
    return ParsedCommand(
        chat_info=extract_chat(event, bot_name=bot_name),
        text_message=text_message,
        prefix="",
        command_text=command_text,
        args=args,
    )
