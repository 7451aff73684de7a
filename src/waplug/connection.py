from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from .events import IncomingEvent

type ChatId = str
type MessageContent = dict[str, Any]


@dataclass(frozen=True, slots=True)
class BotUser:
    id: str
    name: str | None = None


@dataclass(frozen=True, slots=True)
class SendOptions:
    quoted: IncomingEvent | None = None
    mentions: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class GroupParticipant:
    id: str
    admin: str | None = None


@dataclass(frozen=True, slots=True)
class GroupMetadata:
    id: str
    subject: str
    participants: list[GroupParticipant] = field(default_factory=list)


class Connection(Protocol):
    """The messaging client the core talks to; its lifecycle is managed elsewhere."""

    @property
    def user(self) -> BotUser: ...

    async def send_message(
        self,
        chat_id: ChatId,
        content: MessageContent,
        options: SendOptions | None = None,
    ) -> Any: ...

    async def update_profile_status(self, status: str) -> None: ...

    async def group_metadata(self, chat_id: ChatId) -> GroupMetadata | None: ...


def reply_options(event: IncomingEvent) -> SendOptions:
    return SendOptions(quoted=event)
