from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from .connection import Connection, GroupMetadata, SendOptions
from .context import AppContext
from .jid import bot_jid, strip_user_suffix
from .logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class GroupInfo:
    metadata: GroupMetadata
    group_name: str
    bot_number: str
    bot_admin: bool
    user_admin: bool
    admin_list: list[str] = field(default_factory=list)


async def extract_group(
    connection: Connection, chat_id: str, sender_id: str
) -> GroupInfo | None:
    metadata = await connection.group_metadata(chat_id)
    if metadata is None:
        logger.debug("group.metadata_missing", chat_id=chat_id)
        return None
    bot_number = bot_jid(connection.user.id)
    admins = [p.id for p in metadata.participants if p.admin]
    return GroupInfo(
        metadata=metadata,
        group_name=metadata.subject,
        bot_number=bot_number,
        bot_admin=bot_number in admins,
        user_admin=sender_id in admins,
        admin_list=admins,
    )


async def announce_participants(
    ctx: AppContext,
    chat_id: str,
    participants: list[str],
    action: Literal["add", "remove"],
) -> int:
    """Greet joining members or bid farewell to leaving ones; returns messages sent."""
    database = ctx.database
    if action == "add":
        if not database.is_welcome_enabled(chat_id):
            return 0
        template = database.welcome_text(chat_id)
    else:
        if not database.is_left_enabled(chat_id):
            return 0
        template = database.left_text(chat_id)

    sent = 0
    for participant in participants:
        mention = f"@{strip_user_suffix(participant)}"
        await ctx.connection.send_message(
            chat_id,
            {"text": template.replace("@user", mention)},
            SendOptions(mentions=(participant,)),
        )
        sent += 1
    return sent
