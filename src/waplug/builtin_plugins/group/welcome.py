"""Toggle and customise join/leave greetings for a group.

    .welcome on [text]    .welcome off
    .left on [text]       .left off
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from waplug.connection import reply_options

if TYPE_CHECKING:
    from waplug.context import AppContext
    from waplug.events import IncomingEvent
    from waplug.parse import ParsedCommand

command = ["welcome", "left"]
tags = "Group Menu"
desc = "Atur pesan sambutan dan perpisahan grup"


async def run(
    ctx: AppContext, event: IncomingEvent, parsed: ParsedCommand
) -> None:
    chat = parsed.chat_info
    options = reply_options(event)
    if not chat.is_group:
        await ctx.connection.send_message(
            chat.chat_id, {"text": "Perintah ini hanya untuk grup."}, options
        )
        return

    choice = parsed.args[0].lower() if parsed.args else ""
    if choice not in {"on", "off"}:
        await ctx.connection.send_message(
            chat.chat_id,
            {"text": f"Gunakan: {parsed.prefix}{parsed.command_text} on/off [teks]"},
            options,
        )
        return

    enabled = choice == "on"
    text = " ".join(parsed.args[1:]) or None
    database = ctx.database
    if parsed.command_text == "welcome":
        database.set_welcome(chat.chat_id, enabled, text)
        current = database.welcome_text(chat.chat_id)
        label = "Welcome"
    else:
        database.set_left(chat.chat_id, enabled, text)
        current = database.left_text(chat.chat_id)
        label = "Left"
    state = "aktif" if enabled else "nonaktif"
    await ctx.connection.send_message(
        chat.chat_id, {"text": f"✅ {label} {state}.\n{current}"}, options
    )
