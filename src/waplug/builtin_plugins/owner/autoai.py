from __future__ import annotations

from typing import TYPE_CHECKING

from waplug.connection import reply_options

if TYPE_CHECKING:
    from waplug.context import AppContext
    from waplug.events import IncomingEvent
    from waplug.parse import ParsedCommand

command = "autoai"
tags = "Owner Menu"
desc = "Mengaktifkan atau menonaktifkan balasan AI otomatis"
owner = True

_ON = {"on", "enable", "1"}
_OFF = {"off", "disable", "0"}


async def run(
    ctx: AppContext, event: IncomingEvent, parsed: ParsedCommand
) -> None:
    chat = parsed.chat_info
    options = reply_options(event)
    choice = parsed.args[0].lower() if parsed.args else ""
    if choice not in _ON | _OFF:
        await ctx.connection.send_message(
            chat.chat_id,
            {"text": f"Gunakan: {parsed.prefix}{parsed.command_text} on/off"},
            options,
        )
        return
    enabled = choice in _ON
    if chat.is_group:
        ctx.database.set_auto_ai(chat.chat_id, enabled)
    else:
        ctx.database.set_user_auto_ai(chat.sender_id, enabled)
    state = "aktif" if enabled else "nonaktif"
    await ctx.connection.send_message(
        chat.chat_id, {"text": f"✅ Auto AI {state}."}, options
    )
