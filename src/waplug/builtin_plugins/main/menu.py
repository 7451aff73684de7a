from __future__ import annotations

from typing import TYPE_CHECKING

from waplug.connection import reply_options
from waplug.format import format_uptime, real_time

if TYPE_CHECKING:
    from waplug.context import AppContext
    from waplug.events import IncomingEvent
    from waplug.parse import ParsedCommand

command = ["menu", "help"]
tags = "Main Menu"
desc = "Menampilkan daftar perintah"


def render_menu(ctx: AppContext, parsed: ParsedCommand) -> str:
    settings = ctx.settings
    lines = [
        f"*{settings.bot_name}*",
        f"Halo {parsed.chat_info.push_name}",
        f"Waktu: {real_time(settings.timezone)}",
        f"Aktif: {format_uptime(ctx.uptime())}",
        "",
    ]
    for tag in sorted(ctx.registry.categories):
        lines.append(f"*{tag}*")
        for commands in ctx.registry.categories[tag]:
            for name in commands:
                lines.append(f"  {parsed.prefix}{name}")
        lines.append("")
    return "\n".join(lines).rstrip()


async def run(
    ctx: AppContext, event: IncomingEvent, parsed: ParsedCommand
) -> None:
    await ctx.connection.send_message(
        parsed.chat_info.chat_id,
        {"text": render_menu(ctx, parsed)},
        reply_options(event),
    )
