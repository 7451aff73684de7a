from __future__ import annotations

import inspect

from .autoai import reply_with_ai
from .connection import reply_options
from .context import AppContext
from .events import IncomingEvent
from .jid import digits_only
from .logging import bound_event_context, get_logger
from .normalize import extract_chat
from .parse import ParsedCommand, parse_message, parse_no_prefix
from .plugins import Plugin

logger = get_logger(__name__)

OWNER_ONLY_NOTICE = "⚠️ Fitur ini khusus untuk owner bot."
PREMIUM_ONLY_NOTICE = "⚠️ Fitur ini khusus untuk pengguna premium."
GENERIC_FAILURE_NOTICE = "❌ Terjadi kesalahan saat menjalankan perintah. Coba lagi nanti."


async def check_owner(ctx: AppContext, plugin: Plugin, event: IncomingEvent) -> bool:
    if not plugin.owner:
        return True
    chat = extract_chat(event)
    if digits_only(chat.sender_id) in ctx.settings.owner_numbers:
        return True
    logger.info("dispatch.denied", plugin=plugin.name, gate="owner")
    await ctx.connection.send_message(
        chat.chat_id, {"text": OWNER_ONLY_NOTICE}, reply_options(event)
    )
    return False


async def check_premium(ctx: AppContext, plugin: Plugin, event: IncomingEvent) -> bool:
    if not plugin.premium:
        return True
    chat = extract_chat(event)
    if ctx.database.is_premium(chat.sender_id):
        return True
    logger.info("dispatch.denied", plugin=plugin.name, gate="premium")
    await ctx.connection.send_message(
        chat.chat_id, {"text": PREMIUM_ONLY_NOTICE}, reply_options(event)
    )
    return False


class Dispatcher:
    def __init__(self, ctx: AppContext) -> None:
        self.ctx = ctx

    def match(self, event: IncomingEvent) -> tuple[Plugin, ParsedCommand] | None:
        settings = self.ctx.settings
        registry = self.ctx.registry
        parsed = parse_message(event, settings.prefixes, bot_name=settings.bot_name)
        if parsed is not None:
            plugin = registry.find_command(parsed.command_text, prefixed=True)
            if plugin is not None:
                return plugin, parsed
        parsed = parse_no_prefix(event, bot_name=settings.bot_name)
        if parsed is not None:
            plugin = registry.find_command(parsed.command_text, prefixed=False)
            if plugin is not None:
                return plugin, parsed
        return None

    async def handle(self, event: IncomingEvent) -> bool:
        """Route one event; returns whether a plugin or the AI responder handled it."""
        if not event.key.remote_jid:
            return False
        chat = extract_chat(event, bot_name=self.ctx.settings.bot_name)
        with bound_event_context(chat_id=chat.chat_id, sender_id=chat.sender_id):
            matched = self.match(event)
            if matched is None:
                parsed = parse_no_prefix(event, bot_name=self.ctx.settings.bot_name)
                if parsed is None:
                    return False
                return await reply_with_ai(
                    self.ctx,
                    event,
                    parsed.text_message,
                    sender_id=chat.sender_id,
                    chat_id=chat.chat_id,
                )
            plugin, parsed = matched
            return await self.invoke(plugin, event, parsed)

    async def invoke(
        self, plugin: Plugin, event: IncomingEvent, parsed: ParsedCommand
    ) -> bool:
        if not await check_owner(self.ctx, plugin, event):
            return True
        if not await check_premium(self.ctx, plugin, event):
            return True
        logger.info("dispatch.run", plugin=plugin.name, command=parsed.command_text)
        try:
            result = plugin.run(self.ctx, event, parsed)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            logger.exception(
                "dispatch.failed",
                plugin=plugin.name,
                command=parsed.command_text,
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
            await self.ctx.connection.send_message(
                parsed.chat_info.chat_id,
                {"text": GENERIC_FAILURE_NOTICE},
                reply_options(event),
            )
        return True
