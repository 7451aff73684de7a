from __future__ import annotations

from .connection import reply_options
from .context import AppContext
from .events import IncomingEvent
from .jid import bot_jid
from .logging import get_logger

logger = get_logger(__name__)

AI_FALLBACK_REPLY = "Maaf, saya tidak mengerti."


async def reply_with_ai(
    ctx: AppContext,
    event: IncomingEvent,
    text: str,
    *,
    sender_id: str,
    chat_id: str,
) -> bool:
    """Answer ``text`` through the AI responder when auto-AI applies to this chat.

    Returns ``True`` when a reply was sent.
    """
    if ctx.ai is None:
        return False
    bot_raw_id = ctx.connection.user.id
    if sender_id == bot_raw_id or event.key.from_me:
        return False

    bot_number = bot_jid(bot_raw_id)
    context = event.context_info
    mentioned = (context.mentioned_jid or []) if context is not None else []
    participant = (context.participant or "") if context is not None else ""
    is_reply_to_bot = participant == bot_number
    is_mention = bot_number in mentioned

    # conversations aimed at someone else are left alone
    if context is not None and participant and not is_reply_to_bot and not is_mention:
        return False

    if not ctx.database.is_auto_ai_enabled(sender_id, chat_id):
        return False

    bot_name = ctx.settings.bot_name.lower()
    if not text:
        return False
    if bot_name not in text.lower() and not is_reply_to_bot and not is_mention:
        return False

    try:
        reply = await ctx.ai(text, event, sender_id)
    except Exception as exc:
        logger.exception(
            "autoai.failed",
            chat_id=chat_id,
            error=str(exc),
            error_type=exc.__class__.__name__,
        )
        reply = None

    if reply is not None and reply.status and reply.result:
        answer = reply.result
    else:
        answer = AI_FALLBACK_REPLY
    await ctx.connection.send_message(chat_id, {"text": answer}, reply_options(event))
    return True
