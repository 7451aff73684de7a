"""Brat-style text stickers, still (``brat``) or animated (``bratvid``)."""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

import anyio
import httpx

from waplug.connection import reply_options
from waplug.download import fetch_bytes
from waplug.logging import get_logger
from waplug.media import MediaConversionError, convert_to_webp

if TYPE_CHECKING:
    from waplug.context import AppContext
    from waplug.events import IncomingEvent
    from waplug.parse import ParsedCommand

logger = get_logger(__name__)

command = ["brat", "bratvid"]
tags = "Tools Menu"
desc = "Membuat stiker brat"
prefix = True


def _label(is_video: bool) -> str:
    return "Brat Video" if is_video else "Brat Sticker"


async def run(
    ctx: AppContext, event: IncomingEvent, parsed: ParsedCommand
) -> None:
    chat_id = parsed.chat_info.chat_id
    options = reply_options(event)
    is_video = parsed.command_text == "bratvid"
    label = _label(is_video)

    if not parsed.args:
        await ctx.connection.send_message(
            chat_id, {"text": f"Masukkan teks untuk {label}!"}, options
        )
        return

    try:
        data = await fetch_bytes(
            ctx.http,
            ctx.settings.brat_api_url,
            params={"apikey": ctx.settings.brat_api_key, "text": " ".join(parsed.args)},
            headers={
                "User-Agent": "Mozilla/5.0",
                "Accept": "video/mp4" if is_video else "image/png",
            },
        )
    except httpx.HTTPError as exc:
        logger.warning("brat.fetch_failed", label=label, error=str(exc))
        data = b""

    if not data:
        await ctx.connection.send_message(
            chat_id, {"text": f"Gagal mengambil {label}. Coba lagi nanti."}, options
        )
        return

    stem = f"brat-{uuid.uuid4().hex}"
    temp_dir = ctx.settings.temp_dir
    await anyio.Path(temp_dir).mkdir(parents=True, exist_ok=True)
    input_path = temp_dir / f"{stem}.{'mp4' if is_video else 'png'}"
    output_path = temp_dir / f"{stem}.webp"
    await anyio.Path(input_path).write_bytes(data)

    try:
        try:
            await convert_to_webp(input_path, output_path, animated=is_video)
        except MediaConversionError as exc:
            logger.warning("brat.convert_failed", label=label, error=str(exc))
            failure = (
                "Gagal mengubah video ke stiker bergerak."
                if is_video
                else "Gagal mengubah gambar ke stiker."
            )
            await ctx.connection.send_message(chat_id, {"text": failure}, options)
            return
        sticker = await anyio.Path(output_path).read_bytes()
        await ctx.connection.send_message(chat_id, {"sticker": sticker}, options)
    finally:
        await anyio.Path(input_path).unlink(missing_ok=True)
        await anyio.Path(output_path).unlink(missing_ok=True)
