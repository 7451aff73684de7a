"""Narrow wrapper around ffmpeg for turning images and clips into WebP stickers."""

from __future__ import annotations

import shutil
from pathlib import Path

from .logging import get_logger
from .utils.subprocess import run_command

logger = get_logger(__name__)

FFMPEG = "ffmpeg"
STICKER_SIZE = 512


class MediaConversionError(RuntimeError):
    pass


def sticker_command(
    input_path: Path, output_path: Path, *, animated: bool, ffmpeg: str = FFMPEG
) -> list[str]:
    scale = f"scale={STICKER_SIZE}:{STICKER_SIZE}:force_original_aspect_ratio=decrease"
    if animated:
        return [
            ffmpeg,
            "-y",
            "-i",
            str(input_path),
            "-vf",
            f"{scale},fps=15",
            "-c:v",
            "libwebp",
            "-loop",
            "0",
            "-preset",
            "default",
            "-an",
            "-vsync",
            "0",
            str(output_path),
        ]
    return [
        ffmpeg,
        "-y",
        "-i",
        str(input_path),
        "-vf",
        scale,
        "-c:v",
        "libwebp",
        "-lossless",
        "1",
        str(output_path),
    ]


async def convert_to_webp(
    input_path: Path, output_path: Path, *, animated: bool = False
) -> Path:
    ffmpeg = shutil.which(FFMPEG)
    if ffmpeg is None:
        raise MediaConversionError("ffmpeg was not found on PATH")
    cmd = sticker_command(input_path, output_path, animated=animated, ffmpeg=ffmpeg)
    result = await run_command(cmd)
    if result.returncode != 0:
        logger.error(
            "media.convert_failed",
            input=str(input_path),
            returncode=result.returncode,
            stderr=result.stderr[-500:],
        )
        raise MediaConversionError(
            f"ffmpeg exited with status {result.returncode} for {input_path.name}"
        )
    return output_path
