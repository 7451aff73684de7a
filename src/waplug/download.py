from __future__ import annotations

from pathlib import Path

import anyio
import httpx

from .logging import get_logger

logger = get_logger(__name__)


async def download(client: httpx.AsyncClient, url: str, path: Path) -> Path:
    """Stream ``url`` into ``path``; HTTP errors propagate to the caller."""
    path.parent.mkdir(parents=True, exist_ok=True)
    async with client.stream("GET", url) as response:
        response.raise_for_status()
        async with await anyio.open_file(path, "wb") as handle:
            async for chunk in response.aiter_bytes():
                await handle.write(chunk)
    logger.debug("download.complete", url=url, path=str(path))
    return path


async def fetch_bytes(
    client: httpx.AsyncClient,
    url: str,
    *,
    params: dict[str, str] | None = None,
    headers: dict[str, str] | None = None,
) -> bytes:
    response = await client.get(url, params=params, headers=headers)
    response.raise_for_status()
    return response.content
