from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

import httpx

from .connection import Connection
from .events import IncomingEvent
from .plugins import PluginRegistry
from .settings import BotSettings
from .store import BotDatabase


@dataclass(frozen=True, slots=True)
class AiReply:
    status: bool
    result: str | None = None


type AiResponder = Callable[[str, IncomingEvent, str], Awaitable[AiReply | None]]


@dataclass(slots=True)
class AppContext:
    """Everything a dispatcher and plugin handlers need, built once at startup."""

    settings: BotSettings
    connection: Connection
    database: BotDatabase
    registry: PluginRegistry
    http: httpx.AsyncClient
    ai: AiResponder | None = None
    started_at: float = field(default_factory=time.monotonic)

    @classmethod
    def create(
        cls,
        settings: BotSettings,
        connection: Connection,
        *,
        http: httpx.AsyncClient | None = None,
        ai: AiResponder | None = None,
    ) -> AppContext:
        settings.temp_dir.mkdir(parents=True, exist_ok=True)
        database = BotDatabase(settings.database_path)
        database.init()
        return cls(
            settings=settings,
            connection=connection,
            database=database,
            registry=PluginRegistry(settings.plugins_dir),
            http=http or httpx.AsyncClient(follow_redirects=True),
            ai=ai,
        )

    def uptime(self) -> float:
        return time.monotonic() - self.started_at

    async def aclose(self) -> None:
        await self.http.aclose()
