from __future__ import annotations

import anyio
from anyio.abc import TaskGroup

from .context import AppContext
from .format import format_uptime
from .logging import get_logger

logger = get_logger(__name__)


def bio_text(ctx: AppContext) -> str:
    return f"{ctx.settings.bot_name} Aktif {format_uptime(ctx.uptime())}"


class BioUpdater:
    """Refreshes the bot's profile status on an interval; one active loop at most."""

    def __init__(self, ctx: AppContext) -> None:
        self.ctx = ctx
        self._scope: anyio.CancelScope | None = None

    @property
    def running(self) -> bool:
        return self._scope is not None and not self._scope.cancel_called

    def start(self, task_group: TaskGroup) -> None:
        self.stop()
        scope = anyio.CancelScope()
        self._scope = scope
        task_group.start_soon(self._run, scope)

    def stop(self) -> None:
        if self._scope is not None:
            self._scope.cancel()
            self._scope = None

    async def _run(self, scope: anyio.CancelScope) -> None:
        with scope:
            while True:
                await anyio.sleep(self.ctx.settings.bio_interval)
                if not self.ctx.settings.auto_bio:
                    logger.info("bio.disabled")
                    break
                await self.tick()
        if self._scope is scope:
            self._scope = None

    async def tick(self) -> None:
        try:
            await self.ctx.connection.update_profile_status(bio_text(self.ctx))
        except Exception as exc:
            logger.warning(
                "bio.update_failed",
                error=str(exc),
                error_type=exc.__class__.__name__,
            )
