"""
One-shot delayed auto-save.
"""

import asyncio
from typing import Callable, Optional

from detail_composite.clients.interfaces import SaveTrigger
from detail_composite.core.logging import get_logger
from detail_composite.domain.context import SaveRequest

logger = get_logger(__name__)


class AutoSaveTrigger:
    """
    Fires at most one save per lifetime until ``reset()``.

    The save runs after ``delay_seconds`` so the host has registered the
    new output value first. Without a save trigger the fallback callback
    (usually the host's output-changed notification) is invoked instead.
    """

    def __init__(
        self,
        save_trigger: Optional[SaveTrigger] = None,
        delay_seconds: float = 0.5,
        fallback: Optional[Callable[[], None]] = None,
    ) -> None:
        self.save_trigger = save_trigger
        self.delay_seconds = delay_seconds
        self.fallback = fallback

        self._fired = False
        self._handle: Optional[asyncio.TimerHandle] = None
        self._launched: Optional[asyncio.Future[None]] = None
        self._task: Optional[asyncio.Task[None]] = None

    @property
    def has_fired(self) -> bool:
        return self._fired

    def schedule(self, request: SaveRequest) -> bool:
        """
        Schedule the save unless one has already fired.

        Returns:
            True if a save was scheduled
        """
        if self._fired:
            return False

        self._fired = True
        loop = asyncio.get_running_loop()
        self._launched = loop.create_future()
        self._handle = loop.call_later(self.delay_seconds, self._launch, request)
        logger.debug("Auto-save scheduled", delay=self.delay_seconds, entity=request.entity_name)
        return True

    def _launch(self, request: SaveRequest) -> None:
        self._handle = None
        self._task = asyncio.ensure_future(self._save(request))
        self._settle()

    async def _save(self, request: SaveRequest) -> None:
        try:
            if self.save_trigger is not None:
                await self.save_trigger.save(request)
            elif self.fallback is not None:
                self.fallback()
            logger.info("Auto-save completed", entity=request.entity_name, field=request.field_name)
        except Exception as e:
            logger.warning(
                "Auto-save failed",
                entity=request.entity_name,
                entity_id=request.entity_id,
                error=str(e),
            )

    def reset(self) -> None:
        """Allow one more save."""
        self._fired = False

    def cancel(self) -> None:
        """Cancel a save that has not started yet."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._settle()

    def _settle(self) -> None:
        # Launched or cancelled; either way nothing is pending any more
        if self._launched is not None and not self._launched.done():
            self._launched.set_result(None)

    async def wait(self) -> None:
        """Wait for a scheduled or started save to finish."""
        if self._launched is not None:
            await self._launched
        if self._task is not None:
            await self._task
