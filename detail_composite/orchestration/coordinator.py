"""
Request coordinator: recomputation detection and stale-result suppression.
"""

import asyncio
from typing import Callable, Optional

from detail_composite.clients.interfaces import SaveTrigger
from detail_composite.core.config import settings
from detail_composite.core.constants import INITIAL_MARKER, REFRESH_MARKER, ControlStatus
from detail_composite.core.exceptions import DetailCompositeError
from detail_composite.core.logging import LogContext, get_logger
from detail_composite.domain.context import BoundContext, ControlView, RequestContext, SaveRequest
from detail_composite.orchestration.autosave import AutoSaveTrigger
from detail_composite.orchestration.state_machine import create_control_state_machine
from detail_composite.repositories.cache_repo import EnvironmentConfigCache
from detail_composite.services.composite_service import CompositeResult, CompositeService

logger = get_logger(__name__)


class RequestCoordinator:
    """
    Host-facing state of one composite control.

    The host drives it through explicit lifecycle calls: ``initialize``,
    ``update_view`` on every property change, ``get_outputs``, ``refresh``
    from the rendering surface and ``destroy`` on teardown. Each change of
    the (config, entity id, entity name) triple starts a computation; only
    the most recently started one may change the control's state.
    """

    def __init__(
        self,
        service: CompositeService,
        save_trigger: Optional[SaveTrigger] = None,
        on_output_changed: Optional[Callable[[], None]] = None,
        autosave_delay_seconds: Optional[float] = None,
    ) -> None:
        """
        Initialize the coordinator.

        Args:
            service: Resolution pipeline
            save_trigger: Persists the value after a change; when absent the
                host is only notified
            on_output_changed: Host notification callback
            autosave_delay_seconds: Delay before auto-save, defaults to settings
        """
        self.service = service
        self.on_output_changed = on_output_changed

        if autosave_delay_seconds is None:
            autosave_delay_seconds = settings.engine.autosave_delay_seconds
        self.autosave = AutoSaveTrigger(
            save_trigger=save_trigger,
            delay_seconds=autosave_delay_seconds,
            fallback=self._notify,
        )
        self.state = create_control_state_machine()

        self._value = ""
        self._is_loading = False
        self._error: Optional[str] = None

        self._last_request = RequestContext(INITIAL_MARKER, INITIAL_MARKER, INITIAL_MARKER)
        self._request_id = 0
        self._tasks: set[asyncio.Task[bool]] = set()

    @property
    def cache(self) -> EnvironmentConfigCache:
        return self.service.resolver.cache

    @property
    def request_id(self) -> int:
        """Id of the most recently started computation."""
        return self._request_id

    @property
    def view(self) -> ControlView:
        return ControlView(
            value=self._value,
            is_loading=self._is_loading,
            error=self._error,
            status=ControlStatus(self.state.current),
        )

    # -------------------------
    # Lifecycle
    # -------------------------

    def initialize(self, bound_value: Optional[str] = None) -> None:
        """Show the field's current value until the first computation lands."""
        self._value = bound_value if isinstance(bound_value, str) else ""

    def update_view(self, context: BoundContext) -> ControlView:
        """
        Take the host's current inputs and start a computation if they changed.

        Must be called from a running event loop.
        """
        if (
            context.bound_value is not None
            and not self._is_loading
            and context.bound_value != self._value
        ):
            self._value = context.bound_value

        request = context.request
        if request != self._last_request:
            self._last_request = request
            self._start(context)

        return self.view

    def get_outputs(self) -> dict[str, str]:
        """Value to write to the bound field."""
        return {"value": self._value}

    def refresh(self) -> None:
        """
        Force the next update to recompute.

        Also drops cached environment configuration and re-arms auto-save.
        """
        self._last_request = RequestContext(REFRESH_MARKER, REFRESH_MARKER, REFRESH_MARKER)
        self.autosave.reset()
        self.cache.clear()
        logger.info("Refresh requested")
        self._notify()

    def destroy(self) -> None:
        """Tear down: in-flight computations are dropped when they complete."""
        self._request_id += 1
        self._is_loading = False
        self.cache.clear()
        self.autosave.cancel()

    async def wait_idle(self) -> None:
        """Wait until every in-flight computation has completed."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # -------------------------
    # Computation
    # -------------------------

    def _start(self, context: BoundContext) -> None:
        self._request_id += 1
        request_id = self._request_id

        self._is_loading = True
        self._error = None
        self.state.transition(ControlStatus.COMPUTING.value, request_id=request_id)
        self._notify()

        task = asyncio.get_running_loop().create_task(self._compute(request_id, context))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _compute(self, request_id: int, context: BoundContext) -> bool:
        """
        Resolve and apply one request.

        Returns:
            True if the result (value or error) was applied
        """
        with LogContext(request_id=request_id, entity_name=context.entity_name):
            try:
                result = await self.service.resolve(context.request, context.bound_field)
            except Exception as e:
                if self._is_stale(request_id):
                    return False
                self._apply_error(request_id, e)
                return False

            if self._is_stale(request_id):
                return False
            self._apply_result(request_id, context, result)
            return True

    def _is_stale(self, request_id: int) -> bool:
        if request_id == self._request_id:
            return False
        logger.debug("Discarding stale result", latest_request_id=self._request_id)
        return True

    def _apply_result(self, request_id: int, context: BoundContext, result: CompositeResult) -> None:
        value_changed = self._value != result.value

        self._value = result.value
        self._is_loading = False
        self._error = None
        self.state.transition(ControlStatus.IDLE.value, request_id=request_id)
        self._notify()

        if value_changed and result.auto_save and not self.autosave.has_fired:
            self.autosave.schedule(
                SaveRequest(
                    entity_name=context.entity_name,
                    entity_id=context.entity_id,
                    field_name=context.bound_field,
                    value=result.value,
                )
            )

    def _apply_error(self, request_id: int, error: Exception) -> None:
        if isinstance(error, DetailCompositeError):
            message = error.message
            logger.warning("Composite resolution failed", code=error.code, error=message)
        else:
            message = str(error)
            logger.exception("Unexpected error during composite resolution")

        self._is_loading = False
        self._error = message
        self.state.transition(ControlStatus.ERROR.value, request_id=request_id, error=message)
        self._notify()

    def _notify(self) -> None:
        if self.on_output_changed is not None:
            self.on_output_changed()
