"""Keep the map's collision layer in step with the viewport and the filter form.

Two event sources, a settled viewport and a changed form, both converge on
:meth:`RefreshController.refresh`. Every refresh rebuilds the form parameters
from scratch, reads the live extent and fetches. Each request is tagged with a
monotonically increasing sequence number; only the newest request's outcome is
ever applied, so a slow, superseded response can never overwrite a newer one.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Any, Callable, Optional

from ._encoding import FormControl, encode_parameters
from ._exceptions import QueryError
from ._fetcher import DataFetcher
from ._render import FeatureRenderer, RenderedLayer
from ._settings import BikeDataSettings
from ._utils import _run_sync
from ._viewport import ViewportTracker

logger = logging.getLogger(__name__)


class RefreshState(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    RENDERED = "rendered"
    FAILED = "failed"


class RefreshController:
    """Single writer of the collision layer displayed on the map.

    Args:
        settings: Application settings.
        map_: Map the layer is added to (``add``/``remove``).
        viewport: Tracker exposing the current extent and settle events.
        form: Object with ``controls() -> list[FormControl]`` and
            ``on_change(callback)``.
        fetcher: Locations fetcher.
        renderer: Feature renderer.
        notify: Called with a message when a refresh fails.
        on_rendered: Called with no arguments after a new layer is displayed.
    """

    def __init__(
        self,
        settings: BikeDataSettings,
        map_: Any,
        viewport: ViewportTracker,
        form: Any,
        fetcher: DataFetcher,
        renderer: FeatureRenderer,
        notify: Callable[[str], None],
        on_rendered: Optional[Callable[[], None]] = None,
    ):
        self._settings = settings
        self._map = map_
        self._viewport = viewport
        self._form = form
        self._fetcher = fetcher
        self._renderer = renderer
        self._notify = notify
        self._on_rendered = on_rendered

        self.state = RefreshState.IDLE
        self.rendered: Optional[RenderedLayer] = None
        self._issued = 0
        self._task: Optional[asyncio.Task] = None

    def parameters(self) -> dict[str, str]:
        controls: list[FormControl] = self._form.controls()
        return encode_parameters(controls, self._settings.delimiter)

    def start(self) -> None:
        """Subscribe to both event sources and issue the initial refresh."""
        self._viewport.on_extent_settled(lambda _extent: self.request_refresh("viewport"))
        self._form.on_change(lambda: self.request_refresh("form"))
        self.request_refresh("initial")

    def request_refresh(self, reason: str) -> None:
        """Schedule a refresh from a synchronous widget callback.

        Any refresh still in flight is cancelled. Inside a running event loop
        (a Jupyter kernel) the refresh runs as a task; otherwise it runs to
        completion before returning.
        """
        if self._task is not None and not self._task.done():
            self._task.cancel()
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None
        if loop is None:
            try:
                _run_sync(self.refresh(reason))
            except Exception as e:
                self._fail_unexpectedly(e)
            return
        self._task = loop.create_task(self.refresh(reason))
        self._task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled() or task is not self._task:
            return
        error = task.exception()
        if error is not None:
            self._fail_unexpectedly(error)

    def _fail_unexpectedly(self, error: BaseException) -> None:
        logger.error("Refresh failed unexpectedly", exc_info=error)
        self.state = RefreshState.FAILED
        self._notify(f"Unexpected error while refreshing the map: {error}")

    async def refresh(self, reason: str = "manual") -> RefreshState:
        """Run one refresh cycle.

        Args:
            reason: Trigger name, used for logging only.

        Returns:
            The controller state after this cycle.
        """
        parameters = self.parameters()
        extent = self._viewport.current_extent()
        if extent is None:
            logger.debug("Refresh (%s) skipped: map has not reported its bounds yet", reason)
            return self.state

        self._issued += 1
        sequence = self._issued
        self.state = RefreshState.FETCHING
        logger.info("Refresh #%d (%s) bbox=%s params=%s", sequence, reason, extent, parameters)

        try:
            collection = await self._fetcher.fetch(extent, parameters, self._settings.api_key)
        except QueryError as e:
            if sequence != self._issued:
                logger.debug("Discarding failure of stale refresh #%d", sequence)
                return self.state
            logger.warning("Refresh #%d failed: %s", sequence, e.message)
            self.state = RefreshState.FAILED
            self._notify(e.message)
            return self.state

        if sequence != self._issued:
            logger.debug("Discarding stale refresh #%d (latest is #%d)", sequence, self._issued)
            return self.state

        self._display(self._renderer.render(collection))
        self.state = RefreshState.RENDERED
        if self._on_rendered is not None:
            self._on_rendered()
        return self.state

    def _display(self, rendered: RenderedLayer) -> None:
        if self.rendered is not None:
            self._map.remove(self.rendered.layer)
        self._map.add(rendered.layer)
        self.rendered = rendered
