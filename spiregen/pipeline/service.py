"""
Layout service: owns the current build and publishes finished layouts.

The service is an explicit object created by the caller. It receives the
catalog, settings and spatial host at construction, starts a new build for
every seed it is given and notifies registered listeners exactly once per
finished build.
"""

import logging
from typing import Callable, List, Optional

from ..generators.layout.layout_graph import LayoutSnapshot
from ..generators.layout.spatial_host import SpatialHost
from ..generators.rooms.catalog import RoomCatalog
from .builder import BuildResult, LayoutBuilder
from .settings import GeneratorSettings

logger = logging.getLogger(__name__)

LayoutListener = Callable[[LayoutSnapshot], None]


class LayoutService:
    """Drives layout builds from a scheduler tick."""

    def __init__(self, catalog: RoomCatalog, host: SpatialHost,
                 settings: Optional[GeneratorSettings] = None):
        self.catalog = catalog
        self.host = host
        self.settings = settings or GeneratorSettings()
        self.settings.validate()
        self._builder: Optional[LayoutBuilder] = None
        self._emitted = False
        self._listeners: List[LayoutListener] = []
        self.last_result: Optional[BuildResult] = None

    # -- listeners --

    def on_layout_generated(self, callback: LayoutListener) -> Callable[[], None]:
        """Register a listener for finished layouts.

        Returns:
            Callable that unregisters the listener
        """
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    def _emit(self, snapshot: LayoutSnapshot) -> None:
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Layout listener %r failed", listener)

    # -- builds --

    @property
    def is_building(self) -> bool:
        return self._builder is not None and not self._builder.finished

    @property
    def seed(self) -> Optional[int]:
        return self._builder.seed if self._builder is not None else None

    @property
    def snapshot(self) -> Optional[LayoutSnapshot]:
        return self.last_result.snapshot if self.last_result is not None else None

    def set_seed(self, seed: int) -> None:
        """Start building the layout for ``seed``.

        An in-flight build is cancelled and the previous layout's rooms are
        destroyed before the new build starts.
        """
        self._discard_current()
        self._builder = None
        self.last_result = None
        logger.info("Starting layout build for seed %d", seed)
        self._builder = LayoutBuilder(self.catalog, self.settings, self.host, seed)
        self._emitted = False

    def tick(self) -> bool:
        """Advance the current build by one slice.

        Returns:
            True when there is no build in progress
        """
        if self._builder is None:
            return True
        if self._emitted:
            return True
        if not self._builder.step():
            return False

        self._emitted = True
        self.last_result = self._builder.result
        self._emit(self.last_result.snapshot)
        return True

    def generate(self, seed: int) -> LayoutSnapshot:
        """Build the layout for ``seed`` synchronously."""
        self.set_seed(seed)
        while not self.tick():
            pass
        return self.last_result.snapshot

    def shutdown(self) -> None:
        """Tear down the current build or layout and drop every listener."""
        self._discard_current()
        self._builder = None
        self._listeners.clear()

    def _discard_current(self) -> None:
        builder = self._builder
        if builder is None:
            return
        if builder.finished:
            destroyed = builder.destroy_rooms()
            logger.debug("Destroyed %d rooms of the layout for seed %d", destroyed, builder.seed)
        else:
            builder.cancel()
