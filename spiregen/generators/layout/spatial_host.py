"""
Spatial host collaborator.

The builder never touches geometry directly. It asks a spatial host to
instantiate a template at a world pose and receives an opaque handle plus the
instance's world bounds; rejected or backtracked rooms are handed back through
``destroy``. Engines plug in their own host; ``BoxSpatialHost`` is the
reference implementation driven by each template's authored bounds.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from itertools import count
from typing import Any, Dict, Tuple

from ..rooms.room_template import RoomTemplate
from ..rooms.socket_system import Vec3
from .geometry import add, rotate
from .spatial import AABB

# Fallback extents when a template has no authored bounds.
DEFAULT_ROOM_SIZE: Vec3 = (1.0, 1.0, 1.0)


class SpatialHost(ABC):
    """Narrow geometry contract required by the layout builder."""

    @abstractmethod
    def instantiate(self, template: RoomTemplate, position: Vec3, yaw: int) -> Tuple[Any, AABB]:
        """Create an instance of ``template`` at the pose.

        Returns:
            (handle, world_bounds)
        """
        pass

    @abstractmethod
    def destroy(self, handle: Any) -> None:
        """Release an instance previously returned by ``instantiate``."""
        pass


def world_bounds(template: RoomTemplate, position: Vec3, yaw: int) -> AABB:
    """World AABB of a template's authored bounds at a pose."""
    local = template.local_bounds or AABB.around((0.0, 0.0, 0.0), DEFAULT_ROOM_SIZE)
    return AABB.from_points([add(position, rotate(c, yaw)) for c in local.corners])


class BoxSpatialHost(SpatialHost):
    """Instantiates rooms as boxes; keeps track of live instances."""

    def __init__(self):
        self._ids = count(1)
        self._live: Dict[int, Tuple[str, Vec3, int]] = {}
        self.instantiate_calls = 0
        self.destroy_calls = 0

    def instantiate(self, template: RoomTemplate, position: Vec3, yaw: int) -> Tuple[int, AABB]:
        self.instantiate_calls += 1
        handle = next(self._ids)
        self._live[handle] = (template.template_id, position, yaw)
        return handle, world_bounds(template, position, yaw)

    def destroy(self, handle: Any) -> None:
        if handle not in self._live:
            raise KeyError(f"Unknown or already destroyed room handle: {handle!r}")
        self.destroy_calls += 1
        del self._live[handle]

    @property
    def live_count(self) -> int:
        return len(self._live)
