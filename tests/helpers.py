"""Small hand-authored catalogs and context builders for layout tests."""

from __future__ import annotations

from typing import Optional, Sequence

from spiregen.generators.layout.layout_graph import LayoutGraph
from spiregen.generators.layout.spatial import AABB
from spiregen.generators.layout.spatial_host import BoxSpatialHost
from spiregen.generators.rng import create_stream
from spiregen.generators.rooms.catalog import RoomCatalog
from spiregen.generators.rooms.room_template import RoomTemplate
from spiregen.generators.rooms.socket_system import SocketTemplate, SocketType
from spiregen.pipeline.passes.context import BuildContext
from spiregen.pipeline.settings import GeneratorSettings

# Doorways sit on the walls of a 10 unit cell; boxes are inset 0.25.
CELL_BOUNDS = AABB(-4.75, 0.0, -4.75, 4.75, 4.0, 4.75)

DIRECTIONS = {
    "n": ((0.0, 0.0, 5.0), (0.0, 0.0, 1.0)),
    "s": ((0.0, 0.0, -5.0), (0.0, 0.0, -1.0)),
    "e": ((5.0, 0.0, 0.0), (1.0, 0.0, 0.0)),
    "w": ((-5.0, 0.0, 0.0), (-1.0, 0.0, 0.0)),
}


def make_socket(direction: str, socket_id: Optional[str] = None,
                socket_type: SocketType = SocketType.DOOR_SMALL,
                low_priority: bool = False) -> SocketTemplate:
    position, forward = DIRECTIONS[direction]
    return SocketTemplate(socket_id or direction, position, forward, socket_type, 0, low_priority)


def make_room(template_id: str, directions: Sequence[str] = "nsew", **flags) -> RoomTemplate:
    """Single-cell room with one small door per listed wall."""
    sockets = tuple(make_socket(d) for d in directions)
    return RoomTemplate(template_id=template_id, sockets=sockets, local_bounds=CELL_BOUNDS, **flags)


def cross_catalog() -> RoomCatalog:
    return RoomCatalog([make_room("cross")])


def make_context(catalog: RoomCatalog, settings: Optional[GeneratorSettings] = None,
                 seed: int = 1, host: Optional[BoxSpatialHost] = None) -> BuildContext:
    settings = settings or GeneratorSettings()
    return BuildContext(LayoutGraph(seed), catalog, settings, host or BoxSpatialHost(),
                        create_stream(seed, settings.rng_stream))


def place(ctx: BuildContext, template: RoomTemplate, position=(0.0, 0.0, 0.0), yaw: int = 0) -> int:
    """Put a room into the graph without any checks or connections."""
    handle, bounds = ctx.host.instantiate(template, position, yaw)
    return ctx.add_room(template, position, yaw, handle, bounds)


def run_phase(phase, limit: int = 10000) -> int:
    """Advance a phase to completion; returns the number of calls."""
    for calls in range(1, limit + 1):
        if phase.advance():
            return calls
    raise AssertionError(f"{phase.name} did not finish within {limit} calls")


def used_socket_keys(snapshot) -> list:
    keys = []
    for conn in snapshot.connections:
        keys.append((conn.a.room_index, conn.a.socket_id))
        keys.append((conn.b.room_index, conn.b.socket_id))
    return keys
