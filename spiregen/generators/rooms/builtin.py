"""
Built-in demo room catalog.

All rooms are authored on a 10 unit grid: doorway sockets sit on the cell
walls at +-5 and room bounds are inset 0.25 from every socket wall, so two
rooms snapped door to door keep a 0.5 gap between their boxes.
"""

from typing import Tuple

from ..layout.spatial import AABB
from .catalog import RoomCatalog
from .room_template import RoomTemplate
from .socket_system import SocketTemplate, SocketType

HALF_CELL = 5.0
WALL_INSET = 0.25
ROOM_HEIGHT = 4.0

START_TEMPLATE_ID = "hall_cross"
TERMINUS_TEMPLATE_ID = "boss_arena"
CONNECTOR_TEMPLATE_ID = "connector_bridge"


def _socket(socket_id: str, direction: str, low_priority: bool = False,
            socket_type: SocketType = SocketType.DOOR_SMALL) -> SocketTemplate:
    """Doorway socket on one wall of a single grid cell."""
    poses = {
        "n": ((0.0, 0.0, HALF_CELL), (0.0, 0.0, 1.0)),
        "s": ((0.0, 0.0, -HALF_CELL), (0.0, 0.0, -1.0)),
        "e": ((HALF_CELL, 0.0, 0.0), (1.0, 0.0, 0.0)),
        "w": ((-HALF_CELL, 0.0, 0.0), (-1.0, 0.0, 0.0)),
    }
    position, forward = poses[direction]
    return SocketTemplate(socket_id, position, forward, socket_type, 0, low_priority)


def _cell_bounds(height: float = ROOM_HEIGHT) -> AABB:
    edge = HALF_CELL - WALL_INSET
    return AABB(-edge, 0.0, -edge, edge, height, edge)


def _room(template_id: str, sockets: Tuple[SocketTemplate, ...], **flags) -> RoomTemplate:
    bounds = flags.pop("local_bounds", None) or _cell_bounds()
    return RoomTemplate(template_id=template_id, sockets=sockets, local_bounds=bounds, **flags)


def builtin_templates() -> Tuple[RoomTemplate, ...]:
    return (
        _room("hall_cross",
              (_socket("n", "n"), _socket("s", "s"), _socket("e", "e"), _socket("w", "w")),
              weight=3),
        _room("hall_straight", (_socket("n", "n"), _socket("s", "s")),
              weight=4, repeat_cooldown=2),
        _room("hall_corner", (_socket("s", "s"), _socket("e", "e")), weight=2),
        _room("chamber_t",
              (_socket("s", "s"), _socket("e", "e"), _socket("w", "w"),
               _socket("n_service", "n", low_priority=True)),
              weight=2, repeat_cooldown=3),
        _room("vault", (_socket("s", "s"), _socket("gate", "n", socket_type=SocketType.DOOR_LARGE)),
              weight=1, unique_per_slice=True),
        _room("landmark_shrine", (_socket("n", "n"), _socket("s", "s"), _socket("e", "e")),
              weight=1, landmark=True,
              local_bounds=_cell_bounds(ROOM_HEIGHT * 2)),
        # Terminus: one doorway on the south wall, arena extends two cells north.
        _room(TERMINUS_TEMPLATE_ID, (_socket("entry", "s"),),
              weight=1,
              local_bounds=AABB(-HALF_CELL * 2 + WALL_INSET, 0.0, -HALF_CELL + WALL_INSET,
                                HALF_CELL * 2 - WALL_INSET, ROOM_HEIGHT * 2,
                                HALF_CELL * 3 - WALL_INSET)),
        _room(CONNECTOR_TEMPLATE_ID, (_socket("a", "s"), _socket("b", "n")),
              weight=1, connector=True),
    )


def builtin_catalog() -> RoomCatalog:
    """Fresh catalog holding the demo templates."""
    return RoomCatalog(builtin_templates())
