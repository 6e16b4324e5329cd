"""
Socket dressing plan for a finished layout.

Every connection gets one door connector, placed on the pre-existing side of
the snap. Every socket left unconnected gets a wall cap. Small and large
variants follow the socket type.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Set, Tuple

from ..generators.layout.geometry import socket_world_pose
from ..generators.layout.layout_graph import LayoutSnapshot
from ..generators.rooms.catalog import RoomCatalog
from ..generators.rooms.socket_system import SocketType, Vec3

logger = logging.getLogger(__name__)


class DressingKind(Enum):
    DOOR = "door"
    CAP = "cap"


PIECES: Dict[Tuple[DressingKind, SocketType], str] = {
    (DressingKind.DOOR, SocketType.DOOR_SMALL): "door_connector_small",
    (DressingKind.DOOR, SocketType.DOOR_LARGE): "door_connector_large",
    (DressingKind.CAP, SocketType.DOOR_SMALL): "wall_cap_small",
    (DressingKind.CAP, SocketType.DOOR_LARGE): "wall_cap_large",
}


@dataclass(frozen=True)
class DressingItem:
    kind: DressingKind
    piece: str
    room_index: int
    socket_id: str
    position: Vec3
    forward: Vec3


def plan_dressing(snapshot: LayoutSnapshot, catalog: RoomCatalog) -> List[DressingItem]:
    """List the door connectors and wall caps for a layout.

    Args:
        snapshot: Finished layout
        catalog: Catalog the layout was built from

    Returns:
        Doors in connection order, followed by caps in room/socket order

    Raises:
        KeyError: If a room refers to a template missing from the catalog
    """
    def socket_pose(room_index: int, socket_id: str):
        room = snapshot.rooms[room_index]
        template = catalog.get(room.template_id)
        if template is None:
            raise KeyError(f"Template '{room.template_id}' is not in the catalog")
        socket = template.get_socket(socket_id)
        return socket, socket_world_pose(room.position, room.yaw_degrees, socket)

    items: List[DressingItem] = []
    connected: Set[Tuple[int, str]] = set()
    for conn in snapshot.connections:
        connected.add((conn.a.room_index, conn.a.socket_id))
        connected.add((conn.b.room_index, conn.b.socket_id))
        socket, pose = socket_pose(conn.a.room_index, conn.a.socket_id)
        items.append(DressingItem(DressingKind.DOOR, PIECES[(DressingKind.DOOR, socket.socket_type)],
                                  conn.a.room_index, conn.a.socket_id, pose.position, pose.forward))

    doors = len(items)
    for room_index, room in enumerate(snapshot.rooms):
        template = catalog.get(room.template_id)
        if template is None:
            raise KeyError(f"Template '{room.template_id}' is not in the catalog")
        for socket in template.sockets:
            if (room_index, socket.socket_id) in connected:
                continue
            pose = socket_world_pose(room.position, room.yaw_degrees, socket)
            items.append(DressingItem(DressingKind.CAP, PIECES[(DressingKind.CAP, socket.socket_type)],
                                      room_index, socket.socket_id, pose.position, pose.forward))

    logger.info("Dressing plan: doors=%d, caps=%d", doors, len(items) - doors)
    return items
