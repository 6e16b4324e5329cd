"""
Layout graph: the shared state of a layout build.

Defines the data structures for a layout in progress and for the finished
result:
- PlacedRoom: one instantiated room (template, pose, bounds, used sockets)
- OpenSocketRef: a compatible socket of a placed room not yet used
- SocketRef / Connection: one side / both sides of a socket snap
- LayoutGraph: mutable aggregate exclusively owned by the builder
- RoomPlacement / LayoutSnapshot: the immutable, serializable output

Rooms are referenced by their index in ``LayoutGraph.rooms``. Rooms are only
ever removed from the end (backtracking undoes the newest placement first),
so indices of surviving rooms never change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from ..errors import LayoutInvariantError
from ..rooms.room_template import RoomTemplate
from ..rooms.socket_system import SocketTemplate, SocketType, Vec3
from .geometry import SocketPose, socket_world_pose
from .spatial import AABB

NO_ROOM = -1


@dataclass
class PlacedRoom:
    """A room instance in the layout."""
    template: RoomTemplate
    position: Vec3
    yaw: int
    bounds: AABB
    handle: Any = None
    used_socket_ids: Set[str] = field(default_factory=set)

    @property
    def template_id(self) -> str:
        return self.template.template_id

    def is_socket_used(self, socket_id: str) -> bool:
        return socket_id in self.used_socket_ids

    def socket_pose(self, socket: SocketTemplate) -> SocketPose:
        return socket_world_pose(self.position, self.yaw, socket)


@dataclass(frozen=True)
class OpenSocketRef:
    """A socket of a placed room that is not in its ``used_socket_ids``."""
    room_index: int
    socket: SocketTemplate


@dataclass(frozen=True)
class SocketRef:
    """One side of a connection."""
    room_index: int
    socket_id: str
    socket_type: SocketType
    size_class: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "room_index": self.room_index,
            "socket_id": self.socket_id,
            "socket_type": self.socket_type.value,
            "size_class": self.size_class,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'SocketRef':
        return SocketRef(
            room_index=int(data["room_index"]),
            socket_id=str(data["socket_id"]),
            socket_type=SocketType.parse(data["socket_type"]),
            size_class=int(data["size_class"]),
        )


@dataclass(frozen=True)
class Connection:
    """Socket-to-socket snap. ``a`` is the pre-existing side, ``b`` the new room."""
    a: SocketRef
    b: SocketRef

    def touches(self, room_index: int) -> bool:
        return self.a.room_index == room_index or self.b.room_index == room_index

    def to_dict(self) -> Dict[str, Any]:
        return {"a": self.a.to_dict(), "b": self.b.to_dict()}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'Connection':
        return Connection(a=SocketRef.from_dict(data["a"]), b=SocketRef.from_dict(data["b"]))


@dataclass(frozen=True)
class RoomPlacement:
    """Serializable placement of one room."""
    template_id: str
    position: Vec3
    yaw_degrees: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "template_id": self.template_id,
            "position": list(self.position),
            "yaw_degrees": self.yaw_degrees,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'RoomPlacement':
        x, y, z = data["position"]
        return RoomPlacement(
            template_id=str(data["template_id"]),
            position=(float(x), float(y), float(z)),
            yaw_degrees=int(data["yaw_degrees"]),
        )


@dataclass(frozen=True)
class LayoutSnapshot:
    """Immutable result handed to every downstream consumer.

    ``terminus_room_index`` is ``NO_ROOM`` (-1) when no terminus was placed;
    consumers must check it before use.
    """
    seed: int
    rooms: Tuple[RoomPlacement, ...] = ()
    connections: Tuple[Connection, ...] = ()
    terminus_room_index: int = NO_ROOM

    @property
    def has_terminus(self) -> bool:
        return 0 <= self.terminus_room_index < len(self.rooms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seed": self.seed,
            "rooms": [r.to_dict() for r in self.rooms],
            "connections": [c.to_dict() for c in self.connections],
            "terminus_room_index": self.terminus_room_index,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'LayoutSnapshot':
        return LayoutSnapshot(
            seed=int(data["seed"]),
            rooms=tuple(RoomPlacement.from_dict(r) for r in data.get("rooms", [])),
            connections=tuple(Connection.from_dict(c) for c in data.get("connections", [])),
            terminus_room_index=int(data.get("terminus_room_index", NO_ROOM)),
        )


class LayoutGraph:
    """Placed rooms, their used sockets and the connections between them."""

    def __init__(self, seed: int):
        self.seed = seed
        self.rooms: List[PlacedRoom] = []
        self.connections: List[Connection] = []
        self.terminus_room_index: int = NO_ROOM

    def __len__(self) -> int:
        return len(self.rooms)

    @property
    def last_index(self) -> int:
        return len(self.rooms) - 1

    def room(self, index: int) -> PlacedRoom:
        return self.rooms[index]

    def add_room(self, room: PlacedRoom) -> int:
        """Append a room; returns its index."""
        self.rooms.append(room)
        return len(self.rooms) - 1

    def pop_room(self) -> Tuple[PlacedRoom, List[SocketRef]]:
        """Remove the newest room and every connection touching it.

        Returns:
            (removed_room, far_sides) where ``far_sides`` are the sockets on
            surviving rooms that were connected to the removed room. They are
            still marked used; the caller decides whether to release them.
        """
        if not self.rooms:
            raise LayoutInvariantError("Cannot remove a room from an empty layout")
        index = len(self.rooms) - 1
        far_sides: List[SocketRef] = []
        kept: List[Connection] = []
        for conn in self.connections:
            if not conn.touches(index):
                kept.append(conn)
                continue
            for side in (conn.a, conn.b):
                if side.room_index != index:
                    far_sides.append(side)
        self.connections = kept
        if self.terminus_room_index == index:
            self.terminus_room_index = NO_ROOM
        return self.rooms.pop(), far_sides

    def mark_used(self, room_index: int, socket_id: str) -> None:
        room = self.rooms[room_index]
        if room.template.get_socket(socket_id) is None:
            raise LayoutInvariantError(
                f"Room {room_index} ({room.template_id}) has no socket '{socket_id}'"
            )
        if socket_id in room.used_socket_ids:
            raise LayoutInvariantError(
                f"Socket '{socket_id}' on room {room_index} is already used"
            )
        room.used_socket_ids.add(socket_id)

    def release(self, room_index: int, socket_id: str) -> None:
        self.rooms[room_index].used_socket_ids.discard(socket_id)

    def socket_ref(self, room_index: int, socket: SocketTemplate) -> SocketRef:
        return SocketRef(room_index, socket.socket_id, socket.socket_type, socket.size_class)

    def connect(self, a: OpenSocketRef, b: OpenSocketRef) -> Connection:
        """Mark both sockets used and record the connection between them.

        Raises:
            LayoutInvariantError: If the sockets differ in type or size, or
                either one is already used
        """
        if (a.socket.socket_type != b.socket.socket_type
                or a.socket.size_class != b.socket.size_class):
            raise LayoutInvariantError(
                f"Cannot connect {a.socket.socket_type.value}/{a.socket.size_class} "
                f"to {b.socket.socket_type.value}/{b.socket.size_class}"
            )
        self.mark_used(a.room_index, a.socket.socket_id)
        self.mark_used(b.room_index, b.socket.socket_id)
        conn = Connection(self.socket_ref(a.room_index, a.socket),
                          self.socket_ref(b.room_index, b.socket))
        self.connections.append(conn)
        return conn

    def open_sockets(self, socket_type: SocketType, size_class: int,
                     room_index: Optional[int] = None) -> List[OpenSocketRef]:
        """Open compatible sockets, by room index then authored socket order."""
        indices = [room_index] if room_index is not None else range(len(self.rooms))
        result = []
        for index in indices:
            room = self.rooms[index]
            for socket in room.template.get_sockets(socket_type, size_class):
                if socket.socket_id not in room.used_socket_ids:
                    result.append(OpenSocketRef(index, socket))
        return result

    def socket_pose(self, ref: OpenSocketRef) -> SocketPose:
        return self.rooms[ref.room_index].socket_pose(ref.socket)

    def bounds(self) -> List[AABB]:
        return [r.bounds for r in self.rooms]

    def template_ids(self) -> List[str]:
        return [r.template_id for r in self.rooms]

    def snapshot(self) -> LayoutSnapshot:
        return LayoutSnapshot(
            seed=self.seed,
            rooms=tuple(
                RoomPlacement(r.template_id, r.position, r.yaw) for r in self.rooms
            ),
            connections=tuple(self.connections),
            terminus_room_index=self.terminus_room_index,
        )
