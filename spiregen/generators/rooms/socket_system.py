"""
Socket model for modular room templates.

A socket is a posed connection point on a room template: a local position on
the room's wall plus a forward vector pointing OUT of the room. Two rooms are
joined by snapping one socket onto another so that their positions coincide
and their forwards face opposite ways.

Only sockets with the same type AND size class may connect.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple

Vec3 = Tuple[float, float, float]


# ==============================================================================
# SOCKET MATCHING CONSTANTS
# ==============================================================================

# Distance (world units) within which two sockets are considered coincident.
SOCKET_POSITION_TOLERANCE = 0.05

# Minimum cosine between one socket's forward and the reversed forward of the
# socket it faces. 0.92 ~= 23 degrees of slack.
SOCKET_FACING_MIN_DOT = 0.92


class SocketType(Enum):
    """Doorway class of a socket."""
    DOOR_SMALL = "DoorSmall"
    DOOR_LARGE = "DoorLarge"

    @classmethod
    def parse(cls, value: Any) -> 'SocketType':
        """Accept an enum member, its value ("DoorSmall") or its name ("DOOR_SMALL")."""
        if isinstance(value, SocketType):
            return value
        try:
            return cls(value)
        except ValueError:
            pass
        try:
            return cls[str(value).upper()]
        except KeyError:
            raise ValueError(f"Unknown socket type: {value!r}") from None


@dataclass(frozen=True)
class SocketTemplate:
    """Connection point authored on a room template.

    Attributes:
        socket_id: Stable identifier, unique within its template. This is the
            sole identity of a socket; nothing is ever looked up by path.
        position: Local position relative to the room origin
        forward: Local forward direction, pointing out of the room
        socket_type: Doorway class
        size_class: Size class; only equal sizes connect
        low_priority: If True, only used after every normal socket was tried
    """
    socket_id: str
    position: Vec3
    forward: Vec3
    socket_type: SocketType = SocketType.DOOR_SMALL
    size_class: int = 0
    low_priority: bool = False

    def is_compatible(self, socket_type: SocketType, size_class: int) -> bool:
        """Exact type and size match."""
        return self.socket_type == socket_type and self.size_class == size_class

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.socket_id,
            "position": list(self.position),
            "forward": list(self.forward),
            "socket_type": self.socket_type.value,
            "size_class": self.size_class,
            "low_priority": self.low_priority,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'SocketTemplate':
        return SocketTemplate(
            socket_id=str(data["id"]),
            position=_vec3(data.get("position", (0.0, 0.0, 0.0))),
            forward=_vec3(data.get("forward", (0.0, 0.0, 1.0))),
            socket_type=SocketType.parse(data.get("socket_type", SocketType.DOOR_SMALL.value)),
            size_class=int(data.get("size_class", 0)),
            low_priority=bool(data.get("low_priority", False)),
        )


def _vec3(values: Any) -> Vec3:
    x, y, z = values
    return (float(x), float(y), float(z))
