"""
Room templates: authored, reusable room definitions.

Templates are immutable. The builder never mutates them; every placed room
shares a reference to its template.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..layout.spatial import AABB
from .socket_system import SocketTemplate, SocketType


@dataclass(frozen=True)
class RoomTemplate:
    """A room definition with sockets and selection metadata.

    Attributes:
        template_id: Unique id within the catalog
        weight: Relative selection weight; 0 removes the template from
            ordinary selection
        unique_per_slice: Selected at most once per generated layout
        landmark: Landmark room; implicitly unique, preferred at intervals
            along the main path
        connector: Reserved for the loop closer
        repeat_cooldown: Placements that must pass before this template may
            be picked again (0 = no restriction)
        sockets: Ordered socket definitions
        local_bounds: Authored room extents around the template origin, used
            by the reference spatial host
    """
    template_id: str
    weight: int = 1
    unique_per_slice: bool = False
    landmark: bool = False
    connector: bool = False
    repeat_cooldown: int = 0
    sockets: Tuple[SocketTemplate, ...] = field(default_factory=tuple)
    local_bounds: Optional[AABB] = None

    def get_sockets(self, socket_type: SocketType, size_class: int) -> Iterator[SocketTemplate]:
        """Lazily yield sockets with an exact type and size match, in authored order."""
        for socket in self.sockets:
            if socket.is_compatible(socket_type, size_class):
                yield socket

    def compatible_socket_count(self, socket_type: SocketType, size_class: int) -> int:
        return sum(1 for _ in self.get_sockets(socket_type, size_class))

    def get_socket(self, socket_id: str) -> Optional[SocketTemplate]:
        for socket in self.sockets:
            if socket.socket_id == socket_id:
                return socket
        return None

    @property
    def is_unique(self) -> bool:
        """Uniques: explicit unique_per_slice or implicit landmark uniqueness."""
        return self.unique_per_slice or self.landmark

    def validate(self) -> List[str]:
        """Return authoring problems (empty when the template is well formed)."""
        problems = []
        if not self.template_id:
            problems.append("template id is empty")
        if self.weight < 0:
            problems.append(f"{self.template_id}: weight must be >= 0 (got {self.weight})")
        if self.repeat_cooldown < 0:
            problems.append(
                f"{self.template_id}: repeat_cooldown must be >= 0 (got {self.repeat_cooldown})"
            )
        seen = set()
        for socket in self.sockets:
            if socket.socket_id in seen:
                problems.append(f"{self.template_id}: duplicate socket id '{socket.socket_id}'")
            seen.add(socket.socket_id)
        return problems

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.template_id,
            "weight": self.weight,
            "unique_per_slice": self.unique_per_slice,
            "landmark": self.landmark,
            "connector": self.connector,
            "repeat_cooldown": self.repeat_cooldown,
            "sockets": [s.to_dict() for s in self.sockets],
        }
        if self.local_bounds is not None:
            data["bounds"] = self.local_bounds.to_dict()
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'RoomTemplate':
        bounds = data.get("bounds")
        return RoomTemplate(
            template_id=str(data["id"]),
            weight=int(data.get("weight", 1)),
            unique_per_slice=bool(data.get("unique_per_slice", False)),
            landmark=bool(data.get("landmark", False)),
            connector=bool(data.get("connector", False)),
            repeat_cooldown=int(data.get("repeat_cooldown", 0)),
            sockets=tuple(SocketTemplate.from_dict(s) for s in data.get("sockets", [])),
            local_bounds=AABB.from_dict(bounds) if bounds else None,
        )
