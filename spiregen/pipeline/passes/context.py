"""
Shared state of a running build.

The context bundles the layout graph with everything the phases consult
(catalog, settings, random stream, spatial host) and implements the graph
mutations every phase needs: trial instantiation, committing a snapped room
and removing the newest room during backtracking.
"""

from __future__ import annotations

import logging
from random import Random
from typing import Any, Dict, List, Optional, Tuple

from ...generators.layout.geometry import distance, socket_world_pose
from ...generators.layout.layout_graph import LayoutGraph, OpenSocketRef, PlacedRoom, SocketRef
from ...generators.layout.spatial import AABB, is_placement_valid
from ...generators.layout.spatial_host import SpatialHost
from ...generators.rooms.catalog import RoomCatalog
from ...generators.rooms.room_template import RoomTemplate
from ...generators.rooms.selection import TemplateSelector
from ...generators.rooms.socket_system import SocketTemplate, Vec3
from ..settings import GeneratorSettings

logger = logging.getLogger(__name__)

MAIN_PATH = "main"


class BuildContext:
    """Mutable state owned by exactly one build."""

    def __init__(self, graph: LayoutGraph, catalog: RoomCatalog, settings: GeneratorSettings,
                 host: SpatialHost, rng: Random):
        self.graph = graph
        self.catalog = catalog
        self.settings = settings
        self.host = host
        self.rng = rng
        self.selector = TemplateSelector(catalog, settings.socket_type, settings.socket_size,
                                         settings.terminus_template_id)
        # Instantiate-and-test cycles so far, successful or not.
        self.attempts = 0
        self.paths: Dict[str, List[int]] = {MAIN_PATH: []}

    @property
    def main_path(self) -> List[int]:
        return self.paths[MAIN_PATH]

    def open_sockets(self, room_index: Optional[int] = None) -> List[OpenSocketRef]:
        return self.graph.open_sockets(self.settings.socket_type, self.settings.socket_size,
                                       room_index)

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------

    def try_place(self, template: RoomTemplate, position: Vec3, yaw: int) -> Optional[Tuple[Any, AABB]]:
        """Instantiate a candidate and test it against every placed room.

        Counts as one attempt. A rejected candidate is destroyed before
        returning, so no provisional instance outlives the call.

        Returns:
            (handle, bounds) if the candidate fits, None otherwise
        """
        self.attempts += 1
        handle, bounds = self.host.instantiate(template, position, yaw)
        if is_placement_valid(bounds, self.graph.bounds(), self.settings.overlap_padding):
            return handle, bounds
        self.host.destroy(handle)
        logger.debug("Rejected %s at %s yaw %d: overlap", template.template_id, position, yaw)
        return None

    def add_room(self, template: RoomTemplate, position: Vec3, yaw: int,
                 handle: Any, bounds: AABB) -> int:
        return self.graph.add_room(PlacedRoom(template, position, yaw, bounds, handle))

    def attach(self, target: OpenSocketRef, template: RoomTemplate, socket: SocketTemplate,
               position: Vec3, yaw: int, handle: Any, bounds: AABB) -> int:
        """Commit a room snapped onto ``target`` through ``socket``.

        Returns:
            Index of the new room
        """
        index = self.add_room(template, position, yaw, handle, bounds)
        self.graph.connect(target, OpenSocketRef(index, socket))
        logger.debug("Placed room %d (%s) on room %d socket '%s'",
                     index, template.template_id, target.room_index, target.socket.socket_id)
        return index

    # ------------------------------------------------------------------
    # Removal
    # ------------------------------------------------------------------

    def remove_last_room(self) -> PlacedRoom:
        """Undo the newest placement.

        Destroys the instance, drops its connections and reopens the sockets
        it occupied on surviving rooms, unless another surviving room still
        has a socket sitting on that spot.
        """
        room, far_sides = self.graph.pop_room()
        if room.handle is not None:
            self.host.destroy(room.handle)
            room.handle = None
        for side in far_sides:
            if self.is_socket_covered(side):
                logger.debug("Socket '%s' on room %d stays used: another socket is in contact",
                             side.socket_id, side.room_index)
                continue
            self.graph.release(side.room_index, side.socket_id)
        logger.debug("Removed room %d (%s)", len(self.graph), room.template_id)
        return room

    def is_socket_covered(self, ref: SocketRef) -> bool:
        """True if a socket of another placed room lies on ``ref``'s world position."""
        owner = self.graph.room(ref.room_index)
        socket = owner.template.get_socket(ref.socket_id)
        if socket is None:
            return False
        position = owner.socket_pose(socket).position
        tolerance = self.settings.socket_restore_tolerance
        for index, room in enumerate(self.graph.rooms):
            if index == ref.room_index:
                continue
            for other in room.template.sockets:
                other_position = socket_world_pose(room.position, room.yaw, other).position
                if distance(position, other_position) <= tolerance:
                    return True
        return False

    def destroy_rooms(self) -> int:
        """Best-effort release of every instance still held by the graph.

        Host failures are logged and do not stop the teardown.

        Returns:
            Number of instances destroyed
        """
        destroyed = 0
        for room in reversed(self.graph.rooms):
            if room.handle is None:
                continue
            try:
                self.host.destroy(room.handle)
                destroyed += 1
            except Exception:
                logger.exception("Failed to destroy room instance %r (%s)",
                                 room.handle, room.template_id)
            room.handle = None
        return destroyed
