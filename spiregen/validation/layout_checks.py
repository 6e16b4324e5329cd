"""
Structural checks for catalogs and finished layouts.

Rule codes:
    CATALOG-001  FAIL  no template exposes the configured socket type/size
    CATALOG-002  FAIL  configured start/terminus template missing
    CATALOG-003  WARN  connector template with fewer than two usable sockets
    CATALOG-004  WARN  terminus template has no usable socket
    LAYOUT-001   FAIL  layout has no rooms
    LAYOUT-002   FAIL  room yaw outside {0, 90, 180, 270}
    LAYOUT-003   FAIL  padded room bounds intersect
    LAYOUT-004   FAIL  socket used by more than one connection side, or
                       connected but not marked used
    LAYOUT-005   FAIL  connection joins different socket types or sizes
    LAYOUT-006   WARN  terminus index does not refer to a room
"""

from typing import Dict, Optional, Tuple

from ..generators.layout.geometry import YAW_STEPS
from ..generators.layout.layout_graph import LayoutGraph
from ..generators.layout.spatial import find_overlapping_pairs
from ..generators.rooms.catalog import RoomCatalog
from ..generators.rooms.socket_system import SocketType
from .core import Severity, ValidationResult, ValidationStage


def validate_catalog(catalog: RoomCatalog, socket_type: SocketType, size_class: int,
                     start_template_id: Optional[str] = None,
                     terminus_template_id: Optional[str] = None) -> ValidationResult:
    """Check a catalog against the build's socket configuration."""
    result = ValidationResult(stage=ValidationStage.CATALOG)

    if not catalog.compatible_templates(socket_type, size_class):
        result.add(Severity.FAIL, "CATALOG-001",
                   f"No room template has a {socket_type.value}/{size_class} socket",
                   remediation="Add sockets of the configured type or change socket_type/socket_size")

    for label, template_id in (("start", start_template_id), ("terminus", terminus_template_id)):
        if template_id is not None and template_id not in catalog:
            result.add(Severity.FAIL, "CATALOG-002",
                       f"Configured {label} template is not in the catalog",
                       template_id=template_id)

    for template in catalog:
        if template.connector and template.compatible_socket_count(socket_type, size_class) < 2:
            result.add(Severity.WARN, "CATALOG-003",
                       "Connector template has fewer than two compatible sockets",
                       template_id=template.template_id)

    if terminus_template_id is not None and terminus_template_id in catalog:
        terminus = catalog.get(terminus_template_id)
        if terminus.compatible_socket_count(socket_type, size_class) == 0:
            result.add(Severity.WARN, "CATALOG-004",
                       "Terminus template has no compatible socket; it can never be placed",
                       template_id=terminus_template_id)

    return result


def validate_layout(graph: LayoutGraph, padding: float) -> ValidationResult:
    """Check a finished layout graph against its structural invariants.

    Args:
        graph: Layout to check
        padding: Clearance used during the build

    Returns:
        ValidationResult for the LAYOUT stage
    """
    result = ValidationResult(stage=ValidationStage.LAYOUT)

    if not graph.rooms:
        result.add(Severity.FAIL, "LAYOUT-001", "Layout contains no rooms")
        return result

    for index, room in enumerate(graph.rooms):
        if room.yaw not in YAW_STEPS:
            result.add(Severity.FAIL, "LAYOUT-002", f"Yaw {room.yaw} is not axis aligned",
                       room_index=index, template_id=room.template_id)

    for i, j in find_overlapping_pairs(graph.bounds(), padding):
        result.add(Severity.FAIL, "LAYOUT-003", f"Room bounds overlap room {j}",
                   room_index=i, template_id=graph.rooms[i].template_id)

    sides: Dict[Tuple[int, str], int] = {}
    for conn in graph.connections:
        for side in (conn.a, conn.b):
            key = (side.room_index, side.socket_id)
            sides[key] = sides.get(key, 0) + 1
        if conn.a.socket_type != conn.b.socket_type or conn.a.size_class != conn.b.size_class:
            result.add(Severity.FAIL, "LAYOUT-005",
                       f"Connection joins {conn.a.socket_type.value}/{conn.a.size_class} "
                       f"to {conn.b.socket_type.value}/{conn.b.size_class}",
                       room_index=conn.a.room_index, socket_id=conn.a.socket_id)

    for (room_index, socket_id), uses in sides.items():
        if uses > 1:
            result.add(Severity.FAIL, "LAYOUT-004",
                       f"Socket appears on {uses} connection sides",
                       room_index=room_index, socket_id=socket_id)
        elif (room_index >= len(graph.rooms)
              or socket_id not in graph.rooms[room_index].used_socket_ids):
            result.add(Severity.FAIL, "LAYOUT-004", "Connected socket is not marked used",
                       room_index=room_index, socket_id=socket_id)

    if not 0 <= graph.terminus_room_index < len(graph.rooms):
        result.add(Severity.WARN, "LAYOUT-006",
                   f"Terminus room index {graph.terminus_room_index} is not a placed room",
                   remediation="Check the terminus template and its sockets")

    return result
