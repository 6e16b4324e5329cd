"""
Graph export utilities for layout debugging.

Provides export functions to visualize generated layouts in:
- DOT format (Graphviz) for visual graph inspection
- JSON format for programmatic analysis and reproducibility tracking
"""

from typing import Dict, List, Optional
import json

from ...generators.layout.layout_graph import LayoutSnapshot
from ...validation import ValidationResult

EXPORT_VERSION = '1.0'


def _room_roles(snapshot: LayoutSnapshot, paths: Optional[Dict[str, List[int]]]) -> Dict[int, str]:
    roles = {}
    for name, rooms in (paths or {}).items():
        for index in rooms:
            roles.setdefault(index, 'main' if name == 'main' else 'branch')
    if snapshot.rooms:
        roles[0] = 'start'
    if snapshot.has_terminus:
        roles[snapshot.terminus_room_index] = 'terminus'
    return roles


def export_layout_dot(snapshot: LayoutSnapshot,
                      paths: Optional[Dict[str, List[int]]] = None) -> str:
    """Export a layout as Graphviz DOT format.

    Args:
        snapshot: Finished layout
        paths: Optional named paths (main/branch_n) used to color rooms

    Returns:
        DOT format string for visualization with Graphviz or online viewers
    """
    lines = ['graph SpireLayout {']
    lines.append(f'  label="seed {snapshot.seed}";')
    lines.append('  node [shape=box, style=filled];')
    lines.append('')

    colors = {
        'start': '#90EE90',      # Light green
        'terminus': '#FFB6C1',   # Light pink
        'main': '#87CEEB',       # Sky blue
        'branch': '#FFD700',     # Gold
        'other': '#D3D3D3',      # Light gray
    }
    roles = _room_roles(snapshot, paths)

    for index, room in enumerate(snapshot.rooms):
        x, y, z = room.position
        label = '\\n'.join([
            room.template_id,
            f"id: {index}",
            f"pos: ({x:g}, {y:g}, {z:g})",
            f"yaw: {room.yaw_degrees}",
        ])
        color = colors[roles.get(index, 'other')]
        lines.append(f'  room_{index} [label="{label}" fillcolor="{color}"];')

    lines.append('')

    for conn in snapshot.connections:
        lines.append(
            f'  room_{conn.a.room_index} -- room_{conn.b.room_index} '
            f'[label="{conn.a.socket_id}:{conn.b.socket_id}"];'
        )

    lines.append('}')
    return '\n'.join(lines)


def export_layout_json(snapshot: LayoutSnapshot,
                       paths: Optional[Dict[str, List[int]]] = None,
                       validation: Optional[ValidationResult] = None) -> str:
    """Export a layout as JSON with metadata.

    Args:
        snapshot: Finished layout
        paths: Optional named paths recorded by the builder
        validation: Optional layout validation report to embed

    Returns:
        JSON string with layout and debug metadata
    """
    template_counts: Dict[str, int] = {}
    for room in snapshot.rooms:
        template_counts[room.template_id] = template_counts.get(room.template_id, 0) + 1

    output = {
        'metadata': {
            'seed': snapshot.seed,
            'version': EXPORT_VERSION,
            'generator': 'spiregen',
        },
        'statistics': {
            'room_count': len(snapshot.rooms),
            'connection_count': len(snapshot.connections),
            'template_counts': template_counts,
            'start_room_index': 0 if snapshot.rooms else None,
            'terminus_room_index': snapshot.terminus_room_index,
        },
        'paths': paths or {},
        'layout': snapshot.to_dict(),
    }
    if validation is not None:
        output['validation'] = validation.to_dict()
    return json.dumps(output, indent=2)
