"""
Spatial validation for placed rooms.

Provides axis-aligned bounding box (AABB) overlap detection used by the layout
builder to reject candidate placements that would interpenetrate rooms that
are already part of the layout.

Padding semantics: ``padding`` is the minimum clearance between two rooms.
Every box grows by ``padding / 2`` on each side before the strict intersection
test, so two rooms whose padded boxes merely touch are still valid.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np

from ..rooms.socket_system import Vec3


@dataclass(frozen=True)
class AABB:
    """Axis-Aligned Bounding Box in world (or template-local) space."""
    min_x: float
    min_y: float
    min_z: float
    max_x: float
    max_y: float
    max_z: float

    @staticmethod
    def from_points(points: Sequence[Vec3]) -> 'AABB':
        arr = np.asarray(points, dtype=float)
        lo = arr.min(axis=0)
        hi = arr.max(axis=0)
        return AABB(float(lo[0]), float(lo[1]), float(lo[2]),
                    float(hi[0]), float(hi[1]), float(hi[2]))

    @staticmethod
    def around(center: Vec3, size: Vec3) -> 'AABB':
        """Box of the given full size centred on ``center``."""
        cx, cy, cz = center
        hx, hy, hz = size[0] / 2, size[1] / 2, size[2] / 2
        return AABB(cx - hx, cy - hy, cz - hz, cx + hx, cy + hy, cz + hz)

    @property
    def corners(self) -> List[Vec3]:
        """The eight corner points."""
        return [
            (x, y, z)
            for x in (self.min_x, self.max_x)
            for y in (self.min_y, self.max_y)
            for z in (self.min_z, self.max_z)
        ]

    @property
    def size(self) -> Vec3:
        return (self.max_x - self.min_x, self.max_y - self.min_y, self.max_z - self.min_z)

    @property
    def center(self) -> Vec3:
        return ((self.min_x + self.max_x) / 2,
                (self.min_y + self.max_y) / 2,
                (self.min_z + self.max_z) / 2)

    def as_array(self) -> np.ndarray:
        """``[min_x, min_y, min_z, max_x, max_y, max_z]`` as float64."""
        return np.array([self.min_x, self.min_y, self.min_z,
                         self.max_x, self.max_y, self.max_z], dtype=float)

    def expanded(self, padding: float) -> 'AABB':
        """Grow the box by ``padding`` in total size (half on each side)."""
        h = padding / 2
        return AABB(self.min_x - h, self.min_y - h, self.min_z - h,
                    self.max_x + h, self.max_y + h, self.max_z + h)

    def translated(self, offset: Vec3) -> 'AABB':
        ox, oy, oz = offset
        return AABB(self.min_x + ox, self.min_y + oy, self.min_z + oz,
                    self.max_x + ox, self.max_y + oy, self.max_z + oz)

    def intersects(self, other: 'AABB') -> bool:
        """Check if this AABB intersects another AABB."""
        # Two AABBs intersect if they overlap on all three axes
        return (
            self.min_x < other.max_x and self.max_x > other.min_x and
            self.min_y < other.max_y and self.max_y > other.min_y and
            self.min_z < other.max_z and self.max_z > other.min_z
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "min": [self.min_x, self.min_y, self.min_z],
            "max": [self.max_x, self.max_y, self.max_z],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'AABB':
        lo = [float(v) for v in data["min"]]
        hi = [float(v) for v in data["max"]]
        return AABB(lo[0], lo[1], lo[2], hi[0], hi[1], hi[2])


def bounds_matrix(bounds: Sequence[AABB]) -> np.ndarray:
    """Stack boxes into an ``(N, 6)`` array (empty input gives shape ``(0, 6)``)."""
    if not bounds:
        return np.empty((0, 6), dtype=float)
    return np.stack([b.as_array() for b in bounds])


def overlapping_indices(candidate: AABB, placed: Sequence[AABB], padding: float) -> List[int]:
    """Indices of ``placed`` boxes that intersect ``candidate`` once both are padded."""
    if not placed:
        return []
    c = candidate.expanded(padding).as_array()
    others = bounds_matrix(placed)
    h = padding / 2
    others[:, :3] -= h
    others[:, 3:] += h
    hits = np.all(c[:3] < others[:, 3:], axis=1) & np.all(c[3:] > others[:, :3], axis=1)
    return [int(i) for i in np.flatnonzero(hits)]


def is_placement_valid(candidate: AABB, placed: Sequence[AABB], padding: float) -> bool:
    """Overlap validator: True when ``candidate`` clears every placed room.

    Pure function. Expands the candidate and each placed box by ``padding``
    and rejects on any strict intersection.
    """
    return not overlapping_indices(candidate, placed, padding)


def find_overlapping_pairs(bounds: Sequence[AABB], padding: float) -> List[Tuple[int, int]]:
    """All index pairs ``(i, j)`` with ``i < j`` whose padded boxes intersect."""
    pairs: List[Tuple[int, int]] = []
    for i in range(len(bounds)):
        for j in overlapping_indices(bounds[i], bounds[i + 1:], padding):
            pairs.append((i, i + 1 + j))
    return pairs
