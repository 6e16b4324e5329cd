"""
Yaw rotation and socket alignment.

World convention: Y is up, the horizontal plane is XZ. Yaw rotates about +Y,
clockwise seen from above: yaw 0 keeps local +Z as world +Z, yaw 90 turns
local +Z into world +X.

Rooms only ever rotate in 90 degree steps, so rotations use exact integer
matrices. This keeps positions free of cos/sin rounding noise and makes two
runs with the same seed byte-identical.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

import numpy as np

from ..rooms.socket_system import SocketTemplate, Vec3

YAW_STEPS: Tuple[int, ...] = (0, 90, 180, 270)

# (x, y, z) -> (x*cos + z*sin, y, -x*sin + z*cos) for each discrete yaw
_YAW_MATRICES: Dict[int, np.ndarray] = {
    0: np.array([[1, 0, 0], [0, 1, 0], [0, 0, 1]], dtype=float),
    90: np.array([[0, 0, 1], [0, 1, 0], [-1, 0, 0]], dtype=float),
    180: np.array([[-1, 0, 0], [0, 1, 0], [0, 0, -1]], dtype=float),
    270: np.array([[0, 0, -1], [0, 1, 0], [1, 0, 0]], dtype=float),
}


def normalize_yaw(yaw: int) -> int:
    """Wrap a yaw in degrees into [0, 360).

    Raises:
        ValueError: If the yaw is not a multiple of 90
    """
    if yaw % 90 != 0:
        raise ValueError(f"Yaw must be a multiple of 90 degrees, got {yaw}")
    return yaw % 360


def rotate(vector: Vec3, yaw: int) -> Vec3:
    """Rotate a vector about +Y by a multiple of 90 degrees."""
    matrix = _YAW_MATRICES[normalize_yaw(yaw)]
    x, y, z = matrix @ np.asarray(vector, dtype=float)
    # +0.0 folds negative zero so snapshots compare and serialize identically
    return (float(x) + 0.0, float(y) + 0.0, float(z) + 0.0)


def add(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def subtract(a: Vec3, b: Vec3) -> Vec3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def distance(a: Vec3, b: Vec3) -> float:
    return float(np.linalg.norm(np.subtract(a, b)))


def horizontal_direction(vector: Vec3) -> np.ndarray:
    """Project onto the XZ plane and normalize. A vertical vector gives zero."""
    flat = np.array([vector[0], 0.0, vector[2]], dtype=float)
    length = np.linalg.norm(flat)
    if length == 0.0:
        return flat
    return flat / length


def facing_dot(forward: Vec3, target_forward: Vec3) -> float:
    """``dot(forward, -target_forward)`` on the horizontal plane.

    1.0 means the two sockets face each other exactly.
    """
    return float(np.dot(horizontal_direction(forward), -horizontal_direction(target_forward)))


@dataclass(frozen=True)
class SocketPose:
    """World position and forward of a socket instance."""
    position: Vec3
    forward: Vec3


def socket_world_pose(room_position: Vec3, room_yaw: int, socket: SocketTemplate) -> SocketPose:
    """Transform a template socket into world space for a room at the given pose."""
    return SocketPose(
        position=add(room_position, rotate(socket.position, room_yaw)),
        forward=rotate(socket.forward, room_yaw),
    )


def align_socket(target: SocketPose, socket: SocketTemplate, yaw_guess: int) -> Tuple[Vec3, int]:
    """Solve the room pose that snaps ``socket`` onto ``target``.

    Tests the four yaws ``guess + 0/90/180/270`` and keeps the one whose
    horizontal forward best opposes the target's forward. Ties resolve to the
    first yaw tested. The room is then translated so the socket lands exactly
    on the target position.

    Args:
        target: World pose of the socket being attached to
        socket: Candidate socket in its template's local space
        yaw_guess: Starting yaw in degrees (multiple of 90)

    Returns:
        (room_position, room_yaw)
    """
    guess = normalize_yaw(yaw_guess)
    best_yaw = guess
    best_dot = float("-inf")
    for step in YAW_STEPS:
        yaw = (guess + step) % 360
        dot = facing_dot(rotate(socket.forward, yaw), target.forward)
        if dot > best_dot:
            best_dot = dot
            best_yaw = yaw

    position = subtract(target.position, rotate(socket.position, best_yaw))
    return position, best_yaw
