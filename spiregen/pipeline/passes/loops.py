"""
Loop phase: closes cycles with connector rooms.

Each attempt picks two distinct open sockets at random and checks whether a connector
template can bridge them exactly: its first compatible socket is snapped onto
the first pick and its second compatible socket must then land on the second
pick, facing it. Matching poses are instantiated one per step until one
passes the overlap test. Failed attempts are silent.
"""

import logging
from typing import List, Optional, Tuple

from ...generators.layout.geometry import (
    YAW_STEPS, SocketPose, align_socket, distance, facing_dot, socket_world_pose,
)
from ...generators.layout.layout_graph import OpenSocketRef
from ...generators.rooms.room_template import RoomTemplate
from ...generators.rooms.selection import weighted_pick
from ...generators.rooms.socket_system import SocketTemplate, Vec3
from .base import BuildPhase
from .context import BuildContext

logger = logging.getLogger(__name__)


def match_connector(pose_a: SocketPose, pose_b: SocketPose,
                    s0: SocketTemplate, s1: SocketTemplate,
                    snap_tolerance: float, min_facing_dot: float) -> List[Tuple[Vec3, int]]:
    """Connector poses that join socket A (through s0) to socket B (through s1).

    Args:
        pose_a: World pose of the first open socket
        pose_b: World pose of the second open socket
        s0: Connector socket snapped onto A
        s1: Connector socket that must meet B
        snap_tolerance: Max distance between s1 and B
        min_facing_dot: Min ``facing_dot`` between s1 and B

    Returns:
        Distinct (position, yaw) poses, in yaw-step order
    """
    matches: List[Tuple[Vec3, int]] = []
    for guess in YAW_STEPS:
        position, yaw = align_socket(pose_a, s0, guess)
        if (position, yaw) in matches:
            continue
        s1_pose = socket_world_pose(position, yaw, s1)
        if distance(s1_pose.position, pose_b.position) > snap_tolerance:
            continue
        if facing_dot(s1_pose.forward, pose_b.forward) < min_facing_dot:
            continue
        matches.append((position, yaw))
    return matches


class _PendingLoop:
    def __init__(self, a: OpenSocketRef, b: OpenSocketRef, connector: RoomTemplate,
                 s0: SocketTemplate, s1: SocketTemplate, poses: List[Tuple[Vec3, int]]):
        self.a = a
        self.b = b
        self.connector = connector
        self.s0 = s0
        self.s1 = s1
        self.poses = poses


class LoopPhase(BuildPhase):
    """Runs up to ``settings.loop_attempts`` loop-closing attempts."""

    def __init__(self, ctx: BuildContext):
        super().__init__(ctx)
        self.attempts_made = 0
        self.loops_created = 0
        self._pending: Optional[_PendingLoop] = None

    @property
    def name(self) -> str:
        return "loops"

    def advance(self) -> bool:
        if self.finished:
            return True
        if self._pending is not None:
            return self._try_pending()
        if self.attempts_made >= self.ctx.settings.loop_attempts:
            return self._complete()
        self.attempts_made += 1
        return self._start_attempt()

    def _start_attempt(self) -> bool:
        ctx = self.ctx
        pool = ctx.open_sockets()
        if len(pool) < 2:
            logger.debug("Loop closing stopped: %d open sockets", len(pool))
            return self._complete()

        first, second = ctx.rng.sample(range(len(pool)), 2)
        a, b = pool[first], pool[second]

        connectors = ctx.selector.eligible(ctx.graph, 2, connectors=True)
        connector = weighted_pick(connectors, ctx.rng)
        if connector is None:
            logger.debug("Loop closing stopped: no eligible connector template")
            return self._complete()

        s0, s1 = ctx.selector.compatible_sockets(connector)[:2]
        settings = ctx.settings
        poses = match_connector(ctx.graph.socket_pose(a), ctx.graph.socket_pose(b), s0, s1,
                                settings.loop_socket_snap_tolerance, settings.loop_min_facing_dot)
        if poses:
            self._pending = _PendingLoop(a, b, connector, s0, s1, poses)
        return False

    def _try_pending(self) -> bool:
        pending = self._pending
        position, yaw = pending.poses.pop(0)
        if not pending.poses:
            self._pending = None
        placed = self.ctx.try_place(pending.connector, position, yaw)
        if placed is None:
            return False

        self._pending = None
        handle, bounds = placed
        index = self.ctx.attach(pending.a, pending.connector, pending.s0,
                                position, yaw, handle, bounds)
        self.ctx.graph.connect(pending.b, OpenSocketRef(index, pending.s1))
        self.loops_created += 1
        logger.info("Created loop: room %d socket '%s' <-> room %d socket '%s' via %s",
                    pending.a.room_index, pending.a.socket.socket_id,
                    pending.b.room_index, pending.b.socket.socket_id,
                    pending.connector.template_id)
        return False

    def _complete(self) -> bool:
        self.result.metrics["attempts"] = self.attempts_made
        self.result.metrics["loops"] = self.loops_created
        logger.info("Loop closing complete: %d loops from %d attempts",
                    self.loops_created, self.attempts_made)
        return self.finish()
