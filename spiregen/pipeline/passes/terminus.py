"""
Terminus phase: attaches the single required end room.

Scans main-path rooms from the tip back to the start and tries every open
socket against every terminus socket and yaw guess, in a fixed order. No
random numbers are drawn. The first candidate that passes the overlap test
is committed and recorded as the terminus.
"""

import logging
from typing import Any, List, Optional, Set, Tuple

from ...generators.layout.geometry import YAW_STEPS, align_socket
from ...generators.layout.layout_graph import OpenSocketRef
from ...generators.rooms.room_template import RoomTemplate
from ...generators.rooms.selection import low_priority_last
from ...generators.rooms.socket_system import SocketTemplate, Vec3
from .base import BuildPhase
from .context import BuildContext

logger = logging.getLogger(__name__)

Candidate = Tuple[OpenSocketRef, SocketTemplate, Vec3, int]


class TerminusPhase(BuildPhase):
    """Places the terminus room somewhere along the main path."""

    def __init__(self, ctx: BuildContext):
        super().__init__(ctx)
        self._template: Optional[RoomTemplate] = None
        self._candidates: Optional[List[Candidate]] = None
        self._cursor = 0

    @property
    def name(self) -> str:
        return "terminus"

    def advance(self) -> bool:
        if self.finished:
            return True
        if self._candidates is None:
            if not self._prepare():
                return self.finish()

        if self._cursor >= len(self._candidates):
            return self._fail(
                f"Terminus '{self._template.template_id}' could not be placed on any of "
                f"{len(self.ctx.main_path)} main path rooms ({len(self._candidates)} candidates)"
            )

        target, socket, position, yaw = self._candidates[self._cursor]
        self._cursor += 1
        placed = self.ctx.try_place(self._template, position, yaw)
        if placed is None:
            return False

        handle, bounds = placed
        index = self.ctx.attach(target, self._template, socket, position, yaw, handle, bounds)
        self.ctx.graph.terminus_room_index = index
        self.result.metrics["room_index"] = index
        self.result.metrics["attached_to"] = target.room_index
        logger.info("Terminus %s placed as room %d on room %d",
                    self._template.template_id, index, target.room_index)
        return self.finish()

    def _prepare(self) -> bool:
        """Resolve the terminus template and enumerate candidate poses.

        Returns:
            False if the phase has nothing to try
        """
        ctx = self.ctx
        self._candidates = []
        template_id = ctx.settings.terminus_template_id
        if template_id is None:
            message = "No terminus template configured; skipping terminus placement"
            logger.warning(message)
            self.result.add_warning(message)
            return False

        template = ctx.catalog.get(template_id)
        if template is None:
            self._fail(f"Terminus template '{template_id}' is not in the catalog")
            return False
        terminus_sockets = ctx.selector.compatible_sockets(template)
        if not terminus_sockets:
            self._fail(
                f"Terminus template '{template_id}' has no "
                f"{ctx.settings.socket_type.value}/{ctx.settings.socket_size} sockets"
            )
            return False

        self._template = template
        for room_index in reversed(ctx.main_path):
            targets = low_priority_last(ctx.open_sockets(room_index), key=lambda ref: ref.socket)
            for target in targets:
                target_pose = ctx.graph.socket_pose(target)
                for socket in terminus_sockets:
                    seen: Set[Tuple[Any, ...]] = set()
                    for guess in YAW_STEPS:
                        position, yaw = align_socket(target_pose, socket, guess)
                        if (position, yaw) in seen:
                            continue
                        seen.add((position, yaw))
                        self._candidates.append((target, socket, position, yaw))
        logger.debug("Terminus search: %d candidates", len(self._candidates))
        return True

    def _fail(self, message: str) -> bool:
        logger.error(message)
        self.result.add_error(message)
        return self.finish()
