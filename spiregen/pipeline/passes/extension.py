"""
Chain extension search.

Grows a chain by one room from its tip. The search enumerates every
(tip socket, candidate template, candidate socket) combination in a random
but seed-determined order and tries them one at a time:

1. The tip's open compatible sockets, shuffled (low-priority last)
2. The eligible templates, weighted-shuffled
3. For each pair, that template's compatible sockets, shuffled

Each try aligns the candidate socket onto the tip socket from a random yaw
guess, instantiates the room and runs the overlap test. The first candidate
that fits is committed.

``ChainExtension`` wraps the search with the relaxation sequence: when one
search is exhausted the next, less demanding one is started.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from ...generators.layout.geometry import YAW_STEPS, align_socket
from ...generators.layout.layout_graph import OpenSocketRef
from ...generators.rooms.room_template import RoomTemplate
from ...generators.rooms.selection import shuffled_sockets, weighted_shuffle
from ...generators.rooms.socket_system import SocketTemplate
from .base import SearchStatus
from .context import BuildContext

logger = logging.getLogger(__name__)

# (min_sockets, force_landmark)
SearchConfig = Tuple[int, bool]


def relaxation_sequence(landmark_due: bool) -> List[SearchConfig]:
    """Searches tried in order for one main-path extension."""
    if landmark_due:
        return [(2, True), (2, False), (1, False)]
    return [(2, False), (1, False)]


def is_landmark_due(chain_length: int, landmark_every: int) -> bool:
    """Whether extending a chain of ``chain_length`` rooms should force a landmark."""
    return landmark_every > 0 and chain_length > 1 and (chain_length - 1) % landmark_every == 0


class ExtensionSearch:
    """One pass over all combinations for a fixed tip, ``k`` and landmark flag.

    Args:
        ctx: Build context
        tip_index: Room to extend from
        min_sockets: Minimum compatible sockets a candidate template must expose
        force_landmark: Only consider landmark templates
    """

    def __init__(self, ctx: BuildContext, tip_index: int, min_sockets: int,
                 force_landmark: bool = False):
        self.ctx = ctx
        self.tip_index = tip_index
        self.min_sockets = min_sockets
        self.force_landmark = force_landmark
        self.placed_index: Optional[int] = None
        self._cursor = 0

        rng = ctx.rng
        targets = shuffled_sockets(ctx.open_sockets(tip_index), rng, key=lambda ref: ref.socket)
        templates = weighted_shuffle(
            ctx.selector.eligible(ctx.graph, min_sockets, require_landmark=force_landmark), rng
        )
        self._combinations: List[Tuple[OpenSocketRef, RoomTemplate, SocketTemplate]] = []
        for target in targets:
            for template in templates:
                for socket in shuffled_sockets(ctx.selector.compatible_sockets(template), rng):
                    self._combinations.append((target, template, socket))

        logger.debug("Extension search from room %d (k=%d, landmark=%s): %d combinations",
                     tip_index, min_sockets, force_landmark, len(self._combinations))

    @property
    def remaining(self) -> int:
        return len(self._combinations) - self._cursor

    def advance(self) -> SearchStatus:
        if self._cursor >= len(self._combinations):
            return SearchStatus.EXHAUSTED

        target, template, socket = self._combinations[self._cursor]
        self._cursor += 1

        ctx = self.ctx
        yaw_guess = YAW_STEPS[ctx.rng.randrange(len(YAW_STEPS))]
        position, yaw = align_socket(ctx.graph.socket_pose(target), socket, yaw_guess)
        placed = ctx.try_place(template, position, yaw)
        if placed is None:
            return SearchStatus.PENDING

        handle, bounds = placed
        self.placed_index = ctx.attach(target, template, socket, position, yaw, handle, bounds)
        return SearchStatus.SUCCESS


class ChainExtension:
    """Runs extension searches for one tip through a relaxation sequence."""

    def __init__(self, ctx: BuildContext, tip_index: int, configs: Sequence[SearchConfig]):
        self.ctx = ctx
        self.tip_index = tip_index
        self._configs = list(configs)
        self._search: Optional[ExtensionSearch] = None
        self.placed_index: Optional[int] = None

    def advance(self) -> SearchStatus:
        while True:
            if self._search is None:
                if not self._configs:
                    return SearchStatus.EXHAUSTED
                min_sockets, force_landmark = self._configs.pop(0)
                self._search = ExtensionSearch(self.ctx, self.tip_index, min_sockets, force_landmark)

            status = self._search.advance()
            if status == SearchStatus.EXHAUSTED:
                self._search = None
                continue
            if status == SearchStatus.SUCCESS:
                self.placed_index = self._search.placed_index
            return status
