"""
Main path phase: bounded backtracking search for a linear chain.

Places a start room at the origin, then extends only from the current tip
until the chain holds ``main_path_rooms`` rooms. When every extension of the
tip fails, the tip is removed and the search resumes from the previous room.
The phase gives up (keeping the shorter chain) when the chain collapses to
the start room or the backtrack budget is spent.
"""

import logging
from typing import Optional

from ...generators.errors import CatalogConfigurationError
from ...generators.layout.geometry import YAW_STEPS
from ...generators.rooms.room_template import RoomTemplate
from ...generators.rooms.selection import weighted_pick
from .base import BuildPhase, SearchStatus
from .context import BuildContext
from .extension import ChainExtension, is_landmark_due, relaxation_sequence

logger = logging.getLogger(__name__)

ORIGIN = (0.0, 0.0, 0.0)


class MainPathPhase(BuildPhase):
    """Builds the main chain from the start room."""

    def __init__(self, ctx: BuildContext):
        super().__init__(ctx)
        self.target_length = ctx.settings.main_path_rooms
        self.backtracks = 0
        self._extension: Optional[ChainExtension] = None

    @property
    def name(self) -> str:
        return "main_path"

    @property
    def chain(self):
        return self.ctx.main_path

    def advance(self) -> bool:
        if self.finished:
            return True
        if not self.chain:
            self._place_start_room()
            if len(self.chain) >= self.target_length:
                return self._complete()
            return False

        if self._extension is None:
            due = is_landmark_due(len(self.chain), self.ctx.settings.landmark_every)
            self._extension = ChainExtension(self.ctx, self.chain[-1], relaxation_sequence(due))

        status = self._extension.advance()
        if status == SearchStatus.PENDING:
            return False

        if status == SearchStatus.SUCCESS:
            self.chain.append(self._extension.placed_index)
            self._extension = None
            if len(self.chain) >= self.target_length:
                return self._complete()
            return False

        # Every relaxation failed at this tip.
        self._extension = None
        if len(self.chain) <= 1:
            return self._give_up("collapsed to the start room")
        if self.backtracks >= self.ctx.settings.max_backtracks:
            return self._give_up(f"backtrack budget of {self.ctx.settings.max_backtracks} exhausted")

        removed = self.ctx.remove_last_room()
        self.chain.pop()
        self.backtracks += 1
        logger.debug("Backtracked main path: removed %s, length now %d (backtracks=%d)",
                     removed.template_id, len(self.chain), self.backtracks)
        return False

    def _start_template(self) -> RoomTemplate:
        settings = self.ctx.settings
        if settings.start_template_id is not None:
            template = self.ctx.catalog.get(settings.start_template_id)
            if template is None:
                raise CatalogConfigurationError(
                    f"Start template '{settings.start_template_id}' is not in the catalog"
                )
            return template
        template = weighted_pick(self.ctx.selector.eligible(self.ctx.graph, 1), self.ctx.rng)
        if template is None:
            raise CatalogConfigurationError("No room template can serve as the start room")
        return template

    def _place_start_room(self) -> None:
        ctx = self.ctx
        template = self._start_template()
        yaw = YAW_STEPS[ctx.rng.randrange(len(YAW_STEPS))]
        placed = ctx.try_place(template, ORIGIN, yaw)
        if placed is None:
            raise CatalogConfigurationError(
                f"Start room '{template.template_id}' could not be placed in an empty layout"
            )
        handle, bounds = placed
        index = ctx.add_room(template, ORIGIN, yaw, handle, bounds)
        self.chain.append(index)
        logger.debug("Placed start room %s (yaw %d)", template.template_id, yaw)

    def _complete(self) -> bool:
        self.result.metrics["length"] = len(self.chain)
        self.result.metrics["backtracks"] = self.backtracks
        logger.info("Main path complete: %d rooms, %d backtracks", len(self.chain), self.backtracks)
        return self.finish()

    def _give_up(self, reason: str) -> bool:
        message = (f"Main path stopped at {len(self.chain)}/{self.target_length} rooms: {reason}")
        logger.warning(message)
        self.result.add_warning(message)
        self.result.metrics["length"] = len(self.chain)
        self.result.metrics["backtracks"] = self.backtracks
        return self.finish()
