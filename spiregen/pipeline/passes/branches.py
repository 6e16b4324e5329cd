"""
Branch phase: side chains grown from the finished main path.

Every main-path room with an open socket is a potential root; roots are
shuffled and used at most once. Each branch reuses the chain extension search
with its own backtrack budget. Branches that end shorter than the minimum
length are removed entirely and do not count toward the quota.
"""

import logging
from typing import List, Optional

from .base import BuildPhase, SearchStatus
from .context import BuildContext
from .extension import ChainExtension

logger = logging.getLogger(__name__)


class BranchPhase(BuildPhase):
    """Grows up to ``settings.branches`` side chains."""

    def __init__(self, ctx: BuildContext):
        super().__init__(ctx)
        self.built = 0
        self.discarded = 0
        self._roots: Optional[List[int]] = None
        self._root_cursor = 0

        # Current branch
        self._root: Optional[int] = None
        self._rooms: List[int] = []
        self._target_length = 0
        self._backtracks = 0
        self._extension: Optional[ChainExtension] = None

    @property
    def name(self) -> str:
        return "branches"

    def advance(self) -> bool:
        if self.finished:
            return True
        settings = self.ctx.settings
        if self.built >= settings.branches:
            return self._complete()

        if self._roots is None:
            self._roots = [i for i in self.ctx.main_path if self.ctx.open_sockets(i)]
            self.ctx.rng.shuffle(self._roots)

        if self._root is None:
            return self._start_next_branch()

        if self._extension is None:
            tip = self._rooms[-1] if self._rooms else self._root
            is_last = len(self._rooms) + 1 >= self._target_length
            configs = [(1, False)] if is_last else [(2, False), (1, False)]
            self._extension = ChainExtension(self.ctx, tip, configs)

        status = self._extension.advance()
        if status == SearchStatus.PENDING:
            return False

        if status == SearchStatus.SUCCESS:
            self._rooms.append(self._extension.placed_index)
            self._extension = None
            if len(self._rooms) >= self._target_length:
                self._end_branch()
            return False

        self._extension = None
        if not self._rooms or self._backtracks >= settings.branch_max_backtracks:
            self._end_branch()
            return False

        self.ctx.remove_last_room()
        self._rooms.pop()
        self._backtracks += 1
        return False

    def _start_next_branch(self) -> bool:
        while self._root_cursor < len(self._roots):
            root = self._roots[self._root_cursor]
            self._root_cursor += 1
            if not self.ctx.open_sockets(root):
                logger.debug("Branch root %d has no open sockets left; skipping", root)
                continue
            settings = self.ctx.settings
            self._root = root
            self._rooms = []
            self._backtracks = 0
            self._target_length = self.ctx.rng.randint(settings.branch_length_min,
                                                       settings.branch_length_max)
            logger.debug("Starting branch from room %d, target length %d",
                         root, self._target_length)
            return False
        return self._complete()

    def _end_branch(self) -> None:
        if len(self._rooms) >= self.ctx.settings.branch_length_min:
            name = f"branch_{self.built}"
            self.ctx.paths[name] = [self._root] + self._rooms
            self.built += 1
            logger.debug("Kept %s: %d rooms from root %d", name, len(self._rooms), self._root)
        else:
            for _ in self._rooms:
                self.ctx.remove_last_room()
            self.discarded += 1
            logger.debug("Discarded branch from room %d: %d/%d rooms",
                         self._root, len(self._rooms), self.ctx.settings.branch_length_min)
        self._root = None
        self._rooms = []

    def _complete(self) -> bool:
        wanted = self.ctx.settings.branches
        self.result.metrics["built"] = self.built
        self.result.metrics["discarded"] = self.discarded
        if self.built < wanted:
            logger.info("Branch quota shortfall: built %d of %d", self.built, wanted)
        else:
            logger.info("Branches complete: %d built, %d discarded", self.built, self.discarded)
        return self.finish()
