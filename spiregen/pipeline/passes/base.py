"""
Base classes for resumable build phases.

A phase is one stage of a layout build (main path, terminus, branches,
loops). Unlike a one-shot pass, a phase is driven in small increments: each
``advance()`` performs at most one placement attempt or one bookkeeping
transition and reports whether the phase has finished. All phase state lives
in plain attributes, so the builder can stop between two calls and resume
later without disturbing the order of random draws.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

from .context import BuildContext


class SearchStatus(Enum):
    """Outcome of one step of a placement search."""
    PENDING = "pending"
    SUCCESS = "success"
    EXHAUSTED = "exhausted"


@dataclass
class PhaseResult:
    """
    Result of a build phase.

    Attributes:
        success: False once an error was recorded
        warnings: Non-fatal issues encountered
        errors: Issues that left the phase's goal unmet
        metrics: Counters for diagnostics
    """
    success: bool = True
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def add_error(self, message: str) -> None:
        """Add an error message and mark as failed."""
        self.errors.append(message)
        self.success = False


class BuildPhase(ABC):
    """
    Base class for resumable build phases.

    Subclasses implement ``advance``; the builder calls it repeatedly until it
    returns True, counting placement attempts through the shared context.
    """

    def __init__(self, ctx: BuildContext):
        self.ctx = ctx
        self.result = PhaseResult()
        self.finished = False

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this phase."""
        pass

    @abstractmethod
    def advance(self) -> bool:
        """
        Perform at most one placement attempt.

        Returns:
            True when the phase has finished
        """
        pass

    def finish(self) -> bool:
        """Mark the phase finished; returns True for use as ``return self.finish()``."""
        self.finished = True
        return True
