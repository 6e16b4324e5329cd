"""
Build phases for layout generation.

Each phase advances the shared BuildContext by at most one placement attempt
per call, so a build can be spread across many short scheduler slices.
"""

from .base import BuildPhase, PhaseResult, SearchStatus
from .context import BuildContext, MAIN_PATH
from .extension import ChainExtension, ExtensionSearch, is_landmark_due, relaxation_sequence
from .main_path import MainPathPhase
from .terminus import TerminusPhase
from .branches import BranchPhase
from .loops import LoopPhase, match_connector

__all__ = [
    # Base classes
    'BuildPhase',
    'PhaseResult',
    'SearchStatus',
    'BuildContext',
    'MAIN_PATH',
    # Extension search
    'ChainExtension',
    'ExtensionSearch',
    'is_landmark_due',
    'relaxation_sequence',
    # Phases
    'MainPathPhase',
    'TerminusPhase',
    'BranchPhase',
    'LoopPhase',
    'match_connector',
]
