"""
Layout builder: drives the build phases in bounded slices.

A build runs through the stages MAIN_PATH -> TERMINUS -> BRANCHES -> LOOPS.
``step()`` advances the current phase until ``attempts_per_step`` placement
attempts have been made (or the build finishes), then returns. All random
draws happen inside the phases in a fixed order, so a layout depends only on
the seed, the catalog and the settings, never on how the work was sliced.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from ..generators.errors import CatalogConfigurationError, GenerationCancelledException
from ..generators.layout.layout_graph import LayoutGraph, LayoutSnapshot
from ..generators.layout.spatial_host import SpatialHost
from ..generators.rng import RNGProvider
from ..generators.rooms.catalog import RoomCatalog
from ..validation import ValidationResult, validate_catalog, validate_layout
from .passes import BranchPhase, BuildContext, BuildPhase, LoopPhase, MainPathPhase, TerminusPhase
from .settings import GeneratorSettings

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Stages / results
# ---------------------------------------------------------------------------

class BuildStage(Enum):
    START = "start"
    MAIN_PATH = "main_path"
    TERMINUS = "terminus"
    BRANCHES = "branches"
    LOOPS = "loops"
    COMPLETE = "complete"


PHASE_ORDER = [
    (BuildStage.MAIN_PATH, MainPathPhase),
    (BuildStage.TERMINUS, TerminusPhase),
    (BuildStage.BRANCHES, BranchPhase),
    (BuildStage.LOOPS, LoopPhase),
]


@dataclass
class BuildResult:
    success: bool = False
    seed: int = 0
    snapshot: Optional[LayoutSnapshot] = None
    paths: Dict[str, List[int]] = field(default_factory=dict)
    stages_completed: List[BuildStage] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    metrics: Dict[str, Any] = field(default_factory=dict)
    validation: Optional[ValidationResult] = None

    @property
    def has_terminus(self) -> bool:
        return self.snapshot is not None and self.snapshot.has_terminus

    def add_error(self, error: str, stage: Optional[BuildStage] = None):
        if stage:
            error = f"[{stage.value}] {error}"
        self.errors.append(error)

    def add_warning(self, warning: str, stage: Optional[BuildStage] = None):
        if stage:
            warning = f"[{stage.value}] {warning}"
        self.warnings.append(warning)


# ---------------------------------------------------------------------------
# Builder
# ---------------------------------------------------------------------------

class LayoutBuilder:
    """Builds one layout for one seed.

    Args:
        catalog: Room templates available to the build
        settings: Generator settings (validated here)
        host: Spatial host that instantiates rooms
        seed: Master seed

    Raises:
        CatalogConfigurationError: If the settings are invalid or no template
            can be used with the configured socket type/size
    """

    def __init__(self, catalog: RoomCatalog, settings: GeneratorSettings,
                 host: SpatialHost, seed: int):
        settings.validate()
        self._check_catalog(catalog, settings)

        self.catalog = catalog
        self.settings = settings
        self.host = host
        self.seed = seed
        self.rng_provider = RNGProvider(seed)
        self.graph = LayoutGraph(seed)
        self.ctx = BuildContext(self.graph, catalog, settings, host,
                                self.rng_provider.get(settings.rng_stream))

        self.stage = BuildStage.START
        self.is_cancelled = False
        self.result = BuildResult(seed=seed)
        self.result.metrics["build_time"] = 0.0
        self.steps = 0
        self._phase: Optional[BuildPhase] = None
        self._phase_index = 0

    @staticmethod
    def _check_catalog(catalog: RoomCatalog, settings: GeneratorSettings) -> None:
        check = validate_catalog(catalog, settings.socket_type, settings.socket_size,
                                 settings.start_template_id, settings.terminus_template_id)
        for issue in check.warnings:
            logger.warning(issue.format())
        if check.failed:
            for issue in check.errors:
                logger.error(issue.format())
            raise CatalogConfigurationError(check.report())

    @property
    def finished(self) -> bool:
        return self.stage == BuildStage.COMPLETE

    @property
    def attempts(self) -> int:
        return self.ctx.attempts

    def step(self) -> bool:
        """Run one bounded slice of the build.

        Returns:
            True once the build has finished

        Raises:
            GenerationCancelledException: If the build was cancelled
        """
        if self.is_cancelled:
            raise GenerationCancelledException("Layout build cancelled")
        if self.finished:
            return True

        started = time.perf_counter()
        budget_end = self.ctx.attempts + self.settings.attempts_per_step
        while not self.finished and self.ctx.attempts < budget_end:
            if self._phase is None:
                self._enter_next_stage()
                continue
            if self._phase.advance():
                self._collect_phase(self._phase)
                self._phase = None

        self.steps += 1
        self.result.metrics["build_time"] += time.perf_counter() - started
        return self.finished

    def run(self) -> BuildResult:
        """Step until finished."""
        while not self.step():
            pass
        return self.result

    def cancel(self) -> None:
        """Stop the build and tear down every room it placed."""
        if self.is_cancelled:
            return
        self.is_cancelled = True
        destroyed = self.ctx.destroy_rooms()
        logger.info("Cancelled build for seed %d at stage %s (%d rooms torn down)",
                    self.seed, self.stage.value, destroyed)

    def destroy_rooms(self) -> int:
        """Release the instances of a finished layout."""
        return self.ctx.destroy_rooms()

    # -- stages --

    def _enter_next_stage(self) -> None:
        if self._phase_index >= len(PHASE_ORDER):
            self._finalize()
            return
        stage, phase_cls = PHASE_ORDER[self._phase_index]
        self._phase_index += 1
        self.stage = stage
        self._phase = phase_cls(self.ctx)
        logger.debug("Stage: %s", stage.value)

    def _collect_phase(self, phase: BuildPhase) -> None:
        self.result.stages_completed.append(self.stage)
        for warning in phase.result.warnings:
            self.result.add_warning(warning, self.stage)
        for error in phase.result.errors:
            self.result.add_error(error, self.stage)
        self.result.metrics[phase.name] = dict(phase.result.metrics)

    def _finalize(self) -> None:
        self.stage = BuildStage.COMPLETE
        result = self.result

        validation = validate_layout(self.graph, self.settings.overlap_padding)
        for issue in validation.errors:
            logger.error(issue.format())
        result.validation = validation

        result.snapshot = self.graph.snapshot()
        result.paths = {name: list(rooms) for name, rooms in self.ctx.paths.items()}
        result.success = not result.errors and validation.passed
        result.metrics["rooms"] = len(self.graph.rooms)
        result.metrics["connections"] = len(self.graph.connections)
        result.metrics["attempts"] = self.ctx.attempts
        result.metrics["seed"] = self.seed
        logger.info("Generated layout: rooms=%d, connections=%d, seed=%d",
                    len(self.graph.rooms), len(self.graph.connections), self.seed)
