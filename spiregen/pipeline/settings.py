"""
Generator settings and their JSON persistence.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from ..generators.errors import CatalogConfigurationError
from ..generators.rng import LAYOUT_STREAM
from ..generators.rooms.socket_system import SOCKET_FACING_MIN_DOT, SOCKET_POSITION_TOLERANCE, SocketType

logger = logging.getLogger(__name__)


@dataclass
class GeneratorSettings:
    # Main path
    main_path_rooms: int = 20
    landmark_every: int = 8  # 0 disables landmark forcing
    max_backtracks: int = 64

    # Branches
    branches: int = 4
    branch_length_min: int = 2
    branch_length_max: int = 6
    branch_max_backtracks: int = 8

    # Loops
    loop_attempts: int = 2
    loop_socket_snap_tolerance: float = 0.6
    loop_min_facing_dot: float = SOCKET_FACING_MIN_DOT

    # Sockets
    socket_type: SocketType = SocketType.DOOR_SMALL
    socket_size: int = 0
    socket_restore_tolerance: float = SOCKET_POSITION_TOLERANCE

    # Placement
    overlap_padding: float = 0.25
    start_template_id: Optional[str] = None
    terminus_template_id: Optional[str] = None

    # Scheduling
    attempts_per_step: int = 16
    rng_stream: str = LAYOUT_STREAM

    def validate(self) -> None:
        """Check every knob; raise once with all problems.

        Raises:
            CatalogConfigurationError: If any value is out of range
        """
        errors = []
        if self.main_path_rooms < 1:
            errors.append("main_path_rooms must be >= 1")
        if self.landmark_every < 0:
            errors.append("landmark_every must be >= 0")
        if self.max_backtracks < 0:
            errors.append("max_backtracks must be >= 0")
        if self.branches < 0:
            errors.append("branches must be >= 0")
        if self.branch_length_min < 1:
            errors.append("branch_length_min must be >= 1")
        if self.branch_length_max < self.branch_length_min:
            errors.append("branch_length_max must be >= branch_length_min")
        if self.branch_max_backtracks < 0:
            errors.append("branch_max_backtracks must be >= 0")
        if self.loop_attempts < 0:
            errors.append("loop_attempts must be >= 0")
        if self.loop_socket_snap_tolerance < 0:
            errors.append("loop_socket_snap_tolerance must be >= 0")
        if not -1.0 <= self.loop_min_facing_dot <= 1.0:
            errors.append("loop_min_facing_dot must be within [-1, 1]")
        if self.socket_size < 0:
            errors.append("socket_size must be >= 0")
        if self.socket_restore_tolerance < 0:
            errors.append("socket_restore_tolerance must be >= 0")
        if self.overlap_padding < 0:
            errors.append("overlap_padding must be >= 0")
        if self.attempts_per_step < 1:
            errors.append("attempts_per_step must be >= 1")
        if not self.rng_stream:
            errors.append("rng_stream must not be empty")
        if errors:
            raise CatalogConfigurationError(f"Invalid settings: {'; '.join(errors)}")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["socket_type"] = self.socket_type.value
        return data

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> 'GeneratorSettings':
        """Build settings from a dict; unknown keys are ignored with a warning."""
        known = {f.name for f in fields(GeneratorSettings)}
        values = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown setting '%s'", key)
                continue
            values[key] = value
        if "socket_type" in values:
            values["socket_type"] = SocketType.parse(values["socket_type"])
        return GeneratorSettings(**values)


def save_settings(settings: GeneratorSettings, file_path: Union[str, Path]) -> Path:
    """Write settings as JSON.

    Returns:
        Path to the saved file
    """
    file_path = Path(file_path)
    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(settings.to_dict(), f, indent=2, ensure_ascii=False)
    return file_path


def load_settings(file_path: Union[str, Path]) -> GeneratorSettings:
    """Read settings from JSON.

    Raises:
        CatalogConfigurationError: If the file is missing or malformed
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise CatalogConfigurationError(f"Settings file not found: {file_path}")
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        return GeneratorSettings.from_dict(data)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise CatalogConfigurationError(f"Invalid settings file {file_path}: {e}") from e
