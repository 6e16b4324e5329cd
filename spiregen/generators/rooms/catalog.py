"""
Room catalog: ordered registry of the room templates available to a build.

The catalog is read-only to the builder. Registration validates each template
and refuses duplicates so that template ids can be used as identities in the
output snapshot.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, Iterator, List, Optional

from ..errors import CatalogConfigurationError
from .room_template import RoomTemplate
from .socket_system import SocketType

logger = logging.getLogger(__name__)

# Upper bound on the rolling cooldown window, whatever the templates ask for.
MAX_COOLDOWN_WINDOW = 100


class RoomCatalog:
    """Registry mapping template ids to templates, preserving authored order."""

    def __init__(self, templates: Optional[Iterable[RoomTemplate]] = None):
        self._templates: Dict[str, RoomTemplate] = {}
        for template in templates or ():
            self.register(template)

    def register(self, template: RoomTemplate) -> None:
        """Register a template.

        Raises:
            CatalogConfigurationError: If the id is already registered or the
                template fails its authoring checks
        """
        if template.template_id in self._templates:
            raise CatalogConfigurationError(
                f"Duplicate room template id '{template.template_id}'"
            )
        problems = template.validate()
        if problems:
            for problem in problems:
                logger.error(f"Invalid room template: {problem}")
            raise CatalogConfigurationError("; ".join(problems))
        self._templates[template.template_id] = template

    def get(self, template_id: str) -> Optional[RoomTemplate]:
        return self._templates.get(template_id)

    def __contains__(self, template_id: object) -> bool:
        return template_id in self._templates

    def __iter__(self) -> Iterator[RoomTemplate]:
        return iter(self._templates.values())

    def __len__(self) -> int:
        return len(self._templates)

    @property
    def templates(self) -> List[RoomTemplate]:
        return list(self._templates.values())

    def list_ids(self) -> List[str]:
        return list(self._templates.keys())

    def compatible_templates(self, socket_type: SocketType, size_class: int,
                             min_sockets: int = 1) -> List[RoomTemplate]:
        """Templates exposing at least ``min_sockets`` sockets of the given type/size."""
        return [
            t for t in self._templates.values()
            if t.compatible_socket_count(socket_type, size_class) >= min_sockets
        ]

    @property
    def cooldown_window(self) -> int:
        """Global cooldown window: worst-case cooldown across templates, capped."""
        worst = max((t.repeat_cooldown for t in self._templates.values()), default=0)
        return max(0, min(worst, MAX_COOLDOWN_WINDOW))
