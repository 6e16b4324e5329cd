"""
Candidate template selection.

Filters the catalog down to the templates a placement may use right now and
orders them by weighted random permutation. Uniqueness and cooldown are
derived from the rooms currently in the layout graph, never from separate
bookkeeping, so removing rooms during backtracking restores them for free.
"""

from __future__ import annotations

from random import Random
from typing import Callable, List, Optional, Sequence, TypeVar, TYPE_CHECKING

from .catalog import RoomCatalog
from .room_template import RoomTemplate
from .socket_system import SocketTemplate, SocketType

if TYPE_CHECKING:
    from ..layout.layout_graph import LayoutGraph

T = TypeVar("T")


def weighted_shuffle(templates: Sequence[RoomTemplate], rng: Random) -> List[RoomTemplate]:
    """Random permutation biased by weight.

    Each template draws ``u ** (1 / weight)`` and the list is sorted by that
    key, highest first. Heavier templates therefore tend to come first while
    every template still appears exactly once. Draws one number per template.
    """
    keyed = []
    for template in templates:
        u = rng.random()
        keyed.append((u ** (1.0 / template.weight), template))
    keyed.sort(key=lambda pair: pair[0], reverse=True)
    return [template for _, template in keyed]


def weighted_pick(templates: Sequence[RoomTemplate], rng: Random) -> Optional[RoomTemplate]:
    """Pick one template with probability proportional to its weight."""
    if not templates:
        return None
    return rng.choices(list(templates), weights=[t.weight for t in templates], k=1)[0]


def low_priority_last(items: List[T], key: Callable[[T], SocketTemplate]) -> List[T]:
    """Stable partition that moves low-priority sockets to the end."""
    return sorted(items, key=lambda item: key(item).low_priority)


def shuffled_sockets(items: Sequence[T], rng: Random,
                     key: Callable[[T], SocketTemplate] = lambda s: s) -> List[T]:
    """Shuffle, then push low-priority sockets behind the normal ones."""
    result = list(items)
    rng.shuffle(result)
    return low_priority_last(result, key)


class TemplateSelector:
    """Applies the selection filters for one build.

    Args:
        catalog: Room catalog
        socket_type: Configured socket type of the build
        size_class: Configured socket size class
        terminus_template_id: Excluded from the ordinary candidate pool
    """

    def __init__(self, catalog: RoomCatalog, socket_type: SocketType, size_class: int,
                 terminus_template_id: Optional[str] = None):
        self.catalog = catalog
        self.socket_type = socket_type
        self.size_class = size_class
        self.terminus_template_id = terminus_template_id
        self.cooldown_window = catalog.cooldown_window

    def recent_template_ids(self, graph: 'LayoutGraph') -> List[str]:
        """Template ids of the last ``cooldown_window`` placed rooms."""
        if self.cooldown_window <= 0:
            return []
        return graph.template_ids()[-self.cooldown_window:]

    def is_available(self, template: RoomTemplate, graph: 'LayoutGraph',
                     recent: Optional[List[str]] = None) -> bool:
        """Weight, uniqueness and cooldown filters."""
        if template.weight <= 0:
            return False
        if template.is_unique and template.template_id in graph.template_ids():
            return False
        if template.repeat_cooldown > 0:
            if recent is None:
                recent = self.recent_template_ids(graph)
            if template.template_id in recent:
                return False
        return True

    def eligible(self, graph: 'LayoutGraph', min_sockets: int = 1,
                 require_landmark: bool = False,
                 connectors: bool = False) -> List[RoomTemplate]:
        """Templates usable for the next placement, in catalog order.

        Args:
            graph: Current layout graph
            min_sockets: Minimum compatible socket count
            require_landmark: Only landmark templates
            connectors: Select from connector templates instead of the
                ordinary pool
        """
        recent = self.recent_template_ids(graph)
        result = []
        for template in self.catalog.compatible_templates(
                self.socket_type, self.size_class, min_sockets):
            if template.template_id == self.terminus_template_id:
                continue
            if template.connector != connectors:
                continue
            if require_landmark and not template.landmark:
                continue
            if self.is_available(template, graph, recent):
                result.append(template)
        return result

    def compatible_sockets(self, template: RoomTemplate) -> List[SocketTemplate]:
        return list(template.get_sockets(self.socket_type, self.size_class))
