"""
spiregen: seed-driven modular dungeon layout builder.

Rooms are snapped together at matching sockets into a main path, a terminus,
side branches and optional loops, without overlapping and fully determined by
an integer seed.
"""

from .generators.errors import (
    CatalogConfigurationError,
    GenerationCancelledException,
    LayoutGenerationError,
    LayoutInvariantError,
)
from .generators.layout.layout_graph import LayoutSnapshot
from .generators.layout.spatial_host import BoxSpatialHost, SpatialHost
from .generators.rooms import RoomCatalog, RoomTemplate, SocketTemplate, SocketType
from .pipeline import GeneratorSettings, LayoutBuilder, LayoutService

__version__ = "0.1.0"

__all__ = [
    'CatalogConfigurationError',
    'GenerationCancelledException',
    'LayoutGenerationError',
    'LayoutInvariantError',
    'BoxSpatialHost',
    'LayoutSnapshot',
    'SpatialHost',
    'RoomCatalog',
    'RoomTemplate',
    'SocketTemplate',
    'SocketType',
    'GeneratorSettings',
    'LayoutBuilder',
    'LayoutService',
]
