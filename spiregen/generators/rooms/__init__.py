"""
Room templates, sockets and the catalog.

This module exports:
- SocketTemplate / SocketType: connection points
- RoomTemplate: immutable room definition
- RoomCatalog: ordered template registry
- TemplateSelector: uniqueness, cooldown and weight filters
- builtin_catalog(): demo catalog
"""

from .socket_system import SocketTemplate, SocketType
from .room_template import RoomTemplate
from .catalog import RoomCatalog
from .selection import TemplateSelector, weighted_pick, weighted_shuffle
from .catalog_storage import load_catalog, save_catalog
from .builtin import builtin_catalog

__all__ = [
    'SocketTemplate',
    'SocketType',
    'RoomTemplate',
    'RoomCatalog',
    'TemplateSelector',
    'weighted_pick',
    'weighted_shuffle',
    'load_catalog',
    'save_catalog',
    'builtin_catalog',
]
