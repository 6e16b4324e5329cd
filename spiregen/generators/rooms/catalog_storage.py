"""
Catalog persistence.

A catalog file is a JSON object ``{"templates": [<template>, ...]}`` where each
template uses the ``RoomTemplate.to_dict`` layout. Template order in the file is
the catalog order.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from ..errors import CatalogConfigurationError
from .catalog import RoomCatalog
from .room_template import RoomTemplate

logger = logging.getLogger(__name__)


def catalog_to_dict(catalog: RoomCatalog) -> Dict[str, Any]:
    return {"templates": [t.to_dict() for t in catalog]}


def catalog_from_dict(data: Dict[str, Any]) -> RoomCatalog:
    templates = [RoomTemplate.from_dict(t) for t in data.get("templates", [])]
    return RoomCatalog(templates)


def save_catalog(catalog: RoomCatalog, file_path: Union[str, Path]) -> Path:
    """
    Save a catalog as JSON.

    Args:
        catalog: Catalog to save
        file_path: Destination file

    Returns:
        Path to the saved file
    """
    file_path = Path(file_path)
    with open(file_path, 'w', encoding='utf-8') as f:
        json.dump(catalog_to_dict(catalog), f, indent=2, ensure_ascii=False)
    logger.debug(f"Saved catalog with {len(catalog)} templates to {file_path}")
    return file_path


def load_catalog(file_path: Union[str, Path]) -> RoomCatalog:
    """
    Load a catalog from JSON.

    Raises:
        CatalogConfigurationError: If the file is missing, malformed, or
            contains invalid templates
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise CatalogConfigurationError(f"Catalog file not found: {file_path}")
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = json.load(f)
        catalog = catalog_from_dict(data)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise CatalogConfigurationError(f"Invalid catalog file {file_path}: {e}") from e
    logger.info(f"Loaded {len(catalog)} room templates from {file_path}")
    return catalog
