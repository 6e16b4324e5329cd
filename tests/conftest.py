from __future__ import annotations

import pytest

from spiregen.generators.layout.spatial_host import BoxSpatialHost
from spiregen.generators.rooms.builtin import TERMINUS_TEMPLATE_ID, builtin_catalog
from spiregen.generators.rooms.catalog import RoomCatalog
from spiregen.pipeline.settings import GeneratorSettings
from tests.helpers import cross_catalog


@pytest.fixture
def host() -> BoxSpatialHost:
    return BoxSpatialHost()


@pytest.fixture
def catalog() -> RoomCatalog:
    """A single four-way room."""
    return cross_catalog()


@pytest.fixture
def demo_catalog() -> RoomCatalog:
    return builtin_catalog()


@pytest.fixture
def demo_settings() -> GeneratorSettings:
    return GeneratorSettings(main_path_rooms=10, terminus_template_id=TERMINUS_TEMPLATE_ID)
