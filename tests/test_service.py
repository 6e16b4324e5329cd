"""Tests for the layout service."""

from __future__ import annotations

from dataclasses import replace

import pytest

from spiregen.generators.errors import CatalogConfigurationError
from spiregen.generators.layout.spatial_host import BoxSpatialHost
from spiregen.pipeline.builder import LayoutBuilder
from spiregen.pipeline.service import LayoutService
from spiregen.pipeline.settings import GeneratorSettings


def _tick_until_done(service: LayoutService, limit: int = 100000) -> int:
    for ticks in range(1, limit + 1):
        if service.tick():
            return ticks
    raise AssertionError("build did not finish")


@pytest.fixture
def service(demo_catalog, demo_settings, host) -> LayoutService:
    return LayoutService(demo_catalog, host, replace(demo_settings, attempts_per_step=4))


def test_event_fires_once_per_build(service: LayoutService) -> None:
    received = []
    service.on_layout_generated(received.append)

    service.set_seed(3)
    ticks = _tick_until_done(service)
    for _ in range(5):
        assert service.tick()

    assert ticks > 1
    assert len(received) == 1
    assert received[0] is service.snapshot
    assert received[0].seed == 3


def test_unsubscribe_stops_notifications(service: LayoutService) -> None:
    received = []
    unsubscribe = service.on_layout_generated(received.append)
    service.generate(1)
    unsubscribe()
    unsubscribe()
    service.generate(2)
    assert [snapshot.seed for snapshot in received] == [1]


def test_failing_listener_does_not_block_others(service: LayoutService) -> None:
    def broken(snapshot):
        raise RuntimeError("listener bug")

    received = []
    service.on_layout_generated(broken)
    service.on_layout_generated(received.append)

    service.generate(4)

    assert len(received) == 1


def test_tick_without_build_is_idle(service: LayoutService) -> None:
    assert service.tick()
    assert not service.is_building
    assert service.seed is None
    assert service.snapshot is None


def test_generate_matches_a_standalone_build(service: LayoutService, demo_catalog,
                                             demo_settings) -> None:
    expected = LayoutBuilder(demo_catalog, demo_settings, BoxSpatialHost(), 17).run()
    assert service.generate(17).to_dict() == expected.snapshot.to_dict()


class TestReseeding:
    def test_new_seed_cancels_the_build_in_flight(self, service: LayoutService, host) -> None:
        received = []
        service.on_layout_generated(received.append)

        service.set_seed(1)
        assert not service.tick()
        assert service.is_building
        assert host.live_count > 0

        service.set_seed(2)
        _tick_until_done(service)

        assert [snapshot.seed for snapshot in received] == [2]
        assert host.live_count == len(service.snapshot.rooms)

    def test_new_seed_replaces_a_finished_layout(self, service: LayoutService, host) -> None:
        service.generate(5)
        second = service.generate(6)
        assert service.seed == 6
        assert host.live_count == len(second.rooms)


def test_shutdown_releases_everything(service: LayoutService, host) -> None:
    received = []
    service.on_layout_generated(received.append)
    service.set_seed(9)
    service.tick()

    service.shutdown()

    assert host.live_count == 0
    assert service.tick()
    assert received == []


def test_invalid_settings_are_rejected(demo_catalog, host) -> None:
    with pytest.raises(CatalogConfigurationError):
        LayoutService(demo_catalog, host, GeneratorSettings(main_path_rooms=0))


def test_failed_reseed_leaves_the_service_idle(service: LayoutService, host) -> None:
    service.generate(1)
    # no template exposes a size 3 socket, so the next build cannot start
    service.settings = replace(service.settings, socket_size=3)

    with pytest.raises(CatalogConfigurationError):
        service.set_seed(2)

    assert host.live_count == 0
    assert service.tick()
    assert not service.is_building
    assert service.seed is None
    assert service.snapshot is None
