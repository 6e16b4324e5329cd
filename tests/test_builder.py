"""Tests for the sliced layout builder."""

from __future__ import annotations

from dataclasses import replace

import pytest

from spiregen.generators.errors import CatalogConfigurationError, GenerationCancelledException
from spiregen.generators.layout.geometry import YAW_STEPS
from spiregen.generators.layout.spatial import find_overlapping_pairs
from spiregen.generators.layout.spatial_host import BoxSpatialHost
from spiregen.generators.rooms.catalog import RoomCatalog
from spiregen.generators.rooms.room_template import RoomTemplate
from spiregen.generators.rooms.socket_system import SocketType
from spiregen.pipeline.builder import BuildStage, LayoutBuilder
from spiregen.pipeline.settings import GeneratorSettings
from tests.helpers import CELL_BOUNDS, cross_catalog, make_socket, used_socket_keys

SEEDS = [0, 1, 7, 42, 12345]


def _build(catalog, settings, seed, host=None):
    return LayoutBuilder(catalog, settings, host or BoxSpatialHost(), seed).run()


class TestDeterminism:
    @pytest.mark.parametrize("seed", SEEDS)
    def test_same_seed_same_layout(self, demo_catalog, demo_settings, seed: int) -> None:
        first = _build(demo_catalog, demo_settings, seed)
        second = _build(demo_catalog, demo_settings, seed)
        assert first.snapshot.to_dict() == second.snapshot.to_dict()
        assert first.paths == second.paths

    @pytest.mark.parametrize("seed", SEEDS)
    def test_slicing_does_not_change_the_layout(self, demo_catalog, demo_settings, seed: int) -> None:
        fine = _build(demo_catalog, replace(demo_settings, attempts_per_step=1), seed)
        coarse = _build(demo_catalog, replace(demo_settings, attempts_per_step=1000), seed)
        assert fine.snapshot.to_dict() == coarse.snapshot.to_dict()

    def test_different_seeds_differ(self, demo_catalog, demo_settings) -> None:
        layouts = {repr(_build(demo_catalog, demo_settings, seed).snapshot.to_dict())
                   for seed in SEEDS}
        assert len(layouts) > 1

    def test_stream_name_changes_the_layout(self, demo_catalog, demo_settings) -> None:
        layouts = {
            repr(_build(demo_catalog, replace(demo_settings, rng_stream=name), 3).snapshot.to_dict())
            for name in ("layout", "alt-a", "alt-b", "alt-c")
        }
        assert len(layouts) > 1


@pytest.mark.parametrize("seed", SEEDS)
def test_layout_invariants(demo_catalog, demo_settings, seed: int) -> None:
    result = _build(demo_catalog, demo_settings, seed)
    snapshot = result.snapshot

    assert result.validation.passed, result.validation.report()
    assert all(room.yaw_degrees in YAW_STEPS for room in snapshot.rooms)

    keys = used_socket_keys(snapshot)
    assert len(keys) == len(set(keys))
    for conn in snapshot.connections:
        assert conn.a.socket_type == conn.b.socket_type
        assert conn.a.size_class == conn.b.size_class


def test_rooms_never_overlap(demo_catalog, demo_settings) -> None:
    for seed in SEEDS:
        builder = LayoutBuilder(demo_catalog, demo_settings, BoxSpatialHost(), seed)
        builder.run()
        assert find_overlapping_pairs(builder.graph.bounds(), demo_settings.overlap_padding) == []


def test_stages_run_in_order(demo_catalog, demo_settings) -> None:
    result = _build(demo_catalog, demo_settings, 5)
    assert result.stages_completed == [
        BuildStage.MAIN_PATH, BuildStage.TERMINUS, BuildStage.BRANCHES, BuildStage.LOOPS,
    ]
    assert result.metrics["rooms"] == len(result.snapshot.rooms)
    assert result.metrics["seed"] == 5


def test_step_respects_the_attempt_budget(demo_catalog, demo_settings) -> None:
    builder = LayoutBuilder(demo_catalog, replace(demo_settings, attempts_per_step=3),
                            BoxSpatialHost(), 11)
    builder.step()
    assert not builder.finished
    # one slice stops as soon as its budget is reached
    assert 3 <= builder.attempts < 3 + 3


def test_every_instance_belongs_to_the_layout(demo_catalog, demo_settings) -> None:
    host = BoxSpatialHost()
    builder = LayoutBuilder(demo_catalog, demo_settings, host, 21)
    builder.run()
    assert host.live_count == len(builder.graph)
    assert builder.destroy_rooms() == len(builder.graph)
    assert host.live_count == 0


class TestConfigurationErrors:
    def test_no_compatible_template(self) -> None:
        large_only = RoomTemplate("large", sockets=(
            make_socket("n", socket_type=SocketType.DOOR_LARGE),), local_bounds=CELL_BOUNDS)
        with pytest.raises(CatalogConfigurationError, match="CATALOG-001"):
            LayoutBuilder(RoomCatalog([large_only]), GeneratorSettings(), BoxSpatialHost(), 1)

    def test_missing_terminus_template(self) -> None:
        with pytest.raises(CatalogConfigurationError, match="CATALOG-002"):
            LayoutBuilder(cross_catalog(), GeneratorSettings(terminus_template_id="boss"),
                          BoxSpatialHost(), 1)

    @pytest.mark.parametrize("overrides", [
        {"main_path_rooms": 0},
        {"branch_length_min": 4, "branch_length_max": 2},
        {"attempts_per_step": 0},
        {"overlap_padding": -1.0},
    ])
    def test_invalid_settings(self, overrides) -> None:
        with pytest.raises(CatalogConfigurationError, match="Invalid settings"):
            LayoutBuilder(cross_catalog(), GeneratorSettings(**overrides), BoxSpatialHost(), 1)


class TestCancellation:
    def test_cancel_tears_down_and_blocks_further_steps(self, demo_catalog, demo_settings) -> None:
        host = BoxSpatialHost()
        builder = LayoutBuilder(demo_catalog, replace(demo_settings, attempts_per_step=4), host, 8)
        builder.step()
        assert host.live_count > 0

        builder.cancel()

        assert host.live_count == 0
        with pytest.raises(GenerationCancelledException):
            builder.step()

    def test_cancel_is_idempotent(self, demo_catalog, demo_settings, host) -> None:
        builder = LayoutBuilder(demo_catalog, demo_settings, host, 8)
        builder.step()
        builder.cancel()
        builder.cancel()
        assert host.destroy_calls == host.instantiate_calls
