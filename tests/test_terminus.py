"""Tests for terminus placement."""

from __future__ import annotations

from spiregen.generators.layout.layout_graph import NO_ROOM
from spiregen.generators.layout.spatial import AABB
from spiregen.generators.layout.spatial_host import BoxSpatialHost
from spiregen.generators.rooms.catalog import RoomCatalog
from spiregen.generators.rooms.room_template import RoomTemplate
from spiregen.generators.rooms.socket_system import SocketType
from spiregen.pipeline.builder import LayoutBuilder
from spiregen.pipeline.passes.terminus import TerminusPhase
from spiregen.pipeline.settings import GeneratorSettings
from tests.helpers import CELL_BOUNDS, make_context, make_room, make_socket, place, run_phase


def _build(catalog: RoomCatalog, seed: int = 5, **overrides):
    settings = GeneratorSettings(main_path_rooms=4, branches=0, loop_attempts=0, **overrides)
    return LayoutBuilder(catalog, settings, BoxSpatialHost(), seed).run()


def test_terminus_attaches_to_tip() -> None:
    catalog = RoomCatalog([make_room("cross"), make_room("boss", "s")])
    result = _build(catalog, terminus_template_id="boss")
    snapshot = result.snapshot

    assert snapshot.terminus_room_index == 4
    assert snapshot.rooms[4].template_id == "boss"
    last = snapshot.connections[-1]
    assert last.b.room_index == 4
    assert last.a.room_index == result.paths["main"][-1]
    assert result.errors == []


def test_terminus_never_used_as_ordinary_room() -> None:
    catalog = RoomCatalog([make_room("cross"), make_room("boss", "nsew")])
    for seed in range(5):
        snapshot = _build(catalog, seed, terminus_template_id="boss").snapshot
        ids = [r.template_id for r in snapshot.rooms]
        assert ids.count("boss") == 1
        assert ids.index("boss") == snapshot.terminus_room_index


def test_terminus_without_compatible_socket_is_an_error() -> None:
    boss = RoomTemplate("boss", sockets=(make_socket("s", socket_type=SocketType.DOOR_LARGE),),
                        local_bounds=CELL_BOUNDS)
    catalog = RoomCatalog([make_room("cross"), boss])
    result = _build(catalog, terminus_template_id="boss")

    assert result.snapshot.terminus_room_index == NO_ROOM
    assert not result.snapshot.has_terminus
    assert any("terminus" in error for error in result.errors)
    assert not result.success
    # the rest of the layout is still emitted
    assert len(result.snapshot.rooms) == 4


def test_no_terminus_configured_is_a_warning() -> None:
    result = _build(RoomCatalog([make_room("cross")]))
    assert result.snapshot.terminus_room_index == NO_ROOM
    assert any("terminus" in warning.lower() for warning in result.warnings)
    assert result.errors == []


def test_terminus_search_walks_back_from_tip() -> None:
    cross = make_room("cross")
    boss = make_room("boss", "s")
    blocker = RoomTemplate("blocker", local_bounds=CELL_BOUNDS)
    ctx = make_context(RoomCatalog([cross, boss]),
                       GeneratorSettings(terminus_template_id="boss"))
    place(ctx, cross)
    place(ctx, cross, (0.0, 0.0, 10.0))
    ctx.graph.mark_used(1, "s")
    ctx.main_path.extend([0, 1])
    # tip (room 1) only has its north socket open and that cell is taken
    for direction in "ew":
        ctx.graph.mark_used(1, direction)
    place(ctx, blocker, (0.0, 0.0, 20.0))

    phase = TerminusPhase(ctx)
    run_phase(phase)

    assert phase.result.success
    terminus = ctx.graph.terminus_room_index
    assert terminus == 3
    assert ctx.graph.connections[-1].a.room_index == 0


def test_terminus_failure_everywhere() -> None:
    cross = make_room("cross")
    boss = RoomTemplate("boss", sockets=(make_socket("s"),),
                        local_bounds=AABB(-50.0, 0.0, -4.75, 50.0, 4.0, 100.0))
    ctx = make_context(RoomCatalog([cross, boss]),
                       GeneratorSettings(terminus_template_id="boss"))
    place(ctx, cross)
    ctx.main_path.append(0)
    # surround the start room so the huge arena cannot fit anywhere
    for position in ((0.0, 0.0, 30.0), (0.0, 0.0, -30.0), (30.0, 0.0, 0.0), (-30.0, 0.0, 0.0)):
        place(ctx, cross, position)

    phase = TerminusPhase(ctx)
    run_phase(phase)

    assert not phase.result.success
    assert ctx.graph.terminus_room_index == NO_ROOM
    assert ctx.host.live_count == len(ctx.graph)
