"""Tests for the layout graph and backtracking bookkeeping."""

from __future__ import annotations

import pytest

from spiregen.generators.errors import LayoutInvariantError
from spiregen.generators.layout.layout_graph import NO_ROOM, LayoutSnapshot, OpenSocketRef
from spiregen.generators.rooms.catalog import RoomCatalog
from spiregen.generators.rooms.room_template import RoomTemplate
from spiregen.generators.rooms.socket_system import SocketType
from tests.helpers import CELL_BOUNDS, make_context, make_room, make_socket, place


@pytest.fixture
def cross() -> RoomTemplate:
    return make_room("cross")


def _attach_north(ctx, template: RoomTemplate, base_index: int = 0) -> int:
    """Snap ``template``'s south socket onto the north socket of ``base_index``."""
    base = ctx.graph.room(base_index)
    x, y, z = base.position
    position = (x, y, z + 10.0)
    handle, bounds = ctx.host.instantiate(template, position, 0)
    target = OpenSocketRef(base_index, base.template.get_socket("n"))
    return ctx.attach(target, template, template.get_socket("s"), position, 0, handle, bounds)


class TestLayoutGraph:
    def test_open_sockets_in_room_then_authored_order(self, cross: RoomTemplate) -> None:
        ctx = make_context(RoomCatalog([cross]))
        place(ctx, cross, (0.0, 0.0, 0.0))
        place(ctx, cross, (30.0, 0.0, 0.0))

        refs = [(r.room_index, r.socket.socket_id) for r in ctx.open_sockets()]
        assert refs == [(0, "n"), (0, "s"), (0, "e"), (0, "w"),
                        (1, "n"), (1, "s"), (1, "e"), (1, "w")]

    def test_connect_marks_both_sides_used(self, cross: RoomTemplate) -> None:
        ctx = make_context(RoomCatalog([cross]))
        place(ctx, cross)
        new_index = _attach_north(ctx, cross)

        assert ctx.graph.room(0).used_socket_ids == {"n"}
        assert ctx.graph.room(new_index).used_socket_ids == {"s"}
        conn = ctx.graph.connections[0]
        assert (conn.a.room_index, conn.a.socket_id) == (0, "n")
        assert (conn.b.room_index, conn.b.socket_id) == (1, "s")

    def test_socket_cannot_be_used_twice(self, cross: RoomTemplate) -> None:
        ctx = make_context(RoomCatalog([cross]))
        place(ctx, cross)
        ctx.graph.mark_used(0, "n")
        with pytest.raises(LayoutInvariantError):
            ctx.graph.mark_used(0, "n")

    def test_mismatched_sockets_cannot_connect(self) -> None:
        small = make_room("small", "n")
        large = RoomTemplate("large", sockets=(make_socket("s", socket_type=SocketType.DOOR_LARGE),),
                             local_bounds=CELL_BOUNDS)
        ctx = make_context(RoomCatalog([small, large]))
        place(ctx, small)
        place(ctx, large, (0.0, 0.0, 10.0))

        with pytest.raises(LayoutInvariantError):
            ctx.graph.connect(OpenSocketRef(0, small.sockets[0]), OpenSocketRef(1, large.sockets[0]))
        assert ctx.graph.connections == []

    def test_pop_on_empty_graph_raises(self, cross: RoomTemplate) -> None:
        ctx = make_context(RoomCatalog([cross]))
        with pytest.raises(LayoutInvariantError):
            ctx.graph.pop_room()


class TestRemoveLastRoom:
    def test_reopens_consumed_socket_and_destroys_instance(self, cross: RoomTemplate) -> None:
        ctx = make_context(RoomCatalog([cross]))
        place(ctx, cross)
        _attach_north(ctx, cross)

        removed = ctx.remove_last_room()

        assert removed.template_id == "cross"
        assert len(ctx.graph) == 1
        assert ctx.graph.connections == []
        assert ctx.graph.room(0).used_socket_ids == set()
        assert ctx.host.live_count == 1

    def test_socket_stays_used_when_another_room_touches_it(self, cross: RoomTemplate) -> None:
        # A stub whose only socket coincides with the cross's north socket.
        stub = RoomTemplate("stub", sockets=(make_socket("n", "plug"),), local_bounds=CELL_BOUNDS)
        ctx = make_context(RoomCatalog([cross, stub]))
        place(ctx, cross)
        place(ctx, stub)
        _attach_north(ctx, cross)

        ctx.remove_last_room()

        assert "n" in ctx.graph.room(0).used_socket_ids

    def test_other_sockets_of_the_same_room_do_not_count(self, cross: RoomTemplate) -> None:
        ctx = make_context(RoomCatalog([cross]))
        place(ctx, cross)
        _attach_north(ctx, cross)
        ctx.remove_last_room()
        assert [r.socket.socket_id for r in ctx.open_sockets(0)] == ["n", "s", "e", "w"]

    def test_removing_terminus_clears_index(self, cross: RoomTemplate) -> None:
        ctx = make_context(RoomCatalog([cross]))
        place(ctx, cross)
        ctx.graph.terminus_room_index = _attach_north(ctx, cross)
        ctx.remove_last_room()
        assert ctx.graph.terminus_room_index == NO_ROOM


def test_snapshot_survives_json_form(cross: RoomTemplate) -> None:
    ctx = make_context(RoomCatalog([cross]), seed=42)
    place(ctx, cross, yaw=90)
    _attach_north(ctx, cross)
    snapshot = ctx.graph.snapshot()

    data = snapshot.to_dict()
    assert data["seed"] == 42
    assert data["rooms"][0] == {"template_id": "cross", "position": [0.0, 0.0, 0.0], "yaw_degrees": 90}
    assert data["connections"][0]["a"]["socket_type"] == "DoorSmall"
    assert data["terminus_room_index"] == -1
    assert LayoutSnapshot.from_dict(data) == snapshot
