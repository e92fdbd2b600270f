import pytest

from backend import RoomFull, RoomNotFound


def test_create_room_sets_host_and_no_joiner(registry):
    assert registry.create_room("r1", "A") is None

    room = registry.lookup("r1")
    assert room.host == "A"
    assert room.joiner is None
    assert not room.is_full


def test_create_room_replaces_existing_room(registry):
    registry.create_room("r1", "A")
    registry.join_room("r1", "B")

    replaced = registry.create_room("r1", "D")

    assert (replaced.host, replaced.joiner) == ("A", "B")
    room = registry.lookup("r1")
    assert (room.host, room.joiner) == ("D", None)
    assert len(registry) == 1


def test_join_room_sets_joiner(registry):
    registry.create_room("r1", "A")

    room = registry.join_room("r1", "B")

    assert room is registry.lookup("r1")
    assert (room.host, room.joiner) == ("A", "B")
    assert room.is_full


def test_join_unknown_room_raises_and_leaves_registry_untouched(registry):
    with pytest.raises(RoomNotFound) as exc_info:
        registry.join_room("missing", "C")

    assert exc_info.value.room_id == "missing"
    assert exc_info.value.message == "Room does not exist"
    assert "missing" not in registry
    assert len(registry) == 0


def test_join_full_room_raises_and_keeps_joiner(registry):
    registry.create_room("r1", "A")
    registry.join_room("r1", "B")

    with pytest.raises(RoomFull) as exc_info:
        registry.join_room("r1", "C")

    assert exc_info.value.message == "Room full"
    room = registry.lookup("r1")
    assert (room.host, room.joiner) == ("A", "B")


def test_lookup_unknown_room_returns_none(registry):
    assert registry.lookup("nope") is None


def test_remove_participant_deletes_every_room_the_connection_is_in(registry):
    registry.create_room("r1", "A")
    registry.join_room("r1", "B")
    registry.create_room("r2", "C")
    registry.join_room("r2", "A")
    registry.create_room("r3", "D")

    removed = registry.remove_participant("A")

    assert sorted(room.room_id for room in removed) == ["r1", "r2"]
    by_id = {room.room_id: room for room in removed}
    assert (by_id["r1"].host, by_id["r1"].joiner) == ("A", "B")
    assert (by_id["r2"].host, by_id["r2"].joiner) == ("C", "A")
    assert registry.lookup("r1") is None
    assert registry.lookup("r2") is None
    assert registry.lookup("r3") is not None


def test_remove_participant_by_joiner_deletes_whole_room(registry):
    registry.create_room("r1", "A")
    registry.join_room("r1", "B")

    removed = registry.remove_participant("B")

    assert [room.room_id for room in removed] == ["r1"]
    assert registry.lookup("r1") is None


def test_remove_unknown_participant_is_noop(registry):
    registry.create_room("r1", "A")

    assert registry.remove_participant("Z") == []
    assert registry.lookup("r1") is not None


def test_peer_of(registry):
    registry.create_room("r1", "A")
    room = registry.lookup("r1")
    assert room.peer_of("A") is None

    registry.join_room("r1", "B")
    assert room.peer_of("A") == "B"
    assert room.peer_of("B") == "A"
    assert room.peer_of("C") is None


def test_expire_idle_only_removes_stale_rooms(registry, clock):
    registry.create_room("old", "A")
    clock.advance(50)
    registry.create_room("fresh", "B")
    clock.advance(20)

    expired = registry.expire_idle(60)

    assert [room.room_id for room in expired] == ["old"]
    assert "old" not in registry
    assert "fresh" in registry


def test_touch_keeps_room_alive(registry, clock):
    registry.create_room("r1", "A")
    clock.advance(50)
    registry.touch("r1")
    clock.advance(50)

    assert registry.expire_idle(60) == []
    assert registry.seconds_since(registry.lookup("r1").created_at) == 100


def test_touch_unknown_room_is_noop(registry):
    registry.touch("missing")
    assert len(registry) == 0
