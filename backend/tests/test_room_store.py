"""Tests for RoomStore and Room."""
from smartgate.rooms.store import Role, Room, RoomStore


class TestRoomStore:
    """Tests for room creation, lookup and removal."""

    def test_get_unknown_room_returns_none(self, store):
        assert store.get("nope") is None
        assert store.size() == 0

    def test_get_never_creates(self, store):
        store.get("ghost-1")
        store.get("ghost-1")
        assert "ghost-1" not in store
        assert store.size() == 0

    def test_create_or_get_inserts_empty_room(self, store, clock):
        room = store.create_or_get("acme-214")
        assert room.id == "acme-214"
        assert room.devices == set()
        assert room.viewers == set()
        assert room.last_activity == clock.now
        assert store.size() == 1

    def test_create_or_get_is_idempotent(self, store, clock):
        first = store.create_or_get("acme-214")
        first.devices.add("sentinel")
        clock.advance(50)
        second = store.create_or_get("acme-214")
        assert second is first
        assert second.devices == {"sentinel"}
        # Re-reserving does not refresh activity
        assert second.last_activity == 1000.0
        assert store.size() == 1

    def test_touch_updates_last_activity(self, store, clock):
        room = store.create_or_get("acme-214")
        clock.advance(120)
        store.touch(room)
        assert room.last_activity == 1120.0

    def test_delete_removes_room(self, store):
        store.create_or_get("acme-214")
        store.delete("acme-214")
        assert store.get("acme-214") is None
        assert store.size() == 0

    def test_delete_unknown_room_is_noop(self, store):
        store.delete("nope")
        assert store.size() == 0

    def test_delete_does_not_touch_members(self, store):
        room = store.create_or_get("acme-214")
        member = object()
        room.viewers.add(member)
        store.delete("acme-214")
        assert room.viewers == {member}

    def test_items_is_a_snapshot(self, store):
        store.create_or_get("a-100")
        store.create_or_get("b-200")
        for room_id, _ in store.items():
            store.delete(room_id)
        assert store.size() == 0

    def test_default_clock_is_monotonic(self):
        store = RoomStore()
        room = store.create_or_get("x")
        before = room.last_activity
        store.touch(room)
        assert room.last_activity >= before


class TestRoom:
    def test_members_by_role(self):
        room = Room(id="r", last_activity=0.0)
        assert room.members(Role.DEVICE) is room.devices
        assert room.members(Role.VIEWER) is room.viewers

    def test_is_empty(self):
        room = Room(id="r", last_activity=0.0)
        assert room.is_empty
        room.devices.add("d")
        assert not room.is_empty


class TestRole:
    def test_parse_is_case_insensitive(self):
        assert Role.parse("Device") is Role.DEVICE
        assert Role.parse(" VIEWER ") is Role.VIEWER

    def test_parse_rejects_unknown(self):
        assert Role.parse("admin") is None
        assert Role.parse("") is None
        assert Role.parse(None) is None
        assert Role.parse(1) is None
