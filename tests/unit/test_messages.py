"""Unit tests for messages, carry entries, user state and the delivery log."""

import pytest

from meshsim.core.delivery_log import DeliveryLog
from meshsim.core.messages import (
    BatchMember,
    CarryEntry,
    PlainMessage,
    make_batch,
    make_batch_id,
    message_size,
    user_key,
)
from meshsim.core.state import UserState, UserStateStore


class TestMessages:
    """Tests for plain and batch messages."""

    def test_plain_message(self):
        msg = PlainMessage(id="m", source="A", target="B", timestamp=3)
        assert msg.kind == "plain"
        assert msg.size is None
        assert message_size(msg) == 1

    def test_batch_id_sorts_member_ids_as_text(self):
        members = [
            BatchMember(PlainMessage(10, "A", "C", 0)),
            BatchMember(PlainMessage(9, "A", "C", 0)),
        ]
        assert make_batch_id("B", members) == "B:[10,9]"

    def test_batch_id_uses_user_id_attribute(self, node_cls):
        members = [BatchMember(PlainMessage("m", "A", "C", 0))]
        assert make_batch_id(node_cls(7), members) == "7:[m]"

    def test_make_batch(self):
        members = [
            BatchMember(PlainMessage("m2", "A", "C", 0, size=3), ("X",)),
            BatchMember(PlainMessage("m1", "A", "C", 0)),
        ]
        batch = make_batch(4, "B", "C", members)

        assert batch.kind == "batch"
        assert batch.id == "B:[m1,m2]"
        assert batch.size == 4
        assert batch.creator == "B"
        assert batch.target == "C"
        assert batch.timestamp == 4
        assert batch.member_ids == ["m2", "m1"]

    def test_user_key(self, node_cls):
        assert user_key("A") == "A"
        assert user_key(node_cls(3)) == 3


class TestCarryEntry:
    """Tests for CarryEntry."""

    def test_defaults(self):
        entry = CarryEntry(PlainMessage("m", "A", "B", 0))
        assert entry.came_from == frozenset()
        assert entry.hops == []
        assert entry.rep == 0
        assert entry.hop_count == 0

    def test_hop_count_includes_padding(self):
        entry = CarryEntry(PlainMessage("m", "A", "B", 0), hops=["X"], padding=2)
        assert entry.hop_count == 3

    def test_relay(self):
        entry = CarryEntry(PlainMessage("m", "A", "D", 0), hops=["B"], rep=2, padding=1)
        relayed = entry.relay("B", "C")

        assert relayed.message is entry.message
        assert relayed.came_from == frozenset({"B"})
        assert relayed.hops == ["B", "C"]
        assert relayed.rep == 0
        assert relayed.padding == 1
        assert entry.hops == ["B"]  # Original untouched


class TestUserStateStore:
    """Tests for UserStateStore."""

    def test_get_creates_empty_state(self):
        store = UserStateStore()
        assert "A" not in store

        state = store.get("A")

        assert isinstance(state, UserState)
        assert "A" in store
        assert state.messages == {}
        assert state.sessions == set()

    def test_get_returns_same_state(self):
        store = UserStateStore()
        store.get("A").sessions.add("B")
        assert store.get("A").sessions == {"B"}
        assert len(store) == 1

    def test_users_is_a_snapshot(self):
        store = UserStateStore()
        store.get("A")
        users = store.users()
        store.get("B")
        assert users == ["A"]
        assert list(store) == ["A", "B"]


class TestDeliveryLog:
    """Tests for DeliveryLog."""

    def test_record_delivery_once(self):
        log = DeliveryLog()
        msg = PlainMessage("m", "A", "B", 2)

        assert log.record_delivery(msg, 5, ["X"]) is True
        assert log.record_delivery(msg, 6, []) is False

        assert log.recv == {"m"}
        assert len(log.recv_detail) == 1
        record = log.recv_detail[0]
        assert record.id == "m"
        assert record.source == "A"
        assert record.target == "B"
        assert record.t_send == 2
        assert record.t_recv == 5
        assert record.latency == 3
        assert record.hops == ["X"]
        assert record.encs == []

    def test_in_flight(self):
        log = DeliveryLog()
        log.record_delivery(PlainMessage("m1", "A", "B", 0), 1, [])
        log.record_drop("m2")

        assert log.in_flight(["m1", "m2", "m3"]) == ["m3"]
        assert log.is_delivered("m1")
        assert not log.is_delivered("m2")
