"""Tests for the generation-tagged snapshot store."""

import pytest

from storage.models import ACTIVITY, POSITIONS, TRADES, Position, PortfolioSnapshot
from storage.state import COMPLETED, FAILED, RESET, STARTED, UPDATED, SnapshotStore

ADDR = "0x" + "c" * 40


@pytest.fixture
def store():
    return SnapshotStore()


@pytest.fixture
def events(store):
    seen = []
    store.subscribe(seen.append)
    return seen


class TestLifecycle:
    def test_begin_replaces_slot(self, store, events):
        gen = store.begin(ADDR)
        assert store.current.address == ADDR
        assert store.current.loaded == frozenset()
        assert events[-1].kind == STARTED
        assert events[-1].generation == gen

    def test_apply_writes_only_its_field(self, store, events):
        gen = store.begin(ADDR)
        assert store.apply(gen, POSITIONS, [Position(title="A", outcome="Yes")])
        assert store.current.has(POSITIONS)
        assert not store.current.has(TRADES)
        assert store.current.trades == ()
        assert events[-1].kind == UPDATED
        assert events[-1].field == POSITIONS

    def test_complete(self, store, events):
        gen = store.begin(ADDR)
        assert store.complete(gen)
        assert events[-1].kind == COMPLETED


class TestStaleness:
    def test_write_from_previous_generation_is_dropped(self, store, events):
        old = store.begin(ADDR)
        new = store.begin("0x" + "d" * 40)
        assert not store.apply(old, ACTIVITY, [])
        assert store.current.generation == new
        assert not store.current.has(ACTIVITY)
        assert [e.kind for e in events] == [STARTED, STARTED]

    def test_reset_invalidates_in_flight_writes(self, store, events):
        gen = store.begin(ADDR)
        store.reset()
        assert store.current is None
        assert not store.apply(gen, POSITIONS, [])
        assert not store.complete(gen)
        assert not store.fail(gen, "boom")
        assert [e.kind for e in events] == [STARTED, RESET]


class TestFailure:
    def test_fail_clears_slot_and_emits_once(self, store, events):
        gen = store.begin(ADDR)
        store.apply(gen, POSITIONS, [])
        assert store.fail(gen, "Failed to load portfolio.")
        assert not store.fail(gen, "again")
        assert store.current is None
        failures = [e for e in events if e.kind == FAILED]
        assert len(failures) == 1
        assert failures[0].message == "Failed to load portfolio."


def test_unsubscribe(store):
    seen = []
    listener = store.subscribe(seen.append)
    store.unsubscribe(listener)
    store.begin(ADDR)
    assert seen == []


def test_snapshot_rejects_unknown_field():
    with pytest.raises(KeyError):
        PortfolioSnapshot(address=ADDR, generation=1).with_field("volume", [])
