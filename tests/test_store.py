from __future__ import annotations

from guestlist.events import ChangeEvent, ChangeFeed, ChangeKind, diff_snapshots, index_by_id
from guestlist.store import GuestRecordStore

from conftest import make_guest


def test_replace_all_keeps_store_order():
    store = GuestRecordStore([make_guest("b"), make_guest("a")])
    assert [guest.id for guest in store] == ["b", "a"]
    store.replace_all([make_guest("c")])
    assert len(store) == 1
    assert "c" in store and "a" not in store


def test_apply_tolerates_out_of_order_events():
    store = GuestRecordStore([make_guest("a")])
    store.apply(ChangeEvent(ChangeKind.UPDATE, "x", make_guest("x", primary="9")))
    store.apply(ChangeEvent(ChangeKind.INSERT, "a", make_guest("a", primary="1")))
    store.apply(ChangeEvent(ChangeKind.DELETE, "missing"))
    store.apply(ChangeEvent(ChangeKind.UPDATE, "y"))
    assert store.get("x").bracelet_number == "9"
    assert store.get("a").bracelet_number == "1"
    assert store.get("y") is None
    assert len(store) == 2


def test_snapshot_numbers_reflect_current_state():
    store = GuestRecordStore([make_guest("a", primary="1", companion="2"), make_guest("b", primary="3")])
    assert store.snapshot_numbers() == {"1", "2", "3"}
    store.remove("a")
    assert store.snapshot_numbers() == {"3"}
    assert store.snapshot_numbers(exclude_id="b") == set()


def test_change_feed_delivers_to_subscribers_until_unsubscribed():
    feed = ChangeFeed()
    received = []
    unsubscribe = feed.subscribe(received.append)
    event = ChangeEvent(ChangeKind.DELETE, "a")
    feed.publish(event)
    unsubscribe()
    unsubscribe()
    feed.publish(event)
    assert received == [event]
    assert len(feed) == 0


def test_diff_snapshots_reports_inserts_updates_and_deletes():
    before = index_by_id([make_guest("a"), make_guest("b")])
    after = index_by_id([make_guest("a", primary="1"), make_guest("c")])
    events = {(event.kind, event.guest_id) for event in diff_snapshots(before, after)}
    assert events == {
        (ChangeKind.UPDATE, "a"),
        (ChangeKind.INSERT, "c"),
        (ChangeKind.DELETE, "b"),
    }
    assert diff_snapshots(after, after) == []
