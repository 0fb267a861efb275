import math

import pytest

from stallsync.realtime.fanout import FanOutQuery, batched, fetch_batched
from stallsync.realtime.hub import ChangeHub
from stallsync.realtime.subscription import Subscription


class ManualHub:
    """Hands callbacks back to the test so late deliveries can be replayed."""

    def __init__(self):
        self.listeners = []

    def subscribe(self, topic, fetch, on_snapshot, on_error=None):
        self.listeners.append((fetch, on_snapshot, on_error))
        return Subscription()

    def deliver_all(self):
        for fetch, on_snapshot, _ in list(self.listeners):
            on_snapshot(fetch())


def _ids(n):
    return [f"s{i:03d}" for i in range(n)]


@pytest.mark.parametrize("n", [0, 1, 30, 31, 60, 61])
def test_batch_count_and_union(n):
    calls = []

    def fetch(batch):
        calls.append(len(batch))
        return {uid: uid.upper() for uid in batch}

    merged = fetch_batched(_ids(n), fetch)

    assert len(calls) == math.ceil(n / 30)
    assert all(size <= 30 for size in calls)
    assert merged == {uid: uid.upper() for uid in _ids(n)}


def test_batched_drops_duplicates_and_rejects_bad_size():
    assert batched(["a", "b", "a"], 2) == [["a", "b"]]
    with pytest.raises(ValueError):
        batched(["a"], 0)


@pytest.mark.parametrize("n", [0, 1, 30, 31, 60, 61])
def test_fanout_query_subscribes_once_per_batch(n):
    hub = ChangeHub()
    updates = []
    query = FanOutQuery(hub, "attendance")

    query.start(_ids(n), lambda batch: {uid: 1 for uid in batch}, on_change=lambda data, done: updates.append((data, done)))

    assert hub.subscriber_count("attendance") == math.ceil(n / 30)
    assert len(query.batches) == math.ceil(n / 30)
    data, done = updates[-1]
    assert done is True
    assert set(data) == set(_ids(n))


def test_completion_is_reported_after_every_batch():
    hub = ManualHub()
    updates = []
    query = FanOutQuery(hub, "t")
    query.start(_ids(45), lambda batch: {uid: True for uid in batch}, on_change=lambda d, done: updates.append(done))

    assert not query.is_complete
    hub.deliver_all()

    assert updates == [False, True]
    assert query.is_complete


def test_stale_generation_callbacks_are_ignored():
    hub = ManualHub()
    updates = []
    query = FanOutQuery(hub, "t")

    query.start(["old"], lambda batch: {"old": 1}, on_change=lambda d, done: updates.append(d))
    _, stale_callback, _ = hub.listeners[0]
    query.start(["new"], lambda batch: {"new": 2}, on_change=lambda d, done: updates.append(d))

    stale_callback({"old": 1})
    assert updates == []

    hub.listeners[1][1]({"new": 2})
    assert updates == [{"new": 2}]
    assert query.generation == 2


def test_dispose_stops_delivery():
    hub = ChangeHub()
    updates = []
    query = FanOutQuery(hub, "t")
    query.start(["a"], lambda batch: {"a": 1}, on_change=lambda d, done: updates.append(d))
    query.dispose()
    hub.notify("t")

    assert updates == [{"a": 1}]
    assert hub.subscriber_count("t") == 0


def test_failed_batch_keeps_others_and_last_good_result():
    hub = ChangeHub()
    broken = set()
    errors = []
    updates = []

    def fetch(batch):
        if broken.intersection(batch):
            raise RuntimeError("batch down")
        return {uid: len(updates) for uid in batch}

    ids = _ids(31)
    query = FanOutQuery(hub, "t")
    query.start(ids, fetch, on_change=lambda d, done: updates.append(d), on_error=lambda i, e: errors.append(i))
    first = updates[-1]

    broken.add(ids[30])
    hub.notify("t")

    assert errors == [1]
    assert set(updates[-1]) == set(ids)
    assert updates[-1][ids[30]] == first[ids[30]]
    assert query.is_complete
    assert query.is_settled
    assert 1 in query.errors


def test_batch_that_never_delivers_leaves_query_incomplete():
    hub = ChangeHub()

    def fetch(batch):
        if "s030" in batch:
            raise RuntimeError("denied")
        return {uid: 1 for uid in batch}

    query = FanOutQuery(hub, "t")
    query.start(_ids(31), fetch)

    assert not query.is_complete
    assert query.is_settled
    assert set(query.snapshot()) == set(_ids(30))


def test_consumer_failure_is_not_recorded_as_batch_error():
    hub = ChangeHub()
    batch_errors = []
    query = FanOutQuery(hub, "t")

    def on_change(data, done):
        raise RuntimeError("consumer bug")

    query.start(["a"], lambda batch: {"a": 1}, on_change=on_change, on_error=lambda i, exc: batch_errors.append(i))
    hub.notify("t")

    assert query.errors == {}
    assert batch_errors == []
    assert query.is_complete
    assert query.snapshot() == {"a": 1}
