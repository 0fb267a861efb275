import pytest

from stallsync.common.optimistic import OptimisticMap


def test_value_visible_during_write_and_committed_after():
    seen_during = []
    state = OptimisticMap({"a": 1})

    result = state.apply("a", 2, lambda: seen_during.append(state.view()["a"]) or "ok")

    assert result == "ok"
    assert seen_during == [2]
    assert state.confirmed == {"a": 2}
    assert state.pending == {}


def test_failed_write_restores_last_known_value():
    changes = []
    state = OptimisticMap({"a": 1}, on_change=lambda: changes.append(state.view().get("a")))

    def write():
        raise RuntimeError("store down")

    with pytest.raises(RuntimeError):
        state.apply("a", 5, write)

    assert state.view() == {"a": 1}
    assert changes == [5, 1]


def test_refused_write_rolls_back_without_raising():
    state = OptimisticMap()
    result = state.apply("a", "Present", lambda: False, committed=bool)

    assert result is False
    assert state.get("a") is None


def test_snapshot_replaces_confirmed_but_keeps_pending():
    state = OptimisticMap({"a": 1})

    def write():
        state.replace_confirmed({"a": 9, "b": 3})
        assert state.view() == {"a": 7, "b": 3}

    state.apply("a", 7, write)
    assert state.view() == {"a": 7, "b": 3}
