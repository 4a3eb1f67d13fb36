# tests/test_allocator.py
import pytest

from allocator import Allocator, AllocationFailure


def test_allocate_and_release_counts():
    a = Allocator()
    a.allocate("node")
    a.allocate("slots", 10)
    assert a.live() == 11
    assert a.live("slots") == 10
    assert a.total_allocations == 2
    a.release("slots", 10)
    assert a.snapshot() == {"node": 1}


def test_denied_kind_raises():
    a = Allocator(deny={"entry"})
    with pytest.raises(AllocationFailure) as exc:
        a.allocate("entry")
    assert exc.value.kind == "entry"
    assert isinstance(exc.value, MemoryError)
    assert a.live() == 0


def test_budget_limits_allocate_and_resize():
    a = Allocator(budget=5)
    a.allocate("slots", 4)
    assert not a.resize("slots", 4, 8)
    assert a.live("slots") == 4
    assert a.resize("slots", 4, 5)
    with pytest.raises(AllocationFailure):
        a.allocate("node")


def test_shrinking_resize_always_succeeds():
    a = Allocator(budget=4)
    a.allocate("slots", 4)
    a.deny.add("slots")
    assert a.resize("slots", 4, 2)
    assert a.live("slots") == 2


def test_over_release_raises():
    a = Allocator()
    a.allocate("name")
    a.release("name")
    with pytest.raises(ValueError):
        a.release("name")


def test_reset_clears_state():
    a = Allocator()
    a.allocate("node")
    a.reset()
    assert a.live() == 0
    assert a.total_allocations == 0


def test_negative_budget_rejected():
    with pytest.raises(ValueError):
        Allocator(budget=-1)
