"""
Sentinel Discord Bot - Bounded Map Tests
========================================

Tests for capacity eviction and sweeps.
"""

import pytest

from src.utils.bounded_map import BoundedMap


class TestBoundedMapBasics:
    """Tests for dict-like access."""

    def test_get_or_create_is_lazy(self):
        """Test the factory only runs on first access."""
        calls = []
        bmap = BoundedMap(10)

        def factory():
            calls.append(1)
            return []

        first = bmap.get_or_create("a", factory)
        second = bmap.get_or_create("a", factory)
        assert first is second
        assert len(calls) == 1

    def test_get_missing_returns_default(self):
        """Test get() never creates an entry."""
        bmap = BoundedMap(10)
        assert bmap.get("missing") is None
        assert "missing" not in bmap

    def test_pop(self):
        """Test pop removes and returns the value."""
        bmap = BoundedMap(10)
        bmap.set("a", 1)
        assert bmap.pop("a") == 1
        assert bmap.pop("a") is None

    def test_invalid_capacity(self):
        """Test a capacity below one is rejected."""
        with pytest.raises(ValueError):
            BoundedMap(0)


class TestBoundedMapEviction:
    """Tests for the capacity ceiling."""

    def test_never_exceeds_capacity(self):
        """Test the size stays at or below max_entries."""
        bmap = BoundedMap(10)
        for i in range(100):
            bmap.set(i, i)
            assert len(bmap) <= 10

    def test_evicts_oldest_inserted(self):
        """Test insertion order is used without an activity key."""
        bmap = BoundedMap(10)
        for i in range(11):
            bmap.set(i, i)
        assert 0 not in bmap
        assert 10 in bmap

    def test_evicts_least_recently_active(self):
        """Test the activity key decides which entry goes first."""
        bmap = BoundedMap(3, activity_key=lambda v: v)
        bmap.set("old", 1.0)
        bmap.set("new", 50.0)
        bmap.set("mid", 20.0)
        bmap.set("latest", 5.0)

        assert "old" not in bmap
        assert set(bmap.keys()) == {"new", "mid", "latest"}

    def test_inserted_entry_survives_its_own_eviction(self):
        """Test the new entry is protected even if it looks oldest."""
        bmap = BoundedMap(2, activity_key=lambda v: v)
        bmap.set("a", 10.0)
        bmap.set("b", 20.0)
        bmap.set("c", 0.0)

        assert "c" in bmap
        assert "a" not in bmap

    def test_replacing_value_does_not_evict(self):
        """Test updating an existing key never triggers eviction."""
        bmap = BoundedMap(2)
        bmap.set("a", 1)
        bmap.set("b", 2)
        bmap.set("a", 3)
        assert len(bmap) == 2
        assert bmap.get("a") == 3


class TestBoundedMapSweep:
    """Tests for predicate sweeps."""

    def test_sweep_removes_matching(self):
        """Test sweep removes entries matching the predicate."""
        bmap = BoundedMap(10)
        for i in range(6):
            bmap.set(i, i)

        removed = bmap.sweep(lambda k, v: v % 2 == 0)
        assert removed == 3
        assert sorted(bmap.keys()) == [1, 3, 5]

    def test_sweep_nothing(self):
        """Test a sweep that matches nothing returns 0."""
        bmap = BoundedMap(10)
        bmap.set("a", 1)
        assert bmap.sweep(lambda k, v: False) == 0
        assert len(bmap) == 1
