"""
Unit tests for Capacity component.

Tests:
- Create: current + incoming must not exceed the limit
- Reassign: target's current count must be below the limit
"""

from __future__ import annotations

import pytest

from src.core.errors import ErrorKind

from ..component import DEFAULT_MAX_ASSETS_PER_PROJECT, run, run_check_capacity, run_check_reassign
from ..models import CapacityCheckInput, ReassignCheckInput


class MockCounter:
    """Mock implementation of ProjectCounterPort."""

    def __init__(self, counts: dict[int, int] | None = None) -> None:
        self.counts = counts or {}
        self.calls: list[int] = []

    def count_active_in_project(self, project_id: int) -> int:
        self.calls.append(project_id)
        return self.counts.get(project_id, 0)


class MockCapacityRules:
    def __init__(self, limit: int) -> None:
        self._limit = limit

    def get_max_assets_per_project(self) -> int:
        return self._limit


class TestCheckCapacity:
    def test_default_limit_is_five(self) -> None:
        assert DEFAULT_MAX_ASSETS_PER_PROJECT == 5

    def test_fifth_asset_fits(self) -> None:
        result = run_check_capacity(
            CapacityCheckInput(project_id=7, incoming_count=1), counter=MockCounter({7: 4})
        )

        assert result.success
        assert result.current_count == 4

    def test_sixth_asset_rejected(self) -> None:
        result = run_check_capacity(
            CapacityCheckInput(project_id=7, incoming_count=1), counter=MockCounter({7: 5})
        )

        assert not result.success
        assert result.errors[0].code == ErrorKind.CAPACITY_EXCEEDED
        assert "already has 5 images" in result.errors[0].message

    def test_batch_counted_as_a_whole(self) -> None:
        result = run_check_capacity(
            CapacityCheckInput(project_id=7, incoming_count=3), counter=MockCounter({7: 3})
        )

        assert not result.success

    def test_no_project_skips_count(self) -> None:
        counter = MockCounter()

        result = run_check_capacity(
            CapacityCheckInput(project_id=None, incoming_count=5), counter=counter
        )

        assert result.success
        assert counter.calls == []

    def test_rules_override_limit(self) -> None:
        result = run_check_capacity(
            CapacityCheckInput(project_id=1, incoming_count=1),
            counter=MockCounter({1: 2}),
            rules=MockCapacityRules(2),
        )

        assert not result.success


class TestCheckReassign:
    def test_move_into_project_with_room(self) -> None:
        result = run_check_reassign(
            ReassignCheckInput(target_project_id=2, current_project_id=1),
            counter=MockCounter({2: 4}),
        )

        assert result.success

    def test_move_into_full_project_rejected(self) -> None:
        result = run_check_reassign(
            ReassignCheckInput(target_project_id=2, current_project_id=1),
            counter=MockCounter({2: 5}),
        )

        assert not result.success
        assert result.errors[0].code == ErrorKind.CAPACITY_EXCEEDED

    def test_same_project_not_checked(self) -> None:
        counter = MockCounter({3: 5})

        result = run_check_reassign(
            ReassignCheckInput(target_project_id=3, current_project_id=3), counter=counter
        )

        assert result.success
        assert counter.calls == []

    def test_leaving_project_not_checked(self) -> None:
        result = run_check_reassign(
            ReassignCheckInput(target_project_id=None, current_project_id=3),
            counter=MockCounter(),
        )

        assert result.success

    def test_ungrouped_asset_joining_project(self) -> None:
        result = run_check_reassign(
            ReassignCheckInput(target_project_id=9, current_project_id=None),
            counter=MockCounter({9: 5}),
        )

        assert not result.success


def test_run_dispatch() -> None:
    counter = MockCounter({1: 5})

    assert not run(CapacityCheckInput(project_id=1, incoming_count=1), counter=counter).success
    assert not run(ReassignCheckInput(target_project_id=1, current_project_id=None), counter=counter).success

    with pytest.raises(ValueError):
        run(object(), counter=counter)  # type: ignore[arg-type]
