"""Tests for active.data.models — DaySequence executed/missed partitions."""

from dataclasses import FrozenInstanceError

import pytest

from active.data.models import DaySequence, FireTime, HabitDay


def _habit_day(day_id: str, was_executed: bool | None) -> HabitDay:
    return HabitDay(
        id=f"hd-{day_id}",
        habit_id="habit-1",
        sequence_id="seq-1",
        day_id=day_id,
        date=f"2026-01-{int(day_id):02d}",
        was_executed=was_executed,
    )


def _sequence(days: set[HabitDay] | None) -> DaySequence:
    return DaySequence(
        id="seq-1",
        habit_id="habit-1",
        from_date="2026-01-01",
        to_date="2026-01-07",
        days=days,
    )


class TestDaySequencePartitions:
    def test_executed_days_only_includes_executed(self):
        executed = _habit_day("1", True)
        missed = _habit_day("2", False)
        sequence = _sequence({executed, missed})
        assert sequence.get_executed_days() == {executed}

    def test_missed_days_only_includes_missed(self):
        executed = _habit_day("1", True)
        missed = _habit_day("2", False)
        sequence = _sequence({executed, missed})
        assert sequence.get_missed_days() == {missed}

    def test_days_without_outcome_are_in_neither_partition(self):
        pending = _habit_day("3", None)
        sequence = _sequence({_habit_day("1", True), _habit_day("2", False), pending})
        assert pending not in sequence.get_executed_days()
        assert pending not in sequence.get_missed_days()

    def test_partitions_are_disjoint_subsets(self):
        days = {
            _habit_day(str(i), [True, False, None][i % 3]) for i in range(1, 22)
        }
        sequence = _sequence(days)
        executed = sequence.get_executed_days()
        missed = sequence.get_missed_days()
        assert executed | missed <= days
        assert executed.isdisjoint(missed)
        assert len(executed) == 7
        assert len(missed) == 7

    def test_no_day_collection_returns_none(self):
        sequence = _sequence(None)
        assert sequence.get_executed_days() is None
        assert sequence.get_missed_days() is None

    def test_empty_day_collection_returns_empty_sets(self):
        sequence = _sequence(set())
        assert sequence.get_executed_days() == set()
        assert sequence.get_missed_days() == set()

    def test_partitions_do_not_modify_days(self):
        days = {_habit_day("1", True), _habit_day("2", False)}
        sequence = _sequence(set(days))
        sequence.get_executed_days()
        sequence.get_missed_days()
        assert sequence.days == days


def test_habit_day_is_immutable():
    day = _habit_day("1", None)
    with pytest.raises(FrozenInstanceError):
        day.was_executed = True


def test_fire_time_defaults_to_no_habit():
    fire_time = FireTime(id="ft-1", created_at="2026-01-01T08:00:00", hour=8, minute=30)
    assert fire_time.habit_id is None
