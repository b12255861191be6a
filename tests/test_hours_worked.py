from datetime import datetime

from creepie.utils.attendance import calculate_hours_worked, break_minutes, sum_hours


def at(hour, minute=0):
    return datetime(2025, 10, 15, hour, minute)


def test_hours_subtract_break():
    assert calculate_hours_worked(at(8), at(17), at(13), at(14)) == 8.0


def test_hours_without_break():
    assert calculate_hours_worked(at(9), at(13, 30)) == 4.5


def test_open_break_is_not_subtracted():
    assert calculate_hours_worked(at(8), at(12, 30), break_start=at(11)) == 4.5


def test_hours_are_floored_at_zero():
    assert calculate_hours_worked(at(10), at(11), at(9), at(12)) == 0.0
    assert calculate_hours_worked(at(17), at(8)) == 0.0


def test_missing_check_out_returns_none():
    assert calculate_hours_worked(at(8), None) is None
    assert calculate_hours_worked(None, at(17)) is None


def test_hours_rounded_to_two_decimals():
    assert calculate_hours_worked(at(8), at(8, 20)) == 0.33


def test_break_minutes():
    assert break_minutes(at(13), at(13, 45)) == 45
    assert break_minutes(at(13), None) == 0


class Record:
    def __init__(self, hours_worked):
        self.hours_worked = hours_worked


def test_sum_hours_ignores_open_records():
    assert sum_hours([Record(8.0), Record(None), Record(4.25)]) == 12.25
