"""Tests for derived ledger views."""
from datetime import date, datetime

from nebula_planner.aggregator import (
    classes_scheduled_on, homework_due_on, homework_on_day, completion_streak,
    upcoming_nudge, subtask_progress, completed_count, recently_completed,
    find_class, month_grid,
)
from nebula_planner.calendar_utils import due_on
from nebula_planner.models import ClassRecord, HomeworkItem, Subtask

TODAY = date(2024, 1, 10)


def hw(id, due, complete=False, title=None, class_id=None):
    return HomeworkItem(id=id, title=title or f"HW {id}", class_id=class_id, due=due, is_complete=complete)


def sample_classes():
    return [
        ClassRecord(id="1", name="Biology", schedule_type="a-day"),
        ClassRecord(id="2", name="Math", schedule_type="everyday", days_of_week=["Monday", "Wednesday"]),
        ClassRecord(id="3", name="History", schedule_type="b-day"),
        ClassRecord(id="4", name="Art", schedule_type="a-day", days_of_week=["Tuesday"]),
    ]


def test_a_day_class_only_on_a_days():
    classes = sample_classes()
    on_a = classes_scheduled_on(date(2024, 1, 9), classes, "a")
    on_b = classes_scheduled_on(date(2024, 1, 9), classes, "b")
    assert [c.name for c in on_a] == ["Biology", "Art"]
    assert [c.name for c in on_b] == ["History"]


def test_everyday_class_matches_weekday_and_keeps_order():
    classes = sample_classes()
    wednesday = classes_scheduled_on(date(2024, 1, 10), classes, "a")
    assert [c.name for c in wednesday] == ["Biology", "Math", "Art"]


def test_days_of_week_ignored_for_rotation_classes():
    classes = sample_classes()
    names = [c.name for c in classes_scheduled_on(date(2024, 1, 9), classes, "none")]
    assert names == []


def test_homework_due_on_excludes_completed():
    items = [
        hw("1", datetime(2024, 1, 10, 9)),
        hw("2", datetime(2024, 1, 10, 18), complete=True),
        hw("3", datetime(2024, 1, 11, 9)),
    ]
    assert [h.id for h in homework_due_on(due_on(TODAY), items)] == ["1"]
    assert [h.id for h in homework_due_on(due_on(date(2024, 1, 11)), items)] == ["3"]
    assert homework_due_on(lambda d: True, [items[1]]) == []


def test_homework_on_day_includes_completed():
    items = [hw("1", datetime(2024, 1, 10, 9)), hw("2", datetime(2024, 1, 10, 18), complete=True)]
    assert [h.id for h in homework_on_day(TODAY, items)] == ["1", "2"]


def test_streak_zero_when_today_incomplete():
    items = [hw("1", datetime(2024, 1, 9, 12), complete=True), hw("2", datetime(2024, 1, 10, 12))]
    assert completion_streak(items, TODAY) == 0


def test_streak_counts_consecutive_days_ending_today():
    items = [
        hw("1", datetime(2024, 1, 10, 8), complete=True),
        hw("2", datetime(2024, 1, 9, 23), complete=True),
        hw("3", datetime(2024, 1, 8, 0, 1), complete=True),
        hw("4", datetime(2024, 1, 6, 12), complete=True),
    ]
    assert completion_streak(items, TODAY) == 3


def test_streak_uses_due_date_and_multiple_items_per_day_count_once():
    items = [
        hw("1", datetime(2024, 1, 10, 8), complete=True),
        hw("2", datetime(2024, 1, 10, 20), complete=True),
        hw("3", datetime(2024, 1, 10, 21)),
    ]
    assert completion_streak(items, TODAY) == 1


def test_streak_crosses_month_boundary():
    items = [
        hw("1", datetime(2024, 3, 1, 10), complete=True),
        hw("2", datetime(2024, 2, 29, 10), complete=True),
        hw("3", datetime(2024, 2, 28, 10), complete=True),
    ]
    assert completion_streak(items, date(2024, 3, 1)) == 3


def test_nudge_none_when_nothing_upcoming():
    items = [hw("1", datetime(2024, 1, 13, 9)), hw("2", datetime(2024, 1, 10, 9), complete=True)]
    assert upcoming_nudge(items, TODAY) is None


def test_nudge_excludes_overdue_items():
    assert upcoming_nudge([hw("1", datetime(2024, 1, 9, 23, 59))], TODAY) is None


def test_nudge_day_phrases():
    first = lambda items: items[0]
    assert upcoming_nudge([hw("1", datetime(2024, 1, 10, 17), title="Essay")], TODAY, choose=first) == \
        "Don't forget 'Essay' is due today. You got this!"
    assert upcoming_nudge([hw("1", datetime(2024, 1, 11, 8), title="Lab")], TODAY, choose=first) == \
        "Don't forget 'Lab' is due tomorrow. You got this!"
    assert upcoming_nudge([hw("1", datetime(2024, 1, 12, 22), title="Quiz prep")], TODAY, choose=first) == \
        "Don't forget 'Quiz prep' is due in 2 days. You got this!"


def test_nudge_chooser_sees_only_candidates():
    items = [
        hw("1", datetime(2024, 1, 10, 9), title="Today"),
        hw("2", datetime(2024, 1, 15, 9), title="Later"),
        hw("3", datetime(2024, 1, 12, 9), title="Soon"),
        hw("4", datetime(2024, 1, 11, 9), title="Done", complete=True),
    ]
    seen = []

    def choose(candidates):
        seen.extend(c.id for c in candidates)
        return candidates[-1]

    assert "'Soon' is due in 2 days" in upcoming_nudge(items, TODAY, choose=choose)
    assert seen == ["1", "3"]


def test_subtask_progress():
    item = hw("1", datetime(2024, 1, 10))
    assert subtask_progress(item) == (0, 0)
    item.subtasks = [Subtask(id="a", title="Outline", is_complete=True), Subtask(id="b", title="Draft")]
    assert subtask_progress(item) == (1, 2)


def test_completed_and_recent():
    items = [
        hw("1", datetime(2024, 1, 3), complete=True),
        hw("2", datetime(2024, 1, 9), complete=True),
        hw("3", datetime(2024, 1, 11)),
    ]
    assert completed_count(items) == 2
    assert [h.id for h in recently_completed(items)] == ["2", "1"]
    assert len(recently_completed(items, limit=1)) == 1


def test_find_class_dangling_reference():
    classes = sample_classes()
    assert find_class("2", classes).name == "Math"
    assert find_class("deleted", classes) is None
    assert find_class(None, classes) is None


def test_month_grid_starts_on_sunday():
    weeks = month_grid(2024, 1)
    assert weeks[0][0] == date(2023, 12, 31)
    assert all(len(week) == 7 for week in weeks)
    assert weeks[-1][-1] == date(2024, 2, 3)
