"""Derived views over the class and homework ledger."""
import calendar
import random
from datetime import date

from nebula_planner.calendar_utils import ONE_DAY, date_key, to_date, weekday_name
from nebula_planner.models import EVERYDAY, ClassRecord, HomeworkItem

NUDGE_WINDOW_DAYS = 2
RECENT_LIMIT = 20


def find_class(class_id, classes: list[ClassRecord]) -> ClassRecord | None:
    for cls in classes:
        if cls.id == class_id:
            return cls
    return None


def classes_scheduled_on(day, classes: list[ClassRecord], day_type: str) -> list[ClassRecord]:
    """Classes meeting on a day, in ledger order.

    Everyday classes match on weekday name; A/B classes match the day's classification.
    """
    name = weekday_name(day)
    return [
        c for c in classes
        if (c.schedule_type == EVERYDAY and name in c.days_of_week)
        or c.schedule_type == f"{day_type}-day"
    ]


def homework_due_on(predicate, homework: list[HomeworkItem]) -> list[HomeworkItem]:
    """Incomplete items whose due date satisfies the predicate."""
    return [h for h in homework if not h.is_complete and predicate(h.due)]


def homework_on_day(day, homework: list[HomeworkItem]) -> list[HomeworkItem]:
    """All items due on a calendar day, complete or not."""
    target = to_date(day)
    return [h for h in homework if to_date(h.due) == target]


def completion_streak(homework: list[HomeworkItem], today: date) -> int:
    """Consecutive days, ending today, with at least one completed item due."""
    completed_days = {date_key(h.due) for h in homework if h.is_complete}
    streak = 0
    current = to_date(today)
    while date_key(current) in completed_days:
        streak += 1
        current -= ONE_DAY
    return streak


def _day_phrase(delta: int) -> str:
    if delta == 0:
        return "today"
    if delta == 1:
        return "tomorrow"
    return f"in {delta} days"


def upcoming_nudge(homework: list[HomeworkItem], today: date, choose=random.choice) -> str | None:
    """Reminder for one incomplete item due within the next two days.

    `choose` picks from the candidate list and can be replaced for deterministic output.
    """
    start = to_date(today)
    upcoming = [
        h for h in homework
        if not h.is_complete and 0 <= (to_date(h.due) - start).days <= NUDGE_WINDOW_DAYS
    ]
    if not upcoming:
        return None
    picked = choose(upcoming)
    delta = (to_date(picked.due) - start).days
    return f"Don't forget '{picked.title}' is due {_day_phrase(delta)}. You got this!"


def subtask_progress(item: HomeworkItem) -> tuple[int, int]:
    done = sum(1 for s in item.subtasks if s.is_complete)
    return done, len(item.subtasks)


def completed_count(homework: list[HomeworkItem]) -> int:
    return sum(1 for h in homework if h.is_complete)


def recently_completed(homework: list[HomeworkItem], limit: int = RECENT_LIMIT) -> list[HomeworkItem]:
    done = [h for h in homework if h.is_complete]
    done.sort(key=lambda h: h.due, reverse=True)
    return done[:limit]


def month_grid(year: int, month: int) -> list[list[date]]:
    """Sunday-to-Saturday weeks covering the month, padded with neighbouring days."""
    return calendar.Calendar(firstweekday=calendar.SUNDAY).monthdatescalendar(year, month)
