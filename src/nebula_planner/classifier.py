"""A/B rotation day classification."""
from datetime import date

from nebula_planner.calendar_utils import date_key, is_weekend, to_date
from nebula_planner.models import DAY_A, DAY_B, NO_SCHOOL, ScheduleSettings


def count_weekdays(start: date, days: int) -> int:
    """Count Mon-Fri days among the `days` calendar days starting at `start` (inclusive).

    Equivalent to walking start, start+1, ..., start+days-1 and counting
    non-weekend days, but runs in constant time.
    """
    if days <= 0:
        return 0
    full_weeks, remainder = divmod(days, 7)
    count = full_weeks * 5
    first = start.weekday()
    for offset in range(remainder):
        if (first + offset) % 7 < 5:
            count += 1
    return count


def classify_day(day, settings: ScheduleSettings | None, overrides: dict) -> str:
    """Classify a calendar day as 'a', 'b' or 'none'.

    Overrides win over the computed rotation. Without settings every day is
    'none'; so is every day before the start date and, unless weekends are
    included, every Saturday and Sunday.
    """
    if settings is None:
        return NO_SCHOOL

    key = date_key(day)
    if key in overrides:
        return overrides[key]

    target = to_date(day)
    start = to_date(settings.start_date)
    if target < start:
        return NO_SCHOOL
    if not settings.include_weekends and is_weekend(target):
        return NO_SCHOOL

    diff_days = (target - start).days
    if settings.include_weekends:
        day_count = diff_days
    else:
        day_count = count_weekdays(start, diff_days)

    is_even = day_count % 2 == 0
    if settings.start_day_type == DAY_A:
        return DAY_A if is_even else DAY_B
    return DAY_B if is_even else DAY_A
