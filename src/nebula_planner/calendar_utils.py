"""Calendar helpers: local day keys, midnight truncation, instant parsing."""
from datetime import date, datetime, timedelta

WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

ONE_DAY = timedelta(days=1)


def parse_instant(value) -> datetime:
    """Parse an ISO-8601 date or datetime string into a naive local datetime.

    Aware values are converted to local time before the tzinfo is dropped, so
    everything downstream works in local calendar days.
    """
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Not an ISO-8601 date or datetime: {value!r}") from None
    else:
        raise ValueError(f"Not a date value: {value!r}")
    if dt.tzinfo is not None:
        dt = dt.astimezone().replace(tzinfo=None)
    return dt


def format_instant(dt: datetime) -> str:
    # Full precision, so a stored instant parses back equal to the original.
    return dt.isoformat()


def to_date(value) -> date:
    """Local calendar day of a date, datetime or ISO string."""
    if isinstance(value, date) and not isinstance(value, datetime):
        return value
    return parse_instant(value).date()


def truncate_to_midnight(value) -> datetime:
    dt = parse_instant(value)
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def date_key(value) -> str:
    """Canonical YYYY-MM-DD key of the local calendar day."""
    return to_date(value).isoformat()


def same_calendar_day(d1, d2) -> bool:
    return to_date(d1) == to_date(d2)


def weekday_name(value) -> str:
    return WEEKDAY_NAMES[to_date(value).weekday()]


def is_weekend(value) -> bool:
    return to_date(value).weekday() >= 5


def today() -> date:
    return date.today()


def due_on(day):
    """Predicate matching instants that fall on the given calendar day."""
    target = to_date(day)

    def predicate(value) -> bool:
        return to_date(value) == target

    return predicate
