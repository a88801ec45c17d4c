"""Study session log fed by completed focus intervals."""
import uuid
from datetime import datetime

from nebula_planner.models import HomeworkItem, StudySession


def new_id() -> str:
    return uuid.uuid4().hex


def record_session(
    sessions: list[StudySession],
    homework: list[HomeworkItem],
    homework_id: str | None,
    start: datetime,
    duration_minutes: int,
) -> StudySession:
    """Append a session; the class is resolved from the linked homework at call time."""
    linked = next((h for h in homework if h.id == homework_id), None) if homework_id else None
    session = StudySession(
        id=new_id(),
        start=start,
        duration_minutes=duration_minutes,
        homework_id=homework_id,
        class_id=linked.class_id if linked else None,
    )
    sessions.append(session)
    return session


def total_study_minutes(sessions: list[StudySession]) -> int:
    return sum(s.duration_minutes for s in sessions)


def format_study_time(minutes: int) -> str:
    hours, rest = divmod(minutes, 60)
    return f"{hours}h {rest}m"


def minutes_by_class(sessions: list[StudySession]) -> dict:
    totals = {}
    for s in sessions:
        totals[s.class_id] = totals.get(s.class_id, 0) + s.duration_minutes
    return totals
