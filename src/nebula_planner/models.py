"""Data classes for the planner domain model."""
from dataclasses import dataclass, field, asdict
from datetime import date, datetime
from typing import Optional

from nebula_planner.calendar_utils import parse_instant, format_instant, to_date

DAY_A = "a"
DAY_B = "b"
NO_SCHOOL = "none"
DAY_TYPES = (DAY_A, DAY_B, NO_SCHOOL)

EVERYDAY = "everyday"
A_DAY = "a-day"
B_DAY = "b-day"
SCHEDULE_TYPES = (EVERYDAY, A_DAY, B_DAY)

CLASS_COLORS = [
    "#EF4444", "#F97316", "#84CC16", "#10B981",
    "#06B6D4", "#3B82F6", "#8B5CF6", "#EC4899",
]


@dataclass
class ScheduleSettings:
    start_date: date
    start_day_type: str = DAY_A
    include_weekends: bool = False

    def to_dict(self) -> dict:
        return {
            "start_date": self.start_date.isoformat(),
            "start_day_type": self.start_day_type,
            "include_weekends": self.include_weekends,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ScheduleSettings":
        day_type = data["start_day_type"]
        if day_type not in (DAY_A, DAY_B):
            raise ValueError(f"Invalid start day type: {day_type!r}")
        return cls(
            start_date=to_date(data["start_date"]),
            start_day_type=day_type,
            include_weekends=bool(data.get("include_weekends", False)),
        )


@dataclass
class ClassRecord:
    id: str
    name: str
    color: str = CLASS_COLORS[0]
    schedule_type: str = EVERYDAY
    days_of_week: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ClassRecord":
        schedule_type = data.get("schedule_type", EVERYDAY)
        if schedule_type not in SCHEDULE_TYPES:
            raise ValueError(f"Invalid schedule type: {schedule_type!r}")
        return cls(
            id=str(data["id"]),
            name=data["name"],
            color=data.get("color", CLASS_COLORS[0]),
            schedule_type=schedule_type,
            days_of_week=list(data.get("days_of_week", [])),
        )


@dataclass
class Subtask:
    id: str
    title: str
    is_complete: bool = False


@dataclass
class HomeworkItem:
    id: str
    title: str
    class_id: Optional[str]
    due: datetime
    notes: str = ""
    is_complete: bool = False
    subtasks: list[Subtask] = field(default_factory=list)
    reminders: list[datetime] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "class_id": self.class_id,
            "due": format_instant(self.due),
            "notes": self.notes,
            "is_complete": self.is_complete,
            "subtasks": [asdict(s) for s in self.subtasks],
            "reminders": [format_instant(r) for r in self.reminders],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "HomeworkItem":
        return cls(
            id=str(data["id"]),
            title=data["title"],
            class_id=data.get("class_id"),
            due=parse_instant(data["due"]),
            notes=data.get("notes", ""),
            is_complete=bool(data.get("is_complete", False)),
            subtasks=[
                Subtask(id=str(s["id"]), title=s["title"], is_complete=bool(s.get("is_complete", False)))
                for s in data.get("subtasks", [])
            ],
            reminders=[parse_instant(r) for r in data.get("reminders", [])],
        )


@dataclass(frozen=True)
class StudySession:
    id: str
    start: datetime
    duration_minutes: int
    homework_id: Optional[str] = None
    class_id: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "homework_id": self.homework_id,
            "class_id": self.class_id,
            "start": format_instant(self.start),
            "duration_minutes": self.duration_minutes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "StudySession":
        return cls(
            id=str(data["id"]),
            start=parse_instant(data["start"]),
            duration_minutes=int(data["duration_minutes"]),
            homework_id=data.get("homework_id"),
            class_id=data.get("class_id"),
        )


@dataclass
class UserProfile:
    name: str = "Student"
    school: str = ""
    grade: str = ""

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "UserProfile":
        return cls(
            name=data.get("name", "Student"),
            school=data.get("school", ""),
            grade=data.get("grade", ""),
        )


GUEST_PROFILE = UserProfile(name="Guest", school="Guest Mode", grade="")
