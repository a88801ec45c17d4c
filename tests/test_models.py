"""Tests for data model classes."""
from datetime import date, datetime

import pytest

from nebula_planner.models import (
    ScheduleSettings, ClassRecord, HomeworkItem, Subtask, StudySession, UserProfile, CLASS_COLORS,
)


def test_schedule_settings_from_dict():
    s = ScheduleSettings.from_dict({"start_date": "2024-01-01", "start_day_type": "b"})
    assert s.start_date == date(2024, 1, 1)
    assert s.start_day_type == "b"
    assert s.include_weekends is False
    assert s.to_dict() == {"start_date": "2024-01-01", "start_day_type": "b", "include_weekends": False}


def test_schedule_settings_rejects_bad_day_type():
    with pytest.raises(ValueError):
        ScheduleSettings.from_dict({"start_date": "2024-01-01", "start_day_type": "none"})


def test_class_record_defaults():
    c = ClassRecord(id="1", name="Biology")
    assert c.color == CLASS_COLORS[0]
    assert c.schedule_type == "everyday"
    assert c.days_of_week == []


def test_class_record_rejects_bad_schedule_type():
    with pytest.raises(ValueError):
        ClassRecord.from_dict({"id": "1", "name": "Bio", "schedule_type": "c-day"})


def test_homework_from_dict_defaults():
    h = HomeworkItem.from_dict({"id": 7, "title": "Essay", "due": "2024-01-10T17:00:00"})
    assert h.id == "7"
    assert h.class_id is None
    assert h.due == datetime(2024, 1, 10, 17, 0)
    assert h.is_complete is False
    assert h.subtasks == []
    assert h.reminders == []


def test_homework_to_dict_serializes_instants():
    h = HomeworkItem(
        id="1", title="Essay", class_id="c1", due=datetime(2024, 1, 10, 17, 0),
        subtasks=[Subtask(id="s1", title="Outline")], reminders=[datetime(2024, 1, 9, 18, 0)],
    )
    data = h.to_dict()
    assert data["due"] == "2024-01-10T17:00:00"
    assert data["reminders"] == ["2024-01-09T18:00:00"]
    assert data["subtasks"] == [{"id": "s1", "title": "Outline", "is_complete": False}]
    assert HomeworkItem.from_dict(data) == h


def test_study_session_is_frozen():
    s = StudySession(id="1", start=datetime(2024, 1, 10, 15), duration_minutes=25)
    assert s.homework_id is None
    with pytest.raises(AttributeError):
        s.class_id = "c1"


def test_user_profile_defaults():
    p = UserProfile()
    assert p.name == "Student"
    assert UserProfile.from_dict({"name": "Ada"}).school == ""
