"""In-memory ledger of classes, homework and study sessions for one user.

The ledger is hydrated from a repository at session start and is
authoritative afterwards: every mutation updates memory first and then
writes the affected collection back through the repository.
"""
import copy
import logging
import random
from dataclasses import replace
from datetime import date, datetime

from nebula_planner import aggregator
from nebula_planner.calendar_utils import ONE_DAY, due_on, parse_instant, today as local_today
from nebula_planner.classifier import classify_day
from nebula_planner.models import (
    CLASS_COLORS, DAY_A, EVERYDAY, GUEST_PROFILE, SCHEDULE_TYPES,
    ClassRecord, HomeworkItem, ScheduleSettings, StudySession, Subtask, UserProfile,
)
from nebula_planner.overrides import clean_overrides, get_override, set_override
from nebula_planner.repository import MemoryRepository
from nebula_planner.sessions import new_id, record_session

logger = logging.getLogger(__name__)

CLASSES = "classes"
HOMEWORK = "homework"
SESSIONS = "study-sessions"
SETTINGS = "schedule-settings"
OVERRIDES = "schedule-overrides"
PROFILE = "profile"


def _load_records(repo, name: str, factory) -> list:
    raw = repo.load(name, [])
    if not isinstance(raw, list):
        logger.warning("Expected a list under %r, starting empty", name)
        return []
    try:
        return [factory(item) for item in raw]
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Discarding malformed %s records: %s", name, e)
        return []


def _load_record(repo, name: str, factory, initial):
    raw = repo.load(name, None)
    if raw is None:
        return initial
    try:
        return factory(raw)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning("Discarding malformed %s: %s", name, e)
        return initial


class Ledger:
    def __init__(self, repo=None, rng: random.Random | None = None, clock=local_today):
        self.repo = repo or MemoryRepository()
        self.rng = rng or random.Random()
        self.clock = clock
        self.classes: list[ClassRecord] = []
        self.homework: list[HomeworkItem] = []
        self.sessions: list[StudySession] = []
        self.settings: ScheduleSettings | None = None
        self.overrides: dict = {}
        self.profile = UserProfile()
        self.load()

    def load(self) -> None:
        """Hydrate every collection from the repository."""
        self.classes = _load_records(self.repo, CLASSES, ClassRecord.from_dict)
        self.homework = _load_records(self.repo, HOMEWORK, HomeworkItem.from_dict)
        self.sessions = _load_records(self.repo, SESSIONS, StudySession.from_dict)
        self.settings = _load_record(self.repo, SETTINGS, ScheduleSettings.from_dict, None)
        raw_overrides = self.repo.load(OVERRIDES, {})
        self.overrides = clean_overrides(raw_overrides) if isinstance(raw_overrides, dict) else {}
        default_profile = UserProfile() if self.repo.persist_enabled else replace(GUEST_PROFILE)
        self.profile = _load_record(self.repo, PROFILE, UserProfile.from_dict, default_profile)

    @property
    def is_guest(self) -> bool:
        return not self.repo.persist_enabled

    def today(self) -> date:
        return self.clock()

    # -- persistence -------------------------------------------------------

    def _save_classes(self) -> None:
        self.repo.save(CLASSES, [c.to_dict() for c in self.classes])

    def _save_homework(self) -> None:
        self.repo.save(HOMEWORK, [h.to_dict() for h in self.homework])

    def _save_sessions(self) -> None:
        self.repo.save(SESSIONS, [s.to_dict() for s in self.sessions])

    def _save_settings(self) -> None:
        self.repo.save(SETTINGS, self.settings.to_dict() if self.settings else None)

    def _save_overrides(self) -> None:
        self.repo.save(OVERRIDES, self.overrides)

    def _save_profile(self) -> None:
        self.repo.save(PROFILE, self.profile.to_dict())

    # -- schedule ----------------------------------------------------------

    def classify(self, day) -> str:
        return classify_day(day, self.settings, self.overrides)

    def configure_schedule(self, start_date, start_day_type: str = DAY_A,
                           include_weekends: bool = False) -> ScheduleSettings:
        settings = ScheduleSettings.from_dict({
            "start_date": start_date,
            "start_day_type": start_day_type,
            "include_weekends": include_weekends,
        })
        self.settings = settings
        self._save_settings()
        return settings

    def clear_schedule(self) -> None:
        self.settings = None
        self._save_settings()

    def set_override(self, day, kind: str) -> None:
        self.overrides = set_override(self.overrides, day, kind)
        self._save_overrides()

    def get_override(self, day) -> str | None:
        return get_override(self.overrides, day)

    # -- queries -----------------------------------------------------------

    def classes_scheduled_on(self, day) -> list[ClassRecord]:
        return aggregator.classes_scheduled_on(day, self.classes, self.classify(day))

    def homework_due_on(self, predicate) -> list[HomeworkItem]:
        return aggregator.homework_due_on(predicate, self.homework)

    def homework_due_today(self) -> list[HomeworkItem]:
        return self.homework_due_on(due_on(self.today()))

    def homework_due_tomorrow(self) -> list[HomeworkItem]:
        return self.homework_due_on(due_on(self.today() + ONE_DAY))

    def homework_on_day(self, day) -> list[HomeworkItem]:
        return aggregator.homework_on_day(day, self.homework)

    def completion_streak(self) -> int:
        return aggregator.completion_streak(self.homework, self.today())

    def upcoming_nudge(self) -> str | None:
        return aggregator.upcoming_nudge(self.homework, self.today(), choose=self.rng.choice)

    def find_class(self, class_id) -> ClassRecord | None:
        return aggregator.find_class(class_id, self.classes)

    def find_homework(self, homework_id) -> HomeworkItem | None:
        """Return a copy of the stored item; edits go back through add_or_update_homework."""
        found = next((h for h in self.homework if h.id == homework_id), None)
        return copy.deepcopy(found)

    # -- homework ----------------------------------------------------------

    def new_homework(self, title: str, due, class_id: str | None = None,
                     notes: str = "") -> HomeworkItem:
        item = HomeworkItem(
            id=new_id(), title=title, class_id=class_id, due=parse_instant(due), notes=notes,
        )
        return self.add_or_update_homework(item)

    def add_or_update_homework(self, item: HomeworkItem) -> HomeworkItem:
        """Replace the item with the same id, or append it if it is new.

        The ledger keeps its own copy, so later changes to `item` are not seen
        until it is passed back in here.
        """
        item = copy.deepcopy(item)
        if any(h.id == item.id for h in self.homework):
            self.homework = [item if h.id == item.id else h for h in self.homework]
        else:
            self.homework = [*self.homework, item]
        self._save_homework()
        return copy.deepcopy(item)

    def toggle_complete(self, homework_id: str) -> None:
        self.homework = [
            replace(h, is_complete=not h.is_complete) if h.id == homework_id else h
            for h in self.homework
        ]
        self._save_homework()

    def delete_homework(self, homework_id: str) -> None:
        self.homework = [h for h in self.homework if h.id != homework_id]
        self._save_homework()

    def _update_homework(self, homework_id: str, change) -> None:
        self.homework = [change(h) if h.id == homework_id else h for h in self.homework]
        self._save_homework()

    def add_subtask(self, homework_id: str, title: str) -> None:
        title = title.strip()
        if not title:
            return
        subtask = Subtask(id=new_id(), title=title)
        self._update_homework(homework_id, lambda h: replace(h, subtasks=[*h.subtasks, subtask]))

    def toggle_subtask(self, homework_id: str, subtask_id: str) -> None:
        def change(h):
            return replace(h, subtasks=[
                replace(s, is_complete=not s.is_complete) if s.id == subtask_id else s
                for s in h.subtasks
            ])
        self._update_homework(homework_id, change)

    def delete_subtask(self, homework_id: str, subtask_id: str) -> None:
        self._update_homework(
            homework_id,
            lambda h: replace(h, subtasks=[s for s in h.subtasks if s.id != subtask_id]),
        )

    def add_reminder(self, homework_id: str, when) -> None:
        instant = parse_instant(when)
        self._update_homework(homework_id, lambda h: replace(h, reminders=[*h.reminders, instant]))

    def remove_reminder(self, homework_id: str, when) -> None:
        instant = parse_instant(when)
        self._update_homework(
            homework_id,
            lambda h: replace(h, reminders=[r for r in h.reminders if r != instant]),
        )

    # -- classes -----------------------------------------------------------

    def add_class(self, name: str, color: str = CLASS_COLORS[0], schedule_type: str = EVERYDAY,
                  days_of_week=()) -> ClassRecord | None:
        name = name.strip()
        if not name:
            return None
        if schedule_type not in SCHEDULE_TYPES:
            raise ValueError(f"Invalid schedule type: {schedule_type!r}")
        record = ClassRecord(
            id=new_id(),
            name=name,
            color=color,
            schedule_type=schedule_type,
            days_of_week=list(days_of_week) if schedule_type == EVERYDAY else [],
        )
        self.classes = [*self.classes, record]
        self._save_classes()
        return record

    def delete_class(self, class_id: str) -> None:
        # Homework keeps its class_id; lookups for it return None afterwards.
        self.classes = [c for c in self.classes if c.id != class_id]
        self._save_classes()

    def add_records(self, classes: list[ClassRecord], homework: list[HomeworkItem]) -> None:
        """Append already validated classes and homework, saving each collection once."""
        if classes:
            self.classes = [*self.classes, *copy.deepcopy(classes)]
            self._save_classes()
        if homework:
            self.homework = [*self.homework, *copy.deepcopy(homework)]
            self._save_homework()

    # -- sessions ----------------------------------------------------------

    def record_session(self, homework_id: str | None, start: datetime,
                       duration_minutes: int) -> StudySession:
        session = record_session(self.sessions, self.homework, homework_id, start, duration_minutes)
        self._save_sessions()
        return session

    def on_session_complete(self, homework_id, start, duration_minutes) -> None:
        """Callback for FocusTimer."""
        self.record_session(homework_id, start, duration_minutes)

    # -- profile / reset ---------------------------------------------------

    def update_profile(self, name: str | None = None, school: str | None = None,
                       grade: str | None = None) -> UserProfile:
        self.profile = UserProfile(
            name=self.profile.name if name is None else name,
            school=self.profile.school if school is None else school,
            grade=self.profile.grade if grade is None else grade,
        )
        self._save_profile()
        return self.profile

    def reset_all(self) -> None:
        self.classes = []
        self.homework = []
        self.sessions = []
        self.settings = None
        self.overrides = {}
        self.profile = UserProfile() if self.repo.persist_enabled else replace(GUEST_PROFILE)
        self._save_classes()
        self._save_homework()
        self._save_sessions()
        self._save_settings()
        self._save_overrides()
        self._save_profile()
