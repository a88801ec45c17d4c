# tests/test_integration.py
"""End-to-end test of the core workflow."""
import random
from datetime import date, datetime

from nebula_planner.db import init_db
from nebula_planner.ledger import Ledger
from nebula_planner.repository import open_repository
from nebula_planner.timer import FocusTimer


def test_full_week_workflow(tmp_db):
    """Configure a rotation, add classes and homework, study, and reload from disk."""
    init_db(tmp_db)
    today = date(2024, 1, 8)
    ledger = Ledger(open_repository(tmp_db, "ada@example.com"), rng=random.Random(1), clock=lambda: today)

    ledger.configure_schedule(date(2024, 1, 1), "a", include_weekends=False)
    bio = ledger.add_class("Biology", schedule_type="a-day")
    chem = ledger.add_class("Chemistry", schedule_type="b-day")
    pe = ledger.add_class("PE", schedule_type="everyday", days_of_week=["Monday", "Friday"])

    # Monday 2024-01-08 follows Friday (A) and is a B day.
    assert ledger.classify(today) == "b"
    assert [c.id for c in ledger.classes_scheduled_on(today)] == [chem.id, pe.id]

    # A make-up day turns Monday into an A day without moving the rotation.
    ledger.set_override(today, "a")
    assert [c.id for c in ledger.classes_scheduled_on(today)] == [bio.id, pe.id]
    assert ledger.classify(date(2024, 1, 9)) == "a"

    lab = ledger.new_homework("Lab report", "2024-01-08T17:00", class_id=bio.id)
    ledger.new_homework("Problem set", "2024-01-09T08:00", class_id=chem.id)
    old = ledger.new_homework("Warm-up", "2024-01-07T08:00", class_id=pe.id)
    ledger.toggle_complete(old.id)

    assert [h.title for h in ledger.homework_due_today()] == ["Lab report"]
    assert [h.title for h in ledger.homework_due_tomorrow()] == ["Problem set"]
    assert ledger.completion_streak() == 0
    assert ledger.upcoming_nudge() is not None

    timer = FocusTimer(1, 1, on_session_complete=ledger.on_session_complete)
    timer.link(lab.id)
    timer.start()
    while not timer.tick(datetime(2024, 1, 8, 16, 0)):
        pass
    ledger.toggle_complete(lab.id)
    assert ledger.completion_streak() == 2

    reloaded = Ledger(open_repository(tmp_db, "ada@example.com"), clock=lambda: today)
    assert reloaded.classify(today) == "a"
    assert reloaded.completion_streak() == 2
    assert len(reloaded.sessions) == 1
    assert reloaded.sessions[0].class_id == bio.id

    other = Ledger(open_repository(tmp_db, "bo@example.com"), clock=lambda: today)
    assert other.homework == []
    assert other.classify(today) == "none"
