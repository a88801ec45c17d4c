"""Bulk import of classes and homework from JSON or YAML files."""
import json
import logging
from pathlib import Path

import yaml

from nebula_planner.calendar_utils import parse_instant
from nebula_planner.models import (
    CLASS_COLORS, EVERYDAY, SCHEDULE_TYPES, ClassRecord, HomeworkItem, Subtask,
)
from nebula_planner.sessions import new_id

logger = logging.getLogger(__name__)


def read_file_data(file_path: str) -> dict:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        data = json.loads(path.read_text())
    elif suffix in (".yaml", ".yml"):
        data = yaml.safe_load(path.read_text())
    else:
        raise ValueError(f"Unsupported file type: {suffix or path.name}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError("Import file must contain a mapping with 'classes' and/or 'homework'")
    return data


def _build_class(entry, color: str) -> ClassRecord | None:
    name = str(entry["name"]).strip()
    if not name:
        return None
    schedule_type = entry.get("schedule_type", EVERYDAY)
    if schedule_type not in SCHEDULE_TYPES:
        raise ValueError(f"Invalid schedule type for class {name!r}: {schedule_type!r}")
    days = entry.get("days_of_week") or []
    return ClassRecord(
        id=new_id(),
        name=name,
        color=entry.get("color", color),
        schedule_type=schedule_type,
        days_of_week=list(days) if schedule_type == EVERYDAY else [],
    )


def _build_homework(entry, by_name: dict) -> HomeworkItem:
    class_id = entry.get("class_id")
    class_name = entry.get("class")
    if class_id is None and class_name:
        class_id = by_name.get(str(class_name).lower())
        if class_id is None:
            logger.warning("Unknown class %r for homework %r", class_name, entry.get("title"))
    subtasks = []
    for title in entry.get("subtasks") or []:
        if not isinstance(title, str):
            raise ValueError(f"Subtask titles must be text, got {title!r}")
        if title.strip():
            subtasks.append(Subtask(id=new_id(), title=title.strip()))
    return HomeworkItem(
        id=new_id(),
        title=entry["title"],
        class_id=class_id,
        due=parse_instant(entry["due"]),
        notes=entry.get("notes", ""),
        subtasks=subtasks,
    )


def import_file(ledger, file_path: str) -> dict:
    """Add the file's classes and homework to the ledger.

    Homework may name its class by `class` (class name) or `class_id`. Names
    resolve against classes already in the ledger, including ones added by
    this import. Every entry is checked before anything is added, so a bad
    entry leaves the ledger untouched.
    """
    data = read_file_data(file_path)
    classes = []
    for entry in data.get("classes") or []:
        color = CLASS_COLORS[(len(ledger.classes) + len(classes)) % len(CLASS_COLORS)]
        record = _build_class(entry, color)
        if record is not None:
            classes.append(record)

    by_name = {c.name.lower(): c.id for c in [*ledger.classes, *classes]}
    homework = [_build_homework(entry, by_name) for entry in data.get("homework") or []]

    ledger.add_records(classes, homework)
    logger.info("Imported %d classes and %d homework items from %s",
                len(classes), len(homework), file_path)
    return {"filename": Path(file_path).name, "classes": len(classes), "homework": len(homework)}
