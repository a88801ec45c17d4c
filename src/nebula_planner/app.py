"""Interactive CLI application."""
import logging
import os
import time
from dataclasses import replace
from datetime import date
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.prompt import Prompt, IntPrompt, Confirm
from rich.progress import Progress, BarColumn, TextColumn

from nebula_planner.db import init_db, DEFAULT_DB_PATH
from nebula_planner.repository import (
    GUEST_USER, get_active_user, set_active_user, open_repository,
)
from nebula_planner.ledger import Ledger
from nebula_planner.calendar_utils import parse_instant, to_date, today as local_today, weekday_name, WEEKDAY_NAMES
from nebula_planner.aggregator import month_grid, recently_completed, completed_count, subtask_progress
from nebula_planner.sessions import total_study_minutes, format_study_time, minutes_by_class
from nebula_planner.models import CLASS_COLORS, SCHEDULE_TYPES, EVERYDAY, NO_SCHOOL
from nebula_planner.timer import FocusTimer, DEFAULT_WORK_MINUTES, DEFAULT_BREAK_MINUTES
from nebula_planner.importer import import_file

console = Console()
logger = logging.getLogger(__name__)


class LogoutRequested(Exception):
    """Raised by the logout command to leave the command loop."""


def configure_logging() -> None:
    level = os.environ.get("NEBULA_PLANNER_LOG_LEVEL", "WARNING").upper()
    logging.basicConfig(
        level=level, format="%(message)s", datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def day_badge(day_type: str) -> str:
    if day_type == NO_SCHOOL:
        return ""
    return f"[bold magenta]{day_type.upper()} DAY[/bold magenta]"


def class_label(ledger: Ledger, class_id) -> str:
    cls = ledger.find_class(class_id)
    if cls is None:
        return "[dim]No class[/dim]"
    return f"[{cls.color}]●[/{cls.color}] {cls.name}"


def ask_date(prompt: str, default: date | None = None) -> date:
    while True:
        raw = Prompt.ask(prompt, default=(default or local_today()).isoformat())
        try:
            return to_date(raw)
        except ValueError:
            console.print("[red]Use the YYYY-MM-DD format.[/red]")


def show_welcome(ledger: Ledger):
    subtitle = "[dim]Guest session: nothing will be saved[/dim]" if ledger.is_guest else f"[dim]{ledger.profile.school or 'No school set'}[/dim]"
    console.print(Panel(
        f"[bold]Hi, {ledger.profile.name}![/bold]\n{subtitle}",
        title="Nebula Planner", border_style="magenta",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("dashboard", "Today at a glance"),
        ("calendar", "Month view with A/B days"),
        ("day", "Day detail + overrides"),
        ("homework", "Add, edit and complete homework"),
        ("classes", "Manage classes"),
        ("schedule", "Configure the A/B rotation"),
        ("focus", "Focus timer"),
        ("progress", "Streak and study time"),
        ("profile", "Edit your profile"),
        ("import", "Import classes/homework from a file"),
        ("logout", "Switch user"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def render_homework_table(ledger: Ledger, title: str, items: list, empty: str = "No homework due.") -> None:
    if not items:
        console.print(Panel(f"[dim]{empty}[/dim]", title=title))
        return
    table = Table(title=title)
    table.add_column("#", justify="right")
    table.add_column("Title")
    table.add_column("Class")
    table.add_column("Due")
    table.add_column("Subtasks", justify="right")
    for i, item in enumerate(items, 1):
        done, total = subtask_progress(item)
        title_text = f"[strike dim]{item.title}[/strike dim]" if item.is_complete else item.title
        table.add_row(
            str(i), title_text, class_label(ledger, item.class_id),
            item.due.strftime("%a %b %d %H:%M"),
            f"{done}/{total}" if total else "",
        )
    console.print(table)


def pick_item(items: list, prompt: str = "Which one? (#)"):
    if not items:
        console.print("[yellow]Nothing to choose from.[/yellow]")
        return None
    index = IntPrompt.ask(prompt, choices=[str(i) for i in range(1, len(items) + 1)])
    return items[index - 1]


def cmd_dashboard(ledger: Ledger):
    today = ledger.today()
    render_homework_table(ledger, "Due Today", ledger.homework_due_today())
    render_homework_table(ledger, "Due Tomorrow", ledger.homework_due_tomorrow())

    nudge = ledger.upcoming_nudge()
    console.print(Panel(nudge or "You're all caught up for now!", title="Heads Up", border_style="yellow"))
    console.print(f"\n  Completion Streak: [bold]{ledger.completion_streak()}[/bold] days\n")

    classes = ledger.classes_scheduled_on(today)
    badge = day_badge(ledger.classify(today))
    if classes:
        lines = "\n".join(f"[{c.color}]●[/{c.color}] {c.name}" for c in classes)
    else:
        lines = "[dim]No classes scheduled for today.[/dim]"
    console.print(Panel(lines, title=f"Today's Classes {badge}".strip()))


def cmd_calendar(ledger: Ledger):
    today = ledger.today()
    year = IntPrompt.ask("Year", default=today.year)
    month = IntPrompt.ask("Month", default=today.month)
    if not 1 <= month <= 12:
        console.print("[red]Month must be between 1 and 12.[/red]")
        return
    table = Table(title=date(year, month, 1).strftime("%B %Y"))
    for name in ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]:
        table.add_column(name, justify="center")
    for week in month_grid(year, month):
        cells = []
        for day in week:
            label = str(day.day)
            if day == today:
                label = f"[reverse]{label}[/reverse]"
            day_type = ledger.classify(day)
            if day_type != NO_SCHOOL:
                label += f" [magenta]{day_type.upper()}[/magenta]"
            due = len(ledger.homework_on_day(day))
            if due:
                label += f"\n[cyan]{'•' * min(due, 3)}[/cyan]"
            if day.month != month:
                label = f"[dim]{label}[/dim]"
            cells.append(label)
        table.add_row(*cells)
    console.print(table)


def cmd_day(ledger: Ledger):
    day = ask_date("Date")
    day_type = ledger.classify(day)
    console.print(Panel(
        f"[bold]{weekday_name(day)}, {day.strftime('%B %d')}[/bold] {day_badge(day_type)}",
        border_style="magenta",
    ))
    classes = ledger.classes_scheduled_on(day)
    if classes:
        for c in classes:
            console.print(f"  [{c.color}]●[/{c.color}] {c.name}")
    else:
        console.print("  [dim]No classes scheduled.[/dim]")
    render_homework_table(ledger, "Homework Due", ledger.homework_on_day(day), "No homework due on this day.")

    override = ledger.get_override(day)
    if override:
        console.print(f"[dim]Override active: {override.upper()}[/dim]")
    action = Prompt.ask("Override", choices=["a", "b", "clear", "skip"], default="skip")
    if action == "skip":
        return
    ledger.set_override(day, NO_SCHOOL if action == "clear" else action)
    console.print(f"[green]{day.isoformat()} is now {day_badge(ledger.classify(day)) or 'a no-school day'}.[/green]")


def add_homework_form(ledger: Ledger):
    title = Prompt.ask("Title").strip()
    if not title:
        console.print("[red]Title is required.[/red]")
        return
    class_id = None
    if ledger.classes:
        for i, c in enumerate(ledger.classes, 1):
            console.print(f"  [cyan]{i}[/cyan]) {c.name}")
        choice = Prompt.ask("Class # (blank for none)", default="")
        if choice.isdigit() and 1 <= int(choice) <= len(ledger.classes):
            class_id = ledger.classes[int(choice) - 1].id
    due_day = ask_date("Due date", default=ledger.today())
    due_time = Prompt.ask("Due time (HH:MM)", default="23:59")
    notes = Prompt.ask("Notes", default="")
    item = ledger.new_homework(title, f"{due_day.isoformat()}T{due_time}", class_id=class_id, notes=notes)
    console.print(f"[green]Added '{item.title}'.[/green]")


def edit_homework_form(ledger: Ledger, item):
    action = Prompt.ask(
        "Edit", choices=["title", "notes", "due", "subtask", "reminder", "back"], default="back",
    )
    if action == "title":
        ledger.add_or_update_homework(replace(item, title=Prompt.ask("Title", default=item.title)))
    elif action == "notes":
        ledger.add_or_update_homework(replace(item, notes=Prompt.ask("Notes", default=item.notes)))
    elif action == "due":
        due_day = ask_date("Due date", default=item.due.date())
        due_time = Prompt.ask("Due time (HH:MM)", default=item.due.strftime("%H:%M"))
        try:
            due = parse_instant(f"{due_day.isoformat()}T{due_time}")
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            return
        ledger.add_or_update_homework(replace(item, due=due))
    elif action == "subtask":
        for i, s in enumerate(item.subtasks, 1):
            mark = "[green]✓[/green]" if s.is_complete else " "
            console.print(f"  {mark} [cyan]{i}[/cyan]) {s.title}")
        sub_action = Prompt.ask("Subtask", choices=["add", "toggle", "delete", "back"], default="add")
        if sub_action == "add":
            ledger.add_subtask(item.id, Prompt.ask("Subtask title"))
        elif sub_action == "toggle":
            subtask = pick_item(item.subtasks)
            if subtask:
                ledger.toggle_subtask(item.id, subtask.id)
        elif sub_action == "delete":
            subtask = pick_item(item.subtasks)
            if subtask:
                ledger.delete_subtask(item.id, subtask.id)
    elif action == "reminder":
        for i, r in enumerate(item.reminders, 1):
            console.print(f"  [cyan]{i}[/cyan]) {r:%a %b %d %H:%M}")
        rem_action = Prompt.ask("Reminder", choices=["add", "remove", "back"], default="add")
        if rem_action == "add":
            when = Prompt.ask("Remind at (YYYY-MM-DDTHH:MM)")
            try:
                ledger.add_reminder(item.id, when)
            except ValueError as e:
                console.print(f"[red]{e}[/red]")
        elif rem_action == "remove":
            reminder = pick_item(item.reminders)
            if reminder:
                ledger.remove_reminder(item.id, reminder)


def cmd_homework(ledger: Ledger):
    items = sorted(ledger.homework, key=lambda h: (h.is_complete, h.due))
    render_homework_table(ledger, "Homework", items, "No homework yet.")
    action = Prompt.ask("Action", choices=["add", "toggle", "edit", "delete", "back"], default="add")
    if action == "add":
        add_homework_form(ledger)
    elif action == "toggle":
        item = pick_item(items)
        if item:
            ledger.toggle_complete(item.id)
    elif action == "edit":
        item = pick_item(items)
        if item:
            edit_homework_form(ledger, item)
    elif action == "delete":
        item = pick_item(items)
        if item and Confirm.ask(f"Delete '{item.title}'?", default=False):
            ledger.delete_homework(item.id)
            console.print("[green]Deleted.[/green]")


def cmd_classes(ledger: Ledger):
    if ledger.classes:
        table = Table(title="Classes")
        table.add_column("#", justify="right")
        table.add_column("Name")
        table.add_column("Schedule")
        table.add_column("Days")
        for i, c in enumerate(ledger.classes, 1):
            table.add_row(
                str(i), f"[{c.color}]●[/{c.color}] {c.name}", c.schedule_type,
                ", ".join(d[:3] for d in c.days_of_week),
            )
        console.print(table)
    else:
        console.print("[dim]No classes yet.[/dim]")
    action = Prompt.ask("Action", choices=["add", "delete", "back"], default="add")
    if action == "add":
        name = Prompt.ask("Class name")
        schedule_type = Prompt.ask("Schedule", choices=list(SCHEDULE_TYPES), default=EVERYDAY)
        days = []
        if schedule_type == EVERYDAY:
            raw = Prompt.ask("Days (e.g. Mon,Wed,Fri)", default="Mon,Tue,Wed,Thu,Fri")
            wanted = {d.strip()[:3].lower() for d in raw.split(",") if d.strip()}
            days = [day for day in WEEKDAY_NAMES if day[:3].lower() in wanted]
        color = Prompt.ask("Color", default=CLASS_COLORS[len(ledger.classes) % len(CLASS_COLORS)])
        record = ledger.add_class(name, color=color, schedule_type=schedule_type, days_of_week=days)
        if record is None:
            console.print("[red]Class name is required.[/red]")
        else:
            console.print(f"[green]Added {record.name}.[/green]")
    elif action == "delete":
        record = pick_item(ledger.classes)
        if record and Confirm.ask(f"Delete {record.name}?", default=False):
            ledger.delete_class(record.id)
            console.print("[green]Deleted.[/green]")


def cmd_schedule(ledger: Ledger):
    if ledger.settings:
        s = ledger.settings
        console.print(
            f"Rotation starts [bold]{s.start_date.isoformat()}[/bold] on an "
            f"[bold]{s.start_day_type.upper()}[/bold] day; weekends "
            f"{'included' if s.include_weekends else 'skipped'}."
        )
    else:
        console.print("[dim]No A/B schedule configured.[/dim]")
    action = Prompt.ask("Action", choices=["set", "clear", "back"], default="set")
    if action == "set":
        start = ask_date("Start date", default=ledger.settings.start_date if ledger.settings else None)
        day_type = Prompt.ask("Start day type", choices=["a", "b"], default="a")
        weekends = Confirm.ask("Include weekends?", default=False)
        ledger.configure_schedule(start, day_type, weekends)
        console.print(f"[green]Today is {day_badge(ledger.classify(ledger.today())) or 'a no-school day'}.[/green]")
    elif action == "clear":
        ledger.clear_schedule()
        console.print("[green]Schedule cleared.[/green]")


def cmd_focus(ledger: Ledger):
    work = IntPrompt.ask("Focus minutes", default=DEFAULT_WORK_MINUTES)
    rest = IntPrompt.ask("Break minutes", default=DEFAULT_BREAK_MINUTES)
    timer = FocusTimer(work, rest, on_session_complete=ledger.on_session_complete)
    open_items = [h for h in ledger.homework if not h.is_complete]
    if open_items and Confirm.ask("Link a homework item?", default=False):
        render_homework_table(ledger, "Open Homework", open_items)
        item = pick_item(open_items)
        timer.link(item.id if item else None)

    while True:
        label = "Break" if timer.is_break else "Focus"
        timer.start()
        try:
            with Progress(TextColumn(f"[bold]{label}[/bold]"), BarColumn(), TextColumn("{task.description}"), console=console) as bar:
                task = bar.add_task(timer.display(), total=timer.interval_seconds)
                finished = False
                while not finished:
                    time.sleep(1)
                    finished = timer.tick()
                    bar.update(task, completed=timer.interval_seconds - timer.remaining if not finished else timer.interval_seconds, description=timer.display())
        except KeyboardInterrupt:
            timer.reset()
            console.print("\n[yellow]Timer stopped.[/yellow]")
            return
        if timer.is_break:
            console.print(f"[green]Focus session {timer.session_count} logged. Time for a break![/green]")
        if not Confirm.ask(f"Start {'break' if timer.is_break else 'focus'}?", default=True):
            return


def cmd_progress(ledger: Ledger):
    minutes = total_study_minutes(ledger.sessions)
    console.print(
        f"\n  Streak: [bold]{ledger.completion_streak()}[/bold] days  |  "
        f"Tasks Completed: [bold]{completed_count(ledger.homework)}[/bold]  |  "
        f"Total Study Time: [bold]{format_study_time(minutes)}[/bold]\n"
    )
    by_class = minutes_by_class(ledger.sessions)
    if by_class:
        study = Table(title="Study Time by Class")
        study.add_column("Class")
        study.add_column("Time", justify="right")
        for class_id, class_minutes in sorted(by_class.items(), key=lambda kv: kv[1], reverse=True):
            study.add_row(class_label(ledger, class_id), format_study_time(class_minutes))
        console.print(study)
    recent = recently_completed(ledger.homework)
    if not recent:
        console.print("[dim]No completed homework yet. Keep going![/dim]")
        return
    table = Table(title="Recently Completed")
    table.add_column("Title")
    table.add_column("Class")
    table.add_column("Due")
    for item in recent:
        table.add_row(item.title, class_label(ledger, item.class_id), item.due.strftime("%Y-%m-%d"))
    console.print(table)


def cmd_profile(ledger: Ledger):
    p = ledger.profile
    ledger.update_profile(
        name=Prompt.ask("Name", default=p.name),
        school=Prompt.ask("School", default=p.school),
        grade=Prompt.ask("Grade", default=p.grade),
    )
    console.print("[green]Profile saved.[/green]" if not ledger.is_guest else "[yellow]Guest profile updated for this session.[/yellow]")


def cmd_import(ledger: Ledger):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    try:
        result = import_file(ledger, file_path)
    except KeyError as e:
        console.print(f"[red]Entry is missing field {e}; nothing was imported.[/red]")
        return
    except ValueError as e:
        console.print(f"[red]{e}; nothing was imported.[/red]")
        return
    console.print(f"[green]Imported {result['filename']}: {result['classes']} classes, {result['homework']} homework.[/green]")


def cmd_logout(ledger: Ledger, db_path: str):
    if ledger.is_guest:
        message = "You are in a guest session. All current data will be lost."
    else:
        message = "Your data is saved on this device. Log back in with the same email to access it."
    console.print(f"[dim]{message}[/dim]")
    if Confirm.ask("Log out?", default=True):
        set_active_user(db_path, None)
        raise LogoutRequested()


def login(db_path: str) -> Ledger:
    user = get_active_user(db_path)
    if not user:
        email = Prompt.ask("Email (leave blank for a guest session)", default="").strip().lower()
        user = email or GUEST_USER
        set_active_user(db_path, user)
    logger.info("Opening ledger for %s", user)
    return Ledger(open_repository(db_path, user))


def run_session(db_path: str) -> bool:
    """Run the command loop for one user. Returns True when the user logged out."""
    ledger = login(db_path)
    show_welcome(ledger)
    commands = {
        "dashboard": cmd_dashboard,
        "calendar": cmd_calendar,
        "day": cmd_day,
        "homework": cmd_homework,
        "classes": cmd_classes,
        "schedule": cmd_schedule,
        "focus": cmd_focus,
        "progress": cmd_progress,
        "profile": cmd_profile,
        "import": cmd_import,
    }
    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="dashboard").strip().lower()
        try:
            if choice in commands:
                commands[choice](ledger)
            elif choice == "logout":
                cmd_logout(ledger, db_path)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]See you tomorrow![/dim]")
                return False
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except LogoutRequested:
            return True
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            logger.debug("Command %s failed", choice, exc_info=True)
            console.print(f"[red]Error: {e}[/red]")


def main():
    configure_logging()
    db_path = DEFAULT_DB_PATH
    init_db(db_path)
    while run_session(db_path):
        pass


if __name__ == "__main__":
    main()
