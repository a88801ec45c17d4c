"""Focus/break countdown driven by one-second ticks."""
import logging
from datetime import datetime, timedelta

DEFAULT_WORK_MINUTES = 25
DEFAULT_BREAK_MINUTES = 5

logger = logging.getLogger(__name__)


class FocusTimer:
    """Alternates focus and break intervals.

    The owner calls tick() once per second. When a focus interval runs out,
    on_session_complete(homework_id, start, duration_minutes) fires once.
    """

    def __init__(self, work_minutes: int = DEFAULT_WORK_MINUTES,
                 break_minutes: int = DEFAULT_BREAK_MINUTES, on_session_complete=None):
        if work_minutes <= 0 or break_minutes <= 0:
            raise ValueError("Interval lengths must be positive")
        self.work_minutes = work_minutes
        self.break_minutes = break_minutes
        self.on_session_complete = on_session_complete
        self.is_active = False
        self.is_break = False
        self.session_count = 0
        self.homework_id = None
        self.remaining = work_minutes * 60

    @property
    def interval_seconds(self) -> int:
        return (self.break_minutes if self.is_break else self.work_minutes) * 60

    @property
    def progress(self) -> float:
        return (1 - self.remaining / self.interval_seconds) * 100

    def display(self) -> str:
        minutes, seconds = divmod(self.remaining, 60)
        return f"{minutes:02d}:{seconds:02d}"

    def link(self, homework_id: str | None) -> None:
        self.homework_id = homework_id

    def start(self) -> None:
        self.is_active = True

    def pause(self) -> None:
        self.is_active = False

    def reset(self) -> None:
        self.is_active = False
        self.remaining = self.interval_seconds

    def tick(self, now: datetime | None = None) -> bool:
        """Advance one second. Returns True when the interval finished on this tick."""
        if not self.is_active:
            return False
        if self.remaining > 0:
            self.remaining -= 1
        if self.remaining > 0:
            return False
        leaving_focus = not self.is_break
        self.is_break = not self.is_break
        self.reset()
        if leaving_focus:
            self.session_count += 1
            now = now or datetime.now()
            start = now - timedelta(minutes=self.work_minutes)
            logger.debug("Focus interval finished (%s min)", self.work_minutes)
            if self.on_session_complete is not None:
                self.on_session_complete(self.homework_id, start, self.work_minutes)
        return True
