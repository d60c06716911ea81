import asyncio
import threading
import uuid
from datetime import date, datetime, timedelta
from typing import Callable, List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from config import get_logger
from db import TimeEntryModel, db_to_pydantic_time_entry, pydantic_to_db_time_entry, to_utc
from models import TimeEntry

logger = get_logger(__name__)


class TimeTrackerError(RuntimeError):
    """Raised when time entries cannot be read or written."""


def _local_now() -> datetime:
    return datetime.now().astimezone()


class TimeTracker:
    """
    Persisted time tracking. At most one entry is active; starting a timer
    stops the active one first. Durations are in minutes.
    """

    def __init__(self, session_factory: sessionmaker[Session], now: Callable[[], datetime] = _local_now) -> None:
        self._session_factory = session_factory
        self._now = now
        self._lock = threading.Lock()

    async def start_timer(self, activity: str, project: str | None = None) -> TimeEntry:
        return await asyncio.to_thread(self._start_timer, activity, project)

    async def stop_timer(self) -> TimeEntry | None:
        return await asyncio.to_thread(self._stop_timer)

    async def get_current_entry(self) -> TimeEntry | None:
        return await asyncio.to_thread(self._get_current_entry)

    async def get_entries(self, day: str | None = None) -> List[TimeEntry]:
        target = day or self._now().date().isoformat()
        return await asyncio.to_thread(self._get_entries_between, target, target)

    async def get_weekly_entries(self) -> List[TimeEntry]:
        start, end = self._week_bounds(self._now().date())
        return await asyncio.to_thread(self._get_entries_between, start.isoformat(), end.isoformat())

    async def get_total_time_today(self) -> float:
        return sum(entry.duration or 0.0 for entry in await self.get_entries())

    async def get_total_time_this_week(self) -> float:
        return sum(entry.duration or 0.0 for entry in await self.get_weekly_entries())

    @staticmethod
    def _week_bounds(today: date) -> tuple[date, date]:
        # Weeks start on Sunday
        start = today - timedelta(days=(today.weekday() + 1) % 7)
        return start, start + timedelta(days=6)

    def _start_timer(self, activity: str, project: str | None) -> TimeEntry:
        with self._lock:
            now = self._now()
            entry = TimeEntry(
                id=str(uuid.uuid4()),
                date=now.date().isoformat(),
                start_time=now,
                activity=activity,
                project=project,
            )
            try:
                with self._session_factory.begin() as session:
                    self._close_active(session, now)
                    session.add(pydantic_to_db_time_entry(entry, active=True))
            except SQLAlchemyError as exc:
                raise TimeTrackerError(f"Failed to start timer: {exc}") from exc
        logger.info("timer_started", activity=activity, project=project)
        return entry

    def _stop_timer(self) -> TimeEntry | None:
        with self._lock:
            try:
                with self._session_factory.begin() as session:
                    stopped = self._close_active(session, self._now())
            except SQLAlchemyError as exc:
                raise TimeTrackerError(f"Failed to stop timer: {exc}") from exc
        if stopped is None:
            logger.info("timer_not_running")
        else:
            logger.info("timer_stopped", activity=stopped.activity, duration_minutes=round(stopped.duration or 0))
        return stopped

    def _close_active(self, session: Session, now: datetime) -> TimeEntry | None:
        active = session.scalars(select(TimeEntryModel).where(TimeEntryModel.active.is_(True))).first()
        if active is None:
            return None
        entry = db_to_pydantic_time_entry(active)
        entry.end_time = now
        entry.duration = (now - entry.start_time).total_seconds() / 60
        active.end_time = to_utc(entry.end_time)
        active.duration = entry.duration
        active.active = False
        return entry

    def _get_current_entry(self) -> TimeEntry | None:
        try:
            with self._session_factory() as session:
                active = session.scalars(select(TimeEntryModel).where(TimeEntryModel.active.is_(True))).first()
                return db_to_pydantic_time_entry(active) if active else None
        except SQLAlchemyError as exc:
            raise TimeTrackerError(f"Failed to read current entry: {exc}") from exc

    def _get_entries_between(self, first_day: str, last_day: str) -> List[TimeEntry]:
        try:
            with self._session_factory() as session:
                rows = session.scalars(
                    select(TimeEntryModel)
                    .where(
                        TimeEntryModel.active.is_(False),
                        TimeEntryModel.date >= first_day,
                        TimeEntryModel.date <= last_day,
                    )
                    .order_by(TimeEntryModel.start_time)
                )
                return [db_to_pydantic_time_entry(row) for row in rows]
        except SQLAlchemyError as exc:
            raise TimeTrackerError(f"Failed to read time entries: {exc}") from exc
