import asyncio
from datetime import datetime
from typing import Awaitable, Callable, List, Set

from config import get_logger
from models import AutomationRule, CalendarEvent

from .collaborators import CalendarCollaborator
from .executor import ActionExecutor
from .scheduler import local_now

logger = get_logger(__name__)

DEFAULT_POLL_INTERVAL_SECONDS = 5 * 60
DEFAULT_LOOKAHEAD_MINUTES = 5
DEFAULT_MEETING_END_THRESHOLD_SECONDS = 2 * 60


def seconds_until(moment: datetime, now: datetime) -> float:
    # Naive calendar timestamps are read as local time
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return (moment - now).total_seconds()


class CalendarTriggerPoller:
    """
    Evaluates enabled calendar rules against the calendar on a fixed interval.

    The calendar is queried once per cycle and the results are shared by every
    rule. A meeting_start rule fires with the earliest upcoming event; a
    meeting_end rule fires when the current meeting has between zero
    (exclusive) and the threshold (inclusive) seconds left. Nothing is
    remembered between cycles, so an event that stays inside the lookahead
    window fires its meeting_start rules again on the next cycle. Firings run
    in their own tasks, so stopping the poller does not cut one short.
    """

    def __init__(
        self,
        calendar: CalendarCollaborator,
        executor: ActionExecutor,
        load_rules: Callable[[], Awaitable[List[AutomationRule]]],
        interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        lookahead_minutes: int = DEFAULT_LOOKAHEAD_MINUTES,
        meeting_end_threshold_seconds: float = DEFAULT_MEETING_END_THRESHOLD_SECONDS,
        now: Callable[[], datetime] = local_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._calendar = calendar
        self._executor = executor
        self._load_rules = load_rules
        self.interval_seconds = interval_seconds
        self.lookahead_minutes = lookahead_minutes
        self.meeting_end_threshold_seconds = meeting_end_threshold_seconds
        self._now = now
        self._sleep = sleep
        self._task: asyncio.Task | None = None
        self._firings: Set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._loop(), name="calendar-poller")
        logger.info("calendar_poller_started", interval_seconds=self.interval_seconds)

    def stop(self) -> asyncio.Task | None:
        task, self._task = self._task, None
        if task is None:
            return None
        task.cancel()
        logger.info("calendar_poller_stopped")
        return task

    async def _loop(self) -> None:
        while True:
            await self._sleep(self.interval_seconds)
            try:
                await self.run_cycle()
            except Exception as exc:
                logger.error("calendar_poll_failed", error=str(exc), exc_info=True)

    async def run_cycle(self) -> List[str]:
        """Run one poll cycle and return the ids of the rules that fired."""
        rules = [rule for rule in await self._load_rules() if rule.enabled and rule.trigger == "calendar"]
        if not rules:
            return []

        upcoming = await self._calendar.get_upcoming_events(self.lookahead_minutes)
        current = await self._calendar.get_current_meeting()

        fired: List[str] = []
        for rule in rules:
            event_type = rule.trigger_config.calendar_event_type
            if event_type == "meeting_start":
                if upcoming:
                    await self._fire(rule, upcoming[0])
                    fired.append(rule.id)
            elif event_type == "meeting_end":
                if current is not None and self._is_ending(current):
                    await self._fire(rule, None)
                    fired.append(rule.id)
            else:
                logger.warning("calendar_trigger_unsupported", rule_id=rule.id, calendar_event_type=event_type)
        return fired

    def _is_ending(self, meeting: CalendarEvent) -> bool:
        remaining = seconds_until(meeting.end, self._now())
        return 0 < remaining <= self.meeting_end_threshold_seconds

    async def _fire(self, rule: AutomationRule, event: CalendarEvent | None) -> None:
        # The firing outlives a cancelled poll loop; only future cycles stop
        firing = asyncio.create_task(self._execute(rule, event), name=f"rule-fire:{rule.id}")
        self._firings.add(firing)
        firing.add_done_callback(self._firings.discard)
        await asyncio.shield(firing)

    async def _execute(self, rule: AutomationRule, event: CalendarEvent | None) -> None:
        logger.info("rule_fired", rule_id=rule.id, rule_name=rule.name, trigger="calendar")
        try:
            await self._executor.execute(rule.actions, event)
        except Exception as exc:
            logger.error("rule_firing_failed", rule_id=rule.id, error=str(exc), exc_info=True)
