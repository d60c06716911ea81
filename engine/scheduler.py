import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable, Callable, Dict, Iterable, List, Set

from croniter import croniter

from config import get_logger
from models import AutomationRule, is_valid_cron

from .executor import ActionExecutor

logger = get_logger(__name__)


class InvalidScheduleError(ValueError):
    """Raised when a time rule's cron expression cannot be scheduled."""


def local_now() -> datetime:
    return datetime.now().astimezone()


@dataclass
class ScheduledJob:
    rule_id: str
    expression: str
    task: asyncio.Task


class TimeTriggerScheduler:
    """
    Owns one recurring asyncio task per enabled time rule, keyed by rule id.

    The job map is private and only changes through schedule_rule, unschedule,
    reconcile and stop_all, so there is never more than one job per rule.
    Each firing runs in its own task; cancelling a job stops future firings
    and leaves a firing already in progress to finish.
    """

    def __init__(
        self,
        executor: ActionExecutor,
        now: Callable[[], datetime] = local_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._executor = executor
        self._now = now
        self._sleep = sleep
        self._jobs: Dict[str, ScheduledJob] = {}
        self._firings: Set[asyncio.Task] = set()

    @staticmethod
    def check_schedule(rule: AutomationRule) -> None:
        expression = rule.trigger_config.time
        if expression is not None and not is_valid_cron(expression):
            raise InvalidScheduleError(f"Rule {rule.id} has an invalid cron expression: {expression!r}")

    def schedule_rule(self, rule: AutomationRule) -> bool:
        """
        Register (or replace) the recurring job for a time rule.

        Returns False without scheduling anything when the rule has no cron
        expression. Raises InvalidScheduleError for a malformed expression.
        """
        expression = rule.trigger_config.time
        if not expression:
            return False
        self.check_schedule(rule)

        self.unschedule(rule.id)
        task = asyncio.create_task(self._run_job(rule, expression), name=f"rule-job:{rule.id}")
        self._jobs[rule.id] = ScheduledJob(rule_id=rule.id, expression=expression, task=task)
        logger.info("rule_scheduled", rule_id=rule.id, rule_name=rule.name, cron=expression)
        return True

    def unschedule(self, rule_id: str) -> bool:
        job = self._jobs.pop(rule_id, None)
        if job is None:
            return False
        job.task.cancel()
        logger.info("rule_unscheduled", rule_id=rule_id)
        return True

    def reconcile(self, rules: Iterable[AutomationRule]) -> None:
        """Make the live job set match the given rules. Safe to run repeatedly."""
        wanted = {rule.id: rule for rule in rules if rule.is_time_scheduled}
        for rule_id in list(self._jobs):
            if rule_id not in wanted:
                self.unschedule(rule_id)
        for rule_id, rule in wanted.items():
            job = self._jobs.get(rule_id)
            if job is not None and job.expression == rule.trigger_config.time and not job.task.done():
                continue
            self.schedule_rule(rule)

    def stop_all(self) -> List[asyncio.Task]:
        """Cancel every job and return the cancelled tasks so callers can wait for them to unwind."""
        tasks = [job.task for job in self._jobs.values()]
        for rule_id in list(self._jobs):
            self.unschedule(rule_id)
        return tasks

    def has_job(self, rule_id: str) -> bool:
        return rule_id in self._jobs

    def job_ids(self) -> List[str]:
        return list(self._jobs)

    def next_fire_time(self, expression: str, after: datetime) -> datetime:
        # Cron fields are local wall-clock times; the offset is resolved per
        # fire time so a daylight saving change keeps the scheduled hour.
        wall_clock = after.astimezone().replace(tzinfo=None) if after.tzinfo else after
        return croniter(expression, wall_clock).get_next(datetime).astimezone()

    async def _run_job(self, rule: AutomationRule, expression: str) -> None:
        last_fire: datetime | None = None
        while True:
            now = self._now()
            base = now if last_fire is None or now > last_fire else last_fire
            fire_at = self.next_fire_time(expression, base)
            await self._sleep(max((fire_at - self._now()).total_seconds(), 0.0))
            last_fire = fire_at
            firing = asyncio.create_task(self._fire(rule), name=f"rule-fire:{rule.id}")
            self._firings.add(firing)
            firing.add_done_callback(self._firings.discard)

    async def _fire(self, rule: AutomationRule) -> None:
        logger.info("rule_fired", rule_id=rule.id, rule_name=rule.name, trigger="time")
        try:
            await self._executor.execute(rule.actions)
        except Exception as exc:
            logger.error("rule_firing_failed", rule_id=rule.id, error=str(exc), exc_info=True)
