import asyncio
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List

from config import get_logger
from db import RuleRepository
from models import ActionResult, AutomationRule
from registry import Registry, create_default_registries
from validations import parse_and_validate_rule, validate_rule

from .collaborators import (
    CalendarCollaborator,
    MeetingJoinCollaborator,
    StandupCollaborator,
    StatusCollaborator,
    TimerCollaborator,
)
from .executor import ActionExecutor
from .poller import (
    DEFAULT_LOOKAHEAD_MINUTES,
    DEFAULT_MEETING_END_THRESHOLD_SECONDS,
    DEFAULT_POLL_INTERVAL_SECONDS,
    CalendarTriggerPoller,
)
from .scheduler import TimeTriggerScheduler, local_now

logger = get_logger(__name__)


class AutomationEngine:
    """
    Rule store, time scheduler, calendar poller and action executor behind one API.

    The engine is either stopped or running. Rule mutations are persisted
    first and then applied to the live job set; live jobs only exist while the
    engine is running, and start() rebuilds them from the store.
    """

    def __init__(
        self,
        store: RuleRepository,
        status: StatusCollaborator | None = None,
        calendar: CalendarCollaborator | None = None,
        meeting_joiner: MeetingJoinCollaborator | None = None,
        standup: StandupCollaborator | None = None,
        timer: TimerCollaborator | None = None,
        registries: Dict[str, Registry] | None = None,
        poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS,
        lookahead_minutes: int = DEFAULT_LOOKAHEAD_MINUTES,
        meeting_end_threshold_seconds: float = DEFAULT_MEETING_END_THRESHOLD_SECONDS,
        now: Callable[[], datetime] = local_now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.store = store
        self.registries = registries or create_default_registries()
        self.executor = ActionExecutor(status=status, meeting_joiner=meeting_joiner, standup=standup, timer=timer)
        self.scheduler = TimeTriggerScheduler(self.executor, now=now, sleep=sleep)
        self.poller: CalendarTriggerPoller | None = None
        if calendar is not None:
            self.poller = CalendarTriggerPoller(
                calendar,
                self.executor,
                self.list_rules,
                interval_seconds=poll_interval_seconds,
                lookahead_minutes=lookahead_minutes,
                meeting_end_threshold_seconds=meeting_end_threshold_seconds,
                now=now,
                sleep=sleep,
            )
        self._running = False
        self._lock = asyncio.Lock()

    @property
    def is_running(self) -> bool:
        return self._running

    def scheduled_rule_ids(self) -> List[str]:
        return self.scheduler.job_ids()

    # ---- Lifecycle ----

    async def start(self) -> None:
        async with self._lock:
            if self._running:
                logger.info("engine_already_running")
                return
            rules = await asyncio.to_thread(self.store.list)
            self.scheduler.reconcile(rules)
            if self.poller is not None:
                self.poller.start()
            self._running = True
            logger.info(
                "engine_started",
                rules=len(rules),
                scheduled_jobs=len(self.scheduler.job_ids()),
                calendar_polling=self.poller is not None,
            )

    async def stop(self) -> None:
        async with self._lock:
            cancelled = self.scheduler.stop_all()
            if self.poller is not None:
                poll_task = self.poller.stop()
                if poll_task is not None:
                    cancelled.append(poll_task)
            await asyncio.gather(*cancelled, return_exceptions=True)
            if self._running:
                logger.info("engine_stopped")
            self._running = False

    # ---- Rule management ----

    async def add_rule(self, rule: AutomationRule | Dict[str, Any]) -> AutomationRule:
        """Validate, persist and (when running) schedule a new rule. Errors propagate to the caller."""
        if isinstance(rule, dict):
            rule = parse_and_validate_rule(rule, self.registries)
        else:
            validate_rule(rule, self.registries)
        self.scheduler.check_schedule(rule)

        async with self._lock:
            await asyncio.to_thread(self.store.add, rule)
            if self._running and rule.is_time_scheduled:
                self.scheduler.schedule_rule(rule)
        logger.info("rule_added", rule_id=rule.id, rule_name=rule.name, trigger=rule.trigger)
        return rule

    async def remove_rule(self, rule_id: str) -> bool:
        async with self._lock:
            removed = await asyncio.to_thread(self.store.remove, rule_id)
            self.scheduler.unschedule(rule_id)
        if removed:
            logger.info("rule_removed", rule_id=rule_id)
        else:
            logger.warning("rule_not_found", rule_id=rule_id, operation="remove")
        return removed

    async def enable_rule(self, rule_id: str) -> bool:
        async with self._lock:
            rule = await asyncio.to_thread(self.store.enable, rule_id)
            if rule is None:
                logger.warning("rule_not_found", rule_id=rule_id, operation="enable")
                return False
            if self._running and rule.is_time_scheduled:
                self.scheduler.schedule_rule(rule)
        logger.info("rule_enabled", rule_id=rule_id, rule_name=rule.name)
        return True

    async def disable_rule(self, rule_id: str) -> bool:
        async with self._lock:
            rule = await asyncio.to_thread(self.store.disable, rule_id)
            self.scheduler.unschedule(rule_id)
            if rule is None:
                logger.warning("rule_not_found", rule_id=rule_id, operation="disable")
                return False
        logger.info("rule_disabled", rule_id=rule_id, rule_name=rule.name)
        return True

    async def list_rules(self) -> List[AutomationRule]:
        return await asyncio.to_thread(self.store.list)

    async def get_rule(self, rule_id: str) -> AutomationRule | None:
        return await asyncio.to_thread(self.store.get, rule_id)

    async def run_rule(self, rule_id: str) -> List[ActionResult] | None:
        """Execute a rule's actions now, whatever its trigger. Returns None for an unknown id."""
        rule = await self.get_rule(rule_id)
        if rule is None:
            logger.warning("rule_not_found", rule_id=rule_id, operation="run")
            return None
        logger.info("rule_fired", rule_id=rule.id, rule_name=rule.name, trigger="manual")
        return await self.executor.execute(rule.actions)
