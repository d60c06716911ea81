"""Collaborator fakes and rule builders shared by the tests."""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Any, List

from models import AutomationRule, CalendarEvent, TimeEntry

FIXED_NOW = datetime(2026, 10, 17, 8, 59, 30, tzinfo=timezone.utc)


class FakeStatus:
    def __init__(self, fail_updates: bool = False) -> None:
        self.fail_updates = fail_updates
        self.updates: List[tuple] = []
        self.messages: List[tuple] = []
        self.cleared = 0

    async def update_status(self, text: str, emoji: str, expiration: int | None = None) -> bool:
        if self.fail_updates:
            raise ConnectionError("chat API unavailable")
        self.updates.append((text, emoji, expiration))
        return True

    async def clear_status(self) -> bool:
        self.cleared += 1
        return True

    async def post_message(self, channel: str, text: str) -> bool:
        self.messages.append((channel, text))
        return True


class FakeCalendar:
    def __init__(self, upcoming: List[CalendarEvent] | None = None, current: CalendarEvent | None = None):
        self.upcoming = upcoming or []
        self.current = current
        self.upcoming_calls: List[int] = []
        self.current_calls = 0

    async def get_upcoming_events(self, lookahead_minutes: int) -> List[CalendarEvent]:
        self.upcoming_calls.append(lookahead_minutes)
        return list(self.upcoming)

    async def get_current_meeting(self) -> CalendarEvent | None:
        self.current_calls += 1
        return self.current


class FakeMeetingJoiner:
    def __init__(self) -> None:
        self.joined: List[CalendarEvent] = []

    async def join_meeting(self, event: CalendarEvent) -> bool:
        self.joined.append(event)
        return True


class FakeStandup:
    async def generate(self) -> dict:
        return {"summary": "Merged #42"}

    def format_for_chat(self, standup: Any) -> str:
        return f"*Daily Standup*\n{standup['summary']}"


class FakeTimer:
    def __init__(self) -> None:
        self.started: List[tuple] = []
        self.stopped = 0

    async def start_timer(self, activity: str, project: str | None = None) -> TimeEntry:
        self.started.append((activity, project))
        return TimeEntry(id=str(len(self.started)), date="2026-10-17", start_time=FIXED_NOW, activity=activity)

    async def stop_timer(self) -> TimeEntry | None:
        self.stopped += 1
        return None


class GatedTimer(FakeTimer):
    """Holds start_timer open until the gate is released."""

    def __init__(self) -> None:
        super().__init__()
        self.entered = asyncio.Event()
        self.gate = asyncio.Event()

    async def start_timer(self, activity: str, project: str | None = None) -> TimeEntry:
        self.entered.set()
        await self.gate.wait()
        return await super().start_timer(activity, project)


class BlockingSleep:
    """Returns immediately for the first `free` calls, then blocks until cancelled."""

    def __init__(self, free: int = 0) -> None:
        self.free = free
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        if len(self.delays) > self.free:
            await asyncio.Event().wait()


async def drain(ticks: int = 20) -> None:
    """Let scheduled tasks run for a few event loop iterations."""
    for _ in range(ticks):
        await asyncio.sleep(0)


def make_event(title: str = "Sprint planning", starts_in: float = 120, lasts: float = 1800, **kwargs) -> CalendarEvent:
    start = FIXED_NOW + timedelta(seconds=starts_in)
    return CalendarEvent(
        id=kwargs.pop("id", title.lower().replace(" ", "-")),
        title=title,
        start=start,
        end=start + timedelta(seconds=lasts),
        **kwargs,
    )


def time_rule(rule_id: str = "morning", cron: str = "0 9 * * 1-5", enabled: bool = True) -> AutomationRule:
    return AutomationRule(
        id=rule_id,
        name=f"Rule {rule_id}",
        trigger="time",
        trigger_config={"time": cron},
        actions=[{"type": "slack_status", "text": "Working", "emoji": ":computer:"}],
        enabled=enabled,
    )


def calendar_rule(rule_id: str, event_type: str, actions: list | None = None, enabled: bool = True):
    return AutomationRule(
        id=rule_id,
        name=f"Rule {rule_id}",
        trigger="calendar",
        trigger_config={"calendar_event_type": event_type},
        actions=actions or [{"type": "start_timer", "activity": "meeting"}],
        enabled=enabled,
    )


async def wait_for(predicate, timeout: float = 2.0) -> None:
    """Poll until predicate() is true; used where work hops through a worker thread."""
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not met in time")
        await asyncio.sleep(0.01)
