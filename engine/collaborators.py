"""
Capabilities the engine drives. Concrete chat, calendar, meeting and standup
clients live outside this package and only need to match these shapes.
"""

from typing import Any, List, Protocol

from models import CalendarEvent, TimeEntry


class StatusCollaborator(Protocol):
    async def update_status(self, text: str, emoji: str, expiration: int | None = None) -> Any: ...

    async def clear_status(self) -> Any: ...

    async def post_message(self, channel: str, text: str) -> Any: ...


class CalendarCollaborator(Protocol):
    async def get_upcoming_events(self, lookahead_minutes: int) -> List[CalendarEvent]: ...

    async def get_current_meeting(self) -> CalendarEvent | None: ...


class MeetingJoinCollaborator(Protocol):
    async def join_meeting(self, event: CalendarEvent) -> Any: ...


class StandupCollaborator(Protocol):
    async def generate(self) -> Any: ...

    def format_for_chat(self, standup: Any) -> str: ...


class TimerCollaborator(Protocol):
    async def start_timer(self, activity: str, project: str | None = None) -> TimeEntry: ...

    async def stop_timer(self) -> TimeEntry | None: ...
