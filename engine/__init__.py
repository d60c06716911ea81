from .collaborators import (
    CalendarCollaborator,
    MeetingJoinCollaborator,
    StandupCollaborator,
    StatusCollaborator,
    TimerCollaborator,
)
from .engine import AutomationEngine
from .executor import ActionExecutor
from .poller import CalendarTriggerPoller
from .scheduler import InvalidScheduleError, ScheduledJob, TimeTriggerScheduler

__all__ = [
    "ActionExecutor",
    "AutomationEngine",
    "CalendarCollaborator",
    "CalendarTriggerPoller",
    "InvalidScheduleError",
    "MeetingJoinCollaborator",
    "ScheduledJob",
    "StandupCollaborator",
    "StatusCollaborator",
    "TimeTriggerScheduler",
    "TimerCollaborator",
]
