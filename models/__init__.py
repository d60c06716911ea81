from .automation import (
    ActionResult,
    AutomationAction,
    AutomationRule,
    CalendarEvent,
    CalendarEventType,
    JoinMeetingAction,
    PostStandupAction,
    SlackStatusAction,
    StartTimerAction,
    StopTimerAction,
    TimeEntry,
    TriggerConfig,
    TriggerType,
    is_valid_cron,
)

__all__ = [
    "ActionResult",
    "AutomationAction",
    "AutomationRule",
    "CalendarEvent",
    "CalendarEventType",
    "JoinMeetingAction",
    "PostStandupAction",
    "SlackStatusAction",
    "StartTimerAction",
    "StopTimerAction",
    "TimeEntry",
    "TriggerConfig",
    "TriggerType",
    "is_valid_cron",
]
