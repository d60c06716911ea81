import uuid
from datetime import datetime
from typing import Annotated, Any, Dict, List, Literal, Union

from croniter import croniter
from pydantic import BaseModel, Field, field_validator, model_validator

TriggerType = Literal["time", "calendar", "manual"]
CalendarEventType = Literal["meeting_start", "meeting_end", "work_hours"]


def is_valid_cron(expression: str) -> bool:
    """Standard 5-field cron only (minute, hour, day-of-month, month, day-of-week)."""
    if len(expression.split()) != 5:
        return False
    return croniter.is_valid(expression)


class TriggerConfig(BaseModel):
    time: str | None = Field(default=None, description="Cron expression for time triggers")
    calendar_event_type: CalendarEventType | None = Field(
        default=None, description="Calendar event selector for calendar triggers"
    )

    @field_validator("time")
    @classmethod
    def ensure_cron_is_valid(cls, value: str | None) -> str | None:
        if value is not None and not is_valid_cron(value):
            raise ValueError(f"Invalid cron expression: {value!r}")
        return value


class SlackStatusAction(BaseModel):
    type: Literal["slack_status"] = "slack_status"
    text: str
    emoji: str
    expiration: int | None = Field(default=None, description="Unix timestamp the status expires at")


class JoinMeetingAction(BaseModel):
    type: Literal["join_meeting"] = "join_meeting"


class PostStandupAction(BaseModel):
    type: Literal["post_standup"] = "post_standup"
    channel: str


class StartTimerAction(BaseModel):
    type: Literal["start_timer"] = "start_timer"
    activity: str
    project: str | None = None


class StopTimerAction(BaseModel):
    type: Literal["stop_timer"] = "stop_timer"


AutomationAction = Annotated[
    Union[SlackStatusAction, JoinMeetingAction, PostStandupAction, StartTimerAction, StopTimerAction],
    Field(discriminator="type"),
]


class AutomationRule(BaseModel):
    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        min_length=1,
        description="Opaque unique identifier, immutable once stored",
    )
    name: str = Field(..., description="Human friendly name for the rule")
    trigger: TriggerType
    trigger_config: TriggerConfig = Field(default_factory=TriggerConfig)
    actions: List[AutomationAction] = Field(default_factory=list)
    enabled: bool = True

    @model_validator(mode="before")
    @classmethod
    def accept_flat_action_config(cls, values: Any) -> Any:
        # Actions may arrive as {"type": ..., "config": {...}} from stored or posted payloads
        if not isinstance(values, dict):
            return values
        actions = values.get("actions")
        if isinstance(actions, list):
            values = dict(values)
            values["actions"] = [_flatten_action(action) for action in actions]
        return values

    @model_validator(mode="after")
    def ensure_trigger_config_matches(self) -> "AutomationRule":
        if self.trigger == "calendar" and self.trigger_config.calendar_event_type is None:
            raise ValueError("Calendar rules must define trigger_config.calendar_event_type")
        return self

    @property
    def is_time_scheduled(self) -> bool:
        return self.enabled and self.trigger == "time" and bool(self.trigger_config.time)


def _flatten_action(action: Any) -> Any:
    if isinstance(action, dict) and isinstance(action.get("config"), dict):
        flat: Dict[str, Any] = {k: v for k, v in action.items() if k != "config"}
        flat.update(action["config"])
        return flat
    return action


class CalendarEvent(BaseModel):
    id: str
    title: str
    start: datetime
    end: datetime
    meeting_url: str | None = None
    attendees: List[str] = Field(default_factory=list)
    description: str | None = None


class TimeEntry(BaseModel):
    id: str
    date: str = Field(..., description="Local date the entry started on, YYYY-MM-DD")
    start_time: datetime
    end_time: datetime | None = None
    activity: str
    project: str | None = None
    duration: float | None = Field(default=None, description="Minutes, set once the timer stops")


class ActionResult(BaseModel):
    type: str
    status: Literal["success", "skipped", "failed"]
    error: str | None = None
