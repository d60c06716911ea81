"""
Conversion utilities between Pydantic models and SQLAlchemy DB models.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from models import AutomationRule, TimeEntry

from .models import AutomationRuleModel, TimeEntryModel


def pydantic_to_db_rule(rule: AutomationRule, position: int) -> AutomationRuleModel:
    """
    Convert a Pydantic AutomationRule to a SQLAlchemy AutomationRuleModel.
    Trigger config and actions are stored as JSON in their serialized form.

    Args:
        rule: Pydantic rule to convert
        position: Insertion order of the rule within the store
    """
    trigger_config: Dict[str, Any] = rule.trigger_config.model_dump(mode="json", exclude_none=True)
    actions: list[Dict[str, Any]] = [action.model_dump(mode="json") for action in rule.actions]

    return AutomationRuleModel(
        id=rule.id,
        position=position,
        name=rule.name,
        trigger=rule.trigger,
        trigger_config=trigger_config,
        actions=actions,
        enabled=rule.enabled,
    )


def db_to_pydantic_rule(db_rule: AutomationRuleModel) -> AutomationRule:
    """
    Convert a SQLAlchemy AutomationRuleModel to a Pydantic AutomationRule.
    """
    return AutomationRule.model_validate(
        {
            "id": db_rule.id,
            "name": db_rule.name,
            "trigger": db_rule.trigger,
            "trigger_config": db_rule.trigger_config or {},
            "actions": db_rule.actions or [],
            "enabled": db_rule.enabled,
        }
    )


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on the way back; values are always written in UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def to_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    return value.astimezone(timezone.utc)


def pydantic_to_db_time_entry(entry: TimeEntry, active: bool) -> TimeEntryModel:
    return TimeEntryModel(
        id=entry.id,
        date=entry.date,
        start_time=to_utc(entry.start_time),
        end_time=to_utc(entry.end_time),
        activity=entry.activity,
        project=entry.project,
        duration=entry.duration,
        active=active,
    )


def db_to_pydantic_time_entry(db_entry: TimeEntryModel) -> TimeEntry:
    return TimeEntry(
        id=db_entry.id,
        date=db_entry.date,
        start_time=_as_utc(db_entry.start_time),
        end_time=_as_utc(db_entry.end_time),
        activity=db_entry.activity,
        project=db_entry.project,
        duration=db_entry.duration,
    )
