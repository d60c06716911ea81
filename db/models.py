"""
SQLAlchemy ORM models for persistence layer.
Rules store their trigger config and actions as JSON, since actions are a tagged
union validated by the pydantic models rather than separate entities.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Integer, String
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AutomationRuleModel(Base):
    """
    Database model for AutomationRule.
    `position` keeps the insertion order so listing returns rules in the order they were added.
    """

    __tablename__ = "automation_rules"

    id = Column(String, primary_key=True)
    position = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=False)
    trigger = Column(String, nullable=False, index=True)

    # Trigger config stored as JSON: {"time": "...", "calendar_event_type": "..."}
    trigger_config = Column(JSON, default=dict, nullable=False)

    # Actions stored as JSON: [{"type": "...", ...fields}, ...] in execution order
    actions = Column(JSON, default=list, nullable=False)

    enabled = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    def __repr__(self) -> str:
        return f"<AutomationRuleModel(id={self.id}, name={self.name}, enabled={self.enabled})>"


class TimeEntryModel(Base):
    """
    Database model for TimeEntry.
    At most one row is active (no end time yet); finished rows carry their duration in minutes.
    """

    __tablename__ = "time_entries"

    id = Column(String, primary_key=True)
    date = Column(String, nullable=False, index=True)
    start_time = Column(DateTime(timezone=True), nullable=False)
    end_time = Column(DateTime(timezone=True), nullable=True)
    activity = Column(String, nullable=False)
    project = Column(String, nullable=True)
    duration = Column(Float, nullable=True)
    active = Column(Boolean, default=False, nullable=False, index=True)

    def __repr__(self) -> str:
        return f"<TimeEntryModel(id={self.id}, activity={self.activity}, active={self.active})>"
