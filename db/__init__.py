from .converters import (
    db_to_pydantic_rule,
    db_to_pydantic_time_entry,
    pydantic_to_db_rule,
    pydantic_to_db_time_entry,
    to_utc,
)
from .models import AutomationRuleModel, Base, TimeEntryModel
from .repository import (
    DuplicateRuleError,
    InMemoryRuleRepository,
    RuleRepository,
    RuleStoreError,
    SqlAlchemyRuleRepository,
)
from .session import create_session_factory

__all__ = [
    "AutomationRuleModel",
    "Base",
    "DuplicateRuleError",
    "InMemoryRuleRepository",
    "RuleRepository",
    "RuleStoreError",
    "SqlAlchemyRuleRepository",
    "TimeEntryModel",
    "create_session_factory",
    "db_to_pydantic_rule",
    "db_to_pydantic_time_entry",
    "pydantic_to_db_rule",
    "pydantic_to_db_time_entry",
    "to_utc",
]
