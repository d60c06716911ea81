import threading
from abc import ABC, abstractmethod
from typing import Dict, List

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from models import AutomationRule

from .converters import db_to_pydantic_rule, pydantic_to_db_rule
from .models import AutomationRuleModel


class RuleStoreError(RuntimeError):
    """Raised when the rule store cannot be read or written."""


class DuplicateRuleError(RuleStoreError):
    """Raised when adding a rule whose id is already stored."""


class RuleRepository(ABC):
    """
    Abstract persistence boundary for automation rules. Every mutation is durable
    before it returns. enable/disable/remove on an unknown id are no-ops that
    return False.
    """

    @abstractmethod
    def add(self, rule: AutomationRule) -> AutomationRule:
        """Persist a new rule and return it. Raises DuplicateRuleError if the id exists."""
        raise NotImplementedError

    @abstractmethod
    def remove(self, rule_id: str) -> bool:
        """Delete the rule, returning False if it did not exist."""
        raise NotImplementedError

    @abstractmethod
    def set_enabled(self, rule_id: str, enabled: bool) -> AutomationRule | None:
        """Update the enabled flag, returning the updated rule or None if missing."""
        raise NotImplementedError

    @abstractmethod
    def get(self, rule_id: str) -> AutomationRule | None:
        """Fetch a rule by id, or None if missing."""
        raise NotImplementedError

    @abstractmethod
    def list(self) -> List[AutomationRule]:
        """All rules in insertion order."""
        raise NotImplementedError

    def enable(self, rule_id: str) -> AutomationRule | None:
        return self.set_enabled(rule_id, True)

    def disable(self, rule_id: str) -> AutomationRule | None:
        return self.set_enabled(rule_id, False)


class InMemoryRuleRepository(RuleRepository):
    """
    Minimal in-memory implementation for local testing. Not durable across restarts.
    """

    def __init__(self) -> None:
        self._storage: Dict[str, AutomationRule] = {}
        self._lock = threading.Lock()

    def add(self, rule: AutomationRule) -> AutomationRule:
        with self._lock:
            if rule.id in self._storage:
                raise DuplicateRuleError(f"Rule already exists: {rule.id}")
            self._storage[rule.id] = rule.model_copy(deep=True)
        return rule

    def remove(self, rule_id: str) -> bool:
        with self._lock:
            return self._storage.pop(rule_id, None) is not None

    def set_enabled(self, rule_id: str, enabled: bool) -> AutomationRule | None:
        with self._lock:
            rule = self._storage.get(rule_id)
            if rule is None:
                return None
            updated = rule.model_copy(update={"enabled": enabled}, deep=True)
            self._storage[rule_id] = updated
            return updated.model_copy(deep=True)

    def get(self, rule_id: str) -> AutomationRule | None:
        with self._lock:
            rule = self._storage.get(rule_id)
            return rule.model_copy(deep=True) if rule else None

    def list(self) -> List[AutomationRule]:
        with self._lock:
            return [rule.model_copy(deep=True) for rule in self._storage.values()]


class SqlAlchemyRuleRepository(RuleRepository):
    """
    Rule store backed by a SQLAlchemy database (a single SQLite file by default).
    Each call runs in one transaction; the lock serializes read-modify-write
    cycles within the process.
    """

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory
        self._lock = threading.Lock()

    def add(self, rule: AutomationRule) -> AutomationRule:
        with self._lock:
            try:
                with self._session_factory.begin() as session:
                    if session.get(AutomationRuleModel, rule.id) is not None:
                        raise DuplicateRuleError(f"Rule already exists: {rule.id}")
                    last_position = session.scalar(select(func.max(AutomationRuleModel.position)))
                    position = 0 if last_position is None else last_position + 1
                    session.add(pydantic_to_db_rule(rule, position))
            except SQLAlchemyError as exc:
                raise RuleStoreError(f"Failed to add rule {rule.id}: {exc}") from exc
        return rule

    def remove(self, rule_id: str) -> bool:
        with self._lock:
            try:
                with self._session_factory.begin() as session:
                    db_rule = session.get(AutomationRuleModel, rule_id)
                    if db_rule is None:
                        return False
                    session.delete(db_rule)
            except SQLAlchemyError as exc:
                raise RuleStoreError(f"Failed to remove rule {rule_id}: {exc}") from exc
        return True

    def set_enabled(self, rule_id: str, enabled: bool) -> AutomationRule | None:
        with self._lock:
            try:
                with self._session_factory.begin() as session:
                    db_rule = session.get(AutomationRuleModel, rule_id)
                    if db_rule is None:
                        return None
                    db_rule.enabled = enabled
                    session.flush()
                    return db_to_pydantic_rule(db_rule)
            except SQLAlchemyError as exc:
                raise RuleStoreError(f"Failed to update rule {rule_id}: {exc}") from exc

    def get(self, rule_id: str) -> AutomationRule | None:
        try:
            with self._session_factory() as session:
                db_rule = session.get(AutomationRuleModel, rule_id)
                return db_to_pydantic_rule(db_rule) if db_rule else None
        except SQLAlchemyError as exc:
            raise RuleStoreError(f"Failed to read rule {rule_id}: {exc}") from exc

    def list(self) -> List[AutomationRule]:
        try:
            with self._session_factory() as session:
                rows = session.scalars(select(AutomationRuleModel).order_by(AutomationRuleModel.position))
                return [db_to_pydantic_rule(row) for row in rows]
        except SQLAlchemyError as exc:
            raise RuleStoreError(f"Failed to list rules: {exc}") from exc
