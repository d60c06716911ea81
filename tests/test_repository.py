"""Tests for the rule stores."""

import pytest
from sqlalchemy.exc import OperationalError

from db import DuplicateRuleError, RuleStoreError, SqlAlchemyRuleRepository, create_session_factory
from helpers import calendar_rule, time_rule


@pytest.fixture(params=["sql", "memory"])
def store(request):
    return request.getfixturevalue(f"{request.param}_store")


class TestRuleStoreContract:
    def test_add_then_list_round_trip(self, store):
        rule = time_rule("morning")

        store.add(rule)

        assert store.list() == [rule]
        assert store.get("morning") == rule

    def test_list_keeps_insertion_order(self, store):
        for rule_id in ("b", "a", "c"):
            store.add(time_rule(rule_id))

        assert [rule.id for rule in store.list()] == ["b", "a", "c"]

    def test_remove(self, store):
        store.add(time_rule("morning"))

        assert store.remove("morning") is True
        assert store.list() == []
        assert store.get("morning") is None

    def test_remove_missing_is_noop(self, store):
        assert store.remove("missing") is False

    def test_duplicate_id_rejected(self, store):
        store.add(time_rule("morning"))

        with pytest.raises(DuplicateRuleError):
            store.add(time_rule("morning", cron="0 10 * * *"))
        assert len(store.list()) == 1

    def test_enable_disable(self, store):
        store.add(time_rule("morning"))

        disabled = store.disable("morning")
        assert disabled is not None and disabled.enabled is False
        assert store.get("morning").enabled is False

        enabled = store.enable("morning")
        assert enabled is not None and enabled.enabled is True
        assert store.get("morning").enabled is True

    def test_enable_disable_missing_is_noop(self, store):
        assert store.enable("missing") is None
        assert store.disable("missing") is None
        assert store.list() == []

    def test_calendar_rule_round_trip(self, store):
        rule = calendar_rule(
            "standup-on-start",
            "meeting_start",
            actions=[
                {"type": "join_meeting"},
                {"type": "slack_status", "text": "In a meeting", "emoji": ":calendar:"},
            ],
        )

        store.add(rule)

        assert store.get("standup-on-start") == rule


class TestSqlAlchemyRuleRepository:
    def test_rules_survive_restart(self, database_url):
        SqlAlchemyRuleRepository(create_session_factory(database_url)).add(time_rule("morning"))

        reopened = SqlAlchemyRuleRepository(create_session_factory(database_url))

        assert [rule.id for rule in reopened.list()] == ["morning"]

    def test_enabled_flag_survives_restart(self, database_url):
        store = SqlAlchemyRuleRepository(create_session_factory(database_url))
        store.add(time_rule("morning"))
        store.disable("morning")

        reopened = SqlAlchemyRuleRepository(create_session_factory(database_url))

        assert reopened.get("morning").enabled is False

    def test_write_failure_surfaces_as_store_error(self, sql_store, monkeypatch):
        def broken_begin():
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(sql_store._session_factory, "begin", broken_begin)

        with pytest.raises(RuleStoreError):
            sql_store.add(time_rule("morning"))
