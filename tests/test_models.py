"""Tests for rule and action models."""

import pytest
from pydantic import ValidationError

from models import (
    AutomationRule,
    JoinMeetingAction,
    PostStandupAction,
    SlackStatusAction,
    StartTimerAction,
    is_valid_cron,
)


class TestCronValidation:
    @pytest.mark.parametrize("expression", ["0 9 * * 1-5", "*/5 * * * *", "30 17 * * fri"])
    def test_accepts_five_field_cron(self, expression):
        assert is_valid_cron(expression)

    @pytest.mark.parametrize("expression", ["not a cron", "61 * * * *", "0 0 9 * * 1-5", "* * *"])
    def test_rejects_malformed_cron(self, expression):
        assert not is_valid_cron(expression)

    def test_rule_with_bad_cron_is_rejected(self):
        with pytest.raises(ValidationError):
            AutomationRule(name="Bad", trigger="time", trigger_config={"time": "every morning"})


class TestAutomationRule:
    def test_actions_are_decoded_by_type(self):
        rule = AutomationRule(
            name="Meeting mode",
            trigger="calendar",
            trigger_config={"calendar_event_type": "meeting_start"},
            actions=[
                {"type": "slack_status", "text": "In a meeting", "emoji": ":calendar:", "expiration": 1700000000},
                {"type": "join_meeting"},
                {"type": "start_timer", "activity": "meeting", "project": "core"},
                {"type": "post_standup", "channel": "#standup"},
            ],
        )

        assert isinstance(rule.actions[0], SlackStatusAction)
        assert rule.actions[0].expiration == 1700000000
        assert isinstance(rule.actions[1], JoinMeetingAction)
        assert isinstance(rule.actions[2], StartTimerAction)
        assert rule.actions[2].project == "core"
        assert isinstance(rule.actions[3], PostStandupAction)

    def test_actions_accept_nested_config(self):
        rule = AutomationRule(
            name="Standup",
            trigger="time",
            trigger_config={"time": "0 9 * * *"},
            actions=[{"type": "post_standup", "config": {"channel": "#team"}}],
        )

        assert rule.actions[0].channel == "#team"

    def test_missing_required_action_field(self):
        with pytest.raises(ValidationError):
            AutomationRule(name="Status", trigger="manual", actions=[{"type": "slack_status", "text": "Away"}])

    def test_unknown_action_type(self):
        with pytest.raises(ValidationError):
            AutomationRule(name="Email", trigger="manual", actions=[{"type": "send_email"}])

    def test_calendar_rule_requires_event_type(self):
        with pytest.raises(ValidationError):
            AutomationRule(name="Calendar", trigger="calendar")

    def test_id_is_generated_when_missing(self):
        first = AutomationRule(name="One", trigger="manual")
        second = AutomationRule(name="Two", trigger="manual")

        assert first.id and second.id
        assert first.id != second.id

    def test_is_time_scheduled(self):
        scheduled = AutomationRule(name="A", trigger="time", trigger_config={"time": "0 9 * * *"})
        no_cron = AutomationRule(name="B", trigger="time")
        disabled = AutomationRule(name="C", trigger="time", trigger_config={"time": "0 9 * * *"}, enabled=False)

        assert scheduled.is_time_scheduled
        assert not no_cron.is_time_scheduled
        assert not disabled.is_time_scheduled
