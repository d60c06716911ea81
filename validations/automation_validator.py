from typing import Any, Dict

from models import AutomationRule
from registry import Registry


class UnknownRegistryTypeError(ValueError):
    """Raised when a rule references an unknown trigger, calendar event, or action type."""


class UnsupportedTriggerError(ValueError):
    """Raised when a rule uses a trigger value that is declared but has no firing logic."""


def _validate_against_registries(payload: Dict[str, Any], registries: Dict[str, Registry]) -> None:
    trigger_registry = registries["trigger"]
    calendar_event_registry = registries["calendar_event"]
    action_registry = registries["action"]

    trigger = payload.get("trigger")
    if trigger not in trigger_registry:
        raise UnknownRegistryTypeError(f"Unknown trigger type: {trigger}")

    trigger_config = payload.get("trigger_config") or {}
    event_type = trigger_config.get("calendar_event_type") if isinstance(trigger_config, dict) else None
    if trigger == "calendar" and event_type is not None:
        item = calendar_event_registry.get(event_type)
        if item is None:
            raise UnknownRegistryTypeError(f"Unknown calendar event type: {event_type}")
        if not item.supported:
            raise UnsupportedTriggerError(f"Calendar event type {event_type!r} is not supported yet")

    for action in payload.get("actions") or []:
        action_type = action.get("type") if isinstance(action, dict) else None
        if action_type not in action_registry:
            raise UnknownRegistryTypeError(f"Unknown action type: {action_type}")


def parse_and_validate_rule(payload: dict, registries: Dict[str, Registry]) -> AutomationRule:
    """
    Convert an untrusted payload (dict) into an AutomationRule.
    Raises UnknownRegistryTypeError, UnsupportedTriggerError or ValidationError on failure.
    """
    _validate_against_registries(payload, registries)
    return AutomationRule.model_validate(payload)


def validate_rule(rule: AutomationRule, registries: Dict[str, Registry]) -> AutomationRule:
    """Registry checks for an already-built rule. Raises the same errors as parse_and_validate_rule."""
    _validate_against_registries(rule.model_dump(mode="json"), registries)
    return rule
