from .registry import Registry


def create_default_registries() -> dict[str, Registry]:
    """Create the registries of trigger, calendar event and action types the engine knows."""
    trigger_registry = Registry(name="trigger")
    trigger_registry.register("time", "Fires on a 5-field cron schedule")
    trigger_registry.register("calendar", "Fires on calendar state checked every poll cycle")
    trigger_registry.register("manual", "Never fired by the engine, run on request only")

    calendar_event_registry = Registry(name="calendar_event")
    calendar_event_registry.register("meeting_start", "A meeting starts within the lookahead window")
    calendar_event_registry.register("meeting_end", "The current meeting ends within two minutes")
    calendar_event_registry.register("work_hours", "Start or end of the working day", supported=False)

    action_registry = Registry(name="action")
    action_registry.register("slack_status", "Update the chat status (text, emoji, optional expiration)")
    action_registry.register("join_meeting", "Join the triggering calendar event's meeting")
    action_registry.register("post_standup", "Generate a standup report and post it to a channel")
    action_registry.register("start_timer", "Start a time-tracking entry (activity, optional project)")
    action_registry.register("stop_timer", "Stop the active time-tracking entry")

    return {
        "trigger": trigger_registry,
        "calendar_event": calendar_event_registry,
        "action": action_registry,
    }
