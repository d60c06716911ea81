import asyncio
import os
import signal

from config import Settings, get_logger, get_settings, setup_logging
from db import RuleRepository, SqlAlchemyRuleRepository, create_session_factory
from engine import AutomationEngine
from tracking import TimeTracker

logger = get_logger(__name__)


def build_engine(settings: Settings, **collaborators) -> AutomationEngine:
    """
    Wire the persistence layer, the time tracker and the engine together.
    Chat, calendar, meeting and standup collaborators are passed through as keyword
    arguments; the time tracker is used unless a timer is supplied.
    """
    session_factory = create_session_factory(settings.database_url)
    store: RuleRepository = SqlAlchemyRuleRepository(session_factory)
    collaborators.setdefault("timer", TimeTracker(session_factory))
    return AutomationEngine(
        store,
        poll_interval_seconds=settings.poll_interval_seconds,
        lookahead_minutes=settings.lookahead_minutes,
        meeting_end_threshold_seconds=settings.meeting_end_threshold_seconds,
        **collaborators,
    )


async def list_rules(engine: AutomationEngine) -> None:
    rules = await engine.list_rules()
    if not rules:
        print("No automation rules configured")
        return
    print("Automation rules:\n")
    for rule in rules:
        status = "enabled" if rule.enabled else "disabled"
        print(f"[{status}] {rule.name} ({rule.id})")
        print(f"   Trigger: {rule.trigger}, Actions: {len(rule.actions)}")


async def run_engine(engine: AutomationEngine) -> None:
    """
    Start the engine and keep it running until SIGINT/SIGTERM, then stop it.
    """
    stop_requested = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_requested.set)

    await engine.start()
    logger.info("engine_run_started", pid=os.getpid())
    try:
        await stop_requested.wait()
        logger.info("engine_stop_requested")
    finally:
        await engine.stop()


if __name__ == "__main__":
    import sys

    settings = get_settings()
    setup_logging(settings.log_level, json_output=settings.log_format.lower() == "json")
    engine = build_engine(settings)

    command = sys.argv[1] if len(sys.argv) > 1 else "list"
    if command == "list":
        asyncio.run(list_rules(engine))
    elif command == "run":
        asyncio.run(run_engine(engine))
    else:
        print(f"Unknown command: {command}")
        print("Usage: python main.py [list|run]")
        sys.exit(1)
