from typing import Awaitable, Callable, Dict, List, Sequence

from config import get_logger
from models import (
    ActionResult,
    AutomationAction,
    CalendarEvent,
    JoinMeetingAction,
    PostStandupAction,
    SlackStatusAction,
    StartTimerAction,
    StopTimerAction,
)

from .collaborators import (
    MeetingJoinCollaborator,
    StandupCollaborator,
    StatusCollaborator,
    TimerCollaborator,
)

logger = get_logger(__name__)

# A handler returns False when its collaborator is missing and the action is skipped.
ActionHandler = Callable[[AutomationAction, CalendarEvent | None], Awaitable[bool]]


class ActionExecutor:
    """
    Runs a rule's actions in order against the injected collaborators.

    Every action is isolated: an exception is logged and recorded as a failed
    result, and the next action still runs. Collaborators are optional; an
    action whose collaborator was not supplied is skipped.
    """

    def __init__(
        self,
        status: StatusCollaborator | None = None,
        meeting_joiner: MeetingJoinCollaborator | None = None,
        standup: StandupCollaborator | None = None,
        timer: TimerCollaborator | None = None,
    ) -> None:
        self.status = status
        self.meeting_joiner = meeting_joiner
        self.standup = standup
        self.timer = timer
        self._handlers: Dict[str, ActionHandler] = {
            "slack_status": self._update_status,
            "join_meeting": self._join_meeting,
            "post_standup": self._post_standup,
            "start_timer": self._start_timer,
            "stop_timer": self._stop_timer,
        }

    async def execute(
        self, actions: Sequence[AutomationAction], event: CalendarEvent | None = None
    ) -> List[ActionResult]:
        results: List[ActionResult] = []
        for index, action in enumerate(actions):
            handler = self._handlers.get(action.type)
            if handler is None:
                logger.warning("action_type_unhandled", action_type=action.type, index=index)
                results.append(ActionResult(type=action.type, status="skipped"))
                continue
            try:
                executed = await handler(action, event)
            except Exception as exc:
                logger.error("action_failed", action_type=action.type, index=index, error=str(exc), exc_info=True)
                results.append(ActionResult(type=action.type, status="failed", error=str(exc)))
                continue
            if executed:
                logger.info("action_executed", action_type=action.type, index=index)
                results.append(ActionResult(type=action.type, status="success"))
            else:
                logger.debug("action_skipped", action_type=action.type, index=index)
                results.append(ActionResult(type=action.type, status="skipped"))
        return results

    async def _update_status(self, action: SlackStatusAction, event: CalendarEvent | None) -> bool:
        if self.status is None:
            return False
        await self.status.update_status(action.text, action.emoji, action.expiration)
        return True

    async def _join_meeting(self, action: JoinMeetingAction, event: CalendarEvent | None) -> bool:
        if self.meeting_joiner is None or event is None or not event.meeting_url:
            return False
        await self.meeting_joiner.join_meeting(event)
        return True

    async def _post_standup(self, action: PostStandupAction, event: CalendarEvent | None) -> bool:
        if self.standup is None or self.status is None:
            return False
        standup = await self.standup.generate()
        message = self.standup.format_for_chat(standup)
        await self.status.post_message(action.channel, message)
        return True

    async def _start_timer(self, action: StartTimerAction, event: CalendarEvent | None) -> bool:
        if self.timer is None:
            return False
        await self.timer.start_timer(action.activity, action.project)
        return True

    async def _stop_timer(self, action: StopTimerAction, event: CalendarEvent | None) -> bool:
        if self.timer is None:
            return False
        await self.timer.stop_timer()
        return True
