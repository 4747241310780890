"""Event Router - unified routing for all client events.

Provides a single entry point that drains the EventQueue in arrival order
and hands each event to the SessionController.
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from xo_client.session.controller import SessionController, UnknownEventError
from xo_client.session.event_queue import EventQueue, EventSource, SessionEvent
from xo_client.session.phases import SessionPhase
from xo_client.session.presenter import PresenterProtocol
from xo_client.session.state import SessionState
from xo_client.shared.logging.protocol_logger import log_error

logger = logging.getLogger(__name__)


@dataclass
class RoutingResult:
    """Result of routing one event."""
    handled: bool  # Whether a handler ran
    phase_before: SessionPhase
    phase_after: SessionPhase
    error: Optional[str] = None

    @property
    def transitioned(self) -> bool:
        return self.phase_before is not self.phase_after


class EventRouter:
    """Routes queued events to the SessionController.

    Sources:
    - PUSH    -> lobby add/remove, game start, registration results
    - TURN    -> turn channel results
    - UI      -> create/join/cell/surrender commands
    - CHANNEL -> push channel lifecycle
    """

    def __init__(
        self,
        turn_channel: Any,
        push_channel: Any,
        presenter: PresenterProtocol,
        queue: Optional[EventQueue] = None,
        state: Optional[SessionState] = None,
        **controller_options: Any,
    ) -> None:
        """Initialize the EventRouter.

        Args:
            turn_channel: Request/response channel.
            push_channel: Push channel used for registrations.
            presenter: View receiving controller intents.
            queue: Shared event queue; created if omitted.
            state: Session record handed to the controller.
        """
        self._queue = queue or EventQueue()
        self._controller = SessionController(
            queue=self._queue,
            turn_channel=turn_channel,
            push_channel=push_channel,
            presenter=presenter,
            state=state,
            **controller_options,
        )

    @property
    def queue(self) -> EventQueue:
        return self._queue

    def get_controller(self) -> SessionController:
        """Get the SessionController for direct access."""
        return self._controller

    def post_ui(self, kind: str, **payload: Any) -> None:
        """Queue a UI command (create_game, join_game, pick_cell, surrender)."""
        self._queue.post(SessionEvent(EventSource.UI, kind, payload))

    def route_event(self, event: SessionEvent) -> RoutingResult:
        """Route a single event to its controller handler."""
        before = self._controller.phase
        try:
            self._controller.handle_event(event)
        except UnknownEventError as e:
            logger.warning("Unhandled event %s/%s: %s", event.source.value, event.kind, e)
            return RoutingResult(
                handled=False,
                phase_before=before,
                phase_after=self._controller.phase,
                error=str(e),
            )
        return RoutingResult(
            handled=True, phase_before=before, phase_after=self._controller.phase
        )

    async def run(self) -> None:
        """Process events forever, one at a time, in arrival order."""
        while True:
            event = await self._queue.get()
            try:
                self.route_event(event)
            except Exception as e:
                log_error(f"Failed to handle {event.source.value}/{event.kind}: {e}")

    async def drain(self, settle_timeout: float = 0.01) -> int:
        """Process events until the queue is empty and no request resolves.

        Requests still blocked after settle_timeout (e.g. a long-poll the
        server has not answered) are left in flight.

        Returns:
            Number of events routed.
        """
        routed = 0
        while True:
            while not self._queue.empty():
                self.route_event(self._queue.get_nowait())
                routed += 1
            completed = await self._queue.settle(settle_timeout)
            if not completed and self._queue.empty():
                return routed

    async def close(self) -> None:
        """Cancel in-flight requests."""
        await self._queue.close()
