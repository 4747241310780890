# Area: Session (Turn Synchronization)
"""Session Controller - the client's session/turn state machine.

Phases: LOBBY -> JOINING -> AWAITING_READY -> MY_TURN <-> OPPONENT_TURN
-> GAME_OVER -> LOBBY.

Every handler runs to completion on the event loop. Transport calls are
spawned through the EventQueue and come back as TURN events tagged with
the session they were issued for; results for a session that is no longer
current are dropped.
"""
import logging
import uuid
from typing import Any, Callable, Dict, Optional, Tuple

from xo_client.session.event_queue import EventQueue, EventSource, SessionEvent
from xo_client.session.phases import ACTIVE_PHASES, SessionOutcome, SessionPhase
from xo_client.session.presenter import PresenterProtocol
from xo_client.session.state import SessionState, Side
from xo_client.shared.logging.protocol_logger import (
    log_rejected, log_transition, set_session_context,
)
from xo_client.transport.turn_channel import (
    UNKNOWN_MOVE_MESSAGE, UNKNOWN_READY_MESSAGE, TurnChannelError,
)

logger = logging.getLogger(__name__)

LOST_LOBBY_MESSAGE = "Connection to the lobby was lost, game not started"


class UnknownEventError(ValueError):
    """Raised when no handler exists for an event's source and kind."""


class SessionController:
    """Owns SessionState and drives it from push, turn, UI and channel events."""

    # UI events
    CREATE_GAME = "create_game"
    JOIN_GAME = "join_game"
    PICK_CELL = "pick_cell"
    SURRENDER = "surrender"

    # Push events
    LOBBY_ADD = "lobby_add"
    LOBBY_REMOVE = "lobby_remove"
    GAME_START = "game_start"
    REGISTERED = "registered"

    # Turn channel results
    SESSION_CREATED = "session_created"
    READY_CONFIRMED = "ready_confirmed"
    MOVE_SUBMITTED = "move_submitted"
    OPPONENT_MOVED = "opponent_moved"
    SURRENDERED = "surrendered"

    # Push channel lifecycle
    CHANNEL_OPENED = "channel_opened"
    CHANNEL_CLOSED = "channel_closed"
    CHANNEL_ERROR = "channel_error"

    def __init__(
        self,
        queue: EventQueue,
        turn_channel: Any,
        push_channel: Any,
        presenter: PresenterProtocol,
        state: Optional[SessionState] = None,
        player_id_factory: Optional[Callable[[], str]] = None,
    ) -> None:
        """Initialize the SessionController.

        Args:
            queue: Event queue shared with the channels and the router.
            turn_channel: TurnChannel (or a stand-in with the same coroutines).
            push_channel: PushChannel (or a stand-in with send_registration).
            presenter: View receiving intents.
            state: Session record; a fresh one is created if omitted.
            player_id_factory: Produces a player id for each attempt.
        """
        self._queue = queue
        self._turn = turn_channel
        self._push = push_channel
        self._presenter = presenter
        self._state = state or SessionState()
        self._new_player_id = player_id_factory or (lambda: uuid.uuid4().hex)
        self._phase = SessionPhase.LOBBY
        self._attempt = 0
        self._move_in_flight: Optional[Tuple[str, int]] = None
        self._poll_in_flight: Optional[Tuple[str, int]] = None
        self._last_outcome: Optional[SessionOutcome] = None
        self._handlers: Dict[Tuple[EventSource, str], Callable[[Dict[str, Any]], None]] = {
            (EventSource.UI, self.CREATE_GAME): self.on_create_game,
            (EventSource.UI, self.JOIN_GAME): self.on_join_game,
            (EventSource.UI, self.PICK_CELL): self.on_cell_picked,
            (EventSource.UI, self.SURRENDER): self.on_surrender,
            (EventSource.PUSH, self.LOBBY_ADD): self.on_lobby_add,
            (EventSource.PUSH, self.LOBBY_REMOVE): self.on_lobby_remove,
            (EventSource.PUSH, self.GAME_START): self.on_game_start,
            (EventSource.PUSH, self.REGISTERED): self.on_registered,
            (EventSource.TURN, self.SESSION_CREATED): self.on_session_created,
            (EventSource.TURN, self.READY_CONFIRMED): self.on_ready_confirmed,
            (EventSource.TURN, self.MOVE_SUBMITTED): self.on_move_submitted,
            (EventSource.TURN, self.OPPONENT_MOVED): self.on_opponent_moved,
            (EventSource.TURN, self.SURRENDERED): self.on_surrendered,
            (EventSource.CHANNEL, self.CHANNEL_OPENED): self.on_channel_opened,
            (EventSource.CHANNEL, self.CHANNEL_CLOSED): self.on_channel_closed,
            (EventSource.CHANNEL, self.CHANNEL_ERROR): self.on_channel_error,
        }

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def last_outcome(self) -> Optional[SessionOutcome]:
        return self._last_outcome

    @property
    def move_in_flight(self) -> bool:
        return self._move_in_flight is not None

    @property
    def poll_in_flight(self) -> bool:
        return self._poll_in_flight is not None

    def handle_event(self, event: SessionEvent) -> None:
        """Run the handler for event to completion.

        Raises:
            UnknownEventError: If no handler exists for the event's source
                and kind.
        """
        handler = self._handlers.get((event.source, event.kind))
        if handler is None:
            raise UnknownEventError(f"Unknown {event.source.value} event: {event.kind}")
        handler(event.payload)

    # ------------------------------------------------------------------
    # UI events
    # ------------------------------------------------------------------

    def on_create_game(self, payload: Dict[str, Any]) -> None:
        if self._phase is not SessionPhase.LOBBY:
            logger.info("Ignoring create game in %s", self._phase.value)
            return
        self._attempt += 1
        self._state.begin_attempt(None, self._new_player_id())
        self._presenter.set_create_game_enabled(False)
        self._set_phase(SessionPhase.JOINING)
        self._queue.spawn(
            self.SESSION_CREATED, self._turn.create_session(), attempt=self._attempt
        )

    def on_join_game(self, payload: Dict[str, Any]) -> None:
        session_id = payload.get("session_id")
        if self._phase is not SessionPhase.LOBBY:
            logger.info("Ignoring join of %s in %s", session_id, self._phase.value)
            return
        if not session_id:
            return
        self._attempt += 1
        self._state.begin_attempt(str(session_id), self._new_player_id())
        set_session_context(self._state.session_id)
        self._presenter.set_create_game_enabled(False)
        self._set_phase(SessionPhase.JOINING)
        self._register(self._state.session_id)

    def on_cell_picked(self, payload: Dict[str, Any]) -> None:
        position = payload.get("position")
        if self._phase is not SessionPhase.MY_TURN:
            logger.info("Ignoring cell %s in %s", position, self._phase.value)
            return
        if self._move_in_flight is not None:
            logger.info("Move already in flight, ignoring cell %s", position)
            return
        session_id = self._state.session_id
        self._move_in_flight = (session_id, self._attempt)
        self._queue.spawn(
            self.MOVE_SUBMITTED,
            self._turn.submit_move(position, self._state.player_id, session_id),
            session_id=session_id,
            attempt=self._attempt,
            position=position,
        )

    def on_surrender(self, payload: Dict[str, Any]) -> None:
        if self._phase not in ACTIVE_PHASES:
            logger.info("Ignoring surrender in %s", self._phase.value)
            return
        session_id = self._state.session_id
        self._queue.spawn(
            self.SURRENDERED,
            self._turn.surrender(self._state.player_id, session_id),
            session_id=session_id,
            attempt=self._attempt,
        )
        self._end_session("SURRENDER")

    # ------------------------------------------------------------------
    # Push events
    # ------------------------------------------------------------------

    def on_lobby_add(self, payload: Dict[str, Any]) -> None:
        self._presenter.add_lobby_entry(payload["session_id"])

    def on_lobby_remove(self, payload: Dict[str, Any]) -> None:
        self._presenter.remove_lobby_entry(payload["session_id"])

    def on_game_start(self, payload: Dict[str, Any]) -> None:
        session_id = payload.get("session_id")
        if self._phase is not SessionPhase.JOINING or not self._state.is_current(session_id):
            logger.info(
                "Ignoring game start for %s (joined=%s, phase=%s)",
                session_id, self._state.session_id, self._phase.value,
            )
            return
        if payload.get("player_id"):
            self._state.player_id = payload["player_id"]
        self._set_phase(SessionPhase.AWAITING_READY)
        self._presenter.show_game_board()
        self._queue.spawn(
            self.READY_CONFIRMED,
            self._turn.confirm_ready(self._state.player_id, session_id),
            session_id=session_id,
            attempt=self._attempt,
        )

    def on_registered(self, payload: Dict[str, Any]) -> None:
        session_id = payload.get("session_id")
        error = payload.get("error")
        if error is None:
            logger.debug("Registered for %s", session_id)
            return
        if self._phase is not SessionPhase.JOINING or not self._is_current(payload):
            return
        self._presenter.report_error(f"Could not register for game {session_id}: {error}")
        self._end_session("REGISTRATION_FAILED", message=str(error))

    # ------------------------------------------------------------------
    # Turn channel results
    # ------------------------------------------------------------------

    def on_session_created(self, payload: Dict[str, Any]) -> None:
        if payload.get("attempt") != self._attempt or self._phase is not SessionPhase.JOINING:
            logger.info("Dropping stale session creation result")
            return
        error = payload.get("error")
        if error is not None:
            self._presenter.report_error(str(error))
            self._end_session("CREATE_FAILED", message=str(error))
            return
        session_id = str(payload["result"])
        self._state.session_id = session_id
        set_session_context(session_id)
        self._register(session_id)

    def on_ready_confirmed(self, payload: Dict[str, Any]) -> None:
        session_id = payload.get("session_id")
        if self._phase is not SessionPhase.AWAITING_READY or not self._is_current(payload):
            logger.info("Dropping stale ready confirmation for %s", session_id)
            return
        error = payload.get("error")
        if error is not None:
            message = str(error) if isinstance(error, TurnChannelError) else UNKNOWN_READY_MESSAGE
            self._presenter.report_error(message)
            self._end_session("READY_FAILED", message=message)
            return

        side: Side = payload["result"]
        self._state.assign_side(side)
        set_session_context(session_id, side.value)
        if side is Side.A:
            self._set_phase(SessionPhase.MY_TURN)
        else:
            self._set_phase(SessionPhase.OPPONENT_TURN)
            self._issue_poll()

    def on_move_submitted(self, payload: Dict[str, Any]) -> None:
        session_id = payload.get("session_id")
        if self._move_in_flight == (session_id, payload.get("attempt")):
            self._move_in_flight = None
        if self._phase is not SessionPhase.MY_TURN or not self._is_current(payload):
            logger.info("Dropping stale move result for %s", session_id)
            return

        error = payload.get("error")
        result = payload.get("result")
        if error is not None or not result.accepted:
            message = str(error) if error is not None else UNKNOWN_MOVE_MESSAGE
            log_rejected("move", message)
            self._presenter.report_error(message or UNKNOWN_MOVE_MESSAGE)
            return

        position = payload["position"]
        self._presenter.render_move(position, self._state.side)
        if result.win_signal:
            self._finish_with_winner(result.win_signal, position)
            return
        self._set_phase(SessionPhase.OPPONENT_TURN)
        self._issue_poll()

    def on_opponent_moved(self, payload: Dict[str, Any]) -> None:
        session_id = payload.get("session_id")
        if self._poll_in_flight == (session_id, payload.get("attempt")):
            self._poll_in_flight = None
        if self._phase is not SessionPhase.OPPONENT_TURN or not self._is_current(payload):
            logger.info("Dropping stale poll result for %s", session_id)
            return

        error = payload.get("error")
        if error is not None:
            logger.warning("Poll for %s interrupted (%s), re-issuing", session_id, error)
            self._issue_poll()
            return

        move = payload["result"]
        self._presenter.render_move(move.position, self._state.side.opponent)
        if move.win_signal:
            self._finish_with_winner(move.win_signal, move.position)
            return
        self._set_phase(SessionPhase.MY_TURN)

    def on_surrendered(self, payload: Dict[str, Any]) -> None:
        error = payload.get("error")
        if error is not None:
            logger.warning("Surrender of %s not acknowledged: %s", payload.get("session_id"), error)
        else:
            logger.info("Surrender of %s acknowledged", payload.get("session_id"))

    # ------------------------------------------------------------------
    # Push channel lifecycle
    # ------------------------------------------------------------------

    def on_channel_opened(self, payload: Dict[str, Any]) -> None:
        logger.info("Push channel open: %s", payload.get("url", ""))

    def on_channel_closed(self, payload: Dict[str, Any]) -> None:
        code, reason = payload.get("code"), payload.get("reason", "")
        if payload.get("clean"):
            logger.info("Push channel closed cleanly (code=%s, reason=%s)", code, reason)
            return
        logger.warning("Push channel terminated (code=%s, reason=%s)", code, reason)
        self._recover_from_channel_loss()

    def on_channel_error(self, payload: Dict[str, Any]) -> None:
        logger.warning("Push channel error: %s", payload.get("error"))
        self._recover_from_channel_loss()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _is_current(self, payload: Dict[str, Any]) -> bool:
        """True if a request result belongs to the current attempt and session."""
        return (
            payload.get("attempt") == self._attempt
            and self._state.is_current(payload.get("session_id"))
        )

    def _register(self, session_id: str) -> None:
        self._queue.spawn(
            self.REGISTERED,
            self._push.send_registration(session_id),
            source=EventSource.PUSH,
            session_id=session_id,
            attempt=self._attempt,
        )

    def _issue_poll(self) -> None:
        session_id = self._state.session_id
        if self._poll_in_flight == (session_id, self._attempt):
            logger.debug("Poll already in flight for %s", session_id)
            return
        self._poll_in_flight = (session_id, self._attempt)
        self._queue.spawn(
            self.OPPONENT_MOVED,
            self._turn.poll_opponent_move(self._state.player_id, session_id),
            session_id=session_id,
            attempt=self._attempt,
        )

    def _recover_from_channel_loss(self) -> None:
        """Re-enable game creation; only a pending join is abandoned.

        A join still in JOINING resets the session, because its GameStart can
        no longer arrive. Sessions past JOINING are left untouched.
        """
        if self._phase is SessionPhase.JOINING:
            self._presenter.report_error(LOST_LOBBY_MESSAGE)
            self._end_session("PUSH_CHANNEL_LOST", message=LOST_LOBBY_MESSAGE)
        self._presenter.set_create_game_enabled(True)

    def _finish_with_winner(self, win_signal: str, position: int) -> None:
        self._set_phase(SessionPhase.GAME_OVER)
        self._presenter.report_winner(win_signal)
        self._end_session("WIN_SIGNAL", message=win_signal, position=position)

    def _end_session(
        self, reason: str, message: str = "", position: Optional[int] = None
    ) -> None:
        """Record the outcome, reset SessionState and return to LOBBY."""
        self._last_outcome = SessionOutcome(
            session_id=self._state.session_id,
            player_id=self._state.player_id,
            side=self._state.side.value,
            phase_at_end=self._phase.value,
            reason=reason,
            message=message,
            last_position=position,
        )
        logger.info("Session ended: %s", self._last_outcome.to_dict())
        self._state.reset()
        self._move_in_flight = None
        self._poll_in_flight = None
        set_session_context(None)
        self._set_phase(SessionPhase.LOBBY)
        self._presenter.show_lobby()
        self._presenter.set_create_game_enabled(True)

    def _set_phase(self, phase: SessionPhase) -> None:
        if phase is not self._phase:
            log_transition(self._phase.value, phase.value)
        self._phase = phase
