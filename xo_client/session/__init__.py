"""Session package.

Holds the client's session state and the state machine that drives it.
"""
from xo_client.session.controller import SessionController
from xo_client.session.event_queue import EventQueue, EventSource, SessionEvent
from xo_client.session.phases import SessionOutcome, SessionPhase
from xo_client.session.presenter import PresenterProtocol
from xo_client.session.state import SessionState, Side

__all__ = [
    "SessionController",
    "EventQueue", "EventSource", "SessionEvent",
    "SessionOutcome", "SessionPhase",
    "PresenterProtocol",
    "SessionState", "Side",
]
