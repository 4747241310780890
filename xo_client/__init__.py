"""XO client package.

Plays a two-player 10x10 XO game against a remote server: lobby and
game-start notifications arrive over a WebSocket push channel, moves are
exchanged over an HTTP turn channel with long-polling.

Main entry point:
    EventRouter - drains the event queue into the session controller

Components:
    SessionController - session/turn state machine
    SessionState - identity and side of the current attempt
    PushChannel - WebSocket lobby/start notifications
    TurnChannel - HTTP session, move and surrender calls
    ConsolePresenter - terminal view
"""
from xo_client.config import ClientConfig, load_config
from xo_client.console import ConsolePresenter
from xo_client.router import EventRouter, RoutingResult
from xo_client.session import (
    EventQueue,
    EventSource,
    PresenterProtocol,
    SessionController,
    SessionEvent,
    SessionOutcome,
    SessionPhase,
    SessionState,
    Side,
)
from xo_client.transport import (
    MoveRejected,
    NoOpponentTimeout,
    PollInterrupted,
    PushChannel,
    ReadyConfirmationError,
    TurnChannel,
    TurnChannelError,
)

__version__ = "1.0.0"

__all__ = [
    # Main router
    "EventRouter",
    "RoutingResult",
    # Config
    "ClientConfig",
    "load_config",
    # Console
    "ConsolePresenter",
    # Session components
    "SessionController",
    "SessionState",
    "SessionPhase",
    "SessionOutcome",
    "Side",
    "EventQueue",
    "EventSource",
    "SessionEvent",
    "PresenterProtocol",
    # Transport components
    "PushChannel",
    "TurnChannel",
    "TurnChannelError",
    "NoOpponentTimeout",
    "ReadyConfirmationError",
    "MoveRejected",
    "PollInterrupted",
]
