# Area: Transport
"""Transport package - push channel (WebSocket) and turn channel (HTTP)."""
from xo_client.transport.messages import PushEvent, build_registration, parse_push_message
from xo_client.transport.push_channel import PushChannel, PushChannelError
from xo_client.transport.turn_channel import (
    MoveRejected,
    MoveResult,
    NoOpponentTimeout,
    OpponentMove,
    PollInterrupted,
    ReadyConfirmationError,
    TurnChannel,
    TurnChannelError,
)

__all__ = [
    "PushEvent", "build_registration", "parse_push_message",
    "PushChannel", "PushChannelError",
    "TurnChannel", "TurnChannelError", "NoOpponentTimeout",
    "ReadyConfirmationError", "MoveRejected", "PollInterrupted",
    "MoveResult", "OpponentMove",
]
