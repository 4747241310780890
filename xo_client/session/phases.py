# Area: Session (Turn Synchronization)
"""Session phase tracking and end-of-session reporting.

Provides SessionPhase for explicit phase tracking in SessionController,
and SessionOutcome for capturing how a session attempt ended.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class SessionPhase(Enum):
    """Phases of a client session."""
    LOBBY = "LOBBY"
    JOINING = "JOINING"
    AWAITING_READY = "AWAITING_READY"
    MY_TURN = "MY_TURN"
    OPPONENT_TURN = "OPPONENT_TURN"
    GAME_OVER = "GAME_OVER"


# Phases in which a surrender is meaningful
ACTIVE_PHASES = frozenset({
    SessionPhase.AWAITING_READY,
    SessionPhase.MY_TURN,
    SessionPhase.OPPONENT_TURN,
})


@dataclass(frozen=True)
class SessionOutcome:
    """Snapshot of a session attempt at the moment it ended.

    Created when a win signal arrives, when ready confirmation fails,
    when the player surrenders, or when the push channel drops a pending
    join.
    """
    session_id: Optional[str]
    player_id: Optional[str]
    side: str                    # "x", "o", or "" if never assigned
    phase_at_end: str
    reason: str                  # e.g. "WIN_SIGNAL", "SURRENDER", "READY_FAILED"
    message: str = ""
    last_position: Optional[int] = None

    def to_dict(self) -> dict:
        data = {
            "session_id": self.session_id,
            "player_id": self.player_id,
            "side": self.side,
            "phase_at_end": self.phase_at_end,
            "reason": self.reason,
            "message": self.message,
        }
        if self.last_position is not None:
            data["last_position"] = self.last_position
        return data
