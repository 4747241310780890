# Area: Session (Turn Synchronization)
"""SessionState - identity and side of the current session attempt."""
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Side(Enum):
    """Mark played by this client. A moves first."""
    A = "x"
    B = "o"
    UNASSIGNED = ""

    @property
    def opponent(self) -> "Side":
        if self is Side.A:
            return Side.B
        if self is Side.B:
            return Side.A
        return Side.UNASSIGNED

    @classmethod
    def from_wire(cls, value: str) -> "Side":
        """Map the server's mark ("x" / "o") to a Side."""
        for side in (cls.A, cls.B):
            if side.value == str(value).lower():
                return side
        raise ValueError(f"Unknown side: {value!r}")


@dataclass
class SessionState:
    """Single owned record of the current session attempt.

    Mutated only by SessionController. All fields are null outside a
    session attempt.
    """
    player_id: Optional[str] = None
    session_id: Optional[str] = None
    side: Side = Side.UNASSIGNED

    def begin_attempt(self, session_id: Optional[str], player_id: str) -> None:
        """Start a new attempt, invalidating any previous session."""
        self.session_id = session_id
        self.player_id = player_id
        self.side = Side.UNASSIGNED

    def assign_side(self, side: Side) -> None:
        if side is Side.UNASSIGNED:
            raise ValueError("Cannot assign UNASSIGNED side")
        if self.side is not Side.UNASSIGNED:
            raise ValueError(f"Side already assigned for session {self.session_id}")
        self.side = side

    def reset(self) -> None:
        self.player_id = None
        self.session_id = None
        self.side = Side.UNASSIGNED

    def is_current(self, session_id: Optional[str]) -> bool:
        """True if session_id identifies the session currently joined."""
        return session_id is not None and session_id == self.session_id

    @property
    def is_empty(self) -> bool:
        return (
            self.player_id is None
            and self.session_id is None
            and self.side is Side.UNASSIGNED
        )
