"""Protocol Logger - Colored output for client protocol traffic.

One line per push frame or HTTP call, tagged with the current session
and the side this client plays.
"""
from datetime import datetime
from typing import Optional


class Colors:
    """ANSI color codes for terminal output."""
    GREEN = "\033[92m"
    ORANGE = "\033[93m"  # Using yellow/orange
    RED = "\033[91m"
    RESET = "\033[0m"
    BOLD = "\033[1m"


# Wire name to display name mapping
MESSAGE_DISPLAY_NAMES = {
    # Push channel, received
    "add": "LOBBY-ADD",
    "remove": "LOBBY-REMOVE",
    "startGame": "GAME-START",
    # Push channel, sent
    "register": "REGISTER",
    # Turn channel calls
    "newGame": "NEW-GAME",
    "gameReady": "GAME-READY",
    "move": "MY-MOVE",
    "waitMove": "WAIT-OPPONENT-MOVE",
    "surrender": "SURRENDER",
}

# Expected response mapping
EXPECTED_RESPONSES = {
    "add": "None (display)",
    "remove": "None (display)",
    "startGame": "GAME-READY",
    "register": "Wait for GAME-START",
    "newGame": "REGISTER",
    "gameReady": "MY-MOVE or WAIT-OPPONENT-MOVE",
    "move": "WAIT-OPPONENT-MOVE",
    "waitMove": "MY-MOVE",
    "surrender": "None (terminal)",
}


class ProtocolLogger:
    """Logger for protocol messages with colored output."""

    _current_session_id: str = "-"
    _side: str = ""

    @classmethod
    def set_session_context(cls, session_id: Optional[str], side: str = "") -> None:
        """Set current session context for logging."""
        cls._current_session_id = session_id or "-"
        cls._side = side

    @classmethod
    def _get_display_name(cls, msg_type: str) -> str:
        return MESSAGE_DISPLAY_NAMES.get(msg_type, msg_type)

    @classmethod
    def _get_expected_response(cls, msg_type: str) -> str:
        return EXPECTED_RESPONSES.get(msg_type, "Unknown")

    @classmethod
    def _get_side(cls) -> str:
        return cls._side.upper() if cls._side else "UNASSIGNED"

    @classmethod
    def _format_time(cls, with_ms: bool = False) -> str:
        """Format current time."""
        now = datetime.now()
        if with_ms:
            return now.strftime("%H:%M:%S:%f")[:-3]  # HH:MM:SS:MS
        return now.strftime("%H:%M:%S")

    @classmethod
    def log_received(
        cls,
        msg_type: str,
        sender: str,
        session_id: Optional[str] = None,
    ) -> None:
        """Log a received protocol message (GREEN)."""
        display_name = cls._get_display_name(msg_type)
        expected = cls._get_expected_response(msg_type)
        sid = session_id or cls._current_session_id
        line = (
            f"{Colors.GREEN}"
            f"{cls._format_time()} | SESSION: {sid} | RECEIVED | from {sender:<30} | "
            f"{display_name:<20} | EXPECTED-RESPONSE: {expected:<30} | "
            f"SIDE: {cls._get_side()}"
            f"{Colors.RESET}"
        )
        print(line)

    @classmethod
    def log_sent(
        cls,
        msg_type: str,
        recipient: str,
        session_id: Optional[str] = None,
    ) -> None:
        """Log a sent protocol message (GREEN)."""
        display_name = cls._get_display_name(msg_type)
        expected = cls._get_expected_response(msg_type)
        sid = session_id or cls._current_session_id
        line = (
            f"{Colors.GREEN}"
            f"{cls._format_time()} | SESSION: {sid} | SENT     | to {recipient:<32} | "
            f"{display_name:<20} | EXPECTED-RESPONSE: {expected:<30} | "
            f"SIDE: {cls._get_side()}"
            f"{Colors.RESET}"
        )
        print(line)

    @classmethod
    def log_rejected(cls, msg_type: str, reason: str = "") -> None:
        """Log a request the server refused (RED)."""
        msg = f"REJECTED {cls._get_display_name(msg_type)}"
        if reason:
            msg += f": {reason}"
        print(f"{Colors.RED}[ERROR] {cls._format_time()} | {msg}{Colors.RESET}")

    @classmethod
    def log_error(cls, message: str) -> None:
        """Log an error message (RED)."""
        print(f"{Colors.RED}[ERROR] {cls._format_time()} | {message}{Colors.RESET}")

    @classmethod
    def log_transition(cls, old_phase: str, new_phase: str) -> None:
        """Log a controller phase change (ORANGE)."""
        line = (
            f"{Colors.ORANGE}"
            f"{cls._format_time(with_ms=True)} | PHASE: {old_phase:<15} -> {new_phase:<15} | "
            f"SESSION: {cls._current_session_id}"
            f"{Colors.RESET}"
        )
        print(line)


# Convenience functions
def log_received(msg_type: str, sender: str, session_id: str = None) -> None:
    ProtocolLogger.log_received(msg_type, sender, session_id)


def log_sent(msg_type: str, recipient: str, session_id: str = None) -> None:
    ProtocolLogger.log_sent(msg_type, recipient, session_id)


def log_rejected(msg_type: str, reason: str = "") -> None:
    ProtocolLogger.log_rejected(msg_type, reason)


def log_error(message: str) -> None:
    ProtocolLogger.log_error(message)


def log_transition(old_phase: str, new_phase: str) -> None:
    ProtocolLogger.log_transition(old_phase, new_phase)


def set_session_context(session_id: Optional[str], side: str = "") -> None:
    ProtocolLogger.set_session_context(session_id, side)
