# Area: Transport (WebSocket push channel)
"""Push messages - parses lobby records and builds registrations."""
import json
import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

# Wire action -> controller event kind
ACTION_LOBBY_ADD = "add"
ACTION_LOBBY_REMOVE = "remove"
ACTION_GAME_START = "startGame"

EVENT_KINDS = {
    ACTION_LOBBY_ADD: "lobby_add",
    ACTION_LOBBY_REMOVE: "lobby_remove",
    ACTION_GAME_START: "game_start",
}


@dataclass(frozen=True)
class PushEvent:
    """Parsed push-channel record."""
    kind: str            # "lobby_add", "lobby_remove" or "game_start"
    session_id: str
    action: str          # Raw wire action
    player_id: Optional[str] = None


def parse_push_message(raw: str) -> Optional[PushEvent]:
    """Parse a push-channel frame.

    Format: {"action": "add" | "remove" | "startGame", "id": "<session id>"}
    A startGame record may also carry "player" with a server-assigned
    player id.

    Returns None for frames that are not valid JSON objects, carry an
    unknown action, or have no id.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError):
        logger.warning("Dropping undecodable push frame: %r", raw)
        return None
    if not isinstance(data, dict):
        logger.warning("Dropping non-object push frame: %r", raw)
        return None

    action = data.get("action")
    kind = EVENT_KINDS.get(action)
    session_id = data.get("id")
    if kind is None or session_id in (None, ""):
        logger.warning("Dropping push frame with action=%r id=%r", action, session_id)
        return None

    player_id = data.get("player")
    return PushEvent(
        kind=kind,
        session_id=str(session_id),
        action=action,
        player_id=str(player_id) if player_id else None,
    )


def build_registration(session_id: str) -> str:
    """Build the frame announcing interest in session_id."""
    return json.dumps({"register": session_id})
