# Area: Transport (HTTP turn channel)
"""Turn channel - request/response calls for session and move handling.

Wraps the game server's HTTP API:
- POST /newGame      -> create a session
- POST /gameReady    -> confirm readiness, receive side
- POST /move         -> submit own move
- GET  /move         -> long-poll for opponent's move
- PUT  /surrender    -> give up the current game
"""
import asyncio
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from xo_client.session.board import MAX_POSITION, is_valid_position
from xo_client.session.state import Side
from xo_client.shared.logging.protocol_logger import log_sent, log_received

NO_OPPONENT_MESSAGE = "Error when starting game: no answer from another player"
UNKNOWN_READY_MESSAGE = "Unknown error when starting game"
UNKNOWN_MOVE_MESSAGE = "Unknown error"

# Pause before reporting a poll the server answered without a move
DEFAULT_POLL_RETRY_DELAY_SEC = 1.0


class TurnChannelError(Exception):
    """Base exception for all turn channel failures."""


class NoOpponentTimeout(TurnChannelError):
    """Raised when the counterpart did not join within the server window."""

    def __init__(self, message: str = NO_OPPONENT_MESSAGE) -> None:
        super().__init__(message)


class ReadyConfirmationError(TurnChannelError):
    """Raised for any other ready-confirmation failure."""

    def __init__(self, message: str = UNKNOWN_READY_MESSAGE) -> None:
        super().__init__(message)


class MoveRejected(TurnChannelError):
    """Raised when the server refuses a move. The turn is not consumed."""


class PollInterrupted(TurnChannelError):
    """Raised when a long-poll did not produce a valid response."""


@dataclass(frozen=True)
class MoveResult:
    """Outcome of an accepted move submission."""
    accepted: bool
    win_signal: Optional[str] = None


@dataclass(frozen=True)
class OpponentMove:
    """Opponent's move as delivered by the long-poll."""
    position: int
    win_signal: Optional[str] = None


def _session_headers(player_id: Optional[str], session_id: Optional[str]) -> dict:
    return {
        "Game-ID": session_id or "",
        "Player-ID": player_id or "",
    }


def _json_or_none(response: httpx.Response) -> Optional[dict]:
    try:
        data = response.json()
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


class TurnChannel:
    """HTTP client for the game server's request/response API."""

    def __init__(
        self,
        base_url: str,
        request_timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
        poll_retry_delay: float = DEFAULT_POLL_RETRY_DELAY_SEC,
    ) -> None:
        """Initialize the TurnChannel.

        Args:
            base_url: Server root, e.g. "http://xo.t.javascript.ninja".
            request_timeout: Timeout for every call except the long-poll.
            client: Pre-built AsyncClient (tests inject a MockTransport).
            poll_retry_delay: Seconds to wait before raising PollInterrupted
                for a poll answered with an error status or no move.
        """
        self._client = client or httpx.AsyncClient(base_url=base_url)
        self._request_timeout = request_timeout
        self._poll_retry_delay = poll_retry_delay

    async def aclose(self) -> None:
        await self._client.aclose()

    async def create_session(self) -> str:
        """Create a session and return its id."""
        log_sent("newGame", "server")
        try:
            response = await self._client.post(
                "/newGame", timeout=self._request_timeout
            )
        except httpx.HTTPError as e:
            raise TurnChannelError(f"Failed to create game: {e}") from e

        data = _json_or_none(response)
        if not response.is_success or not data or not data.get("yourId"):
            raise TurnChannelError(
                f"Failed to create game (HTTP {response.status_code})"
            )
        log_received("newGame", "server")
        return str(data["yourId"])

    async def confirm_ready(self, player_id: str, session_id: str) -> Side:
        """Confirm readiness and return the assigned side.

        Raises:
            NoOpponentTimeout: Server answered 410 Gone.
            ReadyConfirmationError: Any other failure.
        """
        log_sent("gameReady", "server")
        try:
            response = await self._client.post(
                "/gameReady",
                json={"player": player_id, "game": session_id},
                timeout=self._request_timeout,
            )
        except httpx.HTTPError as e:
            raise ReadyConfirmationError() from e

        if response.status_code == 410:
            raise NoOpponentTimeout()
        data = _json_or_none(response)
        if not response.is_success or not data:
            raise ReadyConfirmationError()
        try:
            side = Side.from_wire(data.get("side", ""))
        except ValueError as e:
            raise ReadyConfirmationError() from e
        log_received("gameReady", "server")
        return side

    async def submit_move(
        self, position: int, player_id: str, session_id: str
    ) -> MoveResult:
        """Submit own move.

        Raises:
            MoveRejected: Position off the board, or a non-success response
                carrying the server's reason.
        """
        if not is_valid_position(position):
            raise MoveRejected(f"Position out of range: {position}")
        log_sent("move", "server")
        try:
            response = await self._client.post(
                "/move",
                json={"move": position},
                headers=_session_headers(player_id, session_id),
                timeout=self._request_timeout,
            )
        except httpx.HTTPError as e:
            raise MoveRejected(f"Move not sent: {e}") from e

        data = _json_or_none(response)
        if not response.is_success:
            message = (data or {}).get("message") or UNKNOWN_MOVE_MESSAGE
            raise MoveRejected(str(message))
        log_received("move", "server")
        return MoveResult(accepted=True, win_signal=(data or {}).get("win") or None)

    async def poll_opponent_move(
        self, player_id: str, session_id: str
    ) -> OpponentMove:
        """Long-poll until the opponent moves.

        The server holds the request open; no client read timeout is set.

        Raises:
            PollInterrupted: Transport failure or a response that does not
                describe a move. Callers re-issue the poll.
        """
        log_sent("waitMove", "server")
        try:
            response = await self._client.get(
                "/move",
                headers=_session_headers(player_id, session_id),
                timeout=httpx.Timeout(self._request_timeout, read=None),
            )
        except httpx.HTTPError as e:
            raise PollInterrupted(str(e) or type(e).__name__) from e

        data = _json_or_none(response)
        if not response.is_success or data is None:
            await asyncio.sleep(self._poll_retry_delay)
            raise PollInterrupted(f"Poll returned HTTP {response.status_code}")
        position = _parse_position(data.get("move"))
        if position is None:
            await asyncio.sleep(self._poll_retry_delay)
            raise PollInterrupted(f"Poll response without a move: {data!r}")
        if not is_valid_position(position):
            await asyncio.sleep(self._poll_retry_delay)
            raise PollInterrupted(f"Poll move outside 1..{MAX_POSITION}: {position}")
        log_received("waitMove", "server")
        return OpponentMove(position=position, win_signal=data.get("win") or None)

    async def surrender(self, player_id: str, session_id: str) -> Any:
        """Give up the current game. Returns the server's acknowledgement."""
        log_sent("surrender", "server")
        try:
            response = await self._client.put(
                "/surrender",
                headers=_session_headers(player_id, session_id),
                timeout=self._request_timeout,
            )
        except httpx.HTTPError as e:
            raise TurnChannelError(f"Surrender not delivered: {e}") from e
        log_received("surrender", "server")
        return _json_or_none(response)


def _parse_position(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
