# Area: Transport (WebSocket push channel)
"""Push channel - long-lived WebSocket delivering lobby and start events."""
import asyncio
import logging
from typing import Any, Callable, Optional

from websockets.asyncio.client import connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from xo_client.session.event_queue import EventQueue, EventSource, SessionEvent
from xo_client.shared.logging.protocol_logger import log_error, log_received, log_sent
from xo_client.transport.messages import build_registration, parse_push_message

logger = logging.getLogger(__name__)

# Controller event kinds for connection lifecycle
CHANNEL_OPENED = "channel_opened"
CHANNEL_CLOSED = "channel_closed"
CHANNEL_ERROR = "channel_error"

ABNORMAL_CLOSE_CODE = 1006


class PushChannelError(Exception):
    """Raised when the push channel cannot deliver a frame."""


class PushChannel:
    """One WebSocket connection feeding push events into the EventQueue.

    Frames are posted as PUSH events in arrival order. Connection
    lifecycle is posted as CHANNEL events; these are observability
    signals, never game-state transitions.
    """

    def __init__(
        self,
        url: str,
        queue: EventQueue,
        connect_fn: Callable[..., Any] = connect,
    ) -> None:
        self._url = url
        self._queue = queue
        self._connect = connect_fn
        self._ws: Optional[Any] = None

    @property
    def connected(self) -> bool:
        return self._ws is not None

    async def run(self) -> None:
        """Connect and pump frames until the connection ends."""
        try:
            async with self._connect(self._url) as ws:
                self._ws = ws
                logger.info("Push channel connected to %s", self._url)
                self._post(CHANNEL_OPENED, url=self._url)
                try:
                    async for raw in ws:
                        self._handle_frame(raw)
                except ConnectionClosed as e:
                    code = e.rcvd.code if e.rcvd is not None else ABNORMAL_CLOSE_CODE
                    reason = e.rcvd.reason if e.rcvd is not None else ""
                    self._post(CHANNEL_CLOSED, clean=False, code=code, reason=reason)
                else:
                    self._post(
                        CHANNEL_CLOSED,
                        clean=True,
                        code=getattr(ws, "close_code", None),
                        reason=getattr(ws, "close_reason", "") or "",
                    )
        except (OSError, WebSocketException, asyncio.TimeoutError) as e:
            log_error(f"Push channel error: {e}")
            self._post(CHANNEL_ERROR, error=e)
        finally:
            self._ws = None

    async def send_registration(self, session_id: str) -> None:
        """Announce interest in session_id."""
        if self._ws is None:
            raise PushChannelError("Push channel is not connected")
        try:
            await self._ws.send(build_registration(session_id))
        except ConnectionClosed as e:
            raise PushChannelError(f"Registration for {session_id} not sent: {e}") from e
        log_sent("register", self._url, session_id)

    async def close(self) -> None:
        if self._ws is not None:
            await self._ws.close()

    def _handle_frame(self, raw: Any) -> None:
        event = parse_push_message(raw)
        if event is None:
            return
        log_received(event.action, self._url, event.session_id)
        self._queue.post(SessionEvent(
            EventSource.PUSH,
            event.kind,
            {"session_id": event.session_id, "player_id": event.player_id},
        ))

    def _post(self, kind: str, **payload: Any) -> None:
        self._queue.post(SessionEvent(EventSource.CHANNEL, kind, payload))
