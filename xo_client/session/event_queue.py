# Area: Session (Turn Synchronization)
"""Event queue - totally ordered (source, event) pairs for the controller.

Push messages, UI commands and channel lifecycle signals are posted
directly. Transport requests are spawned as asyncio tasks whose outcome
is posted back as an event, so every result is processed in arrival
order relative to everything else.
"""
import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Dict, List, Set


class EventSource(Enum):
    """Where an event came from."""
    PUSH = "PUSH"
    TURN = "TURN"
    UI = "UI"
    CHANNEL = "CHANNEL"


@dataclass(frozen=True)
class SessionEvent:
    """One entry in the controller's queue.

    For spawned requests the payload carries the request tags (such as
    the originating session_id) plus either "result" or "error".
    """
    source: EventSource
    kind: str
    payload: Dict[str, Any] = field(default_factory=dict)


class EventQueue:
    """FIFO of SessionEvents plus the set of in-flight request tasks."""

    def __init__(self) -> None:
        self._queue: "asyncio.Queue[SessionEvent]" = asyncio.Queue()
        self._tasks: Set[asyncio.Task] = set()

    def post(self, event: SessionEvent) -> None:
        self._queue.put_nowait(event)

    def spawn(
        self,
        kind: str,
        request: Awaitable[Any],
        source: EventSource = EventSource.TURN,
        **tags: Any,
    ) -> asyncio.Task:
        """Run request in the background and post its outcome as `kind`."""
        task = asyncio.get_running_loop().create_task(
            self._resolve(kind, request, source, tags)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _resolve(
        self,
        kind: str,
        request: Awaitable[Any],
        source: EventSource,
        tags: Dict[str, Any],
    ) -> None:
        try:
            result = await request
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.post(SessionEvent(source, kind, {**tags, "error": e}))
            return
        self.post(SessionEvent(source, kind, {**tags, "result": result}))

    async def get(self) -> SessionEvent:
        return await self._queue.get()

    def get_nowait(self) -> SessionEvent:
        return self._queue.get_nowait()

    def empty(self) -> bool:
        return self._queue.empty()

    @property
    def pending(self) -> List[asyncio.Task]:
        return [t for t in self._tasks if not t.done()]

    async def settle(self, timeout: float) -> bool:
        """Wait up to timeout for an in-flight request to finish.

        Returns True if at least one request completed.
        """
        pending = self.pending
        if not pending:
            await asyncio.sleep(0)
            return False
        done, _ = await asyncio.wait(
            pending, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
        )
        return bool(done)

    async def close(self) -> None:
        """Cancel all in-flight requests."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
