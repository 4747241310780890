# Area: Transport (WebSocket push channel)
"""Tests for PushChannel frame pumping, registration and lifecycle events."""
import asyncio
import json

import pytest
from websockets.exceptions import ConnectionClosedError, InvalidURI

from xo_client.session.event_queue import EventQueue, EventSource
from xo_client.transport.push_channel import (
    ABNORMAL_CLOSE_CODE,
    CHANNEL_CLOSED,
    CHANNEL_ERROR,
    CHANNEL_OPENED,
    PushChannel,
    PushChannelError,
)

URL = "ws://xo.test/games"


class FakeWebSocket:
    """Async-iterable stand-in for a websockets client connection."""

    def __init__(self, frames, error=None, hold=None):
        self.frames = list(frames)
        self.error = error
        self.hold = hold
        self.sent = []
        self.closed = False
        self.close_code = 1000
        self.close_reason = "bye"

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for frame in self.frames:
            yield frame
        if self.hold is not None:
            await self.hold.wait()
        if self.error is not None:
            raise self.error

    async def send(self, data):
        self.sent.append(data)

    async def close(self):
        self.closed = True
        if self.hold is not None:
            self.hold.set()


class FakeConnect:
    def __init__(self, ws=None, error=None):
        self.ws = ws
        self.error = error
        self.urls = []

    def __call__(self, url):
        self.urls.append(url)
        return self

    async def __aenter__(self):
        if self.error is not None:
            raise self.error
        return self.ws

    async def __aexit__(self, *exc_info):
        return False


def _drain(queue):
    events = []
    while not queue.empty():
        events.append(queue.get_nowait())
    return events


def _run_channel(connect):
    async def scenario():
        queue = EventQueue()
        channel = PushChannel(URL, queue, connect_fn=connect)
        await channel.run()
        return channel, _drain(queue)
    return asyncio.run(scenario())


class TestFramePumping:
    def test_frames_become_push_events_in_order(self):
        ws = FakeWebSocket([
            json.dumps({"action": "add", "id": "G1"}),
            json.dumps({"action": "add", "id": "G2"}),
            json.dumps({"action": "remove", "id": "G1"}),
            json.dumps({"action": "startGame", "id": "G2"}),
        ])
        _, events = _run_channel(FakeConnect(ws))

        push = [(e.kind, e.payload["session_id"]) for e in events if e.source is EventSource.PUSH]
        assert push == [
            ("lobby_add", "G1"),
            ("lobby_add", "G2"),
            ("lobby_remove", "G1"),
            ("game_start", "G2"),
        ]

    def test_bad_frames_are_dropped(self):
        ws = FakeWebSocket(["not json", json.dumps({"action": "dance", "id": "G1"})])
        _, events = _run_channel(FakeConnect(ws))
        assert [e for e in events if e.source is EventSource.PUSH] == []

    def test_start_game_carries_player_id(self):
        ws = FakeWebSocket([json.dumps({"action": "startGame", "id": "G1", "player": "P9"})])
        _, events = _run_channel(FakeConnect(ws))
        start = [e for e in events if e.kind == "game_start"][0]
        assert start.payload["player_id"] == "P9"


class TestLifecycle:
    def test_open_then_clean_close(self):
        channel, events = _run_channel(FakeConnect(FakeWebSocket([])))
        kinds = [e.kind for e in events]
        assert kinds == [CHANNEL_OPENED, CHANNEL_CLOSED]
        assert all(e.source is EventSource.CHANNEL for e in events)
        closed = events[-1].payload
        assert closed["clean"] is True
        assert closed["code"] == 1000
        assert not channel.connected

    def test_abnormal_close_is_not_clean(self):
        ws = FakeWebSocket([], error=ConnectionClosedError(None, None))
        _, events = _run_channel(FakeConnect(ws))
        closed = events[-1]
        assert closed.kind == CHANNEL_CLOSED
        assert closed.payload["clean"] is False
        assert closed.payload["code"] == ABNORMAL_CLOSE_CODE

    def test_connection_refused_posts_error(self):
        _, events = _run_channel(FakeConnect(error=OSError("refused")))
        assert [e.kind for e in events] == [CHANNEL_ERROR]
        assert isinstance(events[0].payload["error"], OSError)

    def test_websocket_exception_posts_error(self):
        _, events = _run_channel(FakeConnect(error=InvalidURI("nope", "bad uri")))
        assert [e.kind for e in events] == [CHANNEL_ERROR]


class TestRegistration:
    def test_registration_frame_sent_while_connected(self):
        async def scenario():
            queue = EventQueue()
            ws = FakeWebSocket([], hold=asyncio.Event())
            channel = PushChannel(URL, queue, connect_fn=FakeConnect(ws))
            task = asyncio.create_task(channel.run())
            for _ in range(5):
                await asyncio.sleep(0)
            assert channel.connected
            await channel.send_registration("G1")
            await channel.close()
            await task
            return ws

        ws = asyncio.run(scenario())
        assert [json.loads(f) for f in ws.sent] == [{"register": "G1"}]
        assert ws.closed

    def test_registration_without_connection_raises(self):
        async def scenario():
            channel = PushChannel(URL, EventQueue(), connect_fn=FakeConnect())
            await channel.send_registration("G1")

        with pytest.raises(PushChannelError):
            asyncio.run(scenario())
