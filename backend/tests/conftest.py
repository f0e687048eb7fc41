"""Shared test fixtures and configuration for backend tests."""
import asyncio
import json

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketState

from smartgate.main import app
from smartgate.relay import BroadcastRelay, ConnectionSession, SessionRegistry
from smartgate.rooms import RoomStore


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeWebSocket:
    """Records frames and close calls instead of talking to a peer.

    With ``hang=True`` every send and close waits forever, like a peer whose
    TCP buffer never drains.
    """

    def __init__(self, fail_sends: bool = False, hang: bool = False) -> None:
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.fail_sends = fail_sends
        self.hang = hang
        self.sent = []
        self.closed_with = None

    async def send_text(self, data: str) -> None:
        if self.hang:
            await asyncio.Event().wait()
        if self.fail_sends or self.application_state != WebSocketState.CONNECTED:
            raise RuntimeError("connection is closed")
        self.sent.append(data)

    async def close(self, code: int = 1000, reason=None) -> None:
        if self.hang:
            await asyncio.Event().wait()
        self.closed_with = (code, reason)
        self.application_state = WebSocketState.DISCONNECTED

    def messages(self):
        return [json.loads(raw) for raw in self.sent]

    def last(self):
        return json.loads(self.sent[-1])


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(clock):
    return RoomStore(clock=clock)


@pytest.fixture
def relay():
    return BroadcastRelay()


@pytest.fixture
def make_session(store, relay):
    """Factory for sessions bound to a FakeWebSocket."""
    def _make(send_timeout: float = 1.0, **ws_kwargs) -> ConnectionSession:
        return ConnectionSession(
            FakeWebSocket(**ws_kwargs), store, relay, send_timeout=send_timeout
        )
    return _make


@pytest.fixture(autouse=True)
def fresh_app_state():
    """Give every test an empty room store and session registry."""
    app.state.room_store = RoomStore()
    app.state.sessions = SessionRegistry()
    app.state.relay = BroadcastRelay()
    yield


@pytest.fixture
def api_client():
    """Provide a TestClient for the main FastAPI app."""
    return TestClient(app)
