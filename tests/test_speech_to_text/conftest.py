"""Fake voice session collaborators shared by the speech-to-text tests."""

import asyncio
from collections.abc import AsyncIterator, Callable

import pytest

from channel_speech.speech_to_text.interfaces import (
    AudioReceiver,
    EndBehavior,
    VoiceConnection,
    VoiceConnectionStatus,
    VoiceSession,
)


class FakeReceiver(AudioReceiver):
    """Receiver whose speaking events and streams are driven by the test."""

    def __init__(self) -> None:
        self.speaking_callbacks: list[Callable[[str], None]] = []
        self.streams: dict[str, list] = {}
        self.subscriptions: list[tuple[str, EndBehavior]] = []

    def on_speaking_start(self, callback: Callable[[str], None]) -> Callable[[], None]:
        self.speaking_callbacks.append(callback)
        return lambda: self.speaking_callbacks.remove(callback)

    def subscribe(self, user_id: str, end: EndBehavior) -> AsyncIterator[bytes]:
        self.subscriptions.append((user_id, end))
        return self._stream(list(self.streams.get(user_id, [])))

    async def _stream(self, items: list) -> AsyncIterator[bytes]:
        for item in items:
            await asyncio.sleep(0)
            if isinstance(item, BaseException):
                raise item
            yield item

    def start_speaking(self, user_id: str) -> None:
        for callback in list(self.speaking_callbacks):
            callback(user_id)


class FakeConnection(VoiceConnection):
    """Connection that is ready immediately unless told otherwise."""

    def __init__(
        self,
        channel_id: str | None = "channel-1",
        status: VoiceConnectionStatus = VoiceConnectionStatus.READY,
    ) -> None:
        self._channel_id = channel_id
        self._status = status
        self._receiver = FakeReceiver()
        self.ready = asyncio.Event()
        self.ready.set()
        self.wait_error: BaseException | None = None
        self.wait_calls = 0
        self.status_listeners: list[Callable[[VoiceConnectionStatus], None]] = []

    @property
    def status(self) -> VoiceConnectionStatus:
        return self._status

    @property
    def channel_id(self) -> str | None:
        return self._channel_id

    @property
    def receiver(self) -> FakeReceiver:
        return self._receiver

    async def wait_for_status(
        self, status: VoiceConnectionStatus, timeout: float
    ) -> None:
        self.wait_calls += 1
        if self.wait_error is not None:
            raise self.wait_error
        await self.ready.wait()

    def add_status_listener(
        self, callback: Callable[[VoiceConnectionStatus], None]
    ) -> Callable[[], None]:
        self.status_listeners.append(callback)
        return lambda: self.status_listeners.remove(callback)

    def set_status(self, status: VoiceConnectionStatus) -> None:
        self._status = status
        for callback in list(self.status_listeners):
            callback(status)


class FakeSession(VoiceSession):
    """Session with a fixed set of voice connections keyed by guild."""

    def __init__(self, user_id: str = "bot") -> None:
        self._user_id = user_id
        self.connections: dict[str, FakeConnection] = {}

    @property
    def user_id(self) -> str:
        return self._user_id

    def get_voice_connection(self, guild_id: str) -> FakeConnection | None:
        return self.connections.get(guild_id)


@pytest.fixture
def session() -> FakeSession:
    """Session with a ready connection in guild-1."""
    fake_session = FakeSession()
    fake_session.connections["guild-1"] = FakeConnection()
    return fake_session


@pytest.fixture
def connection(session: FakeSession) -> FakeConnection:
    """The ready connection of guild-1."""
    return session.connections["guild-1"]


@pytest.fixture
def connection_factory() -> Callable[..., FakeConnection]:
    """Factory for additional fake connections."""
    return FakeConnection
