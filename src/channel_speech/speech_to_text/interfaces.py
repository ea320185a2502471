"""Abstract interfaces for the voice session collaborators."""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Callable
from dataclasses import dataclass
from enum import Enum


class VoiceConnectionStatus(Enum):
    """Lifecycle states of a voice connection."""
    SIGNALLING = "signalling"
    CONNECTING = "connecting"
    READY = "ready"
    DISCONNECTED = "disconnected"
    DESTROYED = "destroyed"


class EndBehaviorType(Enum):
    """When a per-participant audio subscription ends on its own."""
    MANUAL = "manual"
    AFTER_SILENCE = "after_silence"
    AFTER_INACTIVITY = "after_inactivity"


@dataclass(frozen=True)
class EndBehavior:
    """End-of-stream policy for an audio subscription."""

    behavior: EndBehaviorType
    duration_ms: int = 0


class AudioReceiver(ABC):
    """Receives audio from the participants of a voice connection."""

    @abstractmethod
    def on_speaking_start(self, callback: Callable[[str], None]) -> Callable[[], None]:
        """
        Register a callback for participants starting to speak.

        Args:
            callback: Called with the participant id

        Returns:
            Function that removes the callback again
        """
        pass

    @abstractmethod
    def subscribe(self, user_id: str, end: EndBehavior) -> AsyncIterator[bytes]:
        """
        Open an audio subscription for one participant.

        The iterator yields compressed frames in arrival order, stops when the
        end behavior triggers and raises if the underlying stream fails.
        """
        pass


class VoiceConnection(ABC):
    """A connection to one voice channel."""

    @property
    @abstractmethod
    def status(self) -> VoiceConnectionStatus:
        """Current connection status."""
        pass

    @property
    @abstractmethod
    def channel_id(self) -> str | None:
        """Id of the channel this connection joined, if known."""
        pass

    @property
    @abstractmethod
    def receiver(self) -> AudioReceiver:
        """Audio receiver of this connection."""
        pass

    @abstractmethod
    async def wait_for_status(
        self, status: VoiceConnectionStatus, timeout: float
    ) -> None:
        """
        Wait until the connection enters a status.

        Raises:
            TimeoutError: If the status is not reached within the timeout
        """
        pass

    @abstractmethod
    def add_status_listener(
        self, callback: Callable[[VoiceConnectionStatus], None]
    ) -> Callable[[], None]:
        """
        Register a callback for status changes.

        Returns:
            Function that removes the callback again
        """
        pass


class VoiceSession(ABC):
    """The real-time communication client the listener is attached to."""

    @property
    @abstractmethod
    def user_id(self) -> str:
        """Id of the session's own participant."""
        pass

    @abstractmethod
    def get_voice_connection(self, guild_id: str) -> VoiceConnection | None:
        """Look up the active voice connection for a guild."""
        pass


class FrameDecoder(ABC):
    """Turns compressed transport frames into 48kHz 16-bit stereo PCM."""

    @abstractmethod
    def decode(self, frame: bytes) -> bytes:
        """Decode one frame."""
        pass


class PcmPassthroughDecoder(FrameDecoder):
    """Decoder for receivers that already deliver decoded PCM."""

    def decode(self, frame: bytes) -> bytes:
        return bytes(frame)
