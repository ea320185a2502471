"""Captured utterances and their recognition."""

import asyncio
from collections.abc import Sequence
from typing import Any

import httpx

from .audio_conversion import get_duration_seconds, stereo_to_mono
from .interfaces import VoiceConnection
from .logging_utils import get_logger
from .models import RecognitionResponse
from .recognition import RecognitionConfig, recognize_speech

logger = get_logger(__name__)


class VoiceMessage:
    """
    One utterance captured from a participant of a voice channel.

    Attributes:
        client: The session that recorded the utterance
        user_id: Participant the utterance belongs to
        channel_id: Voice channel the utterance was captured in
        connection: Voice connection used for capture (borrowed)
        mono_buffer: 48kHz 16-bit mono PCM audio
        duration: Duration of ``mono_buffer`` in seconds
    """

    def __init__(
        self,
        key: str,
        client: Any,
        user_id: str,
        channel_id: str,
        connection: VoiceConnection,
        mono_buffer: bytes,
        duration: float,
        http_client: httpx.AsyncClient | None = None,
        recognition_config: RecognitionConfig | None = None,
    ) -> None:
        self._key = key
        self.client = client
        self.user_id = user_id
        self.channel_id = channel_id
        self.connection = connection
        self.mono_buffer = mono_buffer
        self.duration = duration

        self._http_client = http_client
        self._recognition_config = recognition_config
        self._recognition: RecognitionResponse | None = None
        self._pending: asyncio.Future[RecognitionResponse] | None = None

    @classmethod
    def create(
        cls,
        key: str,
        connection: VoiceConnection,
        client: Any,
        user_id: str,
        stereo_frames: Sequence[bytes],
        http_client: httpx.AsyncClient | None = None,
        recognition_config: RecognitionConfig | None = None,
    ) -> "VoiceMessage":
        """
        Build a voice message from decoded stereo frames.

        Args:
            key: API key for the recognition service
            connection: Voice connection the frames were captured on
            client: The session that recorded the frames
            user_id: Participant the frames belong to
            stereo_frames: Decoded 48kHz 16-bit stereo PCM frames in arrival order
            http_client: Optional client to reuse for recognition
            recognition_config: Optional recognition request settings

        Returns:
            VoiceMessage instance

        Raises:
            ValueError: If the channel is unknown or no audio was captured
        """
        channel_id = connection.channel_id
        if not channel_id:
            raise ValueError("VoiceMessage.create: channel_id is undefined")

        stereo_buffer = b"".join(bytes(frame) for frame in stereo_frames)
        if not stereo_buffer:
            raise ValueError("VoiceMessage.create: no audio frames were captured")

        mono_buffer = stereo_to_mono(stereo_buffer)

        return cls(
            key=key,
            client=client,
            user_id=user_id,
            channel_id=channel_id,
            connection=connection,
            mono_buffer=mono_buffer,
            duration=get_duration_seconds(mono_buffer),
            http_client=http_client,
            recognition_config=recognition_config,
        )

    async def recognize(self) -> RecognitionResponse:
        """
        Send the audio to the recognition service.

        The first call issues the request; concurrent callers share it and
        later callers get the cached response. A failed request is not cached,
        so calling again retries.

        Example:
            # ignore voice messages that are too short or too long (in seconds)
            if message.duration < 1 or message.duration > 30:
                return
            response = await message.recognize()

        Returns:
            RecognitionResponse from the service

        Raises:
            SpeechError: If the request or its response fails
        """
        if self._recognition is not None:
            return self._recognition

        if self._pending is None:
            self._pending = asyncio.ensure_future(self._recognize_once())
            self._pending.add_done_callback(self._clear_failed_request)

        return await asyncio.shield(self._pending)

    def _clear_failed_request(self, request: asyncio.Future) -> None:
        """Forget a failed or cancelled request so the next call retries."""
        if request.cancelled() or request.exception() is not None:
            if self._pending is request:
                self._pending = None

    async def _recognize_once(self) -> RecognitionResponse:
        response = await recognize_speech(
            self._key,
            self.mono_buffer,
            http_client=self._http_client,
            config=self._recognition_config,
        )
        self._recognition = response
        logger.debug(
            f"Recognized {self.duration:.2f}s voice message from user {self.user_id}"
        )
        return response

    def __repr__(self) -> str:
        return (
            f"VoiceMessage(user_id={self.user_id!r}, channel_id={self.channel_id!r}, "
            f"duration={self.duration:.3f})"
        )
