"""Voice channel listener that turns participant speech into voice messages."""

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from .config import READY_TIMEOUT, SILENCE_DURATION_MS
from .exceptions import SpeechError, SpeechErrorCode
from .interfaces import (
    EndBehavior,
    EndBehaviorType,
    FrameDecoder,
    PcmPassthroughDecoder,
    VoiceConnection,
    VoiceConnectionStatus,
    VoiceSession,
)
from .logging_utils import get_logger
from .recognition import RecognitionConfig
from .registry import ListenerRegistry
from .voice_message import VoiceMessage

logger = get_logger(__name__)

VoiceMessageCallback = Callable[[VoiceMessage], Awaitable[None] | None]
ErrorCallback = Callable[[SpeechError], Awaitable[None] | None]


class SpeechListener:
    """Attaches to a voice session and emits a voice message per utterance."""

    def __init__(
        self,
        key: str,
        session: VoiceSession,
        should_process_user_id: Callable[[str], Awaitable[bool]] | None = None,
        decoder_factory: Callable[[], FrameDecoder] = PcmPassthroughDecoder,
        registry: ListenerRegistry | None = None,
        http_client: httpx.AsyncClient | None = None,
        recognition_config: RecognitionConfig | None = None,
        ready_timeout: float = READY_TIMEOUT,
        silence_duration_ms: int = SILENCE_DURATION_MS,
    ) -> None:
        """
        Initialize the listener.

        Args:
            key: API key for the recognition service
            session: Communication client to listen with
            should_process_user_id: Optional async predicate deciding whether a
                participant's speech may be processed (e.g. consent, or ignoring
                the session's own voice)
            decoder_factory: Creates one frame decoder per utterance
            registry: Registry to share with other listeners (defaults to a
                registry owned by this listener)
            http_client: Optional client reused by recognition requests
            recognition_config: Optional recognition request settings
            ready_timeout: Seconds to wait for a connection to become ready
            silence_duration_ms: Silence that ends an utterance
        """
        self._key = key
        self._session = session
        self._should_process_user_id = should_process_user_id
        self._decoder_factory = decoder_factory
        self._registry = registry if registry is not None else ListenerRegistry()
        self._http_client = http_client
        self._recognition_config = recognition_config
        self._ready_timeout = ready_timeout
        self._end_behavior = EndBehavior(
            EndBehaviorType.AFTER_SILENCE, duration_ms=silence_duration_ms
        )

        self._voice_message_callback: VoiceMessageCallback | None = None
        self._error_callback: ErrorCallback | None = None

        self._attachments: dict[str, list[Callable[[], None]]] = {}
        self._capture_tasks: set[asyncio.Task] = set()

    @property
    def registry(self) -> ListenerRegistry:
        """Registry tracking this listener's guilds."""
        return self._registry

    def set_voice_message_callback(self, callback: VoiceMessageCallback) -> None:
        """
        Set callback for captured voice messages.

        Args:
            callback: Function or coroutine function called with each VoiceMessage
        """
        self._voice_message_callback = callback

    def set_error_callback(self, callback: ErrorCallback) -> None:
        """
        Set callback for failures while attaching or capturing.

        Args:
            callback: Function or coroutine function called with each SpeechError
        """
        self._error_callback = callback

    def is_listening(self, guild_id: str) -> bool:
        """Whether speaking events are subscribed for a guild."""
        return guild_id in self._attachments

    async def on_voice_state_update(self, member_id: str, guild_id: str) -> None:
        """
        Handle a voice state change reported by the session.

        Only changes to the session's own participant attach a listener. A guild
        that is already registering or subscribed is left alone.

        Args:
            member_id: Participant whose voice state changed
            guild_id: Guild the voice state belongs to
        """
        client_id = self._session.user_id
        if member_id != client_id:
            return

        if not self._registry.try_register(client_id, guild_id):
            logger.trace(f"Listener already active for guild {guild_id}")
            return

        connection = self._session.get_voice_connection(guild_id)
        if connection is None or connection.status == VoiceConnectionStatus.DESTROYED:
            logger.debug(f"No usable voice connection for guild {guild_id}")
            self._registry.release(client_id, guild_id)
            return

        try:
            await connection.wait_for_status(
                VoiceConnectionStatus.READY, self._ready_timeout
            )
        except Exception as e:
            self._registry.release(client_id, guild_id)
            logger.warning(f"Voice connection for guild {guild_id} never became ready")
            await self._emit_error(
                SpeechError.wrap(
                    SpeechErrorCode.VOICE_CONNECTION_STATUS_TIMEOUT,
                    e,
                    "Timed out waiting for connection to enter ready state",
                )
            )
            return

        self._attach(client_id, guild_id, connection)

    def _attach(
        self, client_id: str, guild_id: str, connection: VoiceConnection
    ) -> None:
        """Subscribe to speaking events and connection teardown for a guild."""

        def on_speaking_start(user_id: str) -> None:
            task = asyncio.create_task(self._capture_utterance(connection, user_id))
            self._capture_tasks.add(task)
            task.add_done_callback(self._capture_tasks.discard)

        def on_status_change(status: VoiceConnectionStatus) -> None:
            if status == VoiceConnectionStatus.DESTROYED:
                logger.debug(f"Voice connection for guild {guild_id} was destroyed")
                self.detach(guild_id)

        self._attachments[guild_id] = [
            connection.receiver.on_speaking_start(on_speaking_start),
            connection.add_status_listener(on_status_change),
        ]
        self._registry.mark_subscribed(client_id, guild_id)
        logger.debug(f"Listening for speech in guild {guild_id}")

    def detach(self, guild_id: str) -> None:
        """Remove the speaking subscription of a guild and release its registry entry."""
        unsubscribers = self._attachments.pop(guild_id, None)
        if unsubscribers is None:
            return

        for unsubscribe in unsubscribers:
            try:
                unsubscribe()
            except Exception as e:
                logger.error(f"Error removing subscription for guild {guild_id}: {e}")

        self._registry.release(self._session.user_id, guild_id)
        logger.debug(f"Stopped listening in guild {guild_id}")

    async def close(self) -> None:
        """Detach from every guild and cancel utterances still being captured."""
        for guild_id in list(self._attachments):
            self.detach(guild_id)

        tasks = list(self._capture_tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _capture_utterance(self, connection: VoiceConnection, user_id: str) -> None:
        """Buffer one utterance of a participant and emit the resulting message."""
        if self._should_process_user_id is not None:
            try:
                allowed = await self._should_process_user_id(user_id)
            except Exception as e:
                logger.warning(f"Could not check whether to process user {user_id}: {e}")
                await self._emit_error(
                    SpeechError.wrap(
                        SpeechErrorCode.CREATE_VOICE_MESSAGE,
                        e,
                        "Failed to check whether user speech should be processed",
                    )
                )
                return
            if not allowed:
                logger.trace(f"Skipping speech from user {user_id}")
                return

        decoder = self._decoder_factory()
        frames: list[bytes] = []

        try:
            async for packet in connection.receiver.subscribe(user_id, self._end_behavior):
                frames.append(decoder.decode(packet))
                logger.trace(f"Buffered frame {len(frames)} for user {user_id}")
        except Exception as e:
            logger.warning(f"Audio stream for user {user_id} failed: {e}")
            await self._emit_error(
                SpeechError.wrap(SpeechErrorCode.OPUS_STREAM, e, "Opus Stream Error")
            )
            return

        if not frames:
            logger.debug(f"No audio captured for user {user_id}")
            return

        try:
            voice_message = VoiceMessage.create(
                key=self._key,
                connection=connection,
                client=self._session,
                user_id=user_id,
                stereo_frames=frames,
                http_client=self._http_client,
                recognition_config=self._recognition_config,
            )
        except Exception as e:
            logger.warning(f"Failed to create voice message for user {user_id}: {e}")
            await self._emit_error(
                SpeechError.wrap(
                    SpeechErrorCode.CREATE_VOICE_MESSAGE,
                    e,
                    "Failed to create VoiceMessage",
                )
            )
            return

        logger.debug(f"Captured {voice_message!r}")
        await self._dispatch(self._voice_message_callback, voice_message)

    async def _emit_error(self, error: SpeechError) -> None:
        await self._dispatch(self._error_callback, error)

    async def _dispatch(self, callback: Callable[[Any], Any] | None, payload: Any) -> None:
        """Call a delivery callback, awaiting it when it is a coroutine."""
        if callback is None:
            return
        try:
            result = callback(payload)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Error in listener callback: {e}")
