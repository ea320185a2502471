"""Custom exceptions for channel speech-to-text functionality."""

from enum import Enum
from typing import Any


class SpeechToTextError(Exception):
    """Base exception for speech-to-text errors."""

    pass


class SpeechErrorCode(Enum):
    """Kinds of failure reported by the listener and the recognition client."""

    # Transport failures and any HTTP status other than 200
    NETWORK_REQUEST = "NetworkRequest"
    # Recognition responses that do not have the expected shape
    NETWORK_RESPONSE = "NetworkResponse"
    CREATE_VOICE_MESSAGE = "CreateVoiceMessage"
    # Voice connection did not become ready in time
    VOICE_CONNECTION_STATUS_TIMEOUT = "VoiceConnectionStatusTimeout"
    OPUS_STREAM = "OpusStream"


class SpeechError(SpeechToTextError):
    """Tagged error carrying a failure kind, its cause and optional details."""

    def __init__(
        self, code: SpeechErrorCode, error: BaseException, details: Any = None
    ) -> None:
        super().__init__(f"{code.value}: {error}")
        self.code = code
        self.error = error
        self.details = details

    @classmethod
    def wrap(
        cls,
        code: SpeechErrorCode,
        error: "SpeechError | BaseException | str",
        details: Any = None,
    ) -> "SpeechError":
        """
        Build a SpeechError from an exception or a message.

        An existing SpeechError is returned unchanged so the original kind is
        preserved. Details are only attached when the cause is a message.

        Args:
            code: Kind to tag a newly wrapped error with
            error: Existing SpeechError, any exception, or a plain message
            details: Free-form diagnostic details (messages only)

        Returns:
            SpeechError instance
        """
        if isinstance(error, SpeechError):
            return error

        if isinstance(error, BaseException):
            return cls(code, error)

        return cls(code, Exception(error), details)


class AudioFileError(SpeechToTextError):
    """Exception raised for audio files that can't be submitted for recognition."""

    pass
