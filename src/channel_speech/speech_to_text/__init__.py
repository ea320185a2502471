"""Speech-to-text for participants of real-time voice channels."""

from .audio_conversion import get_duration_seconds, stereo_to_mono
from .exceptions import SpeechError, SpeechErrorCode, SpeechToTextError
from .interfaces import (
    AudioReceiver,
    EndBehavior,
    EndBehaviorType,
    FrameDecoder,
    PcmPassthroughDecoder,
    VoiceConnection,
    VoiceConnectionStatus,
    VoiceSession,
)
from .listener import SpeechListener
from .models import RecognitionAlternative, RecognitionResponse, RecognitionResult
from .recognition import RecognitionConfig, recognize_speech
from .registry import ListenerRegistry, ListenerState
from .voice_message import VoiceMessage

__all__ = [
    "AudioReceiver",
    "EndBehavior",
    "EndBehaviorType",
    "FrameDecoder",
    "ListenerRegistry",
    "ListenerState",
    "PcmPassthroughDecoder",
    "RecognitionAlternative",
    "RecognitionConfig",
    "RecognitionResponse",
    "RecognitionResult",
    "SpeechError",
    "SpeechErrorCode",
    "SpeechListener",
    "SpeechToTextError",
    "VoiceConnection",
    "VoiceConnectionStatus",
    "VoiceMessage",
    "VoiceSession",
    "get_duration_seconds",
    "recognize_speech",
    "stereo_to_mono",
]
